"""Custom logging levels for SpellSwitch.

Levels (ascending):
    TRACE =  5  — every cache lookup, every discarded (superseded) evaluation
    DEBUG = 10  — candidate walks, classification guesses, state changes
    INFO  = 20  — dictionary switches, startup/shutdown (default)

Usage:
    import spellswitch.log  # must be imported once before any logger is used
    logger = logging.getLogger(__name__)
    logger.trace("very noisy message")
"""

import logging

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")


def _trace(self: logging.Logger, message: object, *args: object, **kwargs: object) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)  # type: ignore[attr-defined]


# Patch Logger class once at import time
if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _trace  # type: ignore[attr-defined]
