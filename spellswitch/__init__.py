"""SpellSwitch — adaptive spell checking that follows the language being typed.

Import ``spellswitch.handler.SpellCheckHandler`` for the public API.
"""

from spellswitch.__version__ import __version__

__all__ = ["__version__"]
