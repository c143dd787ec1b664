"""Exception hierarchy for SpellSwitch.

Exhausting every fallback candidate is deliberately NOT an exception: the
resolver returns a ``Resolution`` whose ``dictionary`` is ``None`` and callers
treat that as "spell checking disabled for this language".
"""

from __future__ import annotations


class SpellSwitchError(Exception):
    """Base class for all SpellSwitch errors."""


class DictionaryError(SpellSwitchError):
    """A dictionary could not be served for a language code."""

    def __init__(self, language: str, message: str = ""):
        self.language = language
        super().__init__(message or f"dictionary unavailable for {language!r}")


class NotFound(DictionaryError):
    """No dictionary exists for the language (neither cached nor remote)."""


class DownloadError(DictionaryError):
    """Fetching the dictionary failed for a transport or server reason."""


class CorruptFile(DictionaryError):
    """The dictionary file is still unusable after one delete-and-retry."""


class StaleLearnedMapping(SpellSwitchError):
    """A persisted requested→resolved mapping no longer loads."""

    def __init__(self, requested: str, resolved: str):
        self.requested = requested
        self.resolved = resolved
        super().__init__(f"learned mapping {requested!r} -> {resolved!r} is stale")


class EngineUnavailable(SpellSwitchError):
    """The spell check engine could not be constructed or configured."""
