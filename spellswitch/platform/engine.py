"""CheckEngine interface — abstraction over a native spell check engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class SpellingSpan:
    """Half-open ``[start, end)`` range of a misspelled word in checked text."""

    start: int
    end: int


class CheckEngine(ABC):
    """A spell check engine bound to at most one dictionary.

    Engines come in two flavours, told apart by ``reports_misspellings``:

    * predicate engines answer ``is_misspelled()`` reliably and are queried
      directly;
    * span engines are trusted only through ``check_spelling()``; their
      predicate is used as a second opinion on lowercased text.
    """

    reports_misspellings: bool = True

    @abstractmethod
    def set_dictionary(self, language: str, content: bytes) -> None: ...

    @abstractmethod
    def is_misspelled(self, text: str) -> bool: ...

    @abstractmethod
    def check_spelling(self, text: str) -> list[SpellingSpan]: ...

    @abstractmethod
    def get_corrections_for_misspelling(self, text: str) -> list[str]: ...

    @abstractmethod
    def add(self, text: str) -> None: ...

    @abstractmethod
    def get_available_dictionaries(self) -> list[str]: ...


# Engine construction may fail (missing native library, bad install).
# Factories signal that by raising spellswitch.errors.EngineUnavailable.
EngineFactory = Callable[[], CheckEngine]
