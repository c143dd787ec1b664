"""Typed event definitions (dataclasses)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class EventType(Enum):
    # Input signals
    TEXT_CHANGED = auto()
    MISSPELLING_OBSERVED = auto()
    # Checker
    LANGUAGE_CHANGED = auto()
    # App lifecycle
    DETACHED = auto()


@dataclass
class Event:
    type: EventType
    data: Any
    timestamp: float


@dataclass(frozen=True)
class LanguageChange:
    """Payload of LANGUAGE_CHANGED.

    ``available`` is False when no dictionary could be resolved for
    ``requested``; in that case checking is disabled and ``language`` is the
    code that was attempted.
    """

    requested: str
    language: str
    available: bool = True


@dataclass(frozen=True)
class EvaluationData:
    sample: str
    source: str         # "text" | "misspellings"
