"""Switcher states and the immutable checker state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spellswitch.platform.engine import CheckEngine


class State(Enum):
    IDLE = auto()
    EVALUATING = auto()
    ACTIVE = auto()


@dataclass(frozen=True)
class CheckerState:
    """The active checker: a language and the engine loaded with it.

    ``engine`` is None when no dictionary could be found for ``language``
    (checking disabled). Instances are replaced, never mutated.
    """

    language: str | None = None
    engine: "CheckEngine | None" = None

    @property
    def bound(self) -> bool:
        return self.engine is not None


EMPTY_CHECKER = CheckerState()
