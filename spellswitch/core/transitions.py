"""State transition rules for the language auto-switcher."""

from __future__ import annotations

from spellswitch.core.states import State


# Allowed transitions: {from_state: {event_name: to_state}}
TRANSITIONS: dict[State, dict[str, State]] = {
    State.IDLE: {
        "signal": State.EVALUATING,
        "resolved": State.ACTIVE,   # explicit switch_language()
    },
    State.EVALUATING: {
        "signal": State.EVALUATING,
        "resolved": State.ACTIVE,
        "abandoned": State.IDLE,
        "restored": State.ACTIVE,
    },
    State.ACTIVE: {
        "signal": State.EVALUATING,
        "resolved": State.ACTIVE,
    },
}


def can_transition(from_state: State, event_name: str) -> bool:
    return event_name in TRANSITIONS.get(from_state, {})


def next_state(from_state: State, event_name: str) -> State:
    try:
        return TRANSITIONS[from_state][event_name]
    except KeyError:
        raise ValueError(f"No transition from {from_state!r} on event {event_name!r}")
