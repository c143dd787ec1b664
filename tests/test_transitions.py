"""Tests for the auto-switcher transition table."""

from __future__ import annotations

import pytest

from spellswitch.core.states import EMPTY_CHECKER, CheckerState, State
from spellswitch.core.transitions import TRANSITIONS, can_transition, next_state


def test_every_state_has_rules():
    assert set(TRANSITIONS) == set(State)


@pytest.mark.parametrize("state", list(State))
def test_signal_always_starts_evaluation(state):
    assert next_state(state, "signal") == State.EVALUATING


def test_resolution_activates():
    assert next_state(State.EVALUATING, "resolved") == State.ACTIVE
    assert next_state(State.IDLE, "resolved") == State.ACTIVE


def test_settling_without_change():
    assert next_state(State.EVALUATING, "abandoned") == State.IDLE
    assert next_state(State.EVALUATING, "restored") == State.ACTIVE


def test_invalid_transition():
    assert not can_transition(State.IDLE, "abandoned")
    with pytest.raises(ValueError):
        next_state(State.ACTIVE, "restored")


def test_checker_state():
    assert not EMPTY_CHECKER.bound
    assert EMPTY_CHECKER.language is None
    assert CheckerState("en-US", object()).bound
    assert not CheckerState("tlh", None).bound
