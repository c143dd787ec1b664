"""Tests for DebouncedReplace (switch-latest-after-delay)."""

from __future__ import annotations

import asyncio
import logging

import pytest

from spellswitch.core.switch_latest import DebouncedReplace


def make_op(scheduler, mapper=None, delay=1.0):
    results = []

    async def identity(x):
        return x

    op = DebouncedReplace(mapper or identity, delay, results.append, scheduler=scheduler)
    return op, results


@pytest.mark.asyncio
async def test_emits_only_after_delay(scheduler):
    async def upper(x):
        return x.upper()

    op, results = make_op(scheduler, upper)
    op.push("hello")
    await scheduler.advance(0.5)
    assert results == []
    assert op.pending
    await scheduler.advance(0.6)
    assert results == ["HELLO"]
    assert not op.pending


@pytest.mark.asyncio
async def test_superseded_input_is_never_mapped(scheduler):
    mapped = []

    async def mapper(x):
        mapped.append(x)
        return x

    op, results = make_op(scheduler, mapper)
    op.push("first")
    await scheduler.advance(0.5)
    op.push("second")
    await scheduler.advance(0.9)
    assert mapped == []          # window restarted by "second"
    await scheduler.advance(0.2)
    assert mapped == ["second"]
    assert results == ["second"]


@pytest.mark.asyncio
async def test_in_flight_mapping_is_cancelled(scheduler):
    started, finished = [], []

    async def slow(x):
        started.append(x)
        await scheduler.sleep(5.0)
        finished.append(x)
        return x

    op, results = make_op(scheduler, slow)
    op.push("a")
    await scheduler.advance(1.0)
    assert started == ["a"]

    op.push("b")
    await scheduler.advance(10.0)
    assert started == ["a", "b"]
    assert finished == ["b"]
    assert results == ["b"]


@pytest.mark.asyncio
async def test_result_of_uninterruptible_work_is_discarded(scheduler):
    gate = asyncio.Event()

    async def stubborn(x):
        try:
            await gate.wait()
        except asyncio.CancelledError:
            # work that cannot be interrupted keeps going and still returns
            pass
        return x

    op, results = make_op(scheduler, stubborn)
    op.push("stale")
    await scheduler.advance(1.0)
    op.push("fresh")
    gate.set()
    await scheduler.advance(2.0)
    assert results == ["fresh"]


@pytest.mark.asyncio
async def test_surviving_results_keep_input_order(scheduler):
    op, results = make_op(scheduler)
    op.push(1)
    await scheduler.advance(1.5)
    op.push(2)
    await scheduler.advance(1.5)
    op.push(3)
    await scheduler.advance(1.5)
    assert results == [1, 2, 3]


@pytest.mark.asyncio
async def test_stop_suppresses_pending_work(scheduler):
    op, results = make_op(scheduler)
    op.push("x")
    await op.stop()
    await scheduler.advance(5.0)
    assert results == []
    assert op.closed
    with pytest.raises(RuntimeError):
        op.push("y")


@pytest.mark.asyncio
async def test_cancel_keeps_operator_open(scheduler):
    op, results = make_op(scheduler)
    op.push("x")
    op.cancel()
    await scheduler.advance(5.0)
    assert results == []
    op.push("y")
    await scheduler.advance(5.0)
    assert results == ["y"]


@pytest.mark.asyncio
async def test_mapper_failure_is_logged_not_emitted(scheduler, caplog):
    async def fails_on_x(x):
        if x == "x":
            raise RuntimeError("classifier down")
        return x

    op, results = make_op(scheduler, fails_on_x)
    with caplog.at_level(logging.ERROR):
        op.push("x")
        await scheduler.advance(2.0)
    assert results == []
    assert "mapper failed" in caplog.text

    # subscription survives the failure
    op.push("y")
    await scheduler.advance(2.0)
    assert results == ["y"]


@pytest.mark.asyncio
async def test_mapper_failure_reaches_error_handler(scheduler):
    errors, results = [], []

    async def fails(x):
        raise OSError(f"cannot map {x}")

    op = DebouncedReplace(fails, 1.0, results.append, scheduler=scheduler, on_error=errors.append)
    op.push("a")
    await scheduler.advance(2.0)
    assert results == []
    assert [str(e) for e in errors] == ["cannot map a"]


@pytest.mark.asyncio
async def test_failing_error_handler_is_logged(scheduler, caplog):
    async def fails(x):
        raise RuntimeError("boom")

    def bad_handler(exc):
        raise ValueError("handler broke")

    op = DebouncedReplace(fails, 1.0, lambda r: None, scheduler=scheduler, on_error=bad_handler)
    with caplog.at_level(logging.ERROR):
        op.push("a")
        await scheduler.advance(2.0)
    assert "error handler failed" in caplog.text
    assert not op.pending


def test_negative_delay_rejected():
    async def identity(x):
        return x

    with pytest.raises(ValueError):
        DebouncedReplace(identity, -1, lambda r: None)
