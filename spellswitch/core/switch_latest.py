"""DebouncedReplace — delay, then map, keeping only the latest input.

Each ``push()`` supersedes whatever is pending: a task still waiting out the
delay is cancelled, and so is a task already inside the mapper. Results of
work that cannot be interrupted (threads, native calls) are dropped by the
generation check before ``on_result`` runs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

import spellswitch.log  # registers TRACE level and logger.trace()
from spellswitch.core.scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class DebouncedReplace(Generic[T, R]):
    """Task supervisor with switch-latest-after-delay semantics.

    Guarantees:
      * at most one mapping in flight;
      * superseded inputs never reach ``on_result``;
      * surviving results are delivered in input order;
      * a mapper failure of the latest input reaches ``on_error``, if given.
    """

    def __init__(
        self,
        mapper: Callable[[T], Awaitable[R]],
        delay: float,
        on_result: Callable[[R], None],
        scheduler: Scheduler | None = None,
        name: str = "debounce",
        on_error: Callable[[Exception], None] | None = None,
    ):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self._mapper = mapper
        self._delay = delay
        self._on_result = on_result
        self._on_error = on_error
        self._scheduler = scheduler or AsyncioScheduler()
        self._name = name
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """True while an input is waiting out the delay or being mapped."""
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, value: T) -> None:
        """Supersede pending work with *value*. Must be called from the loop."""
        if self._closed:
            raise RuntimeError(f"{self._name}: push() after stop()")
        self._generation += 1
        self._cancel_pending()
        self._task = asyncio.get_running_loop().create_task(
            self._run(value, self._generation), name=f"{self._name}-{self._generation}"
        )

    def cancel(self) -> None:
        """Drop pending work without closing the operator."""
        self._generation += 1
        self._cancel_pending()

    async def stop(self) -> None:
        """Cancel pending work and refuse further input."""
        self._closed = True
        self._generation += 1
        task = self._task
        self._cancel_pending()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            logger.trace("%s: cancelling superseded task %s", self._name, self._task.get_name())  # type: ignore[attr-defined]
            self._task.cancel()
        self._task = None

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def _run(self, value: T, generation: int) -> None:
        await self._scheduler.sleep(self._delay)
        if not self._is_current(generation):
            return
        try:
            result = await self._mapper(value)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("%s: mapper failed", self._name)
            if self._on_error is not None and self._is_current(generation):
                try:
                    self._on_error(exc)
                except Exception:
                    logger.exception("%s: error handler failed", self._name)
            return
        if not self._is_current(generation):
            logger.trace("%s: discarding stale result of generation %d", self._name, generation)  # type: ignore[attr-defined]
            return
        try:
            self._on_result(result)
        except Exception:
            logger.exception("%s: result handler failed", self._name)
