"""Schedulers: the time source for debouncing and cache expiry.

``AsyncioScheduler`` is the production implementation. ``VirtualScheduler``
keeps its own clock that only moves when ``advance()``/``advance_to()`` is
awaited, so debounce windows and TTLs can be tested deterministically.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod


class Scheduler(ABC):
    @abstractmethod
    def now(self) -> float:
        """Current time in seconds (monotonic)."""

    @abstractmethod
    async def sleep(self, delay: float) -> None:
        """Suspend the calling task for *delay* seconds."""


class AsyncioScheduler(Scheduler):
    """Real time, backed by the running event loop."""

    def now(self) -> float:
        try:
            return asyncio.get_running_loop().time()
        except RuntimeError:
            return time.monotonic()

    async def sleep(self, delay: float) -> None:
        await asyncio.sleep(delay)


class VirtualScheduler(Scheduler):
    """Virtual time for tests.

    Sleepers are parked on futures in a deadline-ordered heap. Advancing the
    clock resolves due sleepers one at a time, in deadline order, and lets the
    loop run ``settle_rounds`` iterations after each so woken tasks can finish
    their (non-sleeping) work before the next timer fires.
    """

    def __init__(self, start: float = 0.0, settle_rounds: int = 20):
        self._now = start
        self._settle_rounds = settle_rounds
        self._timers: list[tuple[float, int, asyncio.Future]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    async def sleep(self, delay: float) -> None:
        if delay <= 0:
            await asyncio.sleep(0)
            return
        fut = asyncio.get_running_loop().create_future()
        heapq.heappush(self._timers, (self._now + delay, next(self._seq), fut))
        await fut

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, fut in self._timers if not fut.done())

    async def settle(self) -> None:
        for _ in range(self._settle_rounds):
            await asyncio.sleep(0)

    async def advance_to(self, target: float) -> None:
        await self.settle()
        while self._timers and self._timers[0][0] <= target:
            deadline, _, fut = heapq.heappop(self._timers)
            if fut.done():
                # sleeper was cancelled
                continue
            self._now = max(self._now, deadline)
            fut.set_result(None)
            await self.settle()
        self._now = max(self._now, target)
        await self.settle()

    async def advance(self, seconds: float) -> None:
        await self.advance_to(self._now + seconds)
