"""Deterministic scheduler for driving controller timers in tests."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Any, Callable, Coroutine, List, Tuple


class ManualTimerHandle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Clock that only moves when ``advance`` is called."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self._queue: List[Tuple[float, int, ManualTimerHandle]] = []
        self._counter = itertools.count()
        self.spawned: List[asyncio.Task] = []

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimerHandle:
        handle = ManualTimerHandle(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self.spawned.append(task)
        return task

    @property
    def pending(self) -> List[ManualTimerHandle]:
        return [handle for _, _, handle in self._queue if not handle.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in order."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = when
            handle.callback()
        self.now = target

    async def settle(self, rounds: int = 10) -> None:
        """Let spawned tasks run until they block."""
        for _ in range(rounds):
            await asyncio.sleep(0)

    async def advance_and_settle(self, seconds: float) -> None:
        self.advance(seconds)
        await self.settle()
