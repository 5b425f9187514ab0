"""
Clock and timer primitives used by the connection controller.

The controller never touches the event loop directly; it goes through a
``Scheduler`` so tests can drive time by hand.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Protocol

from .async_helpers import safely_schedule_coroutine

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Monotonic clock plus delayed callbacks and background tasks."""

    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> "asyncio.Task[Any]": ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def time(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> "asyncio.Task[Any]":
        return safely_schedule_coroutine(coro)


class TimerSlot:
    """
    Holds at most one pending timer.

    Arming always cancels the previous handle first, and the handle is
    released before the callback runs so the callback may re-arm the slot.
    """

    def __init__(self, name: str, scheduler: Scheduler, slot_logger: Optional[logging.Logger] = None):
        self.name = name
        self.scheduler = scheduler
        self.handle: Optional[TimerHandle] = None
        self.logger = slot_logger or logger

    @property
    def active(self) -> bool:
        return self.handle is not None

    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        self.cancel()

        def _fire() -> None:
            self.handle = None
            callback()

        self.handle = self.scheduler.call_later(delay, _fire)
        self.logger.debug("%s timer armed for %.3fs", self.name, delay)

    def cancel(self) -> bool:
        """Cancel the pending timer; return True when one was active."""
        if self.handle is None:
            return False
        self.handle.cancel()
        self.handle = None
        self.logger.debug("%s timer cancelled", self.name)
        return True
