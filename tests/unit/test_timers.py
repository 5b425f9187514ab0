"""Tests for the scheduler and timer slot primitives."""

import asyncio
from unittest.mock import MagicMock

import pytest

from companion.timers import AsyncioScheduler, TimerSlot


class TestTimerSlot:
    """Tests for TimerSlot."""

    def test_arm_and_fire(self, scheduler):
        slot = TimerSlot("Establishment", scheduler)
        callback = MagicMock()

        slot.arm(2.0, callback)
        assert slot.active is True
        scheduler.advance(2.0)

        callback.assert_called_once_with()
        assert slot.active is False

    def test_rearm_cancels_previous(self, scheduler):
        slot = TimerSlot("Reconnection", scheduler)
        first, second = MagicMock(), MagicMock()

        slot.arm(1.0, first)
        slot.arm(3.0, second)
        scheduler.advance(5.0)

        first.assert_not_called()
        second.assert_called_once_with()

    def test_cancel_reports_whether_active(self, scheduler):
        slot = TimerSlot("Reconnection", scheduler)

        assert slot.cancel() is False
        slot.arm(1.0, MagicMock())
        assert slot.cancel() is True
        assert scheduler.pending == []

    def test_callback_may_rearm_slot(self, scheduler):
        slot = TimerSlot("Reconnection", scheduler)
        fired = []

        def _callback():
            fired.append(scheduler.time())
            if len(fired) < 2:
                slot.arm(1.0, _callback)

        slot.arm(1.0, _callback)
        scheduler.advance(5.0)

        assert fired == [101.0, 102.0]
        assert slot.active is False


class TestAsyncioScheduler:
    """Tests for AsyncioScheduler."""

    @pytest.mark.asyncio
    async def test_uses_running_loop_clock(self):
        scheduler = AsyncioScheduler()

        assert scheduler.loop is asyncio.get_running_loop()
        assert scheduler.time() == pytest.approx(asyncio.get_running_loop().time(), abs=0.5)

    @pytest.mark.asyncio
    async def test_call_later_fires(self):
        scheduler = AsyncioScheduler()
        fired = asyncio.Event()

        scheduler.call_later(0.01, fired.set)

        await asyncio.wait_for(fired.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_negative_delay_fires_immediately(self):
        scheduler = AsyncioScheduler()
        fired = asyncio.Event()

        scheduler.call_later(-5.0, fired.set)

        await asyncio.wait_for(fired.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_spawn_runs_coroutine(self):
        async def _work():
            return "rebound"

        task = AsyncioScheduler().spawn(_work())

        assert await task == "rebound"

    @pytest.mark.asyncio
    async def test_timer_slot_with_real_loop(self):
        scheduler = AsyncioScheduler()
        slot = TimerSlot("Establishment", scheduler)
        fired = asyncio.Event()

        slot.arm(0.01, fired.set)
        await asyncio.wait_for(fired.wait(), timeout=1.0)

        assert slot.active is False
