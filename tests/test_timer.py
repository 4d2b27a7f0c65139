"""Tests for the repeating asyncio timer."""

import asyncio

import pytest

from proxydeck.core.timer import RepeatingTimer

from conftest import settle


class TestRepeatingTimer:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            RepeatingTimer(0, lambda: None)

    async def test_fires_immediately(self):
        calls = []

        async def tick():
            calls.append(1)

        timer = RepeatingTimer(10, tick)
        timer.start()
        await settle()
        assert calls == [1]
        await timer.stop()

    async def test_deferred_first_tick(self):
        calls = []

        async def tick():
            calls.append(1)

        async with RepeatingTimer(10, tick, immediate=False) as timer:
            await settle()
            assert calls == []
            assert timer.running
        assert not timer.running

    async def test_slow_tick_does_not_delay_schedule(self):
        async def slow():
            await asyncio.sleep(1)

        timer = RepeatingTimer(0.01, slow)
        timer.start()
        await asyncio.sleep(0.05)
        assert timer.tick_count >= 3
        await timer.stop()

    async def test_failing_tick_keeps_schedule(self):
        async def broken():
            raise RuntimeError("probe failed")

        timer = RepeatingTimer(0.01, broken)
        timer.start()
        await asyncio.sleep(0.05)
        await timer.stop()
        assert timer.tick_count >= 3

    async def test_stop_cancels_in_flight_ticks(self):
        cancelled = []

        async def hang():
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(1)
                raise

        timer = RepeatingTimer(10, hang)
        timer.start()
        await settle()
        await timer.stop()
        assert cancelled == [1]
        assert not timer.running
