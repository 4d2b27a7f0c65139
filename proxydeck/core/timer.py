"""
Repeating asyncio timer with fire-and-forget ticks
"""
import asyncio
from typing import Awaitable, Callable, Optional, Set

from .logging import get_logger

logger = get_logger(__name__)


class RepeatingTimer:
    """
    Calls an async callback every ``interval`` seconds.

    Each tick runs as its own task so a slow callback never delays the
    next tick; overlapping ticks are allowed. A tick that raises is
    logged and the schedule continues. ``stop()`` cancels the schedule
    and every tick still in flight.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Awaitable[None]],
        name: str = "timer",
        immediate: bool = True,
    ):
        """
        Initialize timer.

        Args:
            interval: Seconds between ticks
            callback: Coroutine function invoked on every tick
            name: Task name prefix, used in logs
            immediate: Fire one tick right away on start
        """
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive: {interval}")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.immediate = immediate
        self._task: Optional[asyncio.Task] = None
        self._ticks: Set[asyncio.Task] = set()
        self._tick_count = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def tick_count(self) -> int:
        """Number of ticks fired so far"""
        return self._tick_count

    def start(self) -> None:
        """Start the timer; a second call is a no-op"""
        if self.running:
            return
        self._task = asyncio.create_task(self._schedule(), name=f"{self.name}-schedule")
        logger.debug(f"Timer {self.name} started (every {self.interval}s)")

    async def stop(self) -> None:
        """Cancel the schedule and every in-flight tick"""
        tasks = list(self._ticks)
        if self._task is not None:
            tasks.append(self._task)
        self._task = None

        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._ticks.clear()
        logger.debug(f"Timer {self.name} stopped after {self._tick_count} ticks")

    async def __aenter__(self) -> "RepeatingTimer":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _schedule(self) -> None:
        if self.immediate:
            self._fire()
        while True:
            await asyncio.sleep(self.interval)
            self._fire()

    def _fire(self) -> None:
        self._tick_count += 1
        tick = asyncio.create_task(self._run_tick(), name=f"{self.name}-tick-{self._tick_count}")
        self._ticks.add(tick)
        tick.add_done_callback(self._ticks.discard)

    async def _run_tick(self) -> None:
        try:
            await self.callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Timer {self.name} tick failed: {e}", exc_info=True)
