"""Single recurring ingestion timer.

The timer is one :class:`asyncio.Task` that sleeps for the interval and then
spawns the sweep callback, so a slow sweep never delays the next tick.
Starting the timer always cancels the previous one first.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)


class IngestionScheduler:
    def __init__(
        self,
        sweep: Callable[[], Awaitable[None]],
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._sweep = sweep
        self._sleep = sleep
        self._timer: asyncio.Task[None] | None = None
        self._interval_seconds: int | None = None
        self._sweeps: set[asyncio.Task[None]] = set()

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def interval_seconds(self) -> int | None:
        """Interval of the live timer, ``None`` when stopped."""
        return self._interval_seconds if self.is_running else None

    @property
    def sweeps_in_flight(self) -> int:
        return len(self._sweeps)

    def start(self, interval_seconds: int) -> None:
        """(Re)start the timer. Must be called from a running event loop."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._interval_seconds = interval_seconds
        self._timer = loop.create_task(self._run(interval_seconds), name="paramify-ingestion-timer")
        _logger.info("Update timer started with interval: %d seconds", interval_seconds)

    def cancel(self) -> bool:
        """Stop future ticks. Sweeps already spawned keep running."""
        timer = self._timer
        self._timer = None
        self._interval_seconds = None
        if timer is None or timer.done():
            return False
        timer.cancel()
        _logger.debug("Update timer cancelled")
        return True

    async def shutdown(self) -> None:
        """Cancel the timer and any in-flight sweeps, waiting for them to exit."""
        self.cancel()
        pending = list(self._sweeps)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self, interval_seconds: int) -> None:
        while True:
            await self._sleep(interval_seconds)
            self._spawn_sweep()

    def _spawn_sweep(self) -> None:
        task = asyncio.get_running_loop().create_task(self._sweep(), name="paramify-ingestion-sweep")
        self._sweeps.add(task)
        task.add_done_callback(self._sweep_done)

    def _sweep_done(self, task: asyncio.Task[None]) -> None:
        self._sweeps.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Ingestion sweep crashed", exc_info=exc)
