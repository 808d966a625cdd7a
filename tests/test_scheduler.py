from __future__ import annotations

import asyncio
import logging

import pytest

from paramify.oracle.scheduler import IngestionScheduler


class _Ticker:
    """Sleep replacement that records intervals and yields once per tick."""

    def __init__(self) -> None:
        self.intervals: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.intervals.append(seconds)
        await asyncio.sleep(0)


async def _spin(times: int = 10) -> None:
    for _ in range(times):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_ticks_spawn_sweeps() -> None:
    sweeps = 0

    async def sweep() -> None:
        nonlocal sweeps
        sweeps += 1

    ticker = _Ticker()
    scheduler = IngestionScheduler(sweep, sleep=ticker)
    scheduler.start(300)
    await _spin()

    assert sweeps >= 2
    assert set(ticker.intervals) == {300}
    assert scheduler.is_running is True
    assert scheduler.interval_seconds == 300

    assert scheduler.cancel() is True
    assert scheduler.is_running is False
    assert scheduler.interval_seconds is None
    assert scheduler.cancel() is False
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_restart_replaces_previous_timer() -> None:
    async def sweep() -> None:
        return None

    ticker = _Ticker()
    scheduler = IngestionScheduler(sweep, sleep=ticker)
    scheduler.start(300)
    await _spin()

    scheduler.start(120)
    mark = len(ticker.intervals)
    await _spin()

    assert scheduler.interval_seconds == 120
    assert ticker.intervals[mark:]
    assert set(ticker.intervals[mark:]) == {120}
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_crashing_sweep_is_logged_and_timer_survives(caplog: pytest.LogCaptureFixture) -> None:
    async def sweep() -> None:
        raise RuntimeError("boom")

    scheduler = IngestionScheduler(sweep, sleep=_Ticker())
    with caplog.at_level(logging.ERROR, logger="paramify.oracle.scheduler"):
        scheduler.start(60)
        await _spin()

    assert "Ingestion sweep crashed" in caplog.text
    assert scheduler.is_running is True
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_cancel_leaves_running_sweeps_alone() -> None:
    release = asyncio.Event()
    finished: list[bool] = []

    async def sweep() -> None:
        await release.wait()
        finished.append(True)

    scheduler = IngestionScheduler(sweep, sleep=_Ticker())
    scheduler.start(60)
    await _spin(3)
    scheduler.cancel()
    in_flight = scheduler.sweeps_in_flight
    assert in_flight >= 1

    release.set()
    await _spin()

    assert len(finished) == in_flight
    assert scheduler.sweeps_in_flight == 0


@pytest.mark.asyncio
async def test_shutdown_cancels_in_flight_sweeps() -> None:
    async def sweep() -> None:
        await asyncio.Event().wait()

    scheduler = IngestionScheduler(sweep, sleep=_Ticker())
    scheduler.start(60)
    await _spin()
    assert scheduler.sweeps_in_flight >= 1

    await scheduler.shutdown()

    assert scheduler.is_running is False
    assert scheduler.sweeps_in_flight == 0


def test_start_requires_running_loop() -> None:
    async def sweep() -> None:
        return None

    with pytest.raises(RuntimeError):
        IngestionScheduler(sweep).start(60)
