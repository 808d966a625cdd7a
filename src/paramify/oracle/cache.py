"""Latest reading per location plus fetch statistics."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from paramify.exceptions import ParamifyNotFoundError
from paramify.models.flood import CachedData, FloodData, OracleStats
from paramify.state.store import OracleState


def _utcnow() -> datetime:
    return datetime.now(UTC)


class OracleCache:
    """One :class:`CachedData` entry per location ever fetched successfully.

    Entries are overwritten on refresh and only removed by :meth:`clear`.
    """

    def __init__(self, state: OracleState, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._state = state
        self._clock = clock

    def store(self, data: FloodData) -> CachedData:
        now = self._clock()
        cached = CachedData(data=data, cached_at=now)
        self._state.cache[data.location] = cached

        stats = self._state.stats
        stats.total_updates += 1
        stats.successful_fetches += 1
        stats.last_update_time = now
        stats.last_error = None
        return cached

    def record_failure(self, message: str) -> None:
        stats = self._state.stats
        stats.failed_fetches += 1
        stats.last_error = message

    def charge(self, cycles: int) -> None:
        self._state.stats.cycles_spent += cycles

    def get_latest_data(self, location: str) -> FloodData:
        cached = self._state.cache.get(location)
        if cached is None:
            raise ParamifyNotFoundError(f"No data available for location: {location}")
        return cached.data

    def get_cached_data(self, location: str) -> CachedData | None:
        return self._state.cache.get(location)

    def locations(self) -> list[str]:
        return list(self._state.cache)

    def clear(self) -> int:
        size = len(self._state.cache)
        self._state.cache.clear()
        return size

    def stats(self) -> OracleStats:
        return self._state.stats.model_copy()
