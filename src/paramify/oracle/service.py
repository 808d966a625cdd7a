"""Entry points of the gauge ingestion oracle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from paramify._constants import MAX_RESPONSE_BYTES, MIN_UPDATE_INTERVAL_SECONDS
from paramify._transport import Transport
from paramify.auth import AuthorizationGuard
from paramify.exceptions import (
    ParamifyError,
    ParamifyFetchError,
    ParamifyPausedError,
    ParamifyValidationError,
)
from paramify.ingestion.usgs import fetch_usgs_data
from paramify.models.flood import (
    CachedData,
    FloodData,
    InitArgs,
    LocationRequest,
    OracleConfig,
    OracleStatus,
)
from paramify.oracle.cache import OracleCache
from paramify.oracle.scheduler import IngestionScheduler
from paramify.state.persistence import restore_oracle_state, save_oracle_state
from paramify.state.store import OracleState, replace_state

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class LocationUpdateResult:
    """Outcome of refreshing one location in a batch."""

    location: str
    data: FloodData | None = None
    error: ParamifyError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FloodOracle:
    """Fetches, caches and periodically refreshes gauge readings.

    Usage::

        oracle = FloodOracle(OracleState(), guard, transport)
        oracle.init(deployer)
        oracle.start()
        reading = await oracle.manual_update(deployer, "01646500")
    """

    def __init__(
        self,
        state: OracleState,
        guard: AuthorizationGuard,
        transport: Transport | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
        max_response_bytes: int = MAX_RESPONSE_BYTES,
    ) -> None:
        self._state = state
        self._guard = guard
        self._transport = transport
        self._clock = clock
        self._max_response_bytes = max_response_bytes
        self._cache = OracleCache(state, clock=clock)
        self._scheduler = IngestionScheduler(self.update_all_cached_locations)

    @property
    def scheduler(self) -> IngestionScheduler:
        return self._scheduler

    def bind_transport(self, transport: Transport | None) -> None:
        self._transport = transport

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self, caller: str, args: InitArgs | None = None) -> None:
        """Apply install arguments and authorize the installing identity."""
        config = self._state.config
        update: dict[str, Any] = {}
        principals = list(config.authorized_principals)
        if args is not None:
            if args.update_interval_seconds is not None:
                update["update_interval_seconds"] = max(args.update_interval_seconds, MIN_UPDATE_INTERVAL_SECONDS)
            if args.authorized_principals is not None:
                principals = list(args.authorized_principals)
            if args.max_retries is not None:
                update["max_retries"] = args.max_retries
            if args.usgs_base_url is not None:
                update["usgs_base_url"] = args.usgs_base_url
        if caller not in principals:
            principals.append(caller)
        update["authorized_principals"] = principals
        self._state.config = config.model_copy(update=update)
        _logger.info("Oracle initialized (interval=%ds)", self._state.config.update_interval_seconds)

    def start(self) -> None:
        """Start the sweep timer unless ingestion is paused.

        Outside a running event loop the timer is left stopped;
        ``ParamifyEngine.__aenter__`` calls this again once a loop exists.
        """
        if self._state.config.is_paused:
            _logger.info("Oracle is paused; update timer not started")
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            _logger.debug("No running event loop; update timer deferred")
            return
        self._scheduler.start(self._state.config.update_interval_seconds)

    def pre_upgrade(self) -> bytes:
        """Stop the timer and snapshot configuration, cache and stats."""
        self._scheduler.cancel()
        return save_oracle_state(self._state)

    def post_upgrade(self, blob: bytes | str) -> None:
        """Restore a snapshot from :meth:`pre_upgrade` and restart the timer."""
        replace_state(self._state, restore_oracle_state(blob))
        self.start()
        _logger.info("Oracle upgraded successfully")

    async def aclose(self) -> None:
        await self._scheduler.shutdown()

    # ------------------------------------------------------------------
    # Fetch path
    # ------------------------------------------------------------------

    async def fetch_and_cache(self, location: str) -> FloodData:
        """Fetch *location* from the provider and overwrite its cache entry.

        The paused flag and base URL are read before the request suspends and
        are not re-checked afterwards: a pause issued while the request is in
        flight does not discard its result. The write after resuming is a
        plain overwrite, so interleaved fetches of the same location are safe.

        Raises
        ------
        ParamifyPausedError
            If ingestion is paused. Stats are not touched.
        ParamifyFetchError
            On transport or parse failure, after recording it in the stats.
        """
        config = self._state.config
        if config.is_paused:
            raise ParamifyPausedError("Oracle is paused")
        transport = self._require_transport()

        try:
            data = await fetch_usgs_data(
                transport,
                config.usgs_base_url,
                location,
                charge=self._cache.charge,
                clock=self._clock,
                max_response_bytes=self._max_response_bytes,
            )
        except ParamifyFetchError as exc:
            self._cache.record_failure(str(exc))
            raise

        self._cache.store(data)
        _logger.debug("Successfully cached data for location: %s", location)
        return data

    async def update_all_cached_locations(self) -> None:
        """One ingestion sweep over every location cached at the time of the tick."""
        locations = self._cache.locations()
        for location in locations:
            try:
                await self.fetch_and_cache(location)
            except ParamifyPausedError:
                _logger.info("Oracle paused during sweep; %d location(s) skipped", len(locations))
                return
            except ParamifyFetchError as exc:
                _logger.warning("Failed to update location %s: %s", location, exc)

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise ParamifyError("Oracle has no transport. Use 'async with ParamifyEngine(...) as engine:'")
        return self._transport

    def _require_authorized(self, caller: str) -> None:
        self._guard.require_authorized_principal(caller, self._state.config.authorized_principals)

    @staticmethod
    def _location(location: str) -> str:
        try:
            return LocationRequest(location=location).location
        except ValidationError as exc:
            raise ParamifyValidationError("location must be non-empty") from exc

    # ------------------------------------------------------------------
    # Authorized entry points
    # ------------------------------------------------------------------

    async def manual_update(self, caller: str, location: str) -> FloodData:
        """Refresh one location now. A new location joins future sweeps once cached."""
        self._require_authorized(caller)
        return await self.fetch_and_cache(self._location(location))

    async def batch_update(self, caller: str, locations: Iterable[str]) -> list[LocationUpdateResult]:
        """Refresh several locations sequentially, reporting each outcome.

        If the caller is not authorized every item carries that error and no
        fetch is attempted.
        """
        requested = list(locations)
        try:
            self._require_authorized(caller)
        except ParamifyError as exc:
            return [LocationUpdateResult(location=loc, error=exc) for loc in requested]

        results: list[LocationUpdateResult] = []
        for location in requested:
            try:
                data = await self.fetch_and_cache(self._location(location))
            except ParamifyError as exc:
                results.append(LocationUpdateResult(location=location, error=exc))
            else:
                results.append(LocationUpdateResult(location=location, data=data))
        return results

    def update_configuration(self, caller: str, new_config: OracleConfig) -> None:
        """Replace the configuration wholesale and restart the timer at the new interval."""
        self._require_authorized(caller)
        if new_config.update_interval_seconds < MIN_UPDATE_INTERVAL_SECONDS:
            raise ParamifyValidationError(
                f"Update interval must be at least {MIN_UPDATE_INTERVAL_SECONDS} seconds"
            )
        self._state.config = new_config
        self._scheduler.cancel()
        self.start()
        _logger.info("Configuration updated successfully")

    def set_paused(self, caller: str, paused: bool) -> None:
        self._require_authorized(caller)
        self._state.config = self._state.config.model_copy(update={"is_paused": paused})
        if paused:
            self._scheduler.cancel()
            _logger.info("Oracle paused")
        else:
            self.start()
            _logger.info("Oracle unpaused")

    def add_authorized_principal(self, caller: str, principal: str) -> None:
        self._require_authorized(caller)
        principals = self._state.config.authorized_principals
        if principal not in principals:
            self._state.config = self._state.config.model_copy(
                update={"authorized_principals": [*principals, principal]}
            )

    def remove_authorized_principal(self, caller: str, principal: str) -> None:
        self._require_authorized(caller)
        principals = [p for p in self._state.config.authorized_principals if p != principal]
        self._state.config = self._state.config.model_copy(update={"authorized_principals": principals})

    def clear_cache(self, caller: str) -> int:
        self._require_authorized(caller)
        cleared = self._cache.clear()
        _logger.info("Cleared %d cached entries", cleared)
        return cleared

    # ------------------------------------------------------------------
    # Read-only
    # ------------------------------------------------------------------

    def get_latest_data(self, location: str) -> FloodData:
        return self._cache.get_latest_data(location)

    def get_cached_data(self, location: str) -> CachedData | None:
        return self._cache.get_cached_data(location)

    def get_all_cached_locations(self) -> list[str]:
        return self._cache.locations()

    def get_configuration(self) -> OracleConfig:
        return self._state.config

    def get_status(self) -> OracleStatus:
        stats = self._cache.stats()
        config = self._state.config
        return OracleStatus(
            total_updates=stats.total_updates,
            successful_fetches=stats.successful_fetches,
            failed_fetches=stats.failed_fetches,
            last_update_time=stats.last_update_time,
            last_error=stats.last_error,
            cycles_spent=stats.cycles_spent,
            cached_locations=self._cache.locations(),
            is_paused=config.is_paused,
            update_interval_seconds=config.update_interval_seconds,
            timer_running=self._scheduler.is_running,
        )
