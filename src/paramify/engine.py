"""Top-level context wiring every component to its state container."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import aiohttp

from paramify._transport import HttpOutcallTransport, Transport
from paramify.auth import AuthorizationGuard
from paramify.config import ParamifyConfig
from paramify.ledger import PolicyLedger
from paramify.mirror import MirrorLedger
from paramify.models.flood import InitArgs
from paramify.oracle.service import FloodOracle
from paramify.policies import PolicyStateMachine
from paramify.state.persistence import (
    InsuranceStores,
    restore_insurance_state,
    save_insurance_state,
)
from paramify.state.store import (
    AccessState,
    LedgerState,
    MirrorState,
    OracleState,
    TelemetryState,
    replace_state,
)
from paramify.telemetry import FloodTelemetryTracker

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class EngineSnapshot:
    """Opaque blobs written by :meth:`ParamifyEngine.pre_upgrade`."""

    insurance: bytes
    oracle: bytes


class ParamifyEngine:
    """Settlement engine and ingestion oracle sharing one event loop.

    The deployer becomes admin, the first oracle updater and the first
    authorized principal of the ingestion oracle.

    Usage::

        async with ParamifyEngine(config, deployer="admin") as engine:
            policy_id = engine.policies.create_policy("alice", 100, 5_000)
            engine.telemetry.set_flood_level("admin", 12.4)
            amount = engine.policies.trigger_payout("alice")
    """

    def __init__(
        self,
        config: ParamifyConfig | None = None,
        *,
        deployer: str,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        clock: Callable[[], float] = time.time,
        utc_clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or ParamifyConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._owns_transport = False

        self._access_state = AccessState(admin=deployer)
        self._ledger_state = LedgerState()
        self._telemetry_state = TelemetryState(
            flood_threshold=self._config.default_flood_threshold,
            oracle_updaters=[deployer],
        )
        self._mirror_state = MirrorState()
        self._oracle_state = OracleState()

        self.guard = AuthorizationGuard(self._access_state, controllers=self._config.controllers)
        self.ledger = PolicyLedger(self._ledger_state, clock=clock)
        self.telemetry = FloodTelemetryTracker(
            self._telemetry_state,
            self.guard,
            truncate_flood_level=self._config.truncate_flood_level,
        )
        self.policies = PolicyStateMachine(self.ledger, self.telemetry, self.guard)
        self.mirror = MirrorLedger(self._mirror_state, self.guard)
        self.oracle = FloodOracle(
            self._oracle_state,
            self.guard,
            transport,
            clock=utc_clock,
            max_response_bytes=self._config.max_response_bytes,
        )
        self.oracle.init(
            deployer,
            InitArgs(
                update_interval_seconds=self._config.update_interval_seconds,
                max_retries=self._config.max_retries,
                usgs_base_url=self._config.usgs_base_url,
            ),
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ParamifyEngine:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpOutcallTransport(
                self._http_session,
                timeout=self._config.request_timeout,
            )
            self._owns_transport = True
            self.oracle.bind_transport(self._transport)
        self.oracle.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.oracle.aclose()
        if self._owns_transport:
            self._transport = None
            self._owns_transport = False
            self.oracle.bind_transport(None)
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def get_admin(self) -> str:
        return self.guard.get_admin()

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        self.guard.transfer_admin(caller, new_admin)

    # ------------------------------------------------------------------
    # Upgrade hooks
    # ------------------------------------------------------------------

    def _insurance_stores(self) -> InsuranceStores:
        return InsuranceStores(
            access=self._access_state,
            ledger=self._ledger_state,
            telemetry=self._telemetry_state,
            mirror=self._mirror_state,
        )

    def pre_upgrade(self) -> EngineSnapshot:
        """Stop ingestion and serialize every component store."""
        snapshot = EngineSnapshot(
            insurance=save_insurance_state(self._insurance_stores()),
            oracle=self.oracle.pre_upgrade(),
        )
        _logger.info("State saved (%d + %d bytes)", len(snapshot.insurance), len(snapshot.oracle))
        return snapshot

    def post_upgrade(self, snapshot: EngineSnapshot) -> None:
        """Restore stores saved by this or an earlier release.

        Raises
        ------
        ParamifyPersistenceError
            If either blob cannot be decoded. The engine must not continue.
        """
        restored = restore_insurance_state(snapshot.insurance)
        replace_state(self._access_state, restored.access)
        replace_state(self._ledger_state, restored.ledger)
        replace_state(self._telemetry_state, restored.telemetry)
        replace_state(self._mirror_state, restored.mirror)
        self.oracle.post_upgrade(snapshot.oracle)
