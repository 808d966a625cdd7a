"""Policy lifecycle: creation, status transitions and payout.

Every method here is synchronous. Transition checks run against a snapshot
taken at the start of the call and the write happens in the same call, so
no other entry point can interleave between validation and mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from paramify.auth import AuthorizationGuard
from paramify.exceptions import (
    ParamifyConflictError,
    ParamifyInvalidStateError,
    ParamifyNotFoundError,
    ParamifyThresholdNotMetError,
    ParamifyValidationError,
)
from paramify.ledger import PolicyLedger
from paramify.models.policy import Policy, PolicyStats
from paramify.telemetry import FloodTelemetryTracker

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _SettlementSnapshot:
    level: float
    threshold: float
    policy: Policy | None


class PolicyStateMachine:
    """Validates and applies policy transitions."""

    def __init__(
        self,
        ledger: PolicyLedger,
        telemetry: FloodTelemetryTracker,
        guard: AuthorizationGuard,
    ) -> None:
        self._ledger = ledger
        self._telemetry = telemetry
        self._guard = guard

    def _snapshot(self, policy: Policy | None) -> _SettlementSnapshot:
        return _SettlementSnapshot(
            level=self._telemetry.comparable_level(),
            threshold=self._telemetry.get_flood_threshold(),
            policy=policy,
        )

    def create_policy(self, caller: str, premium: int, coverage: int) -> int:
        """Open a policy for *caller* and return its id.

        Raises
        ------
        ParamifyValidationError
            If the caller identity is empty, or premium or coverage is not a
            positive integer.
        ParamifyConflictError
            If the caller's current policy is still active.
        """
        if not caller:
            raise ParamifyValidationError("Caller identity must be non-empty")
        if premium <= 0:
            raise ParamifyValidationError("Premium must be greater than 0")
        if coverage <= 0:
            raise ParamifyValidationError("Coverage must be greater than 0")

        existing = self._ledger.get_by_holder(caller)
        if existing is not None and existing.active:
            raise ParamifyConflictError("Policy already active")

        try:
            policy = self._ledger.open_policy(caller, premium, coverage)
        except ValidationError as exc:
            raise ParamifyValidationError(f"Invalid policy: {exc.error_count()} error(s)") from exc
        _logger.info("Policy %d created for %s (coverage=%d)", policy.policy_id, caller, coverage)
        return policy.policy_id

    def get_policy(self, policy_id: int) -> Policy | None:
        return self._ledger.get(policy_id)

    def get_policy_by_holder(self, holder: str) -> Policy | None:
        return self._ledger.get_by_holder(holder)

    def get_all_policies(self, caller: str) -> list[Policy]:
        self._guard.require_admin(caller)
        return self._ledger.all()

    def get_policy_stats(self) -> PolicyStats:
        return self._ledger.stats()

    def update_policy_status(self, caller: str, policy_id: int, active: bool, paid_out: bool) -> None:
        """Set both status flags of a policy.

        Only ``paid_out`` is validated. ``active`` is written as given, which
        means a paid-out policy can be reactivated through this call.

        Raises
        ------
        ParamifyNotFoundError
            Unknown policy id.
        ParamifyUnauthorizedError
            Caller is neither the holder nor the admin.
        ParamifyInvalidStateError
            Payout requested on an inactive or already paid-out policy.
        ParamifyThresholdNotMetError
            Payout requested while the flood level is below threshold.
        """
        snap = self._snapshot(self._ledger.get(policy_id))
        existing = snap.policy
        if existing is None:
            raise ParamifyNotFoundError("Policy not found")

        self._guard.require_owner_or_admin(caller, existing)

        if paid_out and not existing.active:
            raise ParamifyInvalidStateError("Cannot pay out inactive policy")
        if existing.paid_out and paid_out:
            raise ParamifyInvalidStateError("Policy already paid out")
        if paid_out and snap.level < snap.threshold:
            raise ParamifyThresholdNotMetError("Flood level below threshold")

        if self._ledger.set_status(policy_id, active=active, paid_out=paid_out) is None:
            raise ParamifyNotFoundError("Policy not found")
        _logger.info("Policy %d status set: active=%s paid_out=%s", policy_id, active, paid_out)

    def trigger_payout(self, caller: str) -> int:
        """Settle the caller's policy and return the coverage amount to pay.

        Raises
        ------
        ParamifyNotFoundError
            The caller holds no policy.
        ParamifyInvalidStateError
            The policy was already paid out or is inactive.
        ParamifyThresholdNotMetError
            The flood level is below threshold.
        """
        policy_id = self._ledger.policy_id_for(caller)
        if policy_id is None:
            raise ParamifyNotFoundError("No policy found")
        snap = self._snapshot(self._ledger.get(policy_id))
        policy = snap.policy
        if policy is None:
            raise ParamifyNotFoundError("Policy not found")

        if policy.paid_out:
            raise ParamifyInvalidStateError("Policy already paid out")
        if not policy.active:
            raise ParamifyInvalidStateError("No active policy")
        if snap.level < snap.threshold:
            raise ParamifyThresholdNotMetError("Flood level below threshold")

        settled = self._ledger.set_status(policy_id, active=False, paid_out=True)
        if settled is None:
            raise ParamifyNotFoundError("Policy not found")
        _logger.info("Payout issued for policy %d: %d", policy_id, settled.coverage)
        return settled.coverage

    def is_payout_eligible(self, holder: str) -> bool:
        policy = self._ledger.get_by_holder(holder)
        if policy is None or not policy.active or policy.paid_out:
            return False
        return self._telemetry.threshold_met()
