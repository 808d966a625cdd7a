"""Policy storage: id -> policy and holder -> latest policy id."""

from __future__ import annotations

import time
from collections.abc import Callable

from paramify.models.policy import Policy, PolicyStats
from paramify.state.store import LedgerState


class PolicyLedger:
    """Owns policy records. Performs no validation; see
    :class:`paramify.policies.PolicyStateMachine` for the transition rules.
    """

    def __init__(self, state: LedgerState, *, clock: Callable[[], float] = time.time) -> None:
        self._state = state
        self._clock = clock

    def open_policy(self, holder: str, premium: int, coverage: int) -> Policy:
        """Allocate the next id and record a new active policy for *holder*.

        The holder mapping is overwritten, so an earlier policy of the same
        holder stays reachable by id only. The record is validated before
        any state changes, so a rejected policy consumes no id.
        """
        policy = Policy(
            policy_id=self._state.policy_id_counter + 1,
            policyholder=holder,
            premium=premium,
            coverage=coverage,
            purchase_time=int(self._clock()),
            active=True,
            paid_out=False,
        )
        self._state.policy_id_counter = policy.policy_id
        self._state.policies[policy.policy_id] = policy
        self._state.policyholder_map[holder] = policy.policy_id
        return policy

    def get(self, policy_id: int) -> Policy | None:
        return self._state.policies.get(policy_id)

    def policy_id_for(self, holder: str) -> int | None:
        return self._state.policyholder_map.get(holder)

    def get_by_holder(self, holder: str) -> Policy | None:
        policy_id = self.policy_id_for(holder)
        if policy_id is None:
            return None
        return self._state.policies.get(policy_id)

    def set_status(self, policy_id: int, *, active: bool, paid_out: bool) -> Policy | None:
        """Replace the status flags of a stored policy, returning the new record."""
        existing = self._state.policies.get(policy_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={"active": active, "paid_out": paid_out})
        self._state.policies[policy_id] = updated
        return updated

    def all(self) -> list[Policy]:
        return list(self._state.policies.values())

    def stats(self) -> PolicyStats:
        policies = self._state.policies.values()
        return PolicyStats(
            total=self._state.policy_id_counter,
            active=sum(1 for p in policies if p.active),
            paid_out=sum(1 for p in policies if p.paid_out),
        )
