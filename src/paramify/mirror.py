"""Dashboard mirror of policies settled on an external chain.

A plain upsert/clear store. Records are never checked against
:class:`paramify.ledger.PolicyLedger`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from paramify.auth import AuthorizationGuard
from paramify.models.policy import MirrorPolicy, PolicyStats
from paramify.state.store import MirrorState

_logger = logging.getLogger(__name__)


class MirrorLedger:
    def __init__(self, state: MirrorState, guard: AuthorizationGuard) -> None:
        self._state = state
        self._guard = guard

    def upsert_policy(self, caller: str, policy: MirrorPolicy) -> None:
        self._guard.require_admin(caller)
        self._state.mirror_policies[policy.policy_id] = policy

    def batch_upsert_policies(self, caller: str, policies: Iterable[MirrorPolicy]) -> None:
        self._guard.require_admin(caller)
        count = 0
        for policy in policies:
            self._state.mirror_policies[policy.policy_id] = policy
            count += 1
        _logger.debug("Mirror upserted %d policies", count)

    def clear_policies(self, caller: str) -> None:
        self._guard.require_admin(caller)
        self._state.mirror_policies.clear()

    def get_policies(self) -> list[MirrorPolicy]:
        return [self._state.mirror_policies[key] for key in sorted(self._state.mirror_policies)]

    def get_policy_stats(self) -> PolicyStats:
        policies = self._state.mirror_policies.values()
        return PolicyStats(
            total=len(self._state.mirror_policies),
            active=sum(1 for p in policies if p.active),
            paid_out=sum(1 for p in policies if p.paid_out),
        )
