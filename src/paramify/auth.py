"""Role checks for every entry point.

Four roles are recognised:

* **admin** - a single identity held in :class:`~paramify.state.store.AccessState`.
* **oracle updater** - may push the flood level used for settlement.
* **authorized principal** - may drive the ingestion oracle. Host
  controllers are implicitly authorized.
* **policy owner** - the holder recorded on a policy.

The allow-sets for the second and third roles are owned by other components;
callers hand them in so the guard never reads another component's storage.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from paramify.exceptions import ParamifyUnauthorizedError
from paramify.models.policy import Policy
from paramify.state.store import AccessState

_logger = logging.getLogger(__name__)


class AuthorizationGuard:
    """Answers "is this identity allowed to do X"."""

    def __init__(self, state: AccessState, *, controllers: Iterable[str] = ()) -> None:
        self._state = state
        self._controllers = frozenset(controllers)

    @property
    def admin(self) -> str:
        return self._state.admin

    def get_admin(self) -> str:
        return self._state.admin

    def is_admin(self, caller: str) -> bool:
        return caller == self._state.admin

    def is_controller(self, caller: str) -> bool:
        return caller in self._controllers

    def require_admin(self, caller: str) -> None:
        if not self.is_admin(caller):
            raise ParamifyUnauthorizedError("Unauthorized: Admin access required")

    def require_oracle_updater(self, caller: str, oracle_updaters: Collection[str]) -> None:
        if caller not in oracle_updaters and not self.is_admin(caller):
            raise ParamifyUnauthorizedError("Unauthorized: Oracle updater access required")

    def is_authorized_principal(self, caller: str, authorized: Collection[str]) -> bool:
        return caller in authorized or self.is_controller(caller)

    def require_authorized_principal(self, caller: str, authorized: Collection[str]) -> None:
        if not self.is_authorized_principal(caller, authorized):
            raise ParamifyUnauthorizedError("Unauthorized: Caller is not authorized")

    def require_owner_or_admin(self, caller: str, policy: Policy) -> None:
        if policy.policyholder != caller and not self.is_admin(caller):
            raise ParamifyUnauthorizedError("Unauthorized")

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        self.require_admin(caller)
        _logger.info("Admin transferred: %s -> %s", self._state.admin, new_admin)
        self._state.admin = new_admin
