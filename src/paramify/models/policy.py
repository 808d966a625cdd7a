"""Insurance policy records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from paramify.models._base import Principal


class Policy(BaseModel):
    """A parametric flood policy.

    Records are immutable; the ledger replaces them on every transition and
    never deletes them.

    Parameters
    ----------
    policy_id : int
        Sequential id, starting at 1.
    policyholder : str
        Identity that bought the policy.
    premium : int
        Premium paid, in the smallest currency unit.
    coverage : int
        Amount authorised for payout when the policy triggers.
    purchase_time : int
        Epoch seconds at creation.
    active : bool
        Whether the policy is currently in force.
    paid_out : bool
        Whether the payout has been authorised.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    policy_id: int = Field(ge=1)
    policyholder: Principal
    premium: int = Field(ge=0)
    coverage: int = Field(ge=0)
    purchase_time: int
    active: bool = True
    paid_out: bool = False


class PolicyStats(BaseModel):
    """Aggregate counts over a set of policies."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    active: int = 0
    paid_out: int = 0


class MirrorPolicy(BaseModel):
    """Dashboard copy of a policy settled on an external chain.

    Amounts are in the external chain's base unit (wei). Nothing checks these
    records against the local ledger.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    policy_id: int
    policyholder_eth: str
    premium_wei: int = Field(ge=0)
    coverage_wei: int = Field(ge=0)
    purchase_time: int
    active: bool
    paid_out: bool
