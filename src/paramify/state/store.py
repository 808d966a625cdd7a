"""In-memory state containers.

Containers are plain mutable models: they hold data and nothing else. All
validation and authorization lives in the component that owns the container.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from paramify._constants import DEFAULT_FLOOD_THRESHOLD_FEET
from paramify.models._base import ANONYMOUS_PRINCIPAL
from paramify.models.flood import CachedData, OracleConfig, OracleStats
from paramify.models.policy import MirrorPolicy, Policy

TState = TypeVar("TState", bound=BaseModel)


class AccessState(BaseModel):
    """Owned by :class:`paramify.auth.AuthorizationGuard`."""

    model_config = ConfigDict(extra="forbid")

    admin: str = ANONYMOUS_PRINCIPAL


class LedgerState(BaseModel):
    """Owned by :class:`paramify.ledger.PolicyLedger`."""

    model_config = ConfigDict(extra="forbid")

    policies: dict[int, Policy] = Field(default_factory=dict)
    policy_id_counter: int = 0
    policyholder_map: dict[str, int] = Field(default_factory=dict)


class TelemetryState(BaseModel):
    """Owned by :class:`paramify.telemetry.FloodTelemetryTracker`."""

    model_config = ConfigDict(extra="forbid")

    flood_level: float = 0.0
    flood_threshold: float = DEFAULT_FLOOD_THRESHOLD_FEET
    oracle_updaters: list[str] = Field(default_factory=list)


class MirrorState(BaseModel):
    """Owned by :class:`paramify.mirror.MirrorLedger`."""

    model_config = ConfigDict(extra="forbid")

    mirror_policies: dict[int, MirrorPolicy] = Field(default_factory=dict)


class OracleState(BaseModel):
    """Owned by :class:`paramify.oracle.service.FloodOracle` and its cache."""

    model_config = ConfigDict(extra="forbid")

    config: OracleConfig = Field(default_factory=OracleConfig)
    cache: dict[str, CachedData] = Field(default_factory=dict)
    stats: OracleStats = Field(default_factory=OracleStats)


def replace_state(target: TState, source: TState) -> None:
    """Overwrite every field of *target* with the value held by *source*.

    Components keep a reference to their container, so restores must mutate
    the existing object instead of swapping it.
    """
    for name in type(target).model_fields:
        setattr(target, name, getattr(source, name))
