"""Versioned save/restore of engine state across upgrades.

The insurance side is saved as a positional tuple::

    (policies, policy_id_counter, policyholder_map, flood_level,
     flood_threshold, admin, oracle_updaters, mirror_policies)

Deployments that predate the dashboard mirror saved the first seven elements
only. Restore walks :data:`INSURANCE_SCHEMAS` newest-first and the first
schema that decodes wins; components absent from an older schema are filled
with their empty value.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from paramify.exceptions import ParamifyPersistenceError
from paramify.models.flood import CachedData, OracleConfig, OracleStats
from paramify.models.policy import MirrorPolicy, Policy
from paramify.state.store import (
    AccessState,
    LedgerState,
    MirrorState,
    OracleState,
    TelemetryState,
)

_logger = logging.getLogger(__name__)

_TUPLE_CONFIG = ConfigDict(ser_json_inf_nan="constants")

_InsuranceTupleV1 = tuple[
    dict[int, Policy],
    int,
    dict[str, int],
    float,
    float,
    str,
    list[str],
]
_InsuranceTupleV2 = tuple[
    dict[int, Policy],
    int,
    dict[str, int],
    float,
    float,
    str,
    list[str],
    dict[int, MirrorPolicy],
]


@dataclass(slots=True)
class InsuranceStores:
    """The state containers covered by the insurance snapshot."""

    access: AccessState
    ledger: LedgerState
    telemetry: TelemetryState
    mirror: MirrorState


@dataclass(frozen=True, slots=True)
class SchemaVersion:
    """One historical layout of the insurance snapshot."""

    version: int
    adapter: TypeAdapter[Any]
    build: Callable[[tuple[Any, ...]], InsuranceStores]


def _build_common(values: tuple[Any, ...], mirror: MirrorState) -> InsuranceStores:
    policies, counter, holder_map, flood_level, flood_threshold, admin, updaters = values[:7]
    return InsuranceStores(
        access=AccessState(admin=admin),
        ledger=LedgerState(
            policies=policies,
            policy_id_counter=counter,
            policyholder_map=holder_map,
        ),
        telemetry=TelemetryState(
            flood_level=flood_level,
            flood_threshold=flood_threshold,
            oracle_updaters=updaters,
        ),
        mirror=mirror,
    )


def _build_v1(values: tuple[Any, ...]) -> InsuranceStores:
    return _build_common(values, MirrorState())


def _build_v2(values: tuple[Any, ...]) -> InsuranceStores:
    return _build_common(values, MirrorState(mirror_policies=values[7]))


INSURANCE_SCHEMAS: tuple[SchemaVersion, ...] = (
    SchemaVersion(2, TypeAdapter(_InsuranceTupleV2, config=_TUPLE_CONFIG), _build_v2),
    SchemaVersion(1, TypeAdapter(_InsuranceTupleV1, config=_TUPLE_CONFIG), _build_v1),
)
"""Known snapshot layouts, newest first."""


def save_insurance_state(stores: InsuranceStores) -> bytes:
    """Serialize the insurance containers using the newest schema."""
    current = INSURANCE_SCHEMAS[0]
    values = (
        stores.ledger.policies,
        stores.ledger.policy_id_counter,
        stores.ledger.policyholder_map,
        stores.telemetry.flood_level,
        stores.telemetry.flood_threshold,
        stores.access.admin,
        stores.telemetry.oracle_updaters,
        stores.mirror.mirror_policies,
    )
    try:
        return current.adapter.dump_json(values)
    except ValueError as exc:
        raise ParamifyPersistenceError(f"Failed to save state: {exc}") from exc


def restore_insurance_state(blob: bytes | str) -> InsuranceStores:
    """Decode a snapshot written by any known schema version.

    Raises
    ------
    ParamifyPersistenceError
        If no schema in :data:`INSURANCE_SCHEMAS` can decode *blob*.
    """
    failures: list[str] = []
    for schema in INSURANCE_SCHEMAS:
        try:
            values = schema.adapter.validate_json(blob)
        except ValidationError as exc:
            failures.append(f"v{schema.version}: {exc.error_count()} error(s)")
            continue
        _logger.info("Restored insurance state using schema v%d", schema.version)
        return schema.build(values)
    raise ParamifyPersistenceError(f"Failed to restore state ({'; '.join(failures)})")


class OracleSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid", ser_json_inf_nan="constants")

    version: Literal[1] = 1
    config: OracleConfig
    cache: dict[str, CachedData] = Field(default_factory=dict)
    stats: OracleStats = Field(default_factory=OracleStats)


def save_oracle_state(state: OracleState) -> bytes:
    snapshot = OracleSnapshot(config=state.config, cache=state.cache, stats=state.stats)
    return snapshot.model_dump_json().encode("utf-8")


def restore_oracle_state(blob: bytes | str) -> OracleState:
    """Decode an oracle snapshot.

    Raises
    ------
    ParamifyPersistenceError
        If the snapshot is not a valid version 1 oracle snapshot.
    """
    try:
        snapshot = OracleSnapshot.model_validate_json(blob)
    except ValidationError as exc:
        raise ParamifyPersistenceError(f"Failed to restore oracle state: {exc.error_count()} error(s)") from exc
    return OracleState(config=snapshot.config, cache=snapshot.cache, stats=snapshot.stats)
