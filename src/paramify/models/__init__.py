"""Data models for paramify."""

from paramify.models._base import ANONYMOUS_PRINCIPAL, ParamifyBaseModel, Principal
from paramify.models.flood import (
    CachedData,
    FloodData,
    InitArgs,
    LocationRequest,
    OracleConfig,
    OracleStats,
    OracleStatus,
)
from paramify.models.policy import MirrorPolicy, Policy, PolicyStats
from paramify.models.usgs import UsgsResponse

__all__ = [
    "ANONYMOUS_PRINCIPAL",
    "CachedData",
    "FloodData",
    "InitArgs",
    "LocationRequest",
    "MirrorPolicy",
    "OracleConfig",
    "OracleStats",
    "OracleStatus",
    "ParamifyBaseModel",
    "Policy",
    "PolicyStats",
    "Principal",
    "UsgsResponse",
]
