"""paramify - Parametric flood insurance settlement with a USGS gauge oracle."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("paramify")
except PackageNotFoundError:
    __version__ = "0+local"
from paramify.config import ParamifyConfig
from paramify.engine import EngineSnapshot, ParamifyEngine
from paramify.exceptions import (
    ParamifyConfigError,
    ParamifyConflictError,
    ParamifyError,
    ParamifyFetchError,
    ParamifyInvalidStateError,
    ParamifyNotFoundError,
    ParamifyParseError,
    ParamifyPausedError,
    ParamifyPersistenceError,
    ParamifyThresholdNotMetError,
    ParamifyTransportError,
    ParamifyUnauthorizedError,
    ParamifyValidationError,
)
from paramify.models import (
    CachedData,
    FloodData,
    InitArgs,
    MirrorPolicy,
    OracleConfig,
    OracleStatus,
    Policy,
    PolicyStats,
)
from paramify.oracle import FloodOracle, LocationUpdateResult

__all__ = [
    "__version__",
    "CachedData",
    "EngineSnapshot",
    "FloodData",
    "FloodOracle",
    "InitArgs",
    "LocationUpdateResult",
    "MirrorPolicy",
    "OracleConfig",
    "OracleStatus",
    "ParamifyConfig",
    "ParamifyConfigError",
    "ParamifyConflictError",
    "ParamifyEngine",
    "ParamifyError",
    "ParamifyFetchError",
    "ParamifyInvalidStateError",
    "ParamifyNotFoundError",
    "ParamifyParseError",
    "ParamifyPausedError",
    "ParamifyPersistenceError",
    "ParamifyThresholdNotMetError",
    "ParamifyTransportError",
    "ParamifyUnauthorizedError",
    "ParamifyValidationError",
    "Policy",
    "PolicyStats",
]
