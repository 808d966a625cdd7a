"""Engine configuration for paramify."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from paramify._constants import (
    DEFAULT_FLOOD_THRESHOLD_FEET,
    DEFAULT_MAX_RETRIES,
    DEFAULT_UPDATE_INTERVAL_SECONDS,
    MAX_RESPONSE_BYTES,
    USGS_BASE_URL,
)
from paramify.exceptions import ParamifyConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_list(value: str | None) -> tuple[str, ...]:
    if value is None:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclasses.dataclass(frozen=True)
class ParamifyConfig:
    """Engine configuration.

    Parameters
    ----------
    usgs_base_url : str
        Base URL of the USGS Instantaneous Values service.
    update_interval_seconds : int
        Initial ingestion sweep interval. Values below 60 are clamped up
        when the oracle is initialised.
    max_retries : int
        Advisory retry budget copied into the oracle configuration.
    default_flood_threshold : float
        Payout threshold (feet) in effect before the admin sets one.
    truncate_flood_level : bool
        Compare the whole-feet part of the flood level against the threshold
        (the behaviour settled policies were written against). Set to
        ``False`` to compare with full precision.
    request_timeout : float
        Total timeout in seconds for a single outbound provider request.
    max_response_bytes : int
        Upper bound on the provider response body.
    controllers : tuple[str, ...]
        Host controller identities. Controllers are always authorized on the
        oracle side, regardless of the authorized-principal list.
    """

    usgs_base_url: str = USGS_BASE_URL
    update_interval_seconds: int = DEFAULT_UPDATE_INTERVAL_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    default_flood_threshold: float = DEFAULT_FLOOD_THRESHOLD_FEET
    truncate_flood_level: bool = True
    request_timeout: float = 30.0
    max_response_bytes: int = MAX_RESPONSE_BYTES
    controllers: tuple[str, ...] = ()

    @classmethod
    def from_env(cls, **overrides: Any) -> ParamifyConfig:
        """Create configuration from ``PARAMIFY_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        ParamifyConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("PARAMIFY_USGS_BASE_URL")
        if base_url is not None:
            config_kwargs["usgs_base_url"] = base_url

        _NUMERIC_ENV_MAP: dict[str, tuple[str, type]] = {
            "PARAMIFY_UPDATE_INTERVAL_SECONDS": ("update_interval_seconds", int),
            "PARAMIFY_MAX_RETRIES": ("max_retries", int),
            "PARAMIFY_DEFAULT_FLOOD_THRESHOLD": ("default_flood_threshold", float),
            "PARAMIFY_REQUEST_TIMEOUT": ("request_timeout", float),
            "PARAMIFY_MAX_RESPONSE_BYTES": ("max_response_bytes", int),
        }
        for env_key, (field_name, caster) in _NUMERIC_ENV_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = caster(val)
            except ValueError as exc:
                raise ParamifyConfigError(f"{env_key} must be numeric, got {val!r}") from exc

        if "truncate_flood_level" not in overrides:
            config_kwargs["truncate_flood_level"] = _env_bool(env.get("PARAMIFY_TRUNCATE_FLOOD_LEVEL"), True)

        controllers = _env_list(env.get("PARAMIFY_CONTROLLERS"))
        if controllers:
            config_kwargs["controllers"] = controllers

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
