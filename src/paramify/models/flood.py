"""Gauge readings, oracle configuration and operational status."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from paramify._constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_UPDATE_INTERVAL_SECONDS,
    USGS_BASE_URL,
)
from paramify.models._base import Principal


class FloodData(BaseModel):
    """Normalized water level reading for one gauge site.

    Parameters
    ----------
    location : str
        Site id the reading was requested for (the cache key).
    water_level_feet : float
        Gage height in feet.
    timestamp : datetime
        When the reading was fetched (UTC), not the provider's observation time.
    source : str
        Provider label.
    site_name : str
        Human readable site name reported by the provider.
    """

    model_config = ConfigDict(frozen=True)

    location: str
    water_level_feet: float
    timestamp: datetime
    source: str
    site_name: str


class CachedData(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: FloodData
    cached_at: datetime


class OracleConfig(BaseModel):
    """Runtime configuration of the ingestion oracle.

    The interval minimum is enforced by the oracle when the configuration is
    applied, not here, so callers get a domain error rather than a model error.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    update_interval_seconds: int = DEFAULT_UPDATE_INTERVAL_SECONDS
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    authorized_principals: list[Principal] = Field(default_factory=list)
    usgs_base_url: str = USGS_BASE_URL
    is_paused: bool = False


class InitArgs(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    update_interval_seconds: int | None = None
    authorized_principals: list[Principal] | None = None
    max_retries: int | None = Field(default=None, ge=0)
    usgs_base_url: str | None = None


class OracleStats(BaseModel):
    """Mutable fetch counters owned by the oracle cache."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    total_updates: int = 0
    successful_fetches: int = 0
    failed_fetches: int = 0
    last_update_time: datetime | None = None
    last_error: str | None = None
    cycles_spent: int = 0


class OracleStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_updates: int
    successful_fetches: int
    failed_fetches: int
    last_update_time: datetime | None
    last_error: str | None
    cycles_spent: int
    cached_locations: list[str]
    is_paused: bool
    update_interval_seconds: int
    timer_running: bool


class LocationRequest(BaseModel):
    """Request naming a gauge site."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    location: str

    @field_validator("location")
    @classmethod
    def _location_non_empty(cls, value: str) -> str:
        location = value.strip()
        if not location:
            raise ValueError("location must be non-empty")
        return location
