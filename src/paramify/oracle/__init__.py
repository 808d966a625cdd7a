"""Gauge ingestion oracle: per-location cache, periodic refresh, entry points."""

from paramify.oracle.cache import OracleCache
from paramify.oracle.scheduler import IngestionScheduler
from paramify.oracle.service import FloodOracle, LocationUpdateResult

__all__ = ["FloodOracle", "IngestionScheduler", "LocationUpdateResult", "OracleCache"]
