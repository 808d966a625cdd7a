"""Settlement flood level and payout threshold.

This is the level policies settle against. It is pushed by oracle updaters
and is deliberately not fed from the ingestion cache in
:mod:`paramify.oracle`; the two telemetry paths are independent.
"""

from __future__ import annotations

import logging
import math

from paramify._constants import MAX_FLOOD_THRESHOLD_FEET, format_flood_level
from paramify.auth import AuthorizationGuard
from paramify.exceptions import ParamifyValidationError
from paramify.state.store import TelemetryState

_logger = logging.getLogger(__name__)


def truncate_level(level: float) -> float:
    """Whole-feet part of *level*, saturating at zero.

    NaN and negative levels become ``0``; positive infinity is kept.
    """
    if math.isnan(level) or level <= 0:
        return 0.0
    if math.isinf(level):
        return level
    return float(math.trunc(level))


class FloodTelemetryTracker:
    """Owns the current flood level, the threshold and the updater allow-set."""

    def __init__(
        self,
        state: TelemetryState,
        guard: AuthorizationGuard,
        *,
        truncate_flood_level: bool = True,
    ) -> None:
        self._state = state
        self._guard = guard
        self._truncate = truncate_flood_level

    def set_flood_level(self, caller: str, level: float) -> None:
        self._guard.require_oracle_updater(caller, self._state.oracle_updaters)
        old_level = self._state.flood_level
        self._state.flood_level = float(level)
        _logger.info(
            "Flood level updated: %s -> %s",
            format_flood_level(old_level),
            format_flood_level(self._state.flood_level),
        )

    def get_flood_level(self) -> float:
        return self._state.flood_level

    def set_flood_threshold(self, caller: str, threshold: float) -> None:
        self._guard.require_admin(caller)
        if not threshold > 0.0:
            raise ParamifyValidationError("Threshold must be positive")
        if threshold > MAX_FLOOD_THRESHOLD_FEET:
            raise ParamifyValidationError(
                f"Threshold too high: {format_flood_level(threshold)} (max {format_flood_level(MAX_FLOOD_THRESHOLD_FEET)})"
            )
        old_threshold = self._state.flood_threshold
        self._state.flood_threshold = float(threshold)
        _logger.info(
            "Flood threshold updated: %s -> %s",
            format_flood_level(old_threshold),
            format_flood_level(self._state.flood_threshold),
        )

    def get_flood_threshold(self) -> float:
        return self._state.flood_threshold

    def comparable_level(self) -> float:
        """Level used in threshold comparisons (truncated unless configured otherwise)."""
        level = self._state.flood_level
        return truncate_level(level) if self._truncate else level

    def threshold_met(self) -> bool:
        return self.comparable_level() >= self._state.flood_threshold

    def add_oracle_updater(self, caller: str, updater: str) -> None:
        self._guard.require_admin(caller)
        if updater not in self._state.oracle_updaters:
            self._state.oracle_updaters.append(updater)

    def remove_oracle_updater(self, caller: str, updater: str) -> None:
        self._guard.require_admin(caller)
        self._state.oracle_updaters = [u for u in self._state.oracle_updaters if u != updater]

    def get_oracle_updaters(self, caller: str) -> list[str]:
        self._guard.require_admin(caller)
        return list(self._state.oracle_updaters)
