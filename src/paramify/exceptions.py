"""Custom exception hierarchy for paramify."""

from __future__ import annotations


class ParamifyError(Exception):
    """Base exception for all paramify errors."""


class ParamifyConfigError(ParamifyError):
    """Invalid or missing configuration."""


class ParamifyUnauthorizedError(ParamifyError):
    """Caller identity does not hold the role required by the operation."""


class ParamifyValidationError(ParamifyError):
    """Malformed or out-of-range input (zero premium, bad threshold, short interval)."""


class ParamifyConflictError(ParamifyError):
    """The caller already holds an active policy."""


class ParamifyNotFoundError(ParamifyError):
    """Unknown policy id, policyholder or location."""


class ParamifyInvalidStateError(ParamifyError):
    """Policy transition not permitted (double payout, payout while inactive)."""


class ParamifyThresholdNotMetError(ParamifyError):
    """Current flood level is below the payout threshold."""


class ParamifyFetchError(ParamifyError):
    """Fetching or interpreting gauge data from the external provider failed."""

    def __init__(self, message: str, *, location: str = "") -> None:
        self.location = location
        super().__init__(message)


class ParamifyTransportError(ParamifyFetchError):
    """HTTP-level failure (network, non-200, oversized body)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        location: str = "",
    ) -> None:
        self.status_code = status_code
        super().__init__(message, location=location)


class ParamifyParseError(ParamifyFetchError):
    """Provider payload is not UTF-8, not JSON, incomplete or non-numeric."""


class ParamifyPausedError(ParamifyError):
    """Ingestion is paused; no fetch is attempted."""


class ParamifyPersistenceError(ParamifyError):
    """Saved state could not be written or restored.

    Unlike the other errors this one is fatal: the lifecycle hooks raise it
    when no known schema can decode a snapshot, and the host cannot continue.
    """
