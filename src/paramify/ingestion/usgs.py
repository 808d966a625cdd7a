"""USGS Instantaneous Values fetcher.

Builds the gage-height request, declares the response transform, and parses
the nested ``value.timeSeries[].values[].value[]`` payload into a
:class:`~paramify.models.flood.FloodData` reading.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime
from urllib.parse import quote

from pydantic import ValidationError

from paramify._constants import MAX_RESPONSE_BYTES, USGS_GAGE_HEIGHT_PARAMETER, USGS_SOURCE_LABEL
from paramify._transport import HttpOutcallRequest, HttpResponse, TransformArgs, Transport
from paramify.exceptions import ParamifyParseError
from paramify.models.flood import FloodData
from paramify.models.usgs import UsgsResponse

_logger = logging.getLogger(__name__)

# Decimal or exponent notation, or inf/infinity/nan. No whitespace, separators or non-ASCII digits.
_NUMERIC_RE = re.compile(r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)", re.IGNORECASE)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def build_usgs_url(base_url: str, site_id: str) -> str:
    return (
        f"{base_url}?format=json&sites={quote(site_id, safe=',')}"
        f"&parameterCd={USGS_GAGE_HEIGHT_PARAMETER}&siteStatus=all"
    )


def transform_usgs_response(args: TransformArgs) -> HttpResponse:
    """Response normalization for USGS outcalls.

    USGS answers identically to repeated requests within an update window,
    so the response is passed through unchanged.
    """
    return args.response


def build_usgs_request(
    base_url: str,
    site_id: str,
    *,
    max_response_bytes: int = MAX_RESPONSE_BYTES,
) -> HttpOutcallRequest:
    return HttpOutcallRequest(
        url=build_usgs_url(base_url, site_id),
        transform=transform_usgs_response,
        max_response_bytes=max_response_bytes,
    )


def parse_usgs_response(
    response: HttpResponse,
    site_id: str,
    *,
    fetched_at: datetime | None = None,
) -> FloodData:
    """Extract the latest gage height from a USGS response.

    Raises
    ------
    ParamifyParseError
        If the body is not UTF-8 JSON in the expected shape, any step of the
        ``timeSeries -> values -> value`` path is empty, or the value is not
        numeric.
    """
    try:
        text = response.body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParamifyParseError(f"Failed to parse response body: {exc}", location=site_id) from exc

    try:
        payload = UsgsResponse.model_validate_json(text)
    except ValidationError as exc:
        raise ParamifyParseError(f"Failed to parse JSON: {exc.error_count()} error(s)", location=site_id) from exc

    if not payload.value.time_series:
        raise ParamifyParseError("No time series data found", location=site_id)
    time_series = payload.value.time_series[0]

    if not time_series.values:
        raise ParamifyParseError("No values found", location=site_id)
    latest_values = time_series.values[0]

    if not latest_values.value:
        raise ParamifyParseError("No latest value found", location=site_id)
    latest_value = latest_values.value[0]

    if _NUMERIC_RE.fullmatch(latest_value.value) is None:
        raise ParamifyParseError(
            f"Failed to parse water level: {latest_value.value!r}",
            location=site_id,
        )
    water_level_feet = float(latest_value.value)

    return FloodData(
        location=site_id,
        water_level_feet=water_level_feet,
        timestamp=fetched_at or _utcnow(),
        source=USGS_SOURCE_LABEL,
        site_name=time_series.source_info.site_name,
    )


async def fetch_usgs_data(
    transport: Transport,
    base_url: str,
    site_id: str,
    *,
    charge: Callable[[int], None] | None = None,
    clock: Callable[[], datetime] = _utcnow,
    max_response_bytes: int = MAX_RESPONSE_BYTES,
) -> FloodData:
    """Fetch and parse the latest reading for *site_id*.

    Parameters
    ----------
    charge
        Called with the request's cycle budget before the request is sent.
        The budget is spent whether or not the call succeeds.
    """
    request = build_usgs_request(base_url, site_id, max_response_bytes=max_response_bytes)
    if charge is not None:
        charge(request.cycles)

    _logger.debug("Fetching USGS data from: %s", request.url)
    response = await transport.http_request(request)
    return parse_usgs_response(response, site_id, fetched_at=clock())
