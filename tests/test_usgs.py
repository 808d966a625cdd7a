from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import pytest

from paramify._constants import HTTP_OUTCALL_CYCLES, USGS_BASE_URL
from paramify._transport import HttpOutcallRequest, HttpResponse, TransformArgs
from paramify.exceptions import ParamifyParseError, ParamifyTransportError
from paramify.ingestion.usgs import (
    build_usgs_request,
    build_usgs_url,
    fetch_usgs_data,
    parse_usgs_response,
    transform_usgs_response,
)
from tests._fakes import FakeUsgsProvider, usgs_payload

FETCHED_AT = datetime(2025, 9, 2, 14, 5, tzinfo=UTC)


def _response(payload: Any) -> HttpResponse:
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    return HttpResponse(status=200, headers=(), body=body)


def test_build_url() -> None:
    assert build_usgs_url(USGS_BASE_URL, "01646500") == (
        "https://waterservices.usgs.gov/nwis/iv/?format=json&sites=01646500&parameterCd=00065&siteStatus=all"
    )


def test_build_url_escapes_site_id() -> None:
    url = build_usgs_url("http://gauges.test/iv/", "0164 6500&x=1")
    assert "sites=0164%206500%26x%3D1&" in url


def test_build_request_declares_transform_and_budget() -> None:
    request = build_usgs_request(USGS_BASE_URL, "01646500")

    assert request.method == "GET"
    assert request.max_response_bytes == 10_000
    assert request.cycles == HTTP_OUTCALL_CYCLES
    assert request.transform is transform_usgs_response


def test_transform_is_identity() -> None:
    raw = HttpResponse(status=200, headers=(("date", "Tue, 02 Sep 2025 14:05:00 GMT"),), body=b"{}")
    assert transform_usgs_response(TransformArgs(response=raw)) is raw


def test_parse_latest_reading() -> None:
    reading = parse_usgs_response(
        _response(usgs_payload(value="3.45")),
        "01646500",
        fetched_at=FETCHED_AT,
    )

    assert reading.location == "01646500"
    assert reading.water_level_feet == 3.45
    assert reading.site_name == "POTOMAC RIVER NEAR WASH, DC"
    assert reading.source == "USGS Water Data"
    assert reading.timestamp == FETCHED_AT


def test_parse_ignores_unknown_fields() -> None:
    payload = usgs_payload(value="9.1")
    payload["name"] = "ns1:timeSeriesResponseType"
    payload["value"]["queryInfo"] = {"queryURL": "http://example"}

    assert parse_usgs_response(_response(payload), "01646500").water_level_feet == 9.1


def _without_time_series() -> dict[str, Any]:
    return {"value": {"timeSeries": []}}


def _without_values() -> dict[str, Any]:
    payload = usgs_payload()
    payload["value"]["timeSeries"][0]["values"] = []
    return payload


def _without_latest_value() -> dict[str, Any]:
    payload = usgs_payload()
    payload["value"]["timeSeries"][0]["values"][0]["value"] = []
    return payload


def _missing_site_name() -> dict[str, Any]:
    payload = usgs_payload()
    del payload["value"]["timeSeries"][0]["sourceInfo"]["siteName"]
    return payload


@pytest.mark.parametrize(
    ("body", "message"),
    [
        (_without_time_series(), "No time series data found"),
        (_without_values(), "No values found"),
        (_without_latest_value(), "No latest value found"),
        (usgs_payload(value="Ice"), "Failed to parse water level"),
        (_missing_site_name(), "Failed to parse JSON"),
        ({"unexpected": True}, "Failed to parse JSON"),
        (b"<html>maintenance</html>", "Failed to parse JSON"),
        (b"\xff\xfe\x00", "Failed to parse response body"),
    ],
)
def test_parse_failures(body: Any, message: str) -> None:
    with pytest.raises(ParamifyParseError, match=message) as excinfo:
        parse_usgs_response(_response(body), "01646500")
    assert excinfo.value.location == "01646500"


@pytest.mark.asyncio
async def test_fetch_charges_budget_before_request() -> None:
    provider = FakeUsgsProvider(levels={"01646500": "4.2"})
    charged: list[int] = []

    reading = await fetch_usgs_data(
        provider,
        USGS_BASE_URL,
        "01646500",
        charge=charged.append,
        clock=lambda: FETCHED_AT,
    )

    assert reading.water_level_feet == 4.2
    assert reading.timestamp == FETCHED_AT
    assert charged == [HTTP_OUTCALL_CYCLES]
    assert provider.requests[0].url == build_usgs_url(USGS_BASE_URL, "01646500")


@pytest.mark.asyncio
async def test_fetch_charges_budget_even_when_transport_fails() -> None:
    provider = FakeUsgsProvider(unreachable={"01646500"})
    charged: list[int] = []

    with pytest.raises(ParamifyTransportError):
        await fetch_usgs_data(provider, USGS_BASE_URL, "01646500", charge=charged.append)

    assert charged == [HTTP_OUTCALL_CYCLES]


@pytest.mark.asyncio
async def test_fetch_passes_response_limit_to_transport() -> None:
    seen: list[HttpOutcallRequest] = []

    class _RecordingTransport:
        async def http_request(self, request: HttpOutcallRequest) -> HttpResponse:
            seen.append(request)
            return _response(usgs_payload())

    await fetch_usgs_data(_RecordingTransport(), USGS_BASE_URL, "01646500", max_response_bytes=2048)

    assert seen[0].max_response_bytes == 2048


@pytest.mark.parametrize("value", ["1_2", " 3.4", "3.4 ", "", "0x1A", "٣.5", "1e", "--1"])
def test_water_level_must_be_strictly_numeric(value: str) -> None:
    with pytest.raises(ParamifyParseError, match="Failed to parse water level"):
        parse_usgs_response(_response(usgs_payload(value=value)), "01646500")


@pytest.mark.parametrize(
    ("value", "expected"),
    [("12", 12.0), ("-1.5e1", -15.0), (".5", 0.5), ("7.", 7.0), ("+3.25", 3.25)],
)
def test_water_level_numeric_forms(value: str, expected: float) -> None:
    assert parse_usgs_response(_response(usgs_payload(value=value)), "01646500").water_level_feet == expected
