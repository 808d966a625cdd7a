"""Shared fakes for the test suite."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlsplit

from paramify._transport import HttpOutcallRequest, HttpResponse, TransformArgs
from paramify.exceptions import ParamifyTransportError

ADMIN = "admin-principal"
ALICE = "alice-principal"
BOB = "bob-principal"
MALLORY = "mallory-principal"

NOW = 1_771_000_000


def usgs_payload(site_name: str = "POTOMAC RIVER NEAR WASH, DC", value: str = "3.45") -> dict[str, Any]:
    return {
        "value": {
            "timeSeries": [
                {
                    "sourceInfo": {
                        "siteName": site_name,
                        "siteCode": [{"value": "01646500"}],
                    },
                    "values": [
                        {
                            "value": [
                                {"value": value, "dateTime": "2025-09-02T10:00:00.000-04:00"},
                            ]
                        }
                    ],
                }
            ]
        }
    }


@dataclass
class FakeUsgsProvider:
    """In-memory stand-in for the USGS service behind the transport protocol."""

    levels: dict[str, str] = field(default_factory=dict)
    bodies: dict[str, bytes] = field(default_factory=dict)
    unreachable: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)
    requests: list[HttpOutcallRequest] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def http_request(self, request: HttpOutcallRequest) -> HttpResponse:
        site = parse_qs(urlsplit(request.url).query)["sites"][0]
        self.calls.append(site)
        self.requests.append(request)

        if self.gate is not None:
            await self.gate.wait()

        if site in self.unreachable:
            raise ParamifyTransportError("HTTP request failed: connection refused")

        body = self.bodies.get(site)
        if body is None:
            level = self.levels.get(site, "3.45")
            body = json.dumps(usgs_payload(site_name=f"SITE {site}", value=level)).encode("utf-8")

        raw = HttpResponse(status=200, headers=(("content-type", "application/json"),), body=body)
        return request.transform(TransformArgs(response=raw, context=request.transform_context))
