"""Outbound HTTP transport with a mandatory response transform."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import aiohttp

from paramify._constants import HTTP_OUTCALL_CYCLES, MAX_RESPONSE_BYTES
from paramify.exceptions import ParamifyTransportError

_logger = logging.getLogger(__name__)

_READ_CHUNK_BYTES = 4096


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    headers: tuple[tuple[str, str], ...]
    body: bytes


@dataclass(frozen=True, slots=True)
class TransformArgs:
    response: HttpResponse
    context: bytes = b""


Transform = Callable[[TransformArgs], HttpResponse]
"""Normalizes a raw response so redundant executions agree byte for byte."""


@dataclass(frozen=True, slots=True)
class HttpOutcallRequest:
    """An outbound request.

    ``transform`` has no default: every outcall must declare how its
    response is normalized before the caller sees it.
    """

    url: str
    transform: Transform
    method: str = "GET"
    headers: tuple[tuple[str, str], ...] = ()
    max_response_bytes: int = MAX_RESPONSE_BYTES
    transform_context: bytes = b""
    cycles: int = HTTP_OUTCALL_CYCLES


class Transport(Protocol):
    """Structural transport interface used by the ingestion layer.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpOutcallTransport`) concrete.
    """

    async def http_request(self, request: HttpOutcallRequest) -> HttpResponse:
        ...


class HttpOutcallTransport:
    """aiohttp transport that bounds the response size and applies the transform."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float = 30.0) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def http_request(self, request: HttpOutcallRequest) -> HttpResponse:
        """Send *request* and return the transformed response.

        Raises
        ------
        ParamifyTransportError
            On network failure, timeout, a non-200 status or a body larger
            than ``request.max_response_bytes``.
        """
        _logger.debug("%s %s", request.method, request.url)

        limit = request.max_response_bytes
        try:
            async with self._http.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                timeout=self._timeout,
            ) as resp:
                body = bytearray()
                async for chunk in resp.content.iter_chunked(_READ_CHUNK_BYTES):
                    body.extend(chunk)
                    if len(body) > limit:
                        raise ParamifyTransportError(
                            f"Response from {request.url} exceeds {limit} bytes",
                            status_code=resp.status,
                        )
                status = resp.status
                headers = tuple((k, v) for k, v in resp.headers.items())
        except ParamifyTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ParamifyTransportError(f"HTTP request failed: {exc!r}") from exc

        if status != 200:
            preview = bytes(body[:200]).decode("utf-8", errors="replace")
            raise ParamifyTransportError(
                f"HTTP {status} from {request.url}: {preview}",
                status_code=status,
            )

        raw = HttpResponse(status=status, headers=headers, body=bytes(body))
        return request.transform(TransformArgs(response=raw, context=request.transform_context))
