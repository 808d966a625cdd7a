#!/usr/bin/env python3
"""Fetch live gage heights from USGS through the paramify ingestion path.

Runs the same request, transform and parser the oracle uses, so parser
regressions against the live service show up without starting an engine.

Usage
-----
::

    python scripts/probe_usgs.py 01646500 01638500
    python scripts/probe_usgs.py 01646500 --json

Options::

    --json               Output as machine-readable JSON
    --raw                Also print the raw response body
    --verbose, -v        Enable debug logging

``PARAMIFY_USGS_BASE_URL`` and ``PARAMIFY_REQUEST_TIMEOUT`` are honoured.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from paramify import ParamifyConfig, ParamifyFetchError  # noqa: E402
from paramify._transport import HttpOutcallTransport  # noqa: E402
from paramify.ingestion.usgs import build_usgs_request, parse_usgs_response  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Probe USGS gauge sites with the paramify parser.",
    )
    parser.add_argument("sites", nargs="+", help="USGS site ids, e.g. 01646500")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--raw", action="store_true", help="Print the raw response body")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args()


async def _probe(transport: HttpOutcallTransport, config: ParamifyConfig, site: str, *, raw: bool) -> dict[str, Any]:
    request = build_usgs_request(config.usgs_base_url, site, max_response_bytes=config.max_response_bytes)
    result: dict[str, Any] = {"site": site, "url": request.url}
    try:
        response = await transport.http_request(request)
        if raw:
            result["raw"] = response.body.decode("utf-8", errors="replace")
        reading = parse_usgs_response(response, site)
    except ParamifyFetchError as exc:
        result["error"] = f"{type(exc).__name__}: {exc}"
        return result
    result["reading"] = reading.model_dump(mode="json")
    return result


async def main() -> int:
    args = _parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = ParamifyConfig.from_env()
    async with aiohttp.ClientSession() as session:
        transport = HttpOutcallTransport(session, timeout=config.request_timeout)
        results = [await _probe(transport, config, site, raw=args.raw) for site in args.sites]

    if args.json_mode:
        print(json.dumps(results, indent=2, ensure_ascii=False))
    else:
        for result in results:
            print(f"── {result['site']} ──")
            print(f"  url   : {result['url']}")
            if "error" in result:
                print(f"  error : {result['error']}")
            else:
                reading = result["reading"]
                print(f"  site  : {reading['site_name']}")
                print(f"  level : {reading['water_level_feet']:.2f} ft")
            if "raw" in result:
                print(f"  raw   : {result['raw']}")

    return 1 if any("error" in r for r in results) else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
