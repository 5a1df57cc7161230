"""Tracking endpoints.

This is the thin FastAPI adapter. It classifies the request path, calls the
recorder or the aggregator, and renders the result. Every path not claimed by
another router lands here.
"""

from __future__ import annotations

import asyncio
import json

import structlog
from fastapi import APIRouter, Request, Response

from edgestats.core.routing import classify_path
from edgestats.core.window import iso_from_ms, now_ms, parse_window
from edgestats.storage.base import StoreUnavailableError

router = APIRouter()

log = structlog.get_logger()

USAGE = """Usage:
  - /alpha, /beta ...          -> fresh payload per request (tracks hits)
  - /stats[?window=60000]      -> metrics JSON (default window 5 min)

  Configure the store in config.yaml:
    storage:
      backend: file            # or "memory"
      base_dir: data/stats
"""


def _unavailable() -> Response:
    return Response(
        content="Stats store unavailable, try again later\n",
        status_code=503,
        media_type="text/plain",
    )


@router.get("/{path:path}")
async def track(request: Request) -> Response:
    """Serve a unique payload for a route, or the stats aggregate.

    - ``/`` and ``/stats``: JSON aggregate over ``?window=<ms>``
    - ``/<route>``: plain-text payload, one hit recorded
    - anything else: usage text with status 404
    """
    from edgestats.main import get_aggregator, get_config, get_recorder

    config = get_config()
    now = now_ms()
    target = classify_path(
        request.url.path,
        stats_identifier=config.routing.stats_identifier,
        max_route_length=config.routing.max_route_length,
    )
    timeout = config.tracking.request_timeout_seconds

    if target.kind == "help":
        return Response(content=USAGE, status_code=404, media_type="text/plain")

    try:
        if target.kind == "stats":
            window_ms = parse_window(
                request.query_params.get("window"),
                default=config.tracking.default_window_ms,
            )
            result = await asyncio.wait_for(
                get_aggregator().compute_aggregate(window_ms, now), timeout,
            )
            return Response(
                content=json.dumps(result.to_dict(), indent=2),
                media_type="application/json",
            )

        await asyncio.wait_for(get_recorder().record_hit(target.route_id, now), timeout)
    except StoreUnavailableError:
        log.error("store_unavailable", path=request.url.path, exc_info=True)
        return _unavailable()
    except asyncio.TimeoutError:
        log.error("request_timeout", path=request.url.path, timeout_seconds=timeout)
        return _unavailable()

    return Response(
        content=f'Fresh content for "{target.route_id}" @ {iso_from_ms(now)}\n',
        media_type="text/plain",
    )
