"""Liveness and upstream health endpoints."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.config import settings
from ..core.errors import UpstreamUnavailableError
from ..db.session import check_database
from ..schemas.content import utc_timestamp
from ..schemas.health import ApiHealthResponse, ApiStatus, HealthResponse
from ..services.registry import UpstreamEndpoint, UpstreamRegistry, get_registry
from ..services.upstream import UpstreamClient, UpstreamRequest, get_upstream_client

logger = logging.getLogger(__name__)

router = APIRouter()

DatabaseCheck = Callable[[], Awaitable[bool]]


def get_database_check() -> DatabaseCheck:
    return check_database


async def probe(client: UpstreamClient, endpoint: UpstreamEndpoint) -> ApiStatus:
    """Call one upstream with the probe timeout and report its status."""

    started = time.perf_counter()
    try:
        await client.send(
            UpstreamRequest(
                url=endpoint.probe_url,
                method=endpoint.probe_method,
                json=endpoint.probe_json,
                timeout=settings.probe_timeout_seconds,
                api_name=endpoint.name,
            )
        )
    except UpstreamUnavailableError as exc:
        logger.warning("Health probe for %s failed: %s", endpoint.name, exc.reason)
        return ApiStatus(status="offline", message=exc.reason)
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    return ApiStatus(status="online", message=f"Response received in {elapsed_ms}ms")


@router.get("/health", response_model=HealthResponse)
async def health(database_check: DatabaseCheck = Depends(get_database_check)) -> JSONResponse | HealthResponse:
    """Liveness probe that also verifies database connectivity."""

    if not await database_check():
        return JSONResponse(
            status_code=500,
            content=HealthResponse(status="error", timestamp=utc_timestamp(), database="error").model_dump(),
        )
    return HealthResponse(status="ok", timestamp=utc_timestamp(), database="connected")


@router.get("/api-health", response_model=ApiHealthResponse)
async def api_health(
    client: UpstreamClient = Depends(get_upstream_client),
    endpoints: UpstreamRegistry = Depends(get_registry),
    database_check: DatabaseCheck = Depends(get_database_check),
) -> ApiHealthResponse:
    """Probe every registered upstream concurrently and report each one."""

    targets = list(endpoints)
    results = await asyncio.gather(*(probe(client, endpoint) for endpoint in targets))
    database_ok = await database_check()
    return ApiHealthResponse(
        status="ok",
        timestamp=utc_timestamp(),
        server="online",
        database="connected" if database_ok else "error",
        apis={endpoint.name: result for endpoint, result in zip(targets, results)},
    )
