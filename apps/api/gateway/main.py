"""FastAPI application for the AYANFE AI content gateway."""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException

from .core.config import settings
from .core.errors import MissingParameterError
from .core.security import get_current_user
from .routers import admin, content, health, media
from .services.upstream import upstream_client
from .services.usage import UsageEvent, usage_recorder

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    await upstream_client.aclose()


async def _missing_parameter(_: Request, exc: MissingParameterError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.message})


async def _http_error(_: Request, exc: HTTPException) -> JSONResponse:
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc) or type(exc).__name__},
    )


async def _record_usage(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Record API usage for authenticated callers once the response is ready."""

    started = time.perf_counter()
    response = await call_next(request)
    user = get_current_user(request)
    if user is not None and request.url.path.startswith("/api/"):
        recorder = getattr(request.app.state, "usage_recorder", usage_recorder)
        await recorder.record(
            UsageEvent(
                user_id=user.id,
                endpoint=request.url.path,
                method=request.method,
                status=response.status_code,
                response_time_ms=int((time.perf_counter() - started) * 1000),
            )
        )
    return response


def create_app() -> FastAPI:
    application = FastAPI(title="AYANFE AI Gateway", version="0.1.0", lifespan=lifespan)

    if settings.cors_allow_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    application.middleware("http")(_record_usage)

    application.add_exception_handler(MissingParameterError, _missing_parameter)
    application.add_exception_handler(HTTPException, _http_error)
    application.add_exception_handler(RequestValidationError, _validation_error)
    application.add_exception_handler(Exception, _internal_error)

    application.include_router(health.router, prefix="/api", tags=["meta"])
    application.include_router(content.router, prefix="/api", tags=["content"])
    application.include_router(media.router, prefix="/api", tags=["media"])
    application.include_router(admin.router, prefix="/api", tags=["admin"])

    @application.head("/api/health", tags=["meta"])
    async def health_head() -> Response:
        """Allow HEAD for uptime monitors that only need the status code."""

        return Response(status_code=200)

    return application


app = create_app()
