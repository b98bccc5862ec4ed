"""Route-level error boundary: validation, fallback substitution and side effects.

Validation failures are surfaced to the caller. Upstream failures on routes that
have a fallback kind are masked: the caller receives HTTP 200 with the canned
payload, the failure is logged and reported once to the notifier. Any other
exception propagates to the application's 500 handler.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from ..core.errors import MissingParameterError, UpstreamUnavailableError
from ..schemas.content import GatewayPayload
from .fallbacks import FallbackKind, generate_fallback
from .notifications import NotificationService

logger = logging.getLogger(__name__)

SOURCE_HEADER = "X-Gateway-Source"

Invocation = Callable[[], Awaitable[Any]]


@dataclass(slots=True)
class Success:
    payload: Any

    source = "upstream"


@dataclass(slots=True)
class Fallback:
    payload: Any
    reason: str

    source = "fallback"


GatewayResult = Union[Success, Fallback]


def require_param(value: str | None, message: str) -> str:
    """Return the stripped value or raise ``MissingParameterError`` before any network call."""

    if value is None or not str(value).strip():
        raise MissingParameterError(message)
    return str(value).strip()


def _as_payload(value: Any) -> Any:
    return value.to_payload() if isinstance(value, GatewayPayload) else value


async def notify_failure(notifier: NotificationService, api_name: str, reason: str) -> None:
    """Report an upstream failure; notifier errors are logged and dropped."""

    try:
        await notifier.send_api_error(api_name, reason)
    except Exception:  # noqa: BLE001 - notification is fire-and-forget
        logger.exception("Failed to send API error notification for %s", api_name)


async def resolve(
    kind: FallbackKind,
    invoke: Invocation,
    *,
    api_name: str,
    notifier: NotificationService,
    query: str | None = None,
) -> GatewayResult:
    """Run ``invoke`` and substitute the ``kind`` fallback if the upstream is unavailable."""

    try:
        payload = await invoke()
    except UpstreamUnavailableError as exc:
        logger.warning("%s unavailable (%s); serving %s fallback", api_name, exc.reason, kind.value)
        await notify_failure(notifier, api_name, exc.reason)
        return Fallback(payload=generate_fallback(kind, query), reason=exc.reason)
    return Success(payload=_as_payload(payload))


async def pass_through(invoke: Invocation, *, api_name: str, error: str) -> Success:
    """Run ``invoke`` for a route without a fallback kind; upstream failure becomes 502."""

    try:
        payload = await invoke()
    except UpstreamUnavailableError as exc:
        logger.warning("%s unavailable: %s", api_name, exc.reason)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error) from exc
    return Success(payload=_as_payload(payload))


def respond(result: GatewayResult) -> JSONResponse:
    """Answer 200 with the payload; the header tells real data from substitutes."""

    return JSONResponse(content=result.payload, headers={SOURCE_HEADER: result.source})
