"""Shared fixtures: a fresh app wired to stubbed upstreams and in-memory collaborators."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import httpx
import pytest
from fastapi import FastAPI

from gateway.core.security import CurrentUser
from gateway.main import create_app
from gateway.routers.health import get_database_check
from gateway.services.notifications import NotificationService, get_notifier
from gateway.services.rate_limit import GatewayLimiter, get_rate_limiter
from gateway.services.registry import UpstreamRegistry, get_registry
from gateway.services.upstream import UpstreamClient, get_upstream_client
from gateway.services.usage import UsageEvent

Handler = Callable[[httpx.Request], httpx.Response]


class UpstreamStub:
    """Route outbound requests by URL prefix and remember every call."""

    def __init__(self) -> None:
        self.routes: list[tuple[str, Handler]] = []
        self.calls: list[httpx.Request] = []

    def on(self, prefix: str, handler: Handler) -> None:
        self.routes.append((prefix, handler))

    def json(self, prefix: str, payload: object, status_code: int = 200) -> None:
        self.on(prefix, lambda request: httpx.Response(status_code, json=payload))

    def binary(self, prefix: str, content: bytes, media_type: str | None = None) -> None:
        headers = {"content-type": media_type} if media_type else {}
        self.on(prefix, lambda request: httpx.Response(200, content=content, headers=headers))

    def down(self, prefix: str) -> None:
        def _fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.on(prefix, _fail)

    def calls_to(self, prefix: str) -> list[httpx.Request]:
        return [request for request in self.calls if str(request.url).startswith(prefix)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        url = str(request.url)
        for prefix, handler in reversed(self.routes):
            if url.startswith(prefix):
                return handler(request)
        raise httpx.ConnectError(f"no stub for {url}", request=request)


@dataclass
class RecordingUsage:
    events: list[UsageEvent] = field(default_factory=list)

    async def record(self, event: UsageEvent) -> bool:
        self.events.append(event)
        return True


@dataclass
class Gateway:
    app: FastAPI
    upstream: UpstreamStub
    notifier: NotificationService
    limiter: GatewayLimiter
    registry: UpstreamRegistry
    usage: RecordingUsage
    user: CurrentUser | None = None

    def sign_in(self, user: CurrentUser | None) -> None:
        self.user = user

    def client(self, *, raise_app_exceptions: bool = True) -> httpx.AsyncClient:
        transport = httpx.ASGITransport(app=self.app, raise_app_exceptions=raise_app_exceptions)
        return httpx.AsyncClient(transport=transport, base_url="http://testserver")


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def gateway(upstream: UpstreamStub) -> Gateway:
    app = create_app()
    notifier = NotificationService()
    limiter = GatewayLimiter("1000/15 minutes")
    registry = UpstreamRegistry()
    usage = RecordingUsage()
    client = UpstreamClient(transport=httpx.MockTransport(upstream))

    async def database_ok() -> bool:
        return True

    app.dependency_overrides[get_upstream_client] = lambda: client
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_database_check] = lambda: database_ok
    app.state.usage_recorder = usage
    gateway = Gateway(app=app, upstream=upstream, notifier=notifier, limiter=limiter, registry=registry, usage=usage)

    async def inject_user(request, call_next):
        if gateway.user is not None:
            request.state.user = gateway.user
        return await call_next(request)

    app.middleware("http")(inject_user)
    return gateway
