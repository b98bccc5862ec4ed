"""Tests for the per-client rate limit on content routes."""
from __future__ import annotations

import pytest

from gateway.core.security import CurrentUser
from gateway.services.rate_limit import GatewayLimiter, get_rate_limiter


def _use_limit(gateway, limit: str) -> GatewayLimiter:
    limiter = GatewayLimiter(limit)
    gateway.app.dependency_overrides[get_rate_limiter] = lambda: limiter
    chat = gateway.registry.url("chat")
    gateway.upstream.json(f"{chat}/api/datetime", {"date": "10/19/2026", "time": "9:30:00 AM", "day": "Monday"})
    return limiter


def test_limiter_allows_up_to_quota_per_key() -> None:
    limiter = GatewayLimiter("2/minute")

    assert limiter.hit("1.2.3.4")
    assert limiter.hit("1.2.3.4")
    assert not limiter.hit("1.2.3.4")
    assert limiter.hit("5.6.7.8")
    assert limiter.remaining("5.6.7.8") == 1


def test_retry_after_follows_the_window() -> None:
    assert GatewayLimiter().retry_after == "15 minutes"
    assert GatewayLimiter("5/hour").retry_after == "60 minutes"


def test_disabled_limiter_lets_everything_through() -> None:
    limiter = GatewayLimiter("1/minute")
    limiter.limiter.enabled = False

    assert all(limiter.hit("1.2.3.4") for _ in range(5))


@pytest.mark.asyncio
async def test_route_returns_429_over_quota(gateway) -> None:
    _use_limit(gateway, "2/15 minutes")

    async with gateway.client() as client:
        statuses = [(await client.get("/api/datetime")).status_code for _ in range(3)]
        blocked = await client.get("/api/datetime")

    assert statuses == [200, 200, 429]
    assert blocked.json() == {"error": "Too many requests, please try again later", "retryAfter": "15 minutes"}


@pytest.mark.asyncio
async def test_quota_exhaustion_notifies_once(gateway) -> None:
    _use_limit(gateway, "2/15 minutes")

    async with gateway.client() as client:
        for _ in range(4):
            await client.get("/api/datetime")

    warnings = [item for item in gateway.notifier.recent() if item.subject.startswith("Rate Limit Warning")]
    assert len(warnings) == 1
    assert "/api/datetime" in warnings[0].message


@pytest.mark.asyncio
async def test_forwarded_clients_are_counted_separately(gateway) -> None:
    _use_limit(gateway, "1/15 minutes")

    async with gateway.client() as client:
        first = await client.get("/api/datetime", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})
        second = await client.get("/api/datetime", headers={"X-Forwarded-For": "10.0.0.2"})
        repeat = await client.get("/api/datetime", headers={"X-Forwarded-For": "10.0.0.1"})

    assert (first.status_code, second.status_code, repeat.status_code) == (200, 200, 429)


@pytest.mark.asyncio
async def test_admins_bypass_the_limit(gateway) -> None:
    _use_limit(gateway, "1/15 minutes")
    gateway.sign_in(CurrentUser(id=1, username="root", is_admin=True))

    async with gateway.client() as client:
        statuses = [(await client.get("/api/datetime")).status_code for _ in range(3)]

    assert statuses == [200, 200, 200]
    assert gateway.notifier.recent() == []
