import httpx
import pytest

from gateway.core.config import Settings
from gateway.routers.health import get_database_check
from gateway.services.registry import UpstreamRegistry, get_registry


@pytest.mark.asyncio
async def test_health_endpoint(gateway) -> None:
    async with gateway.client() as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["server"] == "online"
    assert body["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_health_reports_database_error(gateway) -> None:
    async def database_down() -> bool:
        return False

    gateway.app.dependency_overrides[get_database_check] = lambda: database_down

    async with gateway.client() as client:
        response = await client.get("/api/health")

    assert response.status_code == 500
    assert response.json()["status"] == "error"
    assert response.json()["database"] == "error"


@pytest.mark.asyncio
async def test_health_accepts_head(gateway) -> None:
    async with gateway.client() as client:
        response = await client.head("/api/health")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_api_health_checks_every_upstream(gateway) -> None:
    chat = gateway.registry.get("chat")
    translator = gateway.registry.get("translator")
    gateway.upstream.json(chat.url, {"response": "hi"})
    gateway.upstream.json(translator.url, {"translatedText": "hola mundo"})
    gateway.upstream.on(gateway.registry.url("roast"), lambda request: httpx.Response(503))

    async with gateway.client() as client:
        response = await client.get("/api/api-health")

    assert response.status_code == 200
    body = response.json()
    assert body["server"] == "online"
    assert body["database"] == "connected"
    assert set(body["apis"]) == {endpoint.name for endpoint in gateway.registry}
    assert body["apis"]["chat"]["status"] == "online"
    assert body["apis"]["chat"]["message"].startswith("Response received in ")
    assert body["apis"]["translator"]["status"] == "online"
    assert body["apis"]["roast"]["status"] == "offline"
    assert "503" in body["apis"]["roast"]["message"]
    assert body["apis"]["dog-api"]["status"] == "offline"

    checks = gateway.upstream.calls_to(translator.url)
    assert checks[0].method == "POST"


@pytest.mark.asyncio
async def test_api_health_isolates_malformed_upstream_url(gateway) -> None:
    configured = UpstreamRegistry(config=Settings(dog_api_url="http://dog.example:notaport/api"))
    gateway.app.dependency_overrides[get_registry] = lambda: configured

    async with gateway.client() as client:
        response = await client.get("/api/api-health")

    assert response.status_code == 200
    dog = response.json()["apis"]["dog-api"]
    assert dog["status"] == "offline"
    assert dog["message"].startswith("invalid URL")
