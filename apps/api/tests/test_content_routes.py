"""End-to-end tests for the text and image content routes."""
from __future__ import annotations

import httpx
import pytest

from gateway.core.config import settings
from gateway.services import fallbacks
from gateway.services.boundary import SOURCE_HEADER
from gateway.services.content import ContentService

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


@pytest.mark.asyncio
async def test_quote_from_upstream(gateway) -> None:
    chat = gateway.registry.url("chat")
    gateway.upstream.json(f"{chat}/quotes/motivation", {"quote": "Stay hungry.", "author": "Steve Jobs"})

    async with gateway.client() as client:
        response = await client.get("/api/quotes/motivation")

    assert response.status_code == 200
    assert response.headers[SOURCE_HEADER] == "upstream"
    body = response.json()
    assert body["quote"] == "Stay hungry."
    assert body["author"] == "Steve Jobs"
    assert body["category"] == "motivation"
    assert gateway.notifier.recent() == []


@pytest.mark.asyncio
async def test_quote_fallback_when_upstream_down(gateway) -> None:
    gateway.upstream.down(gateway.registry.url("chat"))

    async with gateway.client() as client:
        response = await client.get("/api/quotes/motivation")

    assert response.status_code == 200
    assert response.headers[SOURCE_HEADER] == "fallback"
    body = response.json()
    assert body["quote"] == fallbacks.FALLBACK_QUOTE
    assert body["author"] == "Winston Churchill"
    assert body["category"] == "motivation"
    assert body["timestamp"].endswith("Z")

    notifications = gateway.notifier.recent()
    assert len(notifications) == 1
    assert notifications[0].subject == "API Error: Quotes API"
    assert len(gateway.upstream.calls) == 1


@pytest.mark.asyncio
async def test_quote_with_unusable_body_falls_back(gateway) -> None:
    gateway.upstream.json(gateway.registry.url("chat"), {"unexpected": True})

    async with gateway.client() as client:
        response = await client.get("/api/quotes/life")

    assert response.headers[SOURCE_HEADER] == "fallback"
    assert response.json()["category"] == "life"


@pytest.mark.asyncio
async def test_chat_requires_uid_before_calling_upstream(gateway) -> None:
    async with gateway.client() as client:
        response = await client.post("/api/chat/ask", json={"question": "hello"})

    assert response.status_code == 400
    assert response.json() == {"error": "UID is required"}
    assert gateway.upstream.calls == []
    assert gateway.notifier.recent() == []


@pytest.mark.asyncio
async def test_chat_forwards_question(gateway) -> None:
    chat = gateway.registry.url("chat")
    gateway.upstream.json(f"{chat}/api/chat/ask", {"answer": "Paris"})

    async with gateway.client() as client:
        response = await client.post("/api/chat/ask", json={"uid": "u-1", "question": "Capital of France?"})

    assert response.status_code == 200
    assert response.json()["response"] == "Paris"
    sent = gateway.upstream.calls_to(f"{chat}/api/chat/ask")[0]
    assert sent.method == "POST"
    assert b'"uid":"u-1"' in sent.content.replace(b" ", b"")


@pytest.mark.asyncio
async def test_chat_fallback_mentions_question(gateway) -> None:
    async with gateway.client() as client:
        response = await client.post("/api/chat/ask", json={"uid": "u-1", "question": "Capital of France?"})

    assert response.status_code == 200
    assert response.headers[SOURCE_HEADER] == "fallback"
    assert "Capital of France?" in response.json()["response"]
    assert len(gateway.notifier.recent()) == 1


@pytest.mark.asyncio
async def test_lyrics_requires_title(gateway) -> None:
    async with gateway.client() as client:
        response = await client.get("/api/music-lyrics", params={"title": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Title parameter is required"}
    assert gateway.upstream.calls == []


@pytest.mark.asyncio
async def test_lyrics_fallback_labels_song(gateway) -> None:
    async with gateway.client() as client:
        response = await client.get("/api/music-lyrics", params={"title": "Faded", "artist": "Alan Walker"})

    body = response.json()
    assert response.headers[SOURCE_HEADER] == "fallback"
    assert body["song"] == "Faded"
    assert body["artist"] == "Alan Walker"
    assert body["lyrics"] == fallbacks.FALLBACK_LYRICS


@pytest.mark.asyncio
async def test_lyrics_from_upstream(gateway) -> None:
    gateway.upstream.json(
        gateway.registry.url("lyrics"),
        {"result": {"lyrics": "You were the shadow to my light", "title": "Faded", "artist": "Alan Walker"}},
    )

    async with gateway.client() as client:
        response = await client.get("/api/music-lyrics", params={"title": "faded"})

    body = response.json()
    assert body["lyrics"].startswith("You were the shadow")
    assert body["song"] == "Faded"
    assert body["artist"] == "Alan Walker"
    assert gateway.upstream.calls[0].url.params["title"] == "faded"


@pytest.mark.asyncio
async def test_generate_image_inlines_binary(gateway) -> None:
    flux = gateway.registry.url("flux")
    gateway.upstream.binary(f"{flux}/flux", PNG, "image/png")

    async with gateway.client() as client:
        response = await client.get("/api/images/generate", params={"prompt": "a red fox"})

    body = response.json()
    assert response.headers[SOURCE_HEADER] == "upstream"
    assert body["imageData"].startswith("data:image/png;base64,")
    assert body["query"] == "a red fox"
    assert body["url"] is None


@pytest.mark.asyncio
async def test_generate_image_too_large_returns_url(gateway, monkeypatch) -> None:
    flux = gateway.registry.url("flux")
    gateway.upstream.binary(f"{flux}/flux", PNG, "image/png")
    monkeypatch.setattr(settings, "max_inline_bytes", 16)

    async with gateway.client() as client:
        response = await client.get("/api/images/generate", params={"prompt": "fox"})

    body = response.json()
    assert body["imageData"] is None
    assert body["url"] == f"{flux}/flux?prompt=fox"


@pytest.mark.asyncio
async def test_search_images_fallback(gateway) -> None:
    async with gateway.client() as client:
        missing = await client.get("/api/images/search")
        response = await client.get("/api/images/search", params={"query": "mountains"})

    assert missing.status_code == 400
    assert missing.json() == {"error": "Search query is required"}
    body = response.json()
    assert body["url"] == fallbacks.PLACEHOLDER_IMAGE_URL
    assert body["query"] == "mountains"


@pytest.mark.asyncio
async def test_mood_defaults(gateway) -> None:
    chat = gateway.registry.url("chat")
    gateway.upstream.json(
        f"{chat}/api/mood/suggest",
        {"mood": "happy", "emoji": "😄", "suggestions": [{"title": "Dance"}, "Sing"]},
    )

    async with gateway.client() as client:
        response = await client.post("/api/mood", json={})

    body = response.json()
    assert body["suggestions"] == ["Dance", "Sing"]
    assert body["message"] == "Dance"
    assert body["emoji"] == "😄"
    sent = gateway.upstream.calls[0]
    assert b'"limit":10' in sent.content.replace(b" ", b"")
    assert b'"mood":"happy"' in sent.content.replace(b" ", b"")


@pytest.mark.asyncio
async def test_mood_rejects_out_of_range_limit(gateway) -> None:
    async with gateway.client() as client:
        response = await client.post("/api/mood", json={"mood": "sad", "limit": 500})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"
    assert gateway.upstream.calls == []


@pytest.mark.asyncio
async def test_datetime_from_upstream(gateway) -> None:
    chat = gateway.registry.url("chat")
    gateway.upstream.json(f"{chat}/api/datetime", {"date": "10/19/2026", "time": "9:30:00 AM", "day": "Monday"})

    async with gateway.client() as client:
        response = await client.get("/api/datetime")

    body = response.json()
    assert response.headers[SOURCE_HEADER] == "upstream"
    assert (body["date"], body["time"], body["day"]) == ("10/19/2026", "9:30:00 AM", "Monday")


@pytest.mark.asyncio
async def test_datetime_fallback_uses_local_clock(gateway) -> None:
    async with gateway.client() as client:
        response = await client.get("/api/datetime")

    body = response.json()
    assert response.status_code == 200
    assert response.headers[SOURCE_HEADER] == "fallback"
    assert set(body) == {"date", "time", "day", "timestamp"}
    assert body["time"].endswith(("AM", "PM"))


@pytest.mark.asyncio
async def test_personalized_roast_category(gateway) -> None:
    roast = gateway.registry.url("roast")
    gateway.upstream.json(f"{roast}/roast/personalized/Sam", {"roast": "Sam, even your Wi-Fi avoids you."})

    async with gateway.client() as client:
        response = await client.get("/api/roast/personalized/Sam")
        fallback = await client.get("/api/roast/savage")

    assert response.json()["category"] == "personalized-Sam"
    assert response.json()["roast"].startswith("Sam")
    assert fallback.headers[SOURCE_HEADER] == "fallback"
    assert fallback.json()["roast"] == fallbacks.FALLBACK_ROAST
    assert fallback.json()["category"] == "savage"


@pytest.mark.asyncio
async def test_translate_passes_through(gateway) -> None:
    gateway.upstream.json(gateway.registry.url("translator"), {"translatedText": "hola"})

    async with gateway.client() as client:
        response = await client.post("/api/translate", json={"text": "hello", "targetLang": "es"})

    assert response.status_code == 200
    assert response.json() == {"translatedText": "hola"}
    assert response.headers[SOURCE_HEADER] == "upstream"


@pytest.mark.asyncio
async def test_translate_validation_and_failure(gateway) -> None:
    async with gateway.client() as client:
        no_target = await client.post("/api/translate", json={"text": "hello"})
        failed = await client.post("/api/translate", json={"text": "hello", "targetLang": "es"})

    assert no_target.status_code == 400
    assert no_target.json() == {"error": "Target language is required"}
    assert failed.status_code == 502
    assert failed.json() == {"error": "Failed to translate text"}


@pytest.mark.asyncio
async def test_unexpected_errors_become_500(gateway, monkeypatch) -> None:
    async def broken(self, category):
        raise RuntimeError("boom")

    monkeypatch.setattr(ContentService, "get_quote", broken)

    async with gateway.client(raise_app_exceptions=False) as client:
        response = await client.get("/api/quotes/motivation")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "message": "boom"}
    assert gateway.notifier.recent() == []


@pytest.mark.asyncio
async def test_notifier_failure_does_not_break_fallback(gateway, monkeypatch) -> None:
    async def explode(*args, **kwargs):
        raise ConnectionError("mailer down")

    monkeypatch.setattr(gateway.notifier, "send_api_error", explode)

    async with gateway.client() as client:
        response = await client.get("/api/roast/light")

    assert response.status_code == 200
    assert response.headers[SOURCE_HEADER] == "fallback"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_body(gateway) -> None:
    async with gateway.client() as client:
        response = await client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
