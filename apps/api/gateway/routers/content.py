"""Text and image content endpoints with canned fallbacks."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..schemas import content as schemas
from ..services import boundary
from ..services.boundary import require_param
from ..services.content import ContentService, get_content_service
from ..services.fallbacks import FallbackKind
from ..services.notifications import NotificationService, get_notifier
from ..services.rate_limit import enforce_rate_limit

router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


@router.post("/chat/ask")
async def ask_chat(
    payload: schemas.ChatAskRequest,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    """Forward a question to the chat API."""

    uid = require_param(payload.uid, "UID is required")
    result = await boundary.resolve(
        FallbackKind.CHAT,
        lambda: service.ask_chat(uid, payload.question),
        api_name="Chat API",
        notifier=notifier,
        query=payload.question,
    )
    return boundary.respond(result)


@router.get("/quotes/{category}")
async def get_quote(
    category: str,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    result = await boundary.resolve(
        FallbackKind.QUOTE,
        lambda: service.get_quote(category),
        api_name="Quotes API",
        notifier=notifier,
        query=category,
    )
    return boundary.respond(result)


@router.get("/music-lyrics")
async def get_lyrics(
    title: str | None = None,
    artist: str | None = None,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    """Look up song lyrics by title; the artist is only used to label fallbacks."""

    song = require_param(title, "Title parameter is required")
    result = await boundary.resolve(
        FallbackKind.LYRICS,
        lambda: service.get_lyrics(song, artist),
        api_name="Lyrics API",
        notifier=notifier,
        query=f"{song} - {artist or 'Unknown'}",
    )
    return boundary.respond(result)


@router.get("/images/generate")
async def generate_image(
    prompt: str | None = None,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    text = require_param(prompt, "Prompt parameter is required")
    result = await boundary.resolve(
        FallbackKind.IMAGE,
        lambda: service.generate_image(text),
        api_name="Image Generation API",
        notifier=notifier,
        query=text,
    )
    return boundary.respond(result)


@router.get("/images/search")
async def search_images(
    query: str | None = None,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    text = require_param(query, "Search query is required")
    result = await boundary.resolve(
        FallbackKind.IMAGE,
        lambda: service.search_images(text),
        api_name="Image Search API",
        notifier=notifier,
        query=text,
    )
    return boundary.respond(result)


@router.post("/mood")
async def suggest_mood(
    payload: schemas.MoodRequest,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    result = await boundary.resolve(
        FallbackKind.MOOD,
        lambda: service.suggest_mood(payload.mood, payload.limit),
        api_name="Mood API",
        notifier=notifier,
    )
    return boundary.respond(result)


@router.get("/datetime")
async def get_datetime(
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    result = await boundary.resolve(
        FallbackKind.DATETIME,
        service.get_datetime,
        api_name="Date/Time API",
        notifier=notifier,
    )
    return boundary.respond(result)


@router.get("/roast/personalized/{name}")
async def get_personalized_roast(
    name: str,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    result = await boundary.resolve(
        FallbackKind.ROAST,
        lambda: service.get_personalized_roast(name),
        api_name="Roast API",
        notifier=notifier,
        query=f"personalized-{name}",
    )
    return boundary.respond(result)


@router.get("/roast/{category}")
async def get_roast(
    category: str,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    result = await boundary.resolve(
        FallbackKind.ROAST,
        lambda: service.get_roast(category),
        api_name="Roast API",
        notifier=notifier,
        query=category,
    )
    return boundary.respond(result)


@router.post("/translate")
async def translate(
    payload: schemas.TranslateRequest,
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    """Translate text; there is no canned translation, so upstream failure is a 502."""

    text = require_param(payload.text, "Text to translate is required")
    target = require_param(payload.target_lang, "Target language is required")
    result = await boundary.pass_through(
        lambda: service.translate(text, target),
        api_name="Translator API",
        error="Failed to translate text",
    )
    return boundary.respond(result)
