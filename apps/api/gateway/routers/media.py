"""Media lookup, animal image, music playback and video feed endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..services import boundary
from ..services.boundary import require_param
from ..services.content import ANIMAL_SOURCES, MEDIA_LOOKUPS, ContentService, get_content_service
from ..services.fallbacks import FallbackKind
from ..services.notifications import NotificationService, get_notifier
from ..services.rate_limit import enforce_rate_limit

router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


async def _lookup(service: ContentService, kind: str, query: str, error: str) -> JSONResponse:
    result = await boundary.pass_through(
        lambda: service.lookup_media(kind, query),
        api_name=MEDIA_LOOKUPS[kind].api_name,
        error=error,
    )
    return boundary.respond(result)


@router.get("/waifu")
@router.get("/waifu/{category}")
async def get_waifu(
    category: str = "waifu",
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    return await _lookup(service, "waifu", category, "Failed to fetch waifu image")


@router.get("/movie")
async def search_movie(
    q: str | None = None,
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    query = require_param(q, "Search query is required")
    return await _lookup(service, "movie", query, "Failed to search movie")


@router.get("/music")
async def search_music(
    q: str | None = None,
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    query = require_param(q, "Search query is required")
    return await _lookup(service, "music", query, "Failed to search music")


@router.get("/anime")
async def search_anime(
    query: str | None = None,
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    text = require_param(query, "Search query is required")
    return await _lookup(service, "anime", text, "Failed to search anime")


@router.get("/pexels")
async def search_pexels(
    q: str | None = None,
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    query = require_param(q, "Search query is required")
    return await _lookup(service, "pexels", query, "Failed to search Pexels images")


@router.get("/download")
async def download_video(
    url: str | None = None,
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    target = require_param(url, "URL parameter is required")
    result = await boundary.pass_through(
        lambda: service.download_video(target),
        api_name="Video Download API",
        error="Failed to download video",
    )
    return boundary.respond(result)


async def _animal(animal: str, service: ContentService, notifier: NotificationService) -> JSONResponse:
    result = await boundary.resolve(
        FallbackKind.IMAGE,
        lambda: service.get_animal_image(animal),
        api_name=ANIMAL_SOURCES[animal].api_name,
        notifier=notifier,
        query=animal,
    )
    return boundary.respond(result)


@router.get("/neko")
async def get_neko(
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    return await _animal("neko", service, notifier)


@router.get("/dog")
async def get_dog(
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    return await _animal("dog", service, notifier)


@router.get("/cat")
async def get_cat(
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    return await _animal("cat", service, notifier)


@router.get("/play")
async def play_song(
    query: str | None = None,
    service: ContentService = Depends(get_content_service),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    """Resolve a song to playable audio, falling back to a YouTube search link."""

    song = require_param(query, "Song query is required")
    result = await boundary.resolve(
        FallbackKind.PLAY,
        lambda: service.play_song(song),
        api_name="Music Player API",
        notifier=notifier,
        query=song,
    )
    return boundary.respond(result)


@router.get("/henataivid")
async def get_video_feed(service: ContentService = Depends(get_content_service)) -> JSONResponse:
    result = await boundary.pass_through(
        service.fetch_video_feed,
        api_name="Video Feed API",
        error="Video service unavailable",
    )
    return boundary.respond(result)
