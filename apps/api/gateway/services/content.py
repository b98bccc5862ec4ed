"""Per-endpoint upstream invocations and response normalization.

Each coroutine issues the upstream call(s) for one route and reshapes the body
into the canonical model for that route. Failures raise
``UpstreamUnavailableError``; choosing a fallback is the route boundary's job.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence
from urllib.parse import quote

import httpx
from fastapi import Depends

from ..core.config import settings
from ..core.errors import SecondaryFetchFailedError, UpstreamUnavailableError
from ..schemas import content as schemas
from . import extractors as ex
from .fallbacks import youtube_search_url
from .media import DEFAULT_AUDIO_TYPE, encode_data_uri, fetch_inline, resolve_media_type
from .registry import UpstreamRegistry, get_registry
from .upstream import UpstreamClient, UpstreamRequest, get_upstream_client

logger = logging.getLogger(__name__)

EMBED_FAILED_MESSAGE = "The image could not be embedded. Open it from the original link instead."
SONG_LINK_MESSAGE = "I found this song but couldn't load it directly. Try playing it from this link:"
SONG_MISSING_MESSAGE = "I couldn't find the audio for this song. You can search for it on YouTube instead."


@dataclass(frozen=True, slots=True)
class MediaLookup:
    """How a metadata API that references a remote image is queried and enriched."""

    endpoint: str
    api_name: str
    query_param: str | None
    source_field: str
    data_field: str
    original_field: str


MEDIA_LOOKUPS: dict[str, MediaLookup] = {
    "waifu": MediaLookup("waifu", "Waifu API", None, "url", "imageData", "originalUrl"),
    "movie": MediaLookup("movie-search", "Movie Search API", "q", "cover", "coverImage", "originalCoverUrl"),
    "music": MediaLookup("music-search", "Music Search API", "q", "cover", "coverImage", "originalCoverUrl"),
    "anime": MediaLookup("anime-info", "Anime API", "query", "imageUrl", "image", "originalImageUrl"),
    "pexels": MediaLookup("pexels-images", "Pexels API", "q", "url", "image", "originalUrl"),
}


@dataclass(frozen=True, slots=True)
class AnimalSource:
    primary_path: str
    secondary_endpoint: str
    image_url: Sequence[ex.Extractor]
    api_name: str


ANIMAL_SOURCES: dict[str, AnimalSource] = {
    "neko": AnimalSource("/neko", "neko-api", ex.NEKO_IMAGE_URL, "Neko API"),
    "dog": AnimalSource("/dog", "dog-api", ex.DOG_IMAGE_URL, "Dog API"),
    "cat": AnimalSource("/cat", "cat-api", ex.CAT_IMAGE_URL, "Cat API"),
}


def _segment(value: str) -> str:
    return quote(value.strip(), safe="")


def _require_object(data: Any, api_name: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise UpstreamUnavailableError("Invalid response data received", api_name=api_name)
    return data


def _require_text(data: Any, chain: Sequence[ex.Extractor], api_name: str, what: str) -> str:
    value = ex.first_text(data, chain)
    if value is None:
        raise UpstreamUnavailableError(f"response is missing {what}", api_name=api_name)
    return value


class ContentService:
    """Upstream invocations bound to one client and endpoint registry."""

    def __init__(self, client: UpstreamClient, endpoints: UpstreamRegistry) -> None:
        self.client = client
        self.endpoints = endpoints

    async def ask_chat(self, uid: str, question: str | None) -> schemas.ChatResponse:
        api_name = "Chat API"
        data = await self.client.fetch_json(
            UpstreamRequest(
                url=f"{self.endpoints.url('chat')}/api/chat/ask",
                method="POST",
                json={"uid": uid, "question": question},
                api_name=api_name,
            )
        )
        body = _require_object(data, api_name)
        return schemas.ChatResponse(response=_require_text(body, ex.CHAT_TEXT, api_name, "an answer"))

    async def get_quote(self, category: str) -> schemas.QuoteResponse:
        api_name = "Quotes API"
        data = await self.client.fetch_json(
            UpstreamRequest(url=f"{self.endpoints.url('chat')}/quotes/{_segment(category)}", api_name=api_name)
        )
        return schemas.QuoteResponse(
            quote=_require_text(data, ex.QUOTE_TEXT, api_name, "a quote"),
            author=ex.first_text(data, ex.QUOTE_AUTHOR) or "Unknown",
            category=category,
        )

    async def get_lyrics(self, title: str, artist: str | None = None) -> schemas.LyricsResponse:
        api_name = "Lyrics API"
        data = await self.client.fetch_json(
            UpstreamRequest(url=self.endpoints.url("lyrics"), params={"title": title}, api_name=api_name)
        )
        return schemas.LyricsResponse(
            lyrics=_require_text(data, ex.LYRICS_TEXT, api_name, "lyrics"),
            song=ex.first_text(data, ex.LYRICS_SONG) or title,
            artist=ex.first_text(data, ex.LYRICS_ARTIST) or artist or "Unknown",
        )

    async def _binary_image(self, path: str, query: str, api_name: str) -> schemas.ImageResponse:
        url = f"{self.endpoints.url('flux')}{path}"
        params = {"prompt": query}
        body = await self.client.fetch_bytes(
            UpstreamRequest(
                url=url,
                params=params,
                timeout=settings.media_timeout_seconds,
                api_name=api_name,
            )
        )
        data_uri = encode_data_uri(body.content, resolve_media_type(body.media_type, url))
        if len(data_uri) >= settings.max_inline_bytes:
            logger.warning("%s returned %d bytes; not inlining", api_name, len(body.content))
            return schemas.ImageResponse(url=str(httpx.URL(url, params=params)), query=query)
        return schemas.ImageResponse(query=query, image_data=data_uri)

    async def generate_image(self, prompt: str) -> schemas.ImageResponse:
        return await self._binary_image("/flux", prompt, "Image Generation API")

    async def search_images(self, query: str) -> schemas.ImageResponse:
        return await self._binary_image("/image", query, "Image Search API")

    async def suggest_mood(self, mood: str | None, limit: int | None) -> schemas.MoodResponse:
        api_name = "Mood API"
        requested = mood or "happy"
        data = await self.client.fetch_json(
            UpstreamRequest(
                url=f"{self.endpoints.url('chat')}/api/mood/suggest",
                method="POST",
                json={"mood": requested, "limit": limit or 10},
                api_name=api_name,
            )
        )
        body = _require_object(data, api_name)
        suggestions = ex.text_list(ex.first_match(body, ex.MOOD_SUGGESTIONS))
        message = ex.first_text(body, ex.MOOD_MESSAGE) or (suggestions[0] if suggestions else None)
        if message is None:
            raise UpstreamUnavailableError("response is missing a mood message", api_name=api_name)
        return schemas.MoodResponse(
            mood=ex.first_text(body, ex.MOOD_NAME) or requested,
            emoji=ex.first_text(body, ex.MOOD_EMOJI) or "",
            message=message,
            suggestions=suggestions,
        )

    async def get_datetime(self) -> schemas.DateTimeResponse:
        api_name = "Date/Time API"
        data = await self.client.fetch_json(
            UpstreamRequest(url=f"{self.endpoints.url('chat')}/api/datetime", api_name=api_name)
        )
        return schemas.DateTimeResponse(
            date=_require_text(data, ex.DATE_TEXT, api_name, "date"),
            time=_require_text(data, ex.TIME_TEXT, api_name, "time"),
            day=_require_text(data, ex.DAY_TEXT, api_name, "day"),
        )

    async def _roast(self, path: str, category: str) -> schemas.RoastResponse:
        api_name = "Roast API"
        data = await self.client.fetch_json(
            UpstreamRequest(url=f"{self.endpoints.url('roast')}/roast/{path}", api_name=api_name)
        )
        return schemas.RoastResponse(roast=_require_text(data, ex.ROAST_TEXT, api_name, "a roast"), category=category)

    async def get_roast(self, category: str) -> schemas.RoastResponse:
        return await self._roast(_segment(category), category)

    async def get_personalized_roast(self, name: str) -> schemas.RoastResponse:
        return await self._roast(f"personalized/{_segment(name)}", f"personalized-{name}")

    async def translate(self, text: str, target_lang: str) -> Any:
        return await self.client.fetch_json(
            UpstreamRequest(
                url=self.endpoints.url("translator"),
                method="POST",
                json={"text": text, "targetLang": target_lang},
                api_name="Translator API",
            )
        )

    async def download_video(self, url: str) -> Any:
        return await self.client.fetch_json(
            UpstreamRequest(
                url=self.endpoints.url("video-download"),
                params={"url": url},
                timeout=settings.upstream_slow_timeout_seconds,
                api_name="Video Download API",
            )
        )

    async def lookup_media(self, kind: str, query: str) -> dict[str, Any]:
        """Query a metadata API and inline the image it references, when present."""

        lookup = MEDIA_LOOKUPS[kind]
        base = self.endpoints.url(lookup.endpoint)
        if lookup.query_param is None:
            request = UpstreamRequest(url=f"{base}/{_segment(query)}", api_name=lookup.api_name)
        else:
            request = UpstreamRequest(url=base, params={lookup.query_param: query}, api_name=lookup.api_name)
        body = _require_object(await self.client.fetch_json(request), lookup.api_name)

        image_url = ex.first_text(body, (ex.field(lookup.source_field),))
        if image_url is None:
            return body
        enriched = dict(body)
        enriched[lookup.original_field] = image_url
        try:
            media = await fetch_inline(self.client, image_url)
        except SecondaryFetchFailedError as exc:
            logger.warning("Could not inline %s image %s: %s", lookup.api_name, image_url, exc.reason)
            enriched["message"] = EMBED_FAILED_MESSAGE
            return enriched
        if media.inlined:
            enriched[lookup.data_field] = media.data_uri
        return enriched

    async def get_animal_image(self, animal: str) -> schemas.ImageResponse:
        """Try the binary image API first, then the URL-returning API for ``animal``."""

        source = ANIMAL_SOURCES[animal]
        try:
            return await self._binary_animal(source, animal)
        except UpstreamUnavailableError as exc:
            logger.warning("%s primary source failed (%s); trying %s", source.api_name, exc.reason, source.secondary_endpoint)

        data = await self.client.fetch_json(
            UpstreamRequest(url=self.endpoints.url(source.secondary_endpoint), api_name=source.api_name)
        )
        image_url = ex.first_text(data, source.image_url)
        if image_url is None:
            raise UpstreamUnavailableError("response is missing an image URL", api_name=source.api_name)
        try:
            media = await fetch_inline(self.client, image_url)
        except SecondaryFetchFailedError as exc:
            logger.warning("Could not inline %s image %s: %s", source.api_name, image_url, exc.reason)
            return schemas.ImageResponse(url=image_url, query=animal, message=EMBED_FAILED_MESSAGE)
        return schemas.ImageResponse(url=image_url, query=animal, image_data=media.data_uri)

    async def _binary_animal(self, source: AnimalSource, animal: str) -> schemas.ImageResponse:
        url = f"{self.endpoints.url('flux')}{source.primary_path}"
        body = await self.client.fetch_bytes(
            UpstreamRequest(
                url=url,
                timeout=settings.upstream_slow_timeout_seconds,
                api_name=source.api_name,
            )
        )
        data_uri = encode_data_uri(body.content, resolve_media_type(body.media_type, url))
        if len(data_uri) >= settings.max_inline_bytes:
            return schemas.ImageResponse(url=url, query=animal)
        return schemas.ImageResponse(query=animal, image_data=data_uri)

    async def play_song(self, query: str) -> schemas.PlayResponse:
        """Resolve a song to embedded audio, a direct link, or a search link."""

        api_name = "Music Player API"
        data = await self.client.fetch_json(
            UpstreamRequest(
                url=self.endpoints.url("music-player"),
                params={"query": query},
                timeout=settings.upstream_slow_timeout_seconds,
                api_name=api_name,
            )
        )
        body = _require_object(data, api_name)
        title = ex.first_text(body, ex.SONG_TITLE) or query
        artist = ex.first_text(body, ex.SONG_ARTIST) or "Unknown Artist"

        audio_url = ex.first_text(body, ex.AUDIO_URL)
        if audio_url is None:
            logger.info("No audio URL found for %r", query)
            return schemas.PlayResponse(
                query=query,
                title=title,
                artist=artist,
                fallback_url=youtube_search_url(query),
                message=SONG_MISSING_MESSAGE,
            )

        try:
            media = await fetch_inline(
                self.client,
                audio_url,
                default_type=DEFAULT_AUDIO_TYPE,
                timeout=settings.media_timeout_seconds,
            )
        except SecondaryFetchFailedError as exc:
            logger.warning("Could not load audio for %r from %s: %s", query, audio_url, exc.reason)
            return schemas.PlayResponse(
                query=query,
                title=title,
                artist=artist,
                audio_url=audio_url,
                message=SONG_LINK_MESSAGE,
            )

        if not media.inlined:
            return schemas.PlayResponse(query=query, title=title, artist=artist, audio_url=audio_url)
        logger.info("Loaded audio for %r (%d KB)", query, media.size // 1024)
        return schemas.PlayResponse(query=query, title=title, artist=artist, audio_data=media.data_uri)

    async def fetch_video_feed(self) -> schemas.VideoFeedResponse:
        api_name = "Video Feed API"
        data = await self.client.fetch_json(
            UpstreamRequest(
                url=self.endpoints.url("video-feed"),
                timeout=settings.upstream_slow_timeout_seconds,
                api_name=api_name,
            )
        )
        try:
            videos = ex.extract_video_urls(data)
        except ValueError as exc:
            raise UpstreamUnavailableError("Invalid response format from video feed", api_name=api_name) from exc
        if not videos:
            raise UpstreamUnavailableError("No valid videos found in API response", api_name=api_name)
        return schemas.VideoFeedResponse(videos=videos, count=len(videos))


def get_content_service(
    client: UpstreamClient = Depends(get_upstream_client),
    endpoints: UpstreamRegistry = Depends(get_registry),
) -> ContentService:
    """FastAPI dependency wiring the service to the shared client and registry."""

    return ContentService(client, endpoints)
