"""Canned substitute payloads served when an upstream content API fails."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any
from urllib.parse import quote_plus

from ..schemas import content as schemas

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400x300?text=Image+Placeholder"
PLACEHOLDER_IMAGE_DATA = "data:image/gif;base64,R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7"
FALLBACK_QUOTE = "Success is not final, failure is not fatal: It is the courage to continue that counts."
FALLBACK_QUOTE_AUTHOR = "Winston Churchill"
FALLBACK_LYRICS = "This is a placeholder for lyrics. The external lyrics API is currently unavailable."
FALLBACK_ROAST = "I'd roast you, but it seems the external API is on vacation!"
PLAY_FALLBACK_MESSAGE = "I couldn't find this song through our music service. You can try searching for it on YouTube."


class FallbackKind(str, enum.Enum):
    CHAT = "chat"
    QUOTE = "quote"
    LYRICS = "lyrics"
    IMAGE = "image"
    MOOD = "mood"
    DATETIME = "datetime"
    ROAST = "roast"
    PLAY = "play"


def youtube_search_url(query: str) -> str:
    return f"https://www.youtube.com/results?search_query={quote_plus(query)}"


def _chat_text(question: str | None) -> str:
    return (
        "I apologize, but I'm currently experiencing connectivity issues with my main API. "
        f'Here\'s a comprehensive response to your question: "{question or ""}".\n\n'
        "The AI Platform is designed to provide detailed, informative answers across multiple domains "
        "including general knowledge, creative content, technical support, and personalized assistance. "
        "Your question has been noted, and once connectivity is restored, we'll be able to provide more "
        "tailored and in-depth responses.\n\n"
        "In the meantime, you might want to try one of our other functional APIs for specific tasks like "
        "image generation, lyrics lookup, or motivational quotes. Thank you for your patience and understanding."
    )


def _split_song(query: str | None) -> tuple[str, str]:
    """Split ``"<song> - <artist>"`` into its parts, defaulting each to ``Unknown``."""

    parts = (query or "").split(" - ")
    song = parts[0].strip() if parts and parts[0].strip() else "Unknown"
    artist = parts[1].strip() if len(parts) > 1 and parts[1].strip() else "Unknown"
    return song, artist


def format_clock(now: datetime) -> tuple[str, str, str]:
    """Return ``(date, time, day)`` in US locale style, e.g. ``10/19/2026``, ``3:04:05 PM``, ``Monday``."""

    hour = now.hour % 12 or 12
    meridiem = "AM" if now.hour < 12 else "PM"
    return (
        f"{now.month}/{now.day}/{now.year}",
        f"{hour}:{now.minute:02d}:{now.second:02d} {meridiem}",
        now.strftime("%A"),
    )


def generate_fallback(kind: FallbackKind | str, query: str | None = None) -> dict[str, Any]:
    """Return the substitute payload for ``kind``.

    Never raises and performs no I/O. Unknown kinds get a generic chat-like body.
    """

    try:
        resolved = FallbackKind(kind)
    except ValueError:
        return {"response": "Fallback response", "timestamp": schemas.utc_timestamp()}

    payload: schemas.GatewayPayload
    if resolved is FallbackKind.CHAT:
        payload = schemas.ChatResponse(response=_chat_text(query))
    elif resolved is FallbackKind.QUOTE:
        payload = schemas.QuoteResponse(
            quote=FALLBACK_QUOTE,
            author=FALLBACK_QUOTE_AUTHOR,
            category=query or "motivational",
        )
    elif resolved is FallbackKind.LYRICS:
        song, artist = _split_song(query)
        payload = schemas.LyricsResponse(lyrics=FALLBACK_LYRICS, song=song, artist=artist)
    elif resolved is FallbackKind.IMAGE:
        payload = schemas.ImageResponse(
            url=PLACEHOLDER_IMAGE_URL,
            query=query or "placeholder",
            image_data=PLACEHOLDER_IMAGE_DATA,
        )
    elif resolved is FallbackKind.MOOD:
        payload = schemas.MoodResponse(mood="positive", emoji="😊", message="Today is a great day!")
    elif resolved is FallbackKind.DATETIME:
        date, time, day = format_clock(datetime.now())
        payload = schemas.DateTimeResponse(date=date, time=time, day=day)
    elif resolved is FallbackKind.ROAST:
        payload = schemas.RoastResponse(roast=FALLBACK_ROAST, category=query or "general")
    else:
        song = query or "Unknown"
        payload = schemas.PlayResponse(
            query=song,
            title=song,
            artist="Unknown",
            fallback_url=youtube_search_url(song),
            message=PLAY_FALLBACK_MESSAGE,
        )
    return payload.to_payload()
