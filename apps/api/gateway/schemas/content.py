"""Canonical payload shapes returned by the content gateway.

Successful upstream responses and fallback payloads for the same kind are both
built from these models, so a client only ever has to handle one schema per
route regardless of where the data came from.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""

    value = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class GatewayPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = Field(default_factory=utc_timestamp)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire (camelCase) names and every key present."""

        return self.model_dump(by_alias=True, mode="json")


class ChatResponse(GatewayPayload):
    response: str


class QuoteResponse(GatewayPayload):
    quote: str
    author: str
    category: str


class LyricsResponse(GatewayPayload):
    lyrics: str
    song: str
    artist: str


class ImageResponse(GatewayPayload):
    url: str | None = None
    query: str
    image_data: str | None = Field(default=None, alias="imageData")
    message: str | None = None


class MoodResponse(GatewayPayload):
    mood: str
    emoji: str
    message: str
    suggestions: list[str] = Field(default_factory=list)


class DateTimeResponse(GatewayPayload):
    date: str
    time: str
    day: str


class RoastResponse(GatewayPayload):
    roast: str
    category: str


class PlayResponse(GatewayPayload):
    query: str
    title: str
    artist: str
    audio_data: str | None = Field(default=None, alias="audioData")
    audio_url: str | None = Field(default=None, alias="audioUrl")
    fallback_url: str | None = Field(default=None, alias="fallbackUrl")
    message: str | None = None


class VideoFeedResponse(GatewayPayload):
    videos: list[str]
    count: int


class ChatAskRequest(BaseModel):
    uid: str | None = None
    question: str | None = None


class MoodRequest(BaseModel):
    mood: str | None = None
    limit: int | None = Field(default=None, ge=1, le=50)


class TranslateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    target_lang: str | None = Field(default=None, alias="targetLang")
