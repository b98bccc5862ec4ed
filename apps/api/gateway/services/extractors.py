"""Ordered field extractors for loosely specified upstream JSON bodies."""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Sequence
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], Any]


def field(*path: str | int) -> Extractor:
    """Return an extractor that walks ``path`` through dicts and lists.

    Missing keys, out-of-range indexes, ``None`` and empty strings all yield ``None``.
    """

    def _extract(data: Any) -> Any:
        current = data
        for step in path:
            if isinstance(step, int):
                if not isinstance(current, list) or not -len(current) <= step < len(current):
                    return None
                current = current[step]
            else:
                if not isinstance(current, dict):
                    return None
                current = current.get(step)
            if current is None:
                return None
        if isinstance(current, str):
            current = current.strip()
            return current or None
        return current

    return _extract


def first_match(data: Any, extractors: Iterable[Extractor]) -> Any:
    """Return the first non-``None`` extractor result."""

    for extractor in extractors:
        value = extractor(data)
        if value is not None:
            return value
    return None


def first_text(data: Any, extractors: Iterable[Extractor]) -> str | None:
    """Like ``first_match`` but only accepts scalar values, returned as text."""

    for extractor in extractors:
        value = extractor(data)
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return str(value)
    return None


AUDIO_URL: Sequence[Extractor] = (
    field("result", "download_url"),
    field("audioUrl"),
    field("audio_url"),
    field("data", "audio_url"),
)
SONG_TITLE: Sequence[Extractor] = (field("result", "title"), field("title"))
SONG_ARTIST: Sequence[Extractor] = (field("result", "artist"), field("artist"))

CHAT_TEXT: Sequence[Extractor] = (
    field("response"),
    field("answer"),
    field("reply"),
    field("result"),
    field("message"),
    field("data", "response"),
)
QUOTE_TEXT: Sequence[Extractor] = (field("quote"), field("text"), field("content"), field("data", "quote"))
QUOTE_AUTHOR: Sequence[Extractor] = (field("author"), field("data", "author"))
LYRICS_TEXT: Sequence[Extractor] = (field("lyrics"), field("result", "lyrics"), field("data", "lyrics"))
LYRICS_SONG: Sequence[Extractor] = (field("title"), field("song"), field("result", "title"))
LYRICS_ARTIST: Sequence[Extractor] = (field("artist"), field("result", "artist"))
ROAST_TEXT: Sequence[Extractor] = (field("roast"), field("message"), field("text"))
MOOD_NAME: Sequence[Extractor] = (field("mood"),)
MOOD_EMOJI: Sequence[Extractor] = (field("emoji"),)
MOOD_MESSAGE: Sequence[Extractor] = (field("message"), field("suggestion"), field("text"))
MOOD_SUGGESTIONS: Sequence[Extractor] = (field("suggestions"), field("results"), field("data"))
DATE_TEXT: Sequence[Extractor] = (field("date"),)
TIME_TEXT: Sequence[Extractor] = (field("time"),)
DAY_TEXT: Sequence[Extractor] = (field("day"),)

NEKO_IMAGE_URL: Sequence[Extractor] = (field("url"),)
DOG_IMAGE_URL: Sequence[Extractor] = (field("message"),)
CAT_IMAGE_URL: Sequence[Extractor] = (field(0, "url"),)


def text_list(value: Any) -> list[str]:
    """Coerce a suggestion list whose items may be strings or small objects."""

    if not isinstance(value, list):
        return []
    items: list[str] = []
    for item in value:
        text = item if isinstance(item, str) else first_text(item, (field("text"), field("title"), field("name")))
        if text and text.strip():
            items.append(text.strip())
    return items


def _video_candidates(data: Any) -> list[Any]:
    if isinstance(data, dict) and isinstance(data.get("videos"), list):
        return list(data["videos"])
    if isinstance(data, dict) and isinstance(data.get("results"), list):
        return [first_match(item, (field("video_url"), field("url"))) for item in data["results"]]
    if isinstance(data, list):
        return [item if isinstance(item, str) else first_match(item, (field("video_url"), field("url"))) for item in data]
    if isinstance(data, str):
        return [data]
    raise ValueError("unrecognized video feed shape")


def repair_url(url: str) -> str:
    """Drop any host text glued in front of a second scheme and upgrade ``http``."""

    marker = url.rfind("https://")
    if marker > 0:
        url = url[marker:]
    if url[:7].lower() == "http://":
        url = "https://" + url[7:]
    return url


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def extract_video_urls(data: Any) -> list[str]:
    """Parse one of the known video feed shapes into a clean list of URLs.

    Raises ``ValueError`` when the shape is unrecognized.
    """

    urls: list[str] = []
    for candidate in _video_candidates(data):
        if not isinstance(candidate, str) or not candidate.strip():
            continue
        repaired = repair_url(candidate.strip())
        if is_valid_url(repaired):
            urls.append(repaired)
        else:
            logger.warning("Dropping invalid video URL %r", candidate)
    return urls
