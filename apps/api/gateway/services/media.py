"""Inline remote images and audio as ``data:`` URIs."""
from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from ..core.config import settings
from ..core.errors import SecondaryFetchFailedError
from .upstream import UpstreamClient

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_TYPE = "image/jpeg"
DEFAULT_AUDIO_TYPE = "audio/mpeg"

_SUFFIX_TYPES: tuple[tuple[str, str], ...] = (
    (".png", "image/png"),
    (".gif", "image/gif"),
    (".webp", "image/webp"),
    (".jpg", "image/jpeg"),
    (".jpeg", "image/jpeg"),
    (".mp3", "audio/mpeg"),
    (".m4a", "audio/mp4"),
    (".wav", "audio/wav"),
    (".ogg", "audio/ogg"),
)
_GENERIC_TYPES = frozenset({"application/octet-stream", "binary/octet-stream"})


@dataclass(slots=True)
class InlineMedia:
    url: str
    media_type: str
    data_uri: str | None
    size: int

    @property
    def inlined(self) -> bool:
        return self.data_uri is not None


def guess_media_type(url: str, default: str = DEFAULT_IMAGE_TYPE) -> str:
    """Infer a MIME type from the URL path suffix."""

    path = urlparse(url).path.lower()
    for suffix, media_type in _SUFFIX_TYPES:
        if path.endswith(suffix):
            return media_type
    return default


def resolve_media_type(declared: str | None, url: str, default: str = DEFAULT_IMAGE_TYPE) -> str:
    """Prefer a specific upstream ``Content-Type`` over extension inference."""

    if declared and declared not in _GENERIC_TYPES:
        return declared
    return guess_media_type(url, default)


def encode_data_uri(content: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(content).decode('ascii')}"


async def fetch_inline(
    client: UpstreamClient,
    url: str,
    *,
    default_type: str = DEFAULT_IMAGE_TYPE,
    timeout: float | None = None,
    max_download_bytes: int | None = None,
    max_inline_bytes: int | None = None,
) -> InlineMedia:
    """Fetch ``url`` and embed it, leaving ``data_uri`` empty when the encoding is too large.

    Raises ``SecondaryFetchFailedError`` when the resource cannot be downloaded.
    """

    body = await client.stream_bytes(
        url,
        limit=max_download_bytes or settings.max_download_bytes,
        timeout=timeout or settings.media_timeout_seconds,
    )
    if not body.content:
        raise SecondaryFetchFailedError(url, "empty body")

    media_type = resolve_media_type(body.media_type, url, default_type)
    data_uri = encode_data_uri(body.content, media_type)
    ceiling = max_inline_bytes or settings.max_inline_bytes
    if len(data_uri) >= ceiling:
        logger.warning("Inline payload for %s is %d KB; returning the URL instead", url, len(data_uri) // 1024)
        return InlineMedia(url=url, media_type=media_type, data_uri=None, size=len(body.content))
    return InlineMedia(url=url, media_type=media_type, data_uri=data_uri, size=len(body.content))
