"""Named upstream endpoints, editable at runtime by admins."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterator

import httpx

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpstreamEndpoint:
    name: str
    url: str
    probe_path: str = ""
    probe_method: str = "GET"
    probe_json: dict[str, Any] | None = None

    @property
    def probe_url(self) -> str:
        return f"{self.url.rstrip('/')}{self.probe_path}" if self.probe_path else self.url


def _defaults(config: Settings) -> list[UpstreamEndpoint]:
    return [
        UpstreamEndpoint("chat", config.chat_api_base_url, "/ask?question=test"),
        UpstreamEndpoint("roast", config.roast_api_base_url, "/roast/light"),
        UpstreamEndpoint("flux", config.flux_api_base_url, "/flux?prompt=test"),
        UpstreamEndpoint("lyrics", config.lyrics_api_url, "?title=faded"),
        UpstreamEndpoint("waifu", config.waifu_api_url, "/waifu"),
        UpstreamEndpoint(
            "video-download",
            config.download_api_url,
            "?url=https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        ),
        UpstreamEndpoint("movie-search", config.movie_api_url, "?q=matrix"),
        UpstreamEndpoint("music-search", config.music_api_url, "?q=coldplay"),
        UpstreamEndpoint("anime-info", config.anime_api_url, "?query=naruto"),
        UpstreamEndpoint("pexels-images", config.pexels_api_url, "?q=nature"),
        UpstreamEndpoint(
            "translator",
            config.translator_api_url,
            probe_method="POST",
            probe_json={"text": "hello world", "targetLang": "es"},
        ),
        UpstreamEndpoint("neko-api", config.neko_api_url),
        UpstreamEndpoint("dog-api", config.dog_api_url),
        UpstreamEndpoint("cat-api", config.cat_api_url),
        UpstreamEndpoint("music-player", config.music_player_api_url, "?query=Faded"),
        UpstreamEndpoint("video-feed", config.video_feed_api_url),
    ]


def validate_base_url(url: str) -> str:
    candidate = url.strip()
    try:
        parsed = httpx.URL(candidate)
    except httpx.InvalidURL as exc:
        raise ValueError(f"Invalid URL: {exc}") from exc
    if parsed.scheme not in {"http", "https"} or not parsed.host:
        raise ValueError("URL must be an absolute http(s) URL")
    return candidate


class UpstreamRegistry:
    """In-process table of upstream base URLs keyed by name."""

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or settings
        self._endpoints: dict[str, UpstreamEndpoint] = {}
        self.reset()

    def reset(self) -> None:
        self._endpoints = {endpoint.name: endpoint for endpoint in _defaults(self._config)}

    def url(self, name: str) -> str:
        return self._endpoints[name].url.rstrip("/")

    def get(self, name: str) -> UpstreamEndpoint | None:
        return self._endpoints.get(name)

    def update(self, name: str, url: str) -> UpstreamEndpoint:
        """Point ``name`` at a new base URL.

        Raises ``KeyError`` for unknown names and ``ValueError`` unless ``url`` is an
        absolute http(s) URL.
        """

        current = self._endpoints[name]
        updated = replace(current, url=validate_base_url(url))
        self._endpoints[name] = updated
        logger.info("Upstream endpoint %s changed from %s to %s", name, current.url, updated.url)
        return updated

    def __iter__(self) -> Iterator[UpstreamEndpoint]:
        return iter(list(self._endpoints.values()))

    def __len__(self) -> int:
        return len(self._endpoints)


registry = UpstreamRegistry()


def get_registry() -> UpstreamRegistry:
    """FastAPI dependency returning the process-wide registry."""

    return registry
