"""Single-shot HTTP client for third-party content APIs.

Every call carries an explicit timeout and is attempted exactly once. Network
errors, timeouts, malformed URLs and non-2xx statuses all surface as
``UpstreamUnavailableError`` so callers have a single failure to route to a
fallback.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..core.config import settings
from ..core.errors import PayloadTooLargeError, SecondaryFetchFailedError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UpstreamRequest:
    url: str
    method: str = "GET"
    params: dict[str, Any] | None = None
    json: Any = None
    timeout: float = field(default_factory=lambda: settings.upstream_timeout_seconds)
    headers: dict[str, str] | None = None
    api_name: str | None = None


@dataclass(slots=True)
class BinaryBody:
    content: bytes
    media_type: str | None


def _unavailable(request: UpstreamRequest, exc: Exception) -> UpstreamUnavailableError:
    if isinstance(exc, httpx.TimeoutException):
        return UpstreamUnavailableError(f"timed out after {request.timeout:g}s", api_name=request.api_name)
    if isinstance(exc, httpx.InvalidURL):
        return UpstreamUnavailableError(f"invalid URL: {exc}", api_name=request.api_name)
    return UpstreamUnavailableError(str(exc) or type(exc).__name__, api_name=request.api_name)


def _status_error(request: UpstreamRequest, response: httpx.Response) -> UpstreamUnavailableError:
    return UpstreamUnavailableError(
        f"upstream returned HTTP {response.status_code}",
        api_name=request.api_name,
        status_code=response.status_code,
    )


async def _read_capped(response: httpx.Response, url: str, limit: int) -> bytes:
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(url, limit)
    buffer = bytearray()
    async for chunk in response.aiter_bytes():
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise PayloadTooLargeError(url, limit)
    return bytes(buffer)


class UpstreamClient:
    """Wrap one ``httpx.AsyncClient`` shared by every gateway route."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                follow_redirects=True,
                headers={"User-Agent": settings.upstream_user_agent},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(self, request: UpstreamRequest) -> httpx.Response:
        """Issue the request once and return the response, or raise ``UpstreamUnavailableError``."""

        try:
            response = await self.client.request(
                request.method.upper(),
                request.url,
                params=request.params,
                json=request.json,
                headers=request.headers,
                timeout=request.timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise _unavailable(request, exc) from exc

        if not response.is_success:
            raise _status_error(request, response)
        return response

    async def fetch_json(self, request: UpstreamRequest) -> Any:
        response = await self.send(request)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError("invalid JSON body", api_name=request.api_name) from exc

    async def fetch_bytes(self, request: UpstreamRequest, *, limit: int | None = None) -> BinaryBody:
        """Stream a binary body, refusing empty bodies and ones past the download ceiling."""

        ceiling = limit or settings.max_download_bytes
        try:
            async with self.client.stream(
                request.method.upper(),
                request.url,
                params=request.params,
                json=request.json,
                headers=request.headers,
                timeout=request.timeout,
            ) as response:
                if not response.is_success:
                    raise _status_error(request, response)
                content = await _read_capped(response, request.url, ceiling)
                media_type = _media_type(response)
        except PayloadTooLargeError as exc:
            raise UpstreamUnavailableError(exc.reason, api_name=request.api_name) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise _unavailable(request, exc) from exc

        if not content:
            raise UpstreamUnavailableError("empty binary body", api_name=request.api_name)
        return BinaryBody(content=content, media_type=media_type)

    async def stream_bytes(self, url: str, *, limit: int, timeout: float) -> BinaryBody:
        """Download a referenced resource, refusing bodies larger than ``limit`` bytes."""

        try:
            async with self.client.stream("GET", url, timeout=timeout) as response:
                if not response.is_success:
                    raise SecondaryFetchFailedError(url, f"HTTP {response.status_code}")
                content = await _read_capped(response, url, limit)
                return BinaryBody(content=content, media_type=_media_type(response))
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SecondaryFetchFailedError(url, str(exc) or type(exc).__name__) from exc


def _media_type(response: httpx.Response) -> str | None:
    value = response.headers.get("content-type")
    if not value:
        return None
    return value.split(";", 1)[0].strip().lower() or None


upstream_client = UpstreamClient()


def get_upstream_client() -> UpstreamClient:
    """FastAPI dependency returning the process-wide upstream client."""

    return upstream_client
