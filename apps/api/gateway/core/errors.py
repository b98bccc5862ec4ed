"""Error taxonomy shared by the gateway services and routes."""
from __future__ import annotations


class GatewayError(RuntimeError):
    """Base class for gateway failures."""


class MissingParameterError(GatewayError):
    """Raised when a required request parameter is absent or blank."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UpstreamUnavailableError(GatewayError):
    """Raised when an upstream call fails, times out, or returns an unusable body."""

    def __init__(self, reason: str, *, api_name: str | None = None, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.api_name = api_name
        self.status_code = status_code


class SecondaryFetchFailedError(GatewayError):
    """Raised when a referenced binary resource could not be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class PayloadTooLargeError(SecondaryFetchFailedError):
    """Raised when a binary resource exceeds the download ceiling."""

    def __init__(self, url: str, limit: int) -> None:
        super().__init__(url, f"payload exceeds {limit} bytes")
        self.limit = limit
