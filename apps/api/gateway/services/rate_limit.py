"""Per-client request gate for the content routes, backed by slowapi."""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..core.config import settings
from ..core.security import CurrentUser, get_current_user
from .notifications import NotificationService, get_notifier

logger = logging.getLogger(__name__)

LIMIT_SCOPE = "gateway"


def client_key(request: Request) -> str:
    """Key requests by the first ``X-Forwarded-For`` hop, else the peer address."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return get_remote_address(request)


class GatewayLimiter:
    """One shared quota for every content route, counted per client."""

    def __init__(self, limit: str | None = None, storage_uri: str | None = None) -> None:
        rate = limit or settings.rate_limit
        self.item = parse(rate)
        self.limiter = Limiter(
            key_func=client_key,
            default_limits=[rate],
            storage_uri=storage_uri or settings.rate_limit_storage_uri,
        )

    @property
    def retry_after(self) -> str:
        minutes = max(1, self.item.get_expiry() // 60)
        return f"{minutes} minutes"

    def hit(self, key: str) -> bool:
        if not self.limiter.enabled:
            return True
        return self.limiter.limiter.hit(self.item, LIMIT_SCOPE, key)

    def remaining(self, key: str) -> int:
        _, remaining = self.limiter.limiter.get_window_stats(self.item, LIMIT_SCOPE, key)
        return remaining


rate_limiter = GatewayLimiter()


def get_rate_limiter() -> GatewayLimiter:
    return rate_limiter


async def enforce_rate_limit(
    request: Request,
    user: CurrentUser | None = Depends(get_current_user),
    limiter: GatewayLimiter = Depends(get_rate_limiter),
    notifier: NotificationService = Depends(get_notifier),
) -> None:
    """Reject callers over their window quota; admins are never limited."""

    if user is not None and user.is_admin_user:
        return
    key = client_key(request)
    if not limiter.hit(key):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "Too many requests, please try again later",
                "retryAfter": limiter.retry_after,
            },
        )
    if limiter.limiter.enabled and limiter.remaining(key) == 0:
        logger.warning("Client %s used its whole quota on %s", key, request.url.path)
        try:
            await notifier.send_rate_limit_warning(user.username if user else key, request.url.path, 100)
        except Exception:  # noqa: BLE001 - notification is fire-and-forget
            logger.exception("Failed to send rate limit warning for %s", key)
