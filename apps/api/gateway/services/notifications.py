"""Operator notifications kept in memory until a mail transport is wired in."""
from __future__ import annotations

import enum
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from ..core.config import settings

logger = logging.getLogger(__name__)


class NotificationLevel(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(slots=True)
class Notification:
    subject: str
    message: str
    level: NotificationLevel
    timestamp: datetime
    recipient: str | None = None

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["level"] = self.level.value
        data["timestamp"] = self.timestamp.isoformat()
        return data


class NotificationService:
    """Collect notifications for the admin panel and mirror them to the log."""

    def __init__(self, max_items: int = 500) -> None:
        self._max_items = max_items
        self._items: list[Notification] = []

    async def send(
        self,
        subject: str,
        message: str,
        level: NotificationLevel = NotificationLevel.INFO,
        recipient: str | None = None,
    ) -> Notification:
        notification = Notification(
            subject=subject,
            message=message,
            level=level,
            timestamp=datetime.now(timezone.utc),
            recipient=recipient,
        )
        self._items.append(notification)
        if len(self._items) > self._max_items:
            del self._items[: len(self._items) - self._max_items]

        logger.info(
            "[NOTIFICATION] [%s] To: %s - %s: %s",
            level.value.upper(),
            recipient or settings.notification_recipient,
            subject,
            message,
        )
        return notification

    async def send_api_error(self, api_name: str, error: str, recipient: str | None = None) -> Notification:
        return await self.send(
            subject=f"API Error: {api_name}",
            message=f"The {api_name} API encountered an error: {error}. Please check the logs for more details.",
            level=NotificationLevel.ERROR,
            recipient=recipient,
        )

    async def send_rate_limit_warning(
        self,
        username: str,
        endpoint: str,
        limit_reached: int,
        recipient: str | None = None,
    ) -> Notification:
        return await self.send(
            subject=f"Rate Limit Warning for {username}",
            message=(
                f"User {username} has reached {limit_reached}% of their rate limit for endpoint {endpoint}. "
                "Consider upgrading their plan."
            ),
            level=NotificationLevel.WARNING,
            recipient=recipient,
        )

    def recent(self) -> list[Notification]:
        """Return notifications newest first."""

        return list(reversed(self._items))

    def clear(self) -> None:
        self._items.clear()


notification_service = NotificationService()


def get_notifier() -> NotificationService:
    """FastAPI dependency returning the process-wide notification service."""

    return notification_service
