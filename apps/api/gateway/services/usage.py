"""Usage accounting for authenticated gateway calls."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import SessionLocal
from ..models.api_usage import ApiUsage
from ..repositories import usage as usage_repo
from ..schemas import admin as schemas

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncSession]


@dataclass(slots=True)
class UsageEvent:
    user_id: int
    endpoint: str
    method: str
    status: int
    response_time_ms: int | None = None
    api_key_id: int | None = None


class UsageRecorder:
    """Write usage rows in their own transaction, never failing the caller."""

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    def _open(self) -> AsyncSession:
        return self._session_factory()

    async def record(self, event: UsageEvent) -> bool:
        """Persist ``event``; returns ``False`` and logs when the write fails."""

        try:
            async with self._open() as session:
                async with session.begin():
                    await usage_repo.add(
                        session,
                        ApiUsage(
                            user_id=event.user_id,
                            api_key_id=event.api_key_id,
                            endpoint=event.endpoint,
                            method=event.method.upper(),
                            status=event.status,
                            response_time=event.response_time_ms,
                            timestamp=datetime.now(timezone.utc),
                        ),
                    )
        except Exception:  # noqa: BLE001 - usage accounting must not affect responses
            logger.exception("Failed to record API usage for %s %s", event.method, event.endpoint)
            return False
        return True


usage_recorder = UsageRecorder()


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


async def usage_stats(session: AsyncSession, *, user_id: int | None = None) -> schemas.UsageStatsResponse:
    """Return totals and the 2xx success rate; an empty history counts as 100%."""

    counts = await usage_repo.count_usage(
        session,
        since=_start_of_day(datetime.now(timezone.utc)),
        user_id=user_id,
    )
    success_rate = (counts.successful / counts.total) * 100 if counts.total else 100.0
    return schemas.UsageStatsResponse(
        total_requests=counts.total,
        today_requests=counts.today,
        success_rate=round(success_rate, 2),
    )


async def usage_records(
    session: AsyncSession,
    *,
    user_id: int | None = None,
    limit: int = 1000,
) -> list[schemas.UsageRecord]:
    rows = await usage_repo.list_recent(session, user_id=user_id, limit=limit)
    return [schemas.UsageRecord.model_validate(row) for row in rows]
