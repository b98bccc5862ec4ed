"""API usage repository helpers."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.api_usage import ApiUsage


@dataclass(slots=True)
class UsageCounts:
    total: int
    today: int
    successful: int


async def add(session: AsyncSession, usage: ApiUsage) -> ApiUsage:
    """Persist a usage row and flush to obtain its identifier."""

    session.add(usage)
    await session.flush()
    return usage


async def list_recent(session: AsyncSession, *, user_id: int | None = None, limit: int = 1000) -> list[ApiUsage]:
    """Return usage rows newest first, optionally for a single user."""

    stmt: Select[tuple[ApiUsage]] = select(ApiUsage).order_by(ApiUsage.timestamp.desc()).limit(limit)
    if user_id is not None:
        stmt = stmt.where(ApiUsage.user_id == user_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_usage(session: AsyncSession, *, since: datetime, user_id: int | None = None) -> UsageCounts:
    """Aggregate total, since-midnight and 2xx counts in one query."""

    stmt = select(
        func.count(ApiUsage.id),
        func.coalesce(func.sum(case((ApiUsage.timestamp >= since, 1), else_=0)), 0),
        func.coalesce(func.sum(case(((ApiUsage.status >= 200) & (ApiUsage.status < 300), 1), else_=0)), 0),
    )
    if user_id is not None:
        stmt = stmt.where(ApiUsage.user_id == user_id)
    result = await session.execute(stmt)
    total, today, successful = result.one()
    return UsageCounts(total=int(total or 0), today=int(today or 0), successful=int(successful or 0))
