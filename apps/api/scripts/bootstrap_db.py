"""Create the gateway database schema for development."""
from __future__ import annotations

import asyncio
import logging

from gateway.db.session import engine
from gateway.models import ApiUsage  # noqa: F401 - registers the table on Base.metadata
from gateway.models.base import Base

logger = logging.getLogger(__name__)


async def create_schema() -> None:
	async with engine.begin() as connection:
		await connection.run_sync(Base.metadata.create_all)


async def main() -> None:
	logging.basicConfig(level=logging.INFO)
	await create_schema()
	await engine.dispose()
	logger.info("Database schema ensured: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
	asyncio.run(main())
