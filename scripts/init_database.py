#!/usr/bin/env python3
"""Initialize partner engine database tables."""

import asyncio

from loguru import logger

from partner_engine.config.database import async_engine
from partner_engine.config.settings import settings
from partner_engine.initialization.logging import setup_logging
from partner_engine.models import Base


async def init_database() -> None:
    """Create all database tables."""
    logger.info("Connecting to database...")

    async with async_engine.begin() as conn:
        logger.info("Creating tables (checkfirst=True)...")
        await conn.run_sync(
            Base.metadata.create_all,
            checkfirst=True
        )

    await async_engine.dispose()
    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    setup_logging(settings)
    asyncio.run(init_database())
