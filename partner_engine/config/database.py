"""
Database configuration.

Async engine for scripts and the application process. Dramatiq tasks
open their own engines per event loop (see jobs.async_runner).
"""

from sqlalchemy.ext.asyncio import create_async_engine

from partner_engine.config.settings import settings

async_engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
)
