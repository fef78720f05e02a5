"""
Logging initialization.

Configures the loguru logger: stderr sink plus a rotating file sink.
"""

import sys

from loguru import logger

from partner_engine.config.settings import Settings


def setup_logging(settings: Settings) -> None:
    """
    Configure logger with file rotation.

    Args:
        settings: Runtime settings (log level and file)
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
        diagnose=not settings.is_production(),
    )

    logger.info(
        f"Partner engine logging configured "
        f"(level={settings.log_level}, env={settings.environment})"
    )
