"""
Dramatiq broker configuration.

Redis-based message broker for task queue.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import (
    AgeLimit,
    Callbacks,
    CurrentMessage,
    Middleware,
    Pipelines,
    Retries,
    ShutdownNotifications,
    TimeLimit,
)
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from partner_engine.config.settings import settings
from partner_engine.initialization.logging import setup_logging
from partner_engine.utils.exceptions import PersistenceFailure

MAX_RETRIES = 5


def should_retry(retries_so_far: int, exception: Exception) -> bool:
    """
    Retry only aborted units of work and store errors.

    Domain errors (bad amount, unknown partner) will fail the same way
    again, so they are not retried.
    """
    return retries_so_far < MAX_RETRIES and isinstance(
        exception, (PersistenceFailure, SQLAlchemyError)
    )


class WorkerLogging(Middleware):
    """Configures file logging once a worker process boots."""

    def before_worker_boot(self, broker, worker):
        setup_logging(settings)


# Initialize Redis broker with graceful shutdown middleware
# ShutdownNotifications: Allows workers to gracefully shutdown
# WorkerLogging: File sinks for worker processes
# CurrentMessage: Provides access to current message in actors
# Retries: Exponential backoff for failed tasks
redis_broker = RedisBroker(
    host=settings.redis_host,
    port=settings.redis_port,
    password=settings.redis_password if settings.redis_password else None,
    db=settings.redis_db,
    middleware=[
        AgeLimit(),
        TimeLimit(),
        ShutdownNotifications(),
        CurrentMessage(),
        Callbacks(),
        Pipelines(),
        WorkerLogging(),
        Retries(
            max_retries=MAX_RETRIES,
            min_backoff=1000,  # 1 second
            max_backoff=60000,  # 1 minute
            retry_when=should_retry,
        ),
    ],
)

# Set as default broker
dramatiq.set_broker(redis_broker)

# Export broker
broker = redis_broker

logger.info(
    f"Dramatiq broker initialized: "
    f"redis://{settings.redis_host}:{settings.redis_port}/{settings.redis_db}"
)
