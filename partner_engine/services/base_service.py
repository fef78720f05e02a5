"""
Base service class.

Provides common functionality for all service classes including session management,
logging, and helper decorators.
"""

import functools
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    PartnerProgramConfig,
)
from partner_engine.utils.exceptions import PersistenceFailure

# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Injected partner program configuration
    - Logging with bound service context
    - Transaction helpers
    """

    def __init__(
        self,
        session: AsyncSession,
        config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG,
    ) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
            config: Partner program tables
        """
        self.session = session
        self.config = config
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback current transaction."""
        await self.session.rollback()


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to wrap method in transaction with automatic commit/rollback.

    Commits on success, rolls back on exception. Store errors are
    re-raised as PersistenceFailure; domain errors propagate unchanged.

    Usage:
        @transaction
        async def my_service_method(self, ...):
            # Your code here
            pass

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
            await self.commit()
            return result
        except SQLAlchemyError as e:
            await self.rollback()
            self.logger.error(
                f"Transaction failed in {func.__name__}",
                extra={
                    "error": str(e),
                    "function": func.__name__,
                },
            )
            raise PersistenceFailure(
                f"{func.__name__} aborted: {e.__class__.__name__}"
            ) from e
        except Exception:
            await self.rollback()
            raise

    return wrapper
