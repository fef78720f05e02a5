"""
Transaction volume aggregation.

The payments subsystem owns completed transactions; the partner engine
only asks for sums over a user or a set of users.
"""

from abc import ABC, abstractmethod
from collections.abc import Collection
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.repositories.transaction_repository import (
    TransactionRepository,
)


class TransactionVolumeAggregator(ABC):
    """Sums of completed transactions, provided by the payments side."""

    @abstractmethod
    async def sum_completed(self, user_ids: Collection[int]) -> Decimal:
        """Total completed amount over all given users."""

    @abstractmethod
    async def sum_completed_by_user(
        self, user_ids: Collection[int]
    ) -> dict[int, Decimal]:
        """Completed amount per user (0 for users without transactions)."""


class SqlTransactionVolumeAggregator(TransactionVolumeAggregator):
    """Aggregator over the shared transactions table."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize aggregator.

        Args:
            session: Async database session
        """
        self.transactions = TransactionRepository(session)

    async def sum_completed(self, user_ids: Collection[int]) -> Decimal:
        return await self.transactions.sum_completed(user_ids)

    async def sum_completed_by_user(
        self, user_ids: Collection[int]
    ) -> dict[int, Decimal]:
        return await self.transactions.sum_completed_by_user(user_ids)
