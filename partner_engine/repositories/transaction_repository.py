"""
Transaction repository.

Read-only aggregation over the payments subsystem's transactions.
"""

from collections.abc import Collection
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.models.enums import TransactionStatus
from partner_engine.models.transaction import Transaction
from partner_engine.repositories.base import BaseRepository
from partner_engine.utils.money import to_decimal


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository with aggregate queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def sum_completed(self, user_ids: Collection[int]) -> Decimal:
        """
        Sum completed transaction amounts over a set of users.

        Args:
            user_ids: User IDs

        Returns:
            Total amount (0 for an empty set)
        """
        if not user_ids:
            return Decimal("0")

        stmt = select(
            func.coalesce(func.sum(Transaction.amount), 0)
        ).where(
            Transaction.user_id.in_(list(user_ids)),
            Transaction.status == TransactionStatus.COMPLETED.value,
        )
        result = await self.session.execute(stmt)
        return to_decimal(result.scalar_one())

    async def sum_completed_by_user(
        self, user_ids: Collection[int]
    ) -> dict[int, Decimal]:
        """
        Sum completed transaction amounts per user.

        Args:
            user_ids: User IDs

        Returns:
            Dict mapping every requested user ID to its total
        """
        totals = {user_id: Decimal("0") for user_id in user_ids}
        if not totals:
            return totals

        stmt = (
            select(
                Transaction.user_id,
                func.sum(Transaction.amount).label("total"),
            )
            .where(
                Transaction.user_id.in_(list(totals)),
                Transaction.status == TransactionStatus.COMPLETED.value,
            )
            .group_by(Transaction.user_id)
        )
        result = await self.session.execute(stmt)
        for row in result.all():
            totals[row.user_id] = to_decimal(row.total)
        return totals
