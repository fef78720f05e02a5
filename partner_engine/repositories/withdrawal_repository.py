"""
Withdrawal repository.

Data access layer for WithdrawalRequest model.
"""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.models.withdrawal_request import WithdrawalRequest
from partner_engine.repositories.base import BaseRepository
from partner_engine.utils.money import to_decimal


class WithdrawalRepository(BaseRepository[WithdrawalRequest]):
    """Withdrawal repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal repository."""
        super().__init__(WithdrawalRequest, session)

    async def sum_amount(
        self, user_id: int, statuses: Sequence[str]
    ) -> Decimal:
        """
        Sum withdrawal amounts by status.

        Args:
            user_id: User ID
            statuses: Statuses to include

        Returns:
            Total amount (0 if none)
        """
        stmt = select(
            func.coalesce(func.sum(WithdrawalRequest.amount), 0)
        ).where(
            WithdrawalRequest.user_id == user_id,
            WithdrawalRequest.status.in_([str(s) for s in statuses]),
        )
        result = await self.session.execute(stmt)
        return to_decimal(result.scalar_one())

    def _filtered(
        self,
        stmt: Select,
        user_id: int,
        status: str | None,
        from_date: datetime | None,
        to_date: datetime | None,
    ) -> Select:
        """Apply history filters to a statement."""
        stmt = stmt.where(WithdrawalRequest.user_id == user_id)
        if status is not None:
            stmt = stmt.where(WithdrawalRequest.status == str(status))
        if from_date is not None:
            stmt = stmt.where(WithdrawalRequest.created_at >= from_date)
        if to_date is not None:
            stmt = stmt.where(WithdrawalRequest.created_at <= to_date)
        return stmt

    async def find_history(
        self,
        user_id: int,
        *,
        status: str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[WithdrawalRequest], int]:
        """
        Get a page of withdrawal history.

        Args:
            user_id: User ID
            status: Optional status filter
            from_date: Inclusive lower bound on created_at
            to_date: Inclusive upper bound on created_at
            offset: Rows to skip
            limit: Page size

        Returns:
            Tuple of (requests newest first, total matching count)
        """
        count_stmt = self._filtered(
            select(func.count(WithdrawalRequest.id)),
            user_id, status, from_date, to_date,
        )
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = self._filtered(
            select(WithdrawalRequest), user_id, status, from_date, to_date
        )
        stmt = (
            stmt.order_by(
                WithdrawalRequest.created_at.desc(),
                WithdrawalRequest.id.desc(),
            )
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
