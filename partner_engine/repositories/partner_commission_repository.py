"""
Partner commission repository.

Data access layer for PartnerCommission model, including the
idempotent batch insert used by the commission engine.
"""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, func, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.models.partner_commission import PartnerCommission
from partner_engine.models.user import User
from partner_engine.repositories.base import BaseRepository
from partner_engine.utils.money import to_decimal

# Columns of uq_partner_commissions_partner_tx_level
COMMISSION_UNIQUE_KEY = ("partner_id", "source_transaction_id", "level")


class PartnerCommissionRepository(BaseRepository[PartnerCommission]):
    """Partner commission repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize partner commission repository."""
        super().__init__(PartnerCommission, session)

    async def get_existing_keys(
        self, transaction_id: str, partner_ids: Sequence[int]
    ) -> set[tuple[int, int]]:
        """
        Get (partner_id, level) pairs already recorded for a transaction.

        Args:
            transaction_id: Source transaction ID
            partner_ids: Candidate partner IDs

        Returns:
            Set of (partner_id, level)
        """
        if not partner_ids:
            return set()

        stmt = select(PartnerCommission.partner_id, PartnerCommission.level).where(
            PartnerCommission.source_transaction_id == transaction_id,
            PartnerCommission.partner_id.in_(partner_ids),
        )
        result = await self.session.execute(stmt)
        return {(row.partner_id, row.level) for row in result.all()}

    async def get_keys_by_ids(self, ids: Sequence[int]) -> set[tuple[int, int]]:
        """
        Get (partner_id, level) pairs of the given commissions.

        Args:
            ids: Commission IDs

        Returns:
            Set of (partner_id, level)
        """
        if not ids:
            return set()

        stmt = select(PartnerCommission.partner_id, PartnerCommission.level).where(
            PartnerCommission.id.in_(ids)
        )
        result = await self.session.execute(stmt)
        return {(row.partner_id, row.level) for row in result.all()}

    async def insert_ignore_conflicts(
        self, rows: list[dict[str, Any]]
    ) -> list[int]:
        """
        Insert commission rows, skipping rows that hit the unique key.

        Uses INSERT ... ON CONFLICT DO NOTHING on PostgreSQL and SQLite;
        other dialects get a plain INSERT and rely on the caller's
        existence pre-check (a concurrent duplicate then aborts the unit
        of work with an IntegrityError).

        Args:
            rows: Column values per commission (all columns explicit)

        Returns:
            IDs of inserted rows
        """
        if not rows:
            return []

        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = (
                postgresql.insert(PartnerCommission)
                .values(rows)
                .on_conflict_do_nothing(index_elements=list(COMMISSION_UNIQUE_KEY))
            )
        elif dialect == "sqlite":
            stmt = (
                sqlite.insert(PartnerCommission)
                .values(rows)
                .on_conflict_do_nothing(index_elements=list(COMMISSION_UNIQUE_KEY))
            )
        else:
            stmt = insert(PartnerCommission).values(rows)

        result = await self.session.execute(
            stmt.returning(PartnerCommission.id)
        )
        return list(result.scalars().all())

    async def sum_amount(
        self,
        partner_id: int,
        statuses: Sequence[str],
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> Decimal:
        """
        Sum commission amounts by status and optional creation window.

        Args:
            partner_id: Partner user ID
            statuses: Statuses to include
            from_date: Inclusive lower bound on created_at
            to_date: Exclusive upper bound on created_at

        Returns:
            Total amount (0 if none)
        """
        stmt = select(
            func.coalesce(func.sum(PartnerCommission.amount), 0)
        ).where(
            PartnerCommission.partner_id == partner_id,
            PartnerCommission.status.in_([str(s) for s in statuses]),
        )
        if from_date is not None:
            stmt = stmt.where(PartnerCommission.created_at >= from_date)
        if to_date is not None:
            stmt = stmt.where(PartnerCommission.created_at < to_date)

        result = await self.session.execute(stmt)
        return to_decimal(result.scalar_one())

    def _filtered(
        self,
        stmt: Select,
        partner_id: int,
        status: str | None,
        level: int | None,
        from_date: datetime | None,
        to_date: datetime | None,
    ) -> Select:
        """Apply history filters to a statement."""
        stmt = stmt.where(PartnerCommission.partner_id == partner_id)
        if status is not None:
            stmt = stmt.where(PartnerCommission.status == str(status))
        if level is not None:
            stmt = stmt.where(PartnerCommission.level == level)
        if from_date is not None:
            stmt = stmt.where(PartnerCommission.created_at >= from_date)
        if to_date is not None:
            stmt = stmt.where(PartnerCommission.created_at <= to_date)
        return stmt

    async def find_history(
        self,
        partner_id: int,
        *,
        status: str | None = None,
        level: int | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[tuple[PartnerCommission, User]], int]:
        """
        Get a page of commission history with source users.

        Args:
            partner_id: Partner user ID
            status: Optional status filter
            level: Optional level filter
            from_date: Inclusive lower bound on created_at
            to_date: Inclusive upper bound on created_at
            offset: Rows to skip
            limit: Page size

        Returns:
            Tuple of (rows newest first, total matching count)
        """
        count_stmt = self._filtered(
            select(func.count(PartnerCommission.id)),
            partner_id, status, level, from_date, to_date,
        )
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = self._filtered(
            select(PartnerCommission, User).join(
                User, User.id == PartnerCommission.source_user_id
            ),
            partner_id, status, level, from_date, to_date,
        )
        stmt = (
            stmt.order_by(
                PartnerCommission.created_at.desc(),
                PartnerCommission.id.desc(),
            )
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        rows = [(row[0], row[1]) for row in result.all()]
        return rows, total
