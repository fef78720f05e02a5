"""
Partner relationship repository.

Data access layer for the referral closure table.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.config.partner_program import MAX_REFERRAL_DEPTH
from partner_engine.models.partner_relationship import PartnerRelationship
from partner_engine.models.user import User
from partner_engine.repositories.base import BaseRepository


@dataclass
class DirectReferralRow:
    """Direct referral of some partner, with identity fields."""

    partner_id: int
    referral_id: int
    first_name: str | None
    last_name: str | None
    email: str
    joined_at: datetime


class PartnerRelationshipRepository(BaseRepository[PartnerRelationship]):
    """Closure table repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize partner relationship repository."""
        super().__init__(PartnerRelationship, session)

    async def get_ancestors(self, referral_id: int) -> list[PartnerRelationship]:
        """
        Get the upline of a user.

        Args:
            referral_id: Descendant user ID

        Returns:
            Closure rows ordered by level ascending, at most 5
        """
        stmt = (
            select(PartnerRelationship)
            .where(PartnerRelationship.referral_id == referral_id)
            .order_by(PartnerRelationship.level.asc())
            .limit(MAX_REFERRAL_DEPTH)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_upline(self, user_id: int) -> bool:
        """Check if user already has closure rows as a referral."""
        return await self.exists(referral_id=user_id)

    async def is_ancestor(self, partner_id: int, referral_id: int) -> bool:
        """Check if partner_id is within 5 hops above referral_id."""
        return await self.exists(partner_id=partner_id, referral_id=referral_id)

    async def count_direct(self, partner_id: int) -> int:
        """Count direct (level 1) referrals."""
        return await self.count(partner_id=partner_id, level=1)

    async def count_team(self, partner_id: int) -> int:
        """Count all descendants at any level."""
        return await self.count(partner_id=partner_id)

    async def get_direct_referral_ids(self, partner_id: int) -> list[int]:
        """
        Get IDs of direct referrals.

        Args:
            partner_id: Partner user ID

        Returns:
            Referral user IDs
        """
        stmt = select(PartnerRelationship.referral_id).where(
            PartnerRelationship.partner_id == partner_id,
            PartnerRelationship.level == 1,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_descendant_ids(self, partner_id: int) -> list[int]:
        """
        Get IDs of all descendants at any level.

        Args:
            partner_id: Partner user ID

        Returns:
            Descendant user IDs
        """
        stmt = select(PartnerRelationship.referral_id).where(
            PartnerRelationship.partner_id == partner_id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_direct_referrals_of(
        self, partner_ids: list[int]
    ) -> list[DirectReferralRow]:
        """
        Get direct referrals for several partners in one query.

        Args:
            partner_ids: Partner user IDs

        Returns:
            Rows ordered by join time, then referral ID
        """
        if not partner_ids:
            return []

        stmt = (
            select(
                PartnerRelationship.partner_id,
                PartnerRelationship.referral_id,
                User.first_name,
                User.last_name,
                User.email,
                User.created_at,
            )
            .join(User, User.id == PartnerRelationship.referral_id)
            .where(
                PartnerRelationship.partner_id.in_(partner_ids),
                PartnerRelationship.level == 1,
            )
            .order_by(User.created_at.asc(), PartnerRelationship.referral_id.asc())
        )
        result = await self.session.execute(stmt)
        return [
            DirectReferralRow(
                partner_id=row.partner_id,
                referral_id=row.referral_id,
                first_name=row.first_name,
                last_name=row.last_name,
                email=row.email,
                joined_at=row.created_at,
            )
            for row in result.all()
        ]

    async def get_level_counts(self, partner_id: int) -> dict[int, int]:
        """
        Get descendant counts for all levels in a single query.

        Args:
            partner_id: Partner user ID

        Returns:
            Dict mapping level to count {1: n1, ..., 5: n5}
        """
        stmt = (
            select(
                PartnerRelationship.level,
                func.count(PartnerRelationship.id).label("count"),
            )
            .where(PartnerRelationship.partner_id == partner_id)
            .group_by(PartnerRelationship.level)
        )
        result = await self.session.execute(stmt)

        level_counts = {level: 0 for level in range(1, MAX_REFERRAL_DEPTH + 1)}
        for row in result.all():
            level_counts[row.level] = row.count
        return level_counts
