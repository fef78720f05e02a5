"""
User repository.

Data access layer for User model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.models.user import User
from partner_engine.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_referral_code(self, code: str) -> User | None:
        """
        Get user by referral code.

        Args:
            code: Normalized referral code

        Returns:
            User or None
        """
        return await self.get_by(referral_code=code)
