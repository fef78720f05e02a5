"""
Partner level progression.

A partner's level is the highest level whose referral and team-volume
thresholds are both met. Progress toward the next level averages the
two partial progress values.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    MAX_PARTNER_LEVEL,
    PartnerLevel,
    PartnerProgramConfig,
)
from partner_engine.repositories.partner_relationship_repository import (
    PartnerRelationshipRepository,
)
from partner_engine.repositories.user_repository import UserRepository
from partner_engine.services.base_service import BaseService
from partner_engine.services.partner.volume_aggregator import (
    SqlTransactionVolumeAggregator,
    TransactionVolumeAggregator,
)
from partner_engine.utils.exceptions import PartnerNotFound
from partner_engine.utils.money import to_decimal

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LevelProgress:
    """Current level and progress toward the next one."""

    level: PartnerLevel
    next_level: PartnerLevel
    direct_referrals: int
    team_volume: Decimal
    referral_progress: Decimal
    volume_progress: Decimal
    progress: int

    @property
    def is_max_level(self) -> bool:
        """True at the terminal level."""
        return self.level.level_number == MAX_PARTNER_LEVEL


class LevelProgressionCalculator:
    """Pure level selection and progress computation."""

    def __init__(self, config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG) -> None:
        self.config = config

    def select_level(self, direct_referrals: int, team_volume: Decimal) -> PartnerLevel:
        """
        Pick the highest level whose thresholds are both met.

        Args:
            direct_referrals: Number of level 1 referrals
            team_volume: Completed volume of the whole downline

        Returns:
            Qualifying level (level 1 if none higher)
        """
        for number in range(MAX_PARTNER_LEVEL, 0, -1):
            level = self.config.get_level(number)
            if (
                direct_referrals >= level.min_referrals
                and team_volume >= level.min_team_volume
            ):
                return level
        return self.config.get_level(1)

    @staticmethod
    def _ratio_percent(value: Decimal, target: Decimal) -> Decimal:
        """min(100, value / target * 100); 100 for a zero target."""
        if target <= 0:
            return HUNDRED
        return min(HUNDRED, value / target * HUNDRED)

    def compute(self, direct_referrals: int, team_volume: Any) -> LevelProgress:
        """
        Compute level and next-level progress.

        At the maximum level progress is 100 against that level's own
        thresholds; there is no level above it.

        Args:
            direct_referrals: Number of level 1 referrals
            team_volume: Completed volume of the whole downline

        Returns:
            LevelProgress
        """
        volume = to_decimal(team_volume)
        current = self.select_level(direct_referrals, volume)

        if current.level_number == MAX_PARTNER_LEVEL:
            return LevelProgress(
                level=current,
                next_level=current,
                direct_referrals=direct_referrals,
                team_volume=volume,
                referral_progress=HUNDRED,
                volume_progress=HUNDRED,
                progress=100,
            )

        target = self.config.get_level(current.level_number + 1)
        referral_progress = self._ratio_percent(
            Decimal(direct_referrals), Decimal(target.min_referrals)
        )
        volume_progress = self._ratio_percent(volume, target.min_team_volume)
        progress = ((referral_progress + volume_progress) / 2).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )

        return LevelProgress(
            level=current,
            next_level=target,
            direct_referrals=direct_referrals,
            team_volume=volume,
            referral_progress=referral_progress,
            volume_progress=volume_progress,
            progress=int(progress),
        )


class LevelProgressionService(BaseService):
    """Loads partner statistics and computes the level."""

    def __init__(
        self,
        session: AsyncSession,
        config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG,
        aggregator: TransactionVolumeAggregator | None = None,
    ) -> None:
        """
        Initialize level progression service.

        Args:
            session: Async database session
            config: Partner program tables
            aggregator: Completed-volume source (SQL over transactions by default)
        """
        super().__init__(session, config)
        self.relationships = PartnerRelationshipRepository(session)
        self.users = UserRepository(session)
        self.aggregator = aggregator or SqlTransactionVolumeAggregator(session)
        self.calculator = LevelProgressionCalculator(config)

    async def get_team_volume(self, partner_id: int) -> Decimal:
        """Completed volume of all descendants at any level."""
        descendant_ids = await self.relationships.get_descendant_ids(partner_id)
        return await self.aggregator.sum_completed(descendant_ids)

    async def compute_level(self, partner_id: int) -> LevelProgress:
        """
        Compute a partner's level.

        Args:
            partner_id: Partner user ID

        Returns:
            LevelProgress

        Raises:
            PartnerNotFound: If the user does not exist
        """
        if await self.users.get_by_id(partner_id) is None:
            raise PartnerNotFound(partner_id)

        direct_referrals = await self.relationships.count_direct(partner_id)
        team_volume = await self.get_team_volume(partner_id)
        return self.calculator.compute(direct_referrals, team_volume)
