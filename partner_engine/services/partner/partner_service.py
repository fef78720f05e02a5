"""
Partner service.

Read views over the partner program (dashboard, history, levels, team)
plus entry points delegating to the core components.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    PartnerProgramConfig,
)
from partner_engine.models.enums import CommissionStatus
from partner_engine.repositories.partner_commission_repository import (
    PartnerCommissionRepository,
)
from partner_engine.repositories.partner_relationship_repository import (
    PartnerRelationshipRepository,
)
from partner_engine.repositories.user_repository import UserRepository
from partner_engine.repositories.withdrawal_repository import (
    WithdrawalRepository,
)
from partner_engine.services.base_service import BaseService
from partner_engine.services.partner.balance_ledger import (
    BalanceLedger,
    BalanceSummary,
)
from partner_engine.services.partner.level_progression import (
    LevelProgress,
    LevelProgressionService,
)
from partner_engine.services.partner.queries import (
    CommissionQuery,
    Page,
    WithdrawalQuery,
)
from partner_engine.services.partner.tax_calculator import (
    TaxCalculation,
    TaxCalculator,
)
from partner_engine.services.partner.tree_builder import (
    ReferralTree,
    ReferralTreeBuilder,
)
from partner_engine.services.partner.volume_aggregator import (
    SqlTransactionVolumeAggregator,
    TransactionVolumeAggregator,
)
from partner_engine.utils.datetime_utils import month_bounds, utc_now
from partner_engine.utils.exceptions import PartnerNotFound

# Commissions counted as earnings in monthly statistics
EARNED_COMMISSION_STATUSES = (CommissionStatus.APPROVED, CommissionStatus.PAID)

BASE_BENEFITS = ["Базовые комиссии"]
LEVEL_BENEFITS = {
    2: ["Повышенная ставка комиссии"],
    3: ["Приоритетная поддержка"],
    4: ["Эксклюзивные материалы"],
    5: ["VIP статус", "Персональный менеджер"],
}


@dataclass(frozen=True)
class PartnerDashboard:
    """Partner dashboard statistics."""

    user_id: int
    level: int
    level_name: str
    direct_referrals: int
    active_referrals: int
    team_size: int
    total_earnings: Decimal
    pending_earnings: Decimal
    available_balance: Decimal
    this_month_earnings: Decimal
    last_month_earnings: Decimal
    next_level: int
    next_level_name: str
    next_level_progress: int


@dataclass(frozen=True)
class CommissionHistoryItem:
    """Commission with its source user."""

    id: int
    source_user_id: int
    source_user_name: str
    source_transaction_id: str
    level: int
    rate: Decimal
    amount: Decimal
    status: str
    created_at: datetime
    paid_at: datetime | None


@dataclass(frozen=True)
class WithdrawalHistoryItem:
    """Withdrawal with its net payout."""

    id: int
    amount: Decimal
    currency: str
    tax_status: str
    tax_amount: Decimal
    net_amount: Decimal
    status: str
    created_at: datetime
    processed_at: datetime | None
    rejection_reason: str | None


@dataclass(frozen=True)
class PartnerLevelInfo:
    """Partner level with its benefits for the levels listing."""

    level: int
    name: str
    commission_rate: Decimal
    min_referrals: int
    min_team_volume: Decimal
    benefits: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TeamBreakdown:
    """Downline size per level."""

    by_level: dict[int, int]
    total: int


class PartnerService(BaseService):
    """Partner program views."""

    def __init__(
        self,
        session: AsyncSession,
        config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG,
        aggregator: TransactionVolumeAggregator | None = None,
    ) -> None:
        """
        Initialize partner service.

        Args:
            session: Async database session
            config: Partner program tables
            aggregator: Completed-volume source (SQL over transactions by default)
        """
        super().__init__(session, config)
        self.aggregator = aggregator or SqlTransactionVolumeAggregator(session)
        self.users = UserRepository(session)
        self.relationships = PartnerRelationshipRepository(session)
        self.commissions = PartnerCommissionRepository(session)
        self.withdrawals = WithdrawalRepository(session)
        self.levels = LevelProgressionService(session, config, self.aggregator)
        self.ledger = BalanceLedger(session, config)
        self.tree_builder = ReferralTreeBuilder(session, config, self.aggregator)
        self.tax_calculator = TaxCalculator(config)

    async def _require_user(self, user_id: int) -> None:
        if await self.users.get_by_id(user_id) is None:
            raise PartnerNotFound(user_id)

    async def get_dashboard(
        self, user_id: int, now: datetime | None = None
    ) -> PartnerDashboard:
        """
        Get dashboard statistics.

        Args:
            user_id: Partner user ID
            now: Reference time for monthly figures (current UTC time by default)

        Returns:
            PartnerDashboard

        Raises:
            PartnerNotFound: If the user does not exist
        """
        now = now or utc_now()

        # Raises PartnerNotFound for unknown users
        progress = await self.levels.compute_level(user_id)
        direct_ids = await self.relationships.get_direct_referral_ids(user_id)
        spend = await self.aggregator.sum_completed_by_user(direct_ids)
        team_size = await self.relationships.count_team(user_id)
        balance = await self.ledger.get_balance(user_id)

        this_start, this_end = month_bounds(now)
        last_start, last_end = month_bounds(now, months_back=1)
        this_month = await self.commissions.sum_amount(
            user_id, EARNED_COMMISSION_STATUSES, this_start, this_end
        )
        last_month = await self.commissions.sum_amount(
            user_id, EARNED_COMMISSION_STATUSES, last_start, last_end
        )

        return PartnerDashboard(
            user_id=user_id,
            level=progress.level.level_number,
            level_name=progress.level.name,
            direct_referrals=progress.direct_referrals,
            active_referrals=sum(1 for total in spend.values() if total > 0),
            team_size=team_size,
            total_earnings=balance.approved_commissions,
            pending_earnings=balance.pending_commissions,
            available_balance=balance.available,
            this_month_earnings=this_month,
            last_month_earnings=last_month,
            next_level=progress.next_level.level_number,
            next_level_name=progress.next_level.name,
            next_level_progress=progress.progress,
        )

    async def get_level(self, user_id: int) -> LevelProgress:
        """Current level and progress."""
        return await self.levels.compute_level(user_id)

    async def get_balance(self, user_id: int) -> BalanceSummary:
        """Balance breakdown."""
        await self._require_user(user_id)
        return await self.ledger.get_balance(user_id)

    async def get_tree(self, user_id: int, max_depth: int = 1) -> ReferralTree:
        """Referral tree, depth clamped to 1..5."""
        return await self.tree_builder.build_tree(user_id, max_depth)

    async def get_commissions(
        self, user_id: int, query: CommissionQuery | None = None
    ) -> Page[CommissionHistoryItem]:
        """
        Get commission history, newest first.

        Args:
            user_id: Partner user ID
            query: Filters and pagination

        Returns:
            Page of CommissionHistoryItem
        """
        query = query or CommissionQuery()
        rows, total = await self.commissions.find_history(
            user_id,
            status=query.status,
            level=query.level,
            from_date=query.from_date,
            to_date=query.to_date,
            offset=query.offset,
            limit=query.limit,
        )
        items = [
            CommissionHistoryItem(
                id=commission.id,
                source_user_id=commission.source_user_id,
                source_user_name=source.full_name,
                source_transaction_id=commission.source_transaction_id,
                level=commission.level,
                rate=commission.rate,
                amount=commission.amount,
                status=commission.status,
                created_at=commission.created_at,
                paid_at=commission.paid_at,
            )
            for commission, source in rows
        ]
        return Page(items=items, total=total, page=query.page, limit=query.limit)

    async def get_withdrawals(
        self, user_id: int, query: WithdrawalQuery | None = None
    ) -> Page[WithdrawalHistoryItem]:
        """
        Get withdrawal history, newest first.

        Args:
            user_id: Partner user ID
            query: Filters and pagination

        Returns:
            Page of WithdrawalHistoryItem
        """
        query = query or WithdrawalQuery()
        rows, total = await self.withdrawals.find_history(
            user_id,
            status=query.status,
            from_date=query.from_date,
            to_date=query.to_date,
            offset=query.offset,
            limit=query.limit,
        )
        items = [
            WithdrawalHistoryItem(
                id=w.id,
                amount=w.amount,
                currency=w.currency,
                tax_status=w.tax_status,
                tax_amount=w.tax_amount,
                net_amount=w.net_amount,
                status=w.status,
                created_at=w.created_at,
                processed_at=w.processed_at,
                rejection_reason=w.rejection_reason,
            )
            for w in rows
        ]
        return Page(items=items, total=total, page=query.page, limit=query.limit)

    def preview_tax(self, amount: Any, tax_status: Any) -> TaxCalculation:
        """Tax preview for the payout calculator."""
        return self.tax_calculator.compute_tax(amount, tax_status)

    def get_partner_levels(self) -> list[PartnerLevelInfo]:
        """
        Get all partner levels with thresholds and benefits.

        Returns:
            Levels 1..5 in order
        """
        result = []
        benefits = list(BASE_BENEFITS)
        for number in sorted(self.config.levels):
            level = self.config.get_level(number)
            benefits = benefits + LEVEL_BENEFITS.get(number, [])
            result.append(
                PartnerLevelInfo(
                    level=number,
                    name=level.name,
                    commission_rate=level.commission_rate,
                    min_referrals=level.min_referrals,
                    min_team_volume=level.min_team_volume,
                    benefits=benefits,
                )
            )
        return result

    async def get_team_by_level(self, user_id: int) -> TeamBreakdown:
        """
        Get downline size per level.

        Args:
            user_id: Partner user ID

        Returns:
            TeamBreakdown with counts for levels 1..5
        """
        await self._require_user(user_id)
        by_level = await self.relationships.get_level_counts(user_id)
        return TeamBreakdown(by_level=by_level, total=sum(by_level.values()))
