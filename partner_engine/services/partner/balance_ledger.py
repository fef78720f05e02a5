"""
Balance ledger.

available = approved commissions
            - in-flight withdrawals (PENDING, APPROVED, PROCESSING)
            - completed withdrawals

Withdrawal creation locks the user row so concurrent requests of the
same user validate one after another against a fresh balance.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    PartnerProgramConfig,
)
from partner_engine.config.settings import settings
from partner_engine.models.enums import (
    IN_FLIGHT_WITHDRAWAL_STATUSES,
    CommissionStatus,
    WithdrawalStatus,
)
from partner_engine.repositories.audit_log_repository import AuditLogRepository
from partner_engine.repositories.partner_commission_repository import (
    PartnerCommissionRepository,
)
from partner_engine.repositories.user_repository import UserRepository
from partner_engine.repositories.withdrawal_repository import (
    WithdrawalRepository,
)
from partner_engine.services.base_service import BaseService, transaction
from partner_engine.services.partner.tax_calculator import TaxCalculator
from partner_engine.utils.exceptions import (
    InsufficientBalance,
    InvalidAmount,
    PartnerNotFound,
)
from partner_engine.utils.money import quantize_money, require_positive_amount

AUDIT_ACTION_WITHDRAWAL_REQUESTED = "WITHDRAWAL_REQUESTED"


@dataclass(frozen=True)
class BalanceSummary:
    """Balance breakdown for a partner."""

    approved_commissions: Decimal
    pending_commissions: Decimal
    reserved_withdrawals: Decimal
    completed_withdrawals: Decimal
    available: Decimal


@dataclass(frozen=True)
class WithdrawalResult:
    """Created withdrawal request."""

    id: int
    amount: Decimal
    currency: str
    tax_status: str
    tax_rate: Decimal
    tax_amount: Decimal
    net_amount: Decimal
    status: str
    created_at: datetime


class BalanceLedger(BaseService):
    """Available balance and withdrawal creation."""

    def __init__(
        self,
        session: AsyncSession,
        config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG,
        currency: str | None = None,
    ) -> None:
        """
        Initialize balance ledger.

        Args:
            session: Async database session
            config: Partner program tables
            currency: Withdrawal currency (settings.withdrawal_currency by default)
        """
        super().__init__(session, config)
        self.commissions = PartnerCommissionRepository(session)
        self.withdrawals = WithdrawalRepository(session)
        self.users = UserRepository(session)
        self.audit = AuditLogRepository(session)
        self.tax_calculator = TaxCalculator(config)
        self.currency = currency or settings.withdrawal_currency

    async def get_balance(self, user_id: int) -> BalanceSummary:
        """
        Get balance breakdown.

        A negative raw balance means the ledgers disagree; it is logged
        and reported as 0.

        Args:
            user_id: Partner user ID

        Returns:
            BalanceSummary
        """
        approved = await self.commissions.sum_amount(
            user_id, [CommissionStatus.APPROVED]
        )
        pending = await self.commissions.sum_amount(
            user_id, [CommissionStatus.PENDING]
        )
        reserved = await self.withdrawals.sum_amount(
            user_id, IN_FLIGHT_WITHDRAWAL_STATUSES
        )
        completed = await self.withdrawals.sum_amount(
            user_id, [WithdrawalStatus.COMPLETED]
        )

        raw_available = approved - reserved - completed
        if raw_available < 0:
            self.logger.warning(
                "Negative raw balance detected",
                extra={
                    "user_id": user_id,
                    "approved": str(approved),
                    "reserved": str(reserved),
                    "completed": str(completed),
                },
            )

        return BalanceSummary(
            approved_commissions=approved,
            pending_commissions=pending,
            reserved_withdrawals=reserved,
            completed_withdrawals=completed,
            available=max(raw_available, Decimal("0")),
        )

    async def available_balance(self, user_id: int) -> Decimal:
        """Available balance of a partner."""
        return (await self.get_balance(user_id)).available

    async def validate_withdrawal(self, user_id: int, amount: Any) -> BalanceSummary:
        """
        Check a withdrawal against the available balance.

        Args:
            user_id: Partner user ID
            amount: Requested amount

        Returns:
            BalanceSummary the request was validated against

        Raises:
            InvalidAmount: If amount is not positive
            InsufficientBalance: If amount exceeds the available balance
        """
        requested = require_positive_amount(amount)
        summary = await self.get_balance(user_id)
        if requested > summary.available:
            self.logger.info(
                "Withdrawal rejected: insufficient balance",
                extra={
                    "user_id": user_id,
                    "requested": str(requested),
                    "available": str(summary.available),
                },
            )
            raise InsufficientBalance(summary.available, requested)
        return summary

    @transaction
    async def create_withdrawal(
        self,
        user_id: int,
        amount: Any,
        tax_status: Any,
        payment_details: dict[str, Any] | None = None,
    ) -> WithdrawalResult:
        """
        Create a PENDING withdrawal request.

        Validation and insert run in one transaction under a lock on the
        user's row. Amount and tax are fixed here.

        Args:
            user_id: Partner user ID
            amount: Gross amount, at most two decimal places
            tax_status: TaxStatus or its string value
            payment_details: Payout details stored as JSON

        Returns:
            WithdrawalResult

        Raises:
            InvalidAmount: If amount is not positive or has sub-cent digits
            PartnerNotFound: If the user does not exist
            InsufficientBalance: If amount exceeds the available balance
        """
        requested = require_positive_amount(amount)
        if quantize_money(requested) != requested:
            raise InvalidAmount(
                f"Amount must have at most two decimal places, got {requested}"
            )

        # Serialize withdrawals per user
        if await self.users.lock_by_id(user_id) is None:
            raise PartnerNotFound(user_id)

        await self.validate_withdrawal(user_id, requested)
        tax = self.tax_calculator.compute_tax(requested, tax_status)

        withdrawal = await self.withdrawals.create(
            user_id=user_id,
            amount=requested,
            currency=self.currency,
            tax_status=tax.tax_status.value,
            tax_amount=tax.tax_amount,
            payment_details=payment_details,
            status=WithdrawalStatus.PENDING.value,
        )

        await self.audit.record(
            action=AUDIT_ACTION_WITHDRAWAL_REQUESTED,
            entity_type="withdrawal_request",
            entity_id=withdrawal.id,
            new_value={
                "userId": user_id,
                "amount": str(requested),
                "taxAmount": str(tax.tax_amount),
                "taxStatus": tax.tax_status.value,
            },
        )

        self.logger.info(
            "Withdrawal request created",
            extra={
                "user_id": user_id,
                "withdrawal_id": withdrawal.id,
                "amount": str(requested),
                "tax_amount": str(tax.tax_amount),
            },
        )

        return WithdrawalResult(
            id=withdrawal.id,
            amount=requested,
            currency=withdrawal.currency,
            tax_status=tax.tax_status.value,
            tax_rate=tax.rate,
            tax_amount=tax.tax_amount,
            net_amount=tax.net_amount,
            status=withdrawal.status,
            created_at=withdrawal.created_at,
        )
