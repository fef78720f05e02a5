"""
Commission engine.

Turns a completed payment into PENDING commissions for every ancestor of
the paying user. Safe under redelivery of the same event.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    PartnerProgramConfig,
)
from partner_engine.models.enums import CommissionStatus
from partner_engine.repositories.audit_log_repository import AuditLogRepository
from partner_engine.repositories.partner_commission_repository import (
    PartnerCommissionRepository,
)
from partner_engine.repositories.partner_relationship_repository import (
    PartnerRelationshipRepository,
)
from partner_engine.services.base_service import BaseService, transaction
from partner_engine.utils.datetime_utils import utc_now
from partner_engine.utils.exceptions import InvalidAmount
from partner_engine.utils.money import quantize_money, require_positive_amount

AUDIT_ACTION_COMMISSIONS_CREATED = "PARTNER_COMMISSIONS_CREATED"


@dataclass(frozen=True)
class CommissionLine:
    """Commission computed for one ancestor."""

    partner_id: int
    level: int
    rate: Decimal
    amount: Decimal


@dataclass
class CommissionBatchResult:
    """Result of processing one completed transaction."""

    transaction_id: str
    purchaser_user_id: int
    created: list[CommissionLine] = field(default_factory=list)
    duplicates_skipped: int = 0
    zero_skipped: int = 0

    @property
    def created_count(self) -> int:
        """Number of commission rows written."""
        return len(self.created)

    @property
    def total_amount(self) -> Decimal:
        """Sum of written commissions."""
        return sum((line.amount for line in self.created), Decimal("0"))


class CommissionEngine(BaseService):
    """Creates partner commissions for completed transactions."""

    def __init__(
        self,
        session: AsyncSession,
        config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG,
    ) -> None:
        """Initialize commission engine."""
        super().__init__(session, config)
        self.relationships = PartnerRelationshipRepository(session)
        self.commissions = PartnerCommissionRepository(session)
        self.audit = AuditLogRepository(session)

    def calculate_lines(
        self, ancestors: list[tuple[int, int]], amount: Decimal
    ) -> tuple[list[CommissionLine], int]:
        """
        Calculate commissions for an upline.

        Each amount is rounded to cents half-up before the zero check, since
        commissions are stored as DECIMAL(18, 2). A line that rounds to 0.00
        (for example 1% of 0.40) is dropped and counted in zero_skipped.

        Args:
            ancestors: (partner_id, level) pairs, level ascending
            amount: Transaction amount

        Returns:
            Tuple of (positive commission lines, number of zero lines dropped)
        """
        lines: list[CommissionLine] = []
        zero_skipped = 0
        for partner_id, level in ancestors:
            rate = self.config.commission_rate_for_depth(level)
            commission = quantize_money(amount * rate)
            if commission <= 0:
                zero_skipped += 1
                continue
            lines.append(
                CommissionLine(
                    partner_id=partner_id,
                    level=level,
                    rate=rate,
                    amount=commission,
                )
            )
        return lines, zero_skipped

    @transaction
    async def on_transaction_completed(
        self,
        transaction_id: str,
        purchaser_user_id: int,
        amount: Any,
    ) -> CommissionBatchResult:
        """
        Create commissions for a completed transaction.

        Lines whose amount rounds to 0.00 at cent precision are not stored.
        Rows already present for (partner, transaction, level) are skipped,
        so a redelivered event is a no-op. The audit entry is written in the
        same transaction, only when new rows were inserted.

        Args:
            transaction_id: Payment transaction ID
            purchaser_user_id: Paying user
            amount: Transaction amount (> 0)

        Returns:
            CommissionBatchResult

        Raises:
            InvalidAmount: If amount is not positive or transaction_id empty
            PersistenceFailure: If the batch could not be written
        """
        if not transaction_id:
            raise InvalidAmount("transaction_id is required")
        tx_amount = require_positive_amount(amount)

        result = CommissionBatchResult(
            transaction_id=transaction_id,
            purchaser_user_id=purchaser_user_id,
        )

        ancestors = await self.relationships.get_ancestors(purchaser_user_id)
        if not ancestors:
            self.logger.debug(
                "No upline for purchaser, no commissions",
                extra={
                    "transaction_id": transaction_id,
                    "purchaser_user_id": purchaser_user_id,
                },
            )
            return result

        lines, result.zero_skipped = self.calculate_lines(
            [(row.partner_id, row.level) for row in ancestors], tx_amount
        )
        if not lines:
            return result

        existing = await self.commissions.get_existing_keys(
            transaction_id, [line.partner_id for line in lines]
        )
        pending = [
            line for line in lines
            if (line.partner_id, line.level) not in existing
        ]

        created_at = utc_now()
        inserted_ids = await self.commissions.insert_ignore_conflicts(
            [
                {
                    "partner_id": line.partner_id,
                    "source_user_id": purchaser_user_id,
                    "source_transaction_id": transaction_id,
                    "level": line.level,
                    "amount": line.amount,
                    "rate": line.rate,
                    "status": CommissionStatus.PENDING.value,
                    "created_at": created_at,
                }
                for line in pending
            ]
        )

        if len(inserted_ids) == len(pending):
            result.created = pending
        else:
            # Lost a race with a concurrent delivery; report only our rows
            ours = await self.commissions.get_keys_by_ids(inserted_ids)
            result.created = [
                line for line in pending
                if (line.partner_id, line.level) in ours
            ]
        result.duplicates_skipped = len(lines) - len(inserted_ids)

        if result.duplicates_skipped:
            self.logger.info(
                "Skipped already recorded commissions",
                extra={
                    "transaction_id": transaction_id,
                    "duplicates_skipped": result.duplicates_skipped,
                },
            )

        if not inserted_ids:
            return result

        await self.audit.record(
            action=AUDIT_ACTION_COMMISSIONS_CREATED,
            entity_type="transaction",
            entity_id=transaction_id,
            new_value={
                "transactionId": transaction_id,
                "purchaserUserId": purchaser_user_id,
                "amount": str(tx_amount),
                "commissionsCount": len(inserted_ids),
            },
        )

        self.logger.info(
            "Partner commissions created",
            extra={
                "transaction_id": transaction_id,
                "purchaser_user_id": purchaser_user_id,
                "amount": str(tx_amount),
                "commissions_count": len(inserted_ids),
                "total_commission": str(result.total_amount),
            },
        )
        return result
