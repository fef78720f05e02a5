"""
WithdrawalRequest model.

Partner payout request. Amount and tax are fixed at creation.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from partner_engine.models.base import Base
from partner_engine.models.enums import TaxStatus, WithdrawalStatus
from partner_engine.models.types import MoneyType


class WithdrawalRequest(Base):
    """
    WithdrawalRequest entity.

    Attributes:
        id: Primary key
        user_id: Withdrawing partner
        amount: Gross amount
        currency: ISO currency code
        tax_status: Tax status used for withholding
        tax_amount: Withheld tax
        payment_details: Payout details (card, bank account, ...)
        status: Withdrawal status
        created_at: Creation time
        processed_at: When processed by the payout side
        rejection_reason: Reason if rejected
    """

    __tablename__ = "withdrawal_requests"
    __table_args__ = (
        CheckConstraint(
            "amount > 0", name="check_withdrawal_requests_amount_positive"
        ),
        Index("idx_withdrawal_requests_user_status", "user_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="RUB"
    )
    tax_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaxStatus.INDIVIDUAL.value
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    payment_details: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WithdrawalStatus.PENDING.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def net_amount(self) -> Decimal:
        """Amount paid out after tax."""
        return self.amount - self.tax_amount

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<WithdrawalRequest(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
