"""
PartnerCommission model.

One commission per (partner, source transaction, level). The unique key
makes commission creation idempotent under redelivered payment events.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partner_engine.models.base import Base
from partner_engine.models.enums import CommissionStatus
from partner_engine.models.types import MoneyType, RateType

if TYPE_CHECKING:
    from partner_engine.models.user import User


class PartnerCommission(Base):
    """
    PartnerCommission entity.

    Lifecycle: created PENDING by the commission engine, moved to
    APPROVED/REJECTED by external review, PAID once a withdrawal settles.

    Attributes:
        id: Primary key
        partner_id: Ancestor receiving the commission
        source_user_id: Paying user
        source_transaction_id: Completed payment transaction
        level: Ancestor distance from the paying user
        amount: Commission amount
        rate: Rate applied for this level
        status: Commission status
        created_at: Creation time
        paid_at: When paid out
    """

    __tablename__ = "partner_commissions"
    __table_args__ = (
        UniqueConstraint(
            "partner_id",
            "source_transaction_id",
            "level",
            name="uq_partner_commissions_partner_tx_level",
        ),
        CheckConstraint(
            "amount > 0", name="check_partner_commissions_amount_positive"
        ),
        Index("idx_partner_commissions_partner_status", "partner_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    partner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_transaction_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False)

    amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, comment="Commission amount"
    )
    rate: Mapped[Decimal] = mapped_column(
        RateType, nullable=False, comment="Rate applied (0.10 = 10%)"
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommissionStatus.PENDING.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    source_user: Mapped["User"] = relationship(
        "User", foreign_keys=[source_user_id], lazy="raise"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PartnerCommission(id={self.id}, partner_id={self.partner_id}, "
            f"tx={self.source_transaction_id!r}, level={self.level}, "
            f"amount={self.amount}, status={self.status})>"
        )
