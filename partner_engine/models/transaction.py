"""
Transaction model.

Completed-transaction ledger owned by the payments subsystem. The partner
engine only reads it to aggregate spend and team volume.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from partner_engine.models.base import Base
from partner_engine.models.enums import TransactionStatus
from partner_engine.models.types import MoneyType


class Transaction(Base):
    """Payment transaction (read-only for the partner engine)."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_user_status", "user_id", "status"),
    )

    # Payment provider transaction id
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TransactionStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id!r}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
