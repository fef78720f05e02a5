"""
PartnerRelationship model.

Closure table of the referral tree: one row per (ancestor, descendant)
pair within five hops, not only direct parent-child edges.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partner_engine.models.base import Base

if TYPE_CHECKING:
    from partner_engine.models.user import User


class PartnerRelationship(Base):
    """
    PartnerRelationship entity.

    Attributes:
        id: Primary key
        partner_id: Ancestor (upline partner)
        referral_id: Descendant
        level: Distance from partner to referral (1 = direct referral)
        created_at: When the row was written
    """

    __tablename__ = "partner_relationships"
    __table_args__ = (
        UniqueConstraint(
            "referral_id", "level", name="uq_partner_relationships_referral_level"
        ),
        UniqueConstraint(
            "partner_id", "referral_id", name="uq_partner_relationships_pair"
        ),
        CheckConstraint(
            "level >= 1 AND level <= 5",
            name="check_partner_relationships_level_range",
        ),
        Index("idx_partner_relationships_partner_level", "partner_id", "level"),
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
    referral_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    level: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Distance from partner, 1..5"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    partner: Mapped["User"] = relationship(
        "User", foreign_keys=[partner_id], lazy="raise"
    )
    referral: Mapped["User"] = relationship(
        "User", foreign_keys=[referral_id], lazy="raise"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PartnerRelationship(partner_id={self.partner_id}, "
            f"referral_id={self.referral_id}, level={self.level})>"
        )
