"""
User model.

Minimal identity projection of a registered user. Registration and
profile management live in the identity subsystem; the partner engine
only needs the id, display name and referral code.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from partner_engine.models.base import Base


class User(Base):
    """User model - registered users who can act as partners."""

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True
    )
    first_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    last_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )

    # Referral code shared by the partner
    referral_code: Mapped[str] = mapped_column(
        String(12), nullable=False, unique=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    @property
    def full_name(self) -> str:
        """Display name built from first and last name."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.email

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, email={self.email!r}, "
            f"referral_code={self.referral_code!r})>"
        )
