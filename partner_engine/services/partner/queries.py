"""
Typed query options for history views.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from partner_engine.config.partner_program import MAX_REFERRAL_DEPTH
from partner_engine.models.enums import CommissionStatus, WithdrawalStatus

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PageQuery(BaseModel):
    """Pagination options."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    from_date: datetime | None = None
    to_date: datetime | None = None

    @model_validator(mode="after")
    def validate_date_range(self) -> "PageQuery":
        """from_date must not be after to_date."""
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self

    @property
    def offset(self) -> int:
        """Rows to skip."""
        return (self.page - 1) * self.limit


class CommissionQuery(PageQuery):
    """Commission history filters."""

    status: CommissionStatus | None = None
    level: int | None = Field(default=None, ge=1, le=MAX_REFERRAL_DEPTH)


class WithdrawalQuery(PageQuery):
    """Withdrawal history filters."""

    status: WithdrawalStatus | None = None


@dataclass
class Page(Generic[T]):
    """One page of results."""

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        """Total number of pages."""
        return (self.total + self.limit - 1) // self.limit
