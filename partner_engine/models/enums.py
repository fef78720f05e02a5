"""
Enum definitions for partner program models.

Statuses are stored as plain strings in the database.
"""

from enum import StrEnum


class CommissionStatus(StrEnum):
    """Partner commission status."""

    PENDING = "PENDING"  # Created, awaiting review
    APPROVED = "APPROVED"  # Earned, not yet paid out
    PAID = "PAID"
    REJECTED = "REJECTED"


class WithdrawalStatus(StrEnum):
    """Withdrawal request status."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


# Withdrawals that still reserve funds against the balance
IN_FLIGHT_WITHDRAWAL_STATUSES = (
    WithdrawalStatus.PENDING,
    WithdrawalStatus.APPROVED,
    WithdrawalStatus.PROCESSING,
)


class TaxStatus(StrEnum):
    """Tax status of the withdrawing partner."""

    INDIVIDUAL = "INDIVIDUAL"  # Физическое лицо
    SELF_EMPLOYED = "SELF_EMPLOYED"  # Самозанятый
    ENTREPRENEUR = "ENTREPRENEUR"  # ИП
    COMPANY = "COMPANY"  # Юридическое лицо


class TransactionStatus(StrEnum):
    """Payment transaction status (owned by the payments subsystem)."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
