"""
Partner engine exceptions.

Domain errors raised by the partner services. Callers catch
PartnerEngineError to handle any of them.
"""

from decimal import Decimal


class PartnerEngineError(Exception):
    """Base class for partner engine errors."""
    pass


class InvalidReferrer(PartnerEngineError):
    """Raised when attaching to a nonexistent referrer, self or descendant."""

    def __init__(self, referrer_id: int | None, reason: str = "not found") -> None:
        self.referrer_id = referrer_id
        self.reason = reason
        super().__init__(f"Invalid referrer {referrer_id}: {reason}")


class ReferralAlreadyAttached(PartnerEngineError):
    """Raised when a user already has an upline (no re-parenting)."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} is already attached to a referrer")


class PartnerNotFound(PartnerEngineError):
    """Raised when a partner (user) does not exist."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"Partner {user_id} not found")


class InsufficientBalance(PartnerEngineError):
    """
    Raised when a withdrawal exceeds the available balance.

    Carries the computed available balance for user feedback.
    """

    def __init__(self, available: Decimal, requested: Decimal) -> None:
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient balance: available {available}, requested {requested}"
        )


class InvalidAmount(PartnerEngineError, ValueError):
    """Raised for non-positive or non-finite amounts, before any write."""
    pass


class PersistenceFailure(PartnerEngineError):
    """Raised when a unit of work aborts in the store. Safe to retry."""
    pass
