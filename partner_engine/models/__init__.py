"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from partner_engine.models.audit_log import AuditLog
from partner_engine.models.base import Base
from partner_engine.models.enums import (
    IN_FLIGHT_WITHDRAWAL_STATUSES,
    CommissionStatus,
    TaxStatus,
    TransactionStatus,
    WithdrawalStatus,
)
from partner_engine.models.partner_commission import PartnerCommission
from partner_engine.models.partner_relationship import PartnerRelationship
from partner_engine.models.transaction import Transaction
from partner_engine.models.user import User
from partner_engine.models.withdrawal_request import WithdrawalRequest

__all__ = [
    "AuditLog",
    "Base",
    "CommissionStatus",
    "IN_FLIGHT_WITHDRAWAL_STATUSES",
    "PartnerCommission",
    "PartnerRelationship",
    "TaxStatus",
    "Transaction",
    "TransactionStatus",
    "User",
    "WithdrawalRequest",
    "WithdrawalStatus",
]
