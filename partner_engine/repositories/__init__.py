"""
Repositories.

Data access layer for partner engine models.
"""

from partner_engine.repositories.audit_log_repository import AuditLogRepository
from partner_engine.repositories.partner_commission_repository import (
    PartnerCommissionRepository,
)
from partner_engine.repositories.partner_relationship_repository import (
    DirectReferralRow,
    PartnerRelationshipRepository,
)
from partner_engine.repositories.transaction_repository import (
    TransactionRepository,
)
from partner_engine.repositories.user_repository import UserRepository
from partner_engine.repositories.withdrawal_repository import (
    WithdrawalRepository,
)

__all__ = [
    "AuditLogRepository",
    "DirectReferralRow",
    "PartnerCommissionRepository",
    "PartnerRelationshipRepository",
    "TransactionRepository",
    "UserRepository",
    "WithdrawalRepository",
]
