"""
Partner program services.

Exports the partner engine components.
"""

from partner_engine.services.partner.balance_ledger import (
    BalanceLedger,
    BalanceSummary,
    WithdrawalResult,
)
from partner_engine.services.partner.closure_maintainer import ClosureMaintainer
from partner_engine.services.partner.commission_engine import (
    CommissionBatchResult,
    CommissionEngine,
    CommissionLine,
)
from partner_engine.services.partner.level_progression import (
    LevelProgress,
    LevelProgressionCalculator,
    LevelProgressionService,
)
from partner_engine.services.partner.partner_service import (
    PartnerDashboard,
    PartnerService,
)
from partner_engine.services.partner.queries import (
    CommissionQuery,
    Page,
    WithdrawalQuery,
)
from partner_engine.services.partner.tax_calculator import (
    TaxCalculation,
    TaxCalculator,
)
from partner_engine.services.partner.tree_builder import (
    ReferralNode,
    ReferralTree,
    ReferralTreeBuilder,
)
from partner_engine.services.partner.volume_aggregator import (
    SqlTransactionVolumeAggregator,
    TransactionVolumeAggregator,
)

__all__ = [
    "BalanceLedger",
    "BalanceSummary",
    "ClosureMaintainer",
    "CommissionBatchResult",
    "CommissionEngine",
    "CommissionLine",
    "CommissionQuery",
    "LevelProgress",
    "LevelProgressionCalculator",
    "LevelProgressionService",
    "Page",
    "PartnerDashboard",
    "PartnerService",
    "ReferralNode",
    "ReferralTree",
    "ReferralTreeBuilder",
    "SqlTransactionVolumeAggregator",
    "TaxCalculation",
    "TaxCalculator",
    "TransactionVolumeAggregator",
    "WithdrawalQuery",
    "WithdrawalResult",
]
