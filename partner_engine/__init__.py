"""
Partner referral and commission engine.

Referral closure maintenance, multi-level commission accrual, partner level
progression, withdrawal balance ledger and tax withholding.
"""

__version__ = "1.0.0"
