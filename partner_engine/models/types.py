"""
Standard type definitions for database models.

Provides consistent types for monetary and rate fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts, commissions, withdrawals
# Precision: 18 digits total, 2 after decimal point (kopecks)
MoneyType = DECIMAL(18, 2)

# Commission rate as a fraction (e.g., 0.1000 = 10%)
# Range: 0.0000 to 9.9999
RateType = DECIMAL(5, 4)
