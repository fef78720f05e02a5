"""
Tax calculator.

Withholding on partner payouts by tax status. Pure, no store access.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from loguru import logger

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    PartnerProgramConfig,
)
from partner_engine.models.enums import TaxStatus
from partner_engine.utils.exceptions import InvalidAmount
from partner_engine.utils.money import quantize_money, to_decimal


@dataclass(frozen=True)
class TaxCalculation:
    """Result of a tax computation."""

    amount: Decimal
    tax_status: TaxStatus
    rate: Decimal
    tax_amount: Decimal
    net_amount: Decimal


class TaxCalculator:
    """Computes withheld tax and net payout."""

    def __init__(self, config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG) -> None:
        """
        Initialize tax calculator.

        Args:
            config: Partner program tables (tax rates)
        """
        self.config = config
        self.logger = logger.bind(service=self.__class__.__name__)

    def resolve_status(self, tax_status: Any) -> TaxStatus:
        """
        Resolve a tax status, falling back to INDIVIDUAL.

        Args:
            tax_status: TaxStatus or its string value

        Returns:
            Known TaxStatus with a configured rate
        """
        try:
            status = TaxStatus(str(tax_status).upper())
        except ValueError:
            status = None

        if status is None or status not in self.config.tax_rates:
            self.logger.warning(
                "Unknown tax status, using INDIVIDUAL rate",
                extra={"tax_status": str(tax_status)},
            )
            return TaxStatus.INDIVIDUAL
        return status

    def compute_tax(self, amount: Any, tax_status: Any) -> TaxCalculation:
        """
        Compute tax withholding.

        tax_amount = round(amount * rate, 2, half away from zero);
        net_amount = amount - tax_amount.

        Args:
            amount: Gross amount (>= 0)
            tax_status: TaxStatus or its string value

        Returns:
            TaxCalculation

        Raises:
            InvalidAmount: If amount is negative or not a finite number
        """
        gross = to_decimal(amount)
        if gross < 0:
            raise InvalidAmount(f"Amount must not be negative, got {gross}")

        status = self.resolve_status(tax_status)
        rate = self.config.tax_rate_for(status)
        tax_amount = quantize_money(gross * rate)

        return TaxCalculation(
            amount=gross,
            tax_status=status,
            rate=rate,
            tax_amount=tax_amount,
            net_amount=gross - tax_amount,
        )
