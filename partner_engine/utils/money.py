"""
Money helpers.

All amounts are Decimal; floats are converted through their string form.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from partner_engine.utils.exceptions import InvalidAmount

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Args:
        value: Decimal, int, float or numeric string (None means 0)

    Returns:
        Decimal value

    Raises:
        InvalidAmount: If value is not numeric or not finite
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InvalidAmount(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    return result


def quantize_money(amount: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def require_positive_amount(value: Any) -> Decimal:
    """
    Validate an amount that is about to be written.

    Args:
        value: Raw amount

    Returns:
        Decimal amount

    Raises:
        InvalidAmount: If not a finite number greater than zero
    """
    amount = to_decimal(value)
    if amount <= 0:
        raise InvalidAmount(f"Amount must be positive, got {amount}")
    return amount
