"""
Shared helpers for the calculation engine: money rounding, input checks, warnings.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from freight_ledger.core.exceptions import ValidationError

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_money(value: Decimal) -> Decimal:
    """Round an amount to cents, half up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def require_non_negative(value: Optional[Decimal], field: str) -> Decimal:
    """
    Reject negative calculation inputs.

    Args:
        value: Input value (None is treated as 0)
        field: Field name reported in the error

    Returns:
        The value, or 0 when it was None

    Raises:
        ValidationError: If the value is negative
    """
    if value is None:
        return ZERO
    if value < 0:
        raise ValidationError(f"{field} must be non-negative, got {value}", field=field)
    return value


def require_cents(value: Optional[Decimal], field: str) -> Decimal:
    """
    Reject negative amounts and amounts with fractions of a cent.

    Used for amount inputs that flow into the totals unchanged.

    Raises:
        ValidationError: If the value is negative or has more than two decimal places
    """
    value = require_non_negative(value, field)
    if to_money(value) != value:
        raise ValidationError(f"{field} must be a whole number of cents, got {value}", field=field)
    return value


class CalculationWarning(BaseModel):
    """A misconfiguration that made a calculation fall back to zero."""

    model_config = ConfigDict(frozen=True)

    code: str
    field: str
    message: str
