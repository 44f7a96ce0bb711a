"""
Accessorial calculator - detention, layover, lumper, fuel surcharge and TONU.

Each ``has_*`` flag is authoritative: when it is off the amount is zero no
matter what stale quantity or rate is still on the load.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from freight_ledger.data.models.load import FscType, Load
from freight_ledger.engine.common import (
    HUNDRED,
    ZERO,
    CalculationWarning,
    require_cents,
    require_non_negative,
    to_money,
)


class AccessorialAmounts(BaseModel):
    """Computed accessorial charges for a load."""

    model_config = ConfigDict(frozen=True)

    detention_amount: Decimal = ZERO
    layover_amount: Decimal = ZERO
    lumper_amount: Decimal = ZERO
    fsc_amount: Decimal = ZERO
    tonu_amount: Decimal = ZERO
    other_accessorials: Decimal = ZERO
    warnings: list[CalculationWarning] = Field(default_factory=list)

    @property
    def total(self) -> Decimal:
        """Sum of every accessorial including other charges."""
        return (
            self.detention_amount
            + self.layover_amount
            + self.lumper_amount
            + self.fsc_amount
            + self.tonu_amount
            + self.other_accessorials
        )


def compute_fsc_amount(
    fsc_type: FscType, fsc_rate: Decimal, rate: Decimal, miles: Decimal
) -> Decimal:
    """
    Compute the fuel surcharge.

    The percentage basis is the base ``rate``, never ``grand_total``, since
    the grand total itself includes the surcharge.
    """
    if fsc_type == FscType.PERCENTAGE:
        return to_money(rate * fsc_rate / HUNDRED)
    if fsc_type == FscType.PER_MILE:
        return to_money(miles * fsc_rate)
    return to_money(fsc_rate)


def compute_accessorials(load: Load) -> AccessorialAmounts:
    """
    Compute every accessorial amount for a load.

    Args:
        load: Load carrying the accessorial flags, quantities and rates

    Returns:
        AccessorialAmounts with cent-rounded amounts and any warnings

    Raises:
        ValidationError: If any quantity, rate or fee is negative, or an
            amount input (rate, lumper, TONU, other) has fractions of a cent
    """
    rate = require_cents(load.rate, "rate")
    miles = require_non_negative(load.miles, "miles")
    hours = require_non_negative(load.detention_hours, "detention_hours")
    detention_rate = require_non_negative(load.detention_rate, "detention_rate")
    days = require_non_negative(load.layover_days, "layover_days")
    layover_rate = require_non_negative(load.layover_rate, "layover_rate")
    lumper_fee = require_cents(load.lumper_fee, "lumper_fee")
    fsc_rate = require_non_negative(load.fsc_rate, "fsc_rate")
    tonu_fee = require_cents(load.tonu_fee, "tonu_fee")
    other = require_cents(load.other_accessorials, "other_accessorials")

    warnings: list[CalculationWarning] = []

    fsc_amount = ZERO
    if load.has_fsc:
        if load.fsc_type is None:
            warnings.append(
                CalculationWarning(
                    code="missing_fsc_type",
                    field="fsc_type",
                    message="Fuel surcharge is enabled but no FSC type is set; amount defaults to 0",
                )
            )
        else:
            fsc_amount = compute_fsc_amount(load.fsc_type, fsc_rate, rate, miles)

    return AccessorialAmounts(
        detention_amount=to_money(hours * detention_rate) if load.has_detention else ZERO,
        layover_amount=to_money(days * layover_rate) if load.has_layover else ZERO,
        lumper_amount=lumper_fee if load.has_lumper else ZERO,
        fsc_amount=fsc_amount,
        tonu_amount=tonu_fee if load.has_tonu else ZERO,
        other_accessorials=other,
        warnings=warnings,
    )
