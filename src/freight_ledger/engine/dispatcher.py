"""
Dispatcher commission calculator.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from freight_ledger.data.models.load import Load
from freight_ledger.data.models.reference import CommissionType, DispatcherProfile
from freight_ledger.engine.common import (
    HUNDRED,
    ZERO,
    CalculationWarning,
    require_non_negative,
    to_money,
)


class DispatcherCommission(BaseModel):
    """Commission owed to the booking dispatcher."""

    model_config = ConfigDict(frozen=True)

    amount: Decimal = ZERO
    commission_type: Optional[CommissionType] = None
    commission_rate: Optional[Decimal] = None
    dispatcher_selected: bool = True
    warnings: list[CalculationWarning] = Field(default_factory=list)

    def as_load_update(self) -> dict[str, object]:
        """Dispatcher fields to write back onto the load."""
        update: dict[str, object] = {
            "dispatcher_commission_type": self.commission_type,
            "dispatcher_commission_rate": self.commission_rate,
            "dispatcher_commission_amount": self.amount,
        }
        if not self.dispatcher_selected:
            update["dispatcher_name"] = None
        return update


def compute_dispatcher_commission(
    load: Load, dispatcher_profile: Optional[DispatcherProfile] = None
) -> DispatcherCommission:
    """
    Compute the dispatcher's commission for a load.

    The commission type and rate on the load override the dispatcher's
    profile. The percentage basis is the base ``rate``, not ``grand_total``.

    Args:
        load: Load with rate and miles
        dispatcher_profile: Profile of the selected dispatcher, if any

    Returns:
        DispatcherCommission; with no dispatcher selected every field, the
        dispatcher name included, is cleared

    Raises:
        ValidationError: If the commission rate, load rate or miles is negative
    """
    if load.dispatcher_id is None and dispatcher_profile is None:
        return DispatcherCommission(dispatcher_selected=False)

    commission_type = load.dispatcher_commission_type
    commission_rate = load.dispatcher_commission_rate
    if dispatcher_profile is not None:
        if commission_type is None:
            commission_type = dispatcher_profile.commission_type
        if commission_rate is None:
            commission_rate = dispatcher_profile.commission_rate

    if commission_type is None or commission_rate is None:
        missing = "dispatcher_commission_type" if commission_type is None else "dispatcher_commission_rate"
        return DispatcherCommission(
            commission_type=commission_type,
            commission_rate=commission_rate,
            warnings=[
                CalculationWarning(
                    code="missing_commission_config",
                    field=missing,
                    message="Dispatcher is selected but commission is not configured; amount is 0",
                )
            ],
        )

    commission_rate = require_non_negative(commission_rate, "dispatcher_commission_rate")
    if commission_type == CommissionType.PERCENTAGE:
        amount = to_money(require_non_negative(load.rate, "rate") * commission_rate / HUNDRED)
    elif commission_type == CommissionType.PER_MILE:
        amount = to_money(require_non_negative(load.miles, "miles") * commission_rate)
    else:
        amount = to_money(commission_rate)

    return DispatcherCommission(
        amount=amount,
        commission_type=commission_type,
        commission_rate=commission_rate,
    )
