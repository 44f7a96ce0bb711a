"""
Driver pay calculator.

Computes base pay for a driver slot (primary or team-second) from its pay
basis, and passes detention and layover through to the primary driver in
full. The carrier's percentage cut never applies to accessorial income.

Detention and layover are not duplicated to the team driver. This mirrors
how loads have always been settled and is pending product confirmation.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from freight_ledger.data.models.load import Load
from freight_ledger.data.models.reference import DriverProfile, PayType
from freight_ledger.engine.common import (
    HUNDRED,
    ZERO,
    CalculationWarning,
    require_non_negative,
    to_money,
)


class DriverSlot(str, Enum):
    """Which driver on the load is being paid."""

    PRIMARY = "primary"
    TEAM = "team"


class DriverPay(BaseModel):
    """Pay owed to one driver slot for one load."""

    model_config = ConfigDict(frozen=True)

    slot: DriverSlot
    pay_type: Optional[PayType] = None
    base_pay: Decimal = ZERO
    detention_pay: Decimal = ZERO
    layover_pay: Decimal = ZERO
    total_gross: Decimal = ZERO
    warnings: list[CalculationWarning] = Field(default_factory=list)


def normalize_pay_percentage(value: Decimal) -> Decimal:
    """
    Normalize a pay percentage to a 0-1 fraction.

    Legacy records store whole percentages (88 for 88%); anything above 1 is
    divided by 100.
    """
    value = Decimal(value)
    if value > 1:
        return value / HUNDRED
    return value


def _profile_rate(profile: DriverProfile, pay_type: PayType) -> Optional[Decimal]:
    if pay_type == PayType.PERCENTAGE:
        if profile.payment.percentage is not None:
            return profile.payment.percentage
        return profile.pay_percentage
    if pay_type == PayType.PER_MILE:
        return profile.payment.per_mile_rate
    return profile.payment.flat_rate


def resolve_pay_basis(
    load: Load, profile: Optional[DriverProfile], slot: DriverSlot
) -> tuple[Optional[PayType], Optional[Decimal]]:
    """
    Resolve the effective pay type and rate for a slot.

    The load-level override wins; otherwise the driver profile's default is
    used. A profile with only a legacy ``pay_percentage`` is paid by
    percentage.

    Returns:
        (pay_type, rate); either may be None when nothing is configured
    """
    if slot == DriverSlot.PRIMARY:
        override_type, override_rate = load.driver_pay_type, load.driver_pay_rate
    else:
        override_type, override_rate = load.driver2_pay_type, load.driver2_pay_rate

    pay_type = override_type
    if pay_type is None and profile is not None:
        pay_type = profile.payment.type
        if pay_type is None and profile.pay_percentage is not None:
            pay_type = PayType.PERCENTAGE

    rate = override_rate
    if rate is None and pay_type is not None and profile is not None:
        rate = _profile_rate(profile, pay_type)
    return pay_type, rate


def _slot_assigned(load: Load, profile: Optional[DriverProfile], slot: DriverSlot) -> bool:
    if slot == DriverSlot.TEAM:
        if not load.is_team_load:
            return False
        return bool(load.driver2_id or profile or load.driver2_pay_type)
    return bool(load.driver_id or profile or load.driver_pay_type)


def compute_driver_pay(
    load: Load,
    driver_profile: Optional[DriverProfile] = None,
    slot: DriverSlot = DriverSlot.PRIMARY,
) -> DriverPay:
    """
    Compute pay for one driver slot.

    The load must already carry its computed accessorial amounts; detention
    and layover pay are read from ``detention_amount``/``layover_amount``.

    Args:
        load: Load with rate, miles and accessorial amounts
        driver_profile: Profile of the driver in this slot, if any
        slot: PRIMARY or TEAM

    Returns:
        DriverPay with base, pass-through and gross pay

    Raises:
        ValidationError: If the effective rate, the load rate or miles is negative
    """
    if not _slot_assigned(load, driver_profile, slot):
        return DriverPay(slot=slot)

    field_prefix = "driver" if slot == DriverSlot.PRIMARY else "driver2"
    pay_type, pay_rate = resolve_pay_basis(load, driver_profile, slot)
    warnings: list[CalculationWarning] = []
    base_pay = ZERO

    if pay_type is None:
        warnings.append(
            CalculationWarning(
                code="missing_pay_type",
                field=f"{field_prefix}_pay_type",
                message=f"No pay type configured for {slot.value} driver; base pay is 0",
            )
        )
    elif pay_rate is None:
        warnings.append(
            CalculationWarning(
                code="missing_pay_rate",
                field=f"{field_prefix}_pay_rate",
                message=f"No {pay_type.value} rate configured for {slot.value} driver; base pay is 0",
            )
        )
    elif pay_type == PayType.FLAT_RATE and slot == DriverSlot.PRIMARY:
        warnings.append(
            CalculationWarning(
                code="unsupported_pay_type",
                field="driver_pay_type",
                message="Flat-rate pay is only supported for the team driver; base pay is 0",
            )
        )
    else:
        pay_rate = require_non_negative(pay_rate, f"{field_prefix}_pay_rate")
        if pay_type == PayType.PERCENTAGE:
            rate = require_non_negative(load.rate, "rate")
            base_pay = to_money(rate * normalize_pay_percentage(pay_rate))
        elif pay_type == PayType.PER_MILE:
            miles = require_non_negative(load.miles, "miles")
            base_pay = to_money(miles * pay_rate)
        else:
            base_pay = to_money(pay_rate)

    if slot == DriverSlot.PRIMARY:
        detention_pay = load.detention_amount
        layover_pay = load.layover_amount
    else:
        detention_pay = ZERO
        layover_pay = ZERO

    return DriverPay(
        slot=slot,
        pay_type=pay_type,
        base_pay=base_pay,
        detention_pay=detention_pay,
        layover_pay=layover_pay,
        total_gross=base_pay + detention_pay + layover_pay,
        warnings=warnings,
    )
