"""
Settlement Service - driver pay settlements built from derived load figures.

This service:
- Sums each load's driver pay for the driver's slot (primary or team)
- Passes detention, layover and TONU through to the primary driver
- Applies the settlement's deductions and other earnings
- Produces net pay, pay status and notes
"""

from datetime import date
from decimal import Decimal
from time import time
from typing import Any, Optional

from pydantic import BaseModel, Field

from freight_ledger.core.exceptions import ValidationError
from freight_ledger.data.models.load import LOCKED_STATUSES, Load
from freight_ledger.data.models.reference import DriverProfile, PayType
from freight_ledger.engine.common import ZERO, CalculationWarning, to_money
from freight_ledger.engine.driver_pay import DriverSlot, normalize_pay_percentage
from freight_ledger.services.base import BaseService, OperationRecord


class SettlementLoadEntry(BaseModel):
    """Driver earnings from a single load."""

    load_id: str
    load_number: str
    slot: DriverSlot
    base_pay: Decimal
    detention: Decimal
    layover: Decimal
    tonu: Decimal
    total_pay: Decimal
    miles: Decimal
    delivery_date: Optional[date] = None


class DeductionBreakdown(BaseModel):
    """Amounts withheld from a driver's settlement."""

    insurance: Decimal = ZERO
    ifta: Decimal = ZERO
    cash_advance: Decimal = ZERO
    fuel: Decimal = ZERO
    trailer: Decimal = ZERO
    repairs: Decimal = ZERO
    parking: Decimal = ZERO
    form_2290: Decimal = ZERO
    eld: Decimal = ZERO
    toll: Decimal = ZERO
    irp: Decimal = ZERO
    ucr: Decimal = ZERO
    escrow: Decimal = ZERO
    occupational_accident: Decimal = ZERO
    other: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        """Sum of every deduction."""
        return sum((getattr(self, name) for name in type(self).model_fields), ZERO)


class OtherEarning(BaseModel):
    """Earnings not tied to a load (bonus, reimbursement)."""

    type: str
    description: Optional[str] = None
    amount: Decimal


class DriverSettlement(BaseModel):
    """Complete settlement for a driver for a period."""

    settlement_id: str
    driver_id: str
    driver_name: str
    period_start: date
    period_end: date

    # Loads and earnings
    loads: list[SettlementLoadEntry]
    total_loads: int
    total_miles: Decimal
    gross_pay: Decimal

    # Deductions and other earnings
    deductions: DeductionBreakdown
    total_deductions: Decimal
    other_earnings: list[OtherEarning]
    total_other_earnings: Decimal

    # Final calculation
    net_pay: Decimal
    effective_rate: Decimal  # gross pay per mile
    pay_status: str  # "owed_to_driver", "driver_owes", "settled"

    notes: list[str] = Field(default_factory=list)
    warnings: list[CalculationWarning] = Field(default_factory=list)


class SettlementService(BaseService):
    """Settlement Service for driver pay calculations."""

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the settlement service."""
        super().__init__(service_name="settlement", **kwargs)

    def calculate_settlement(
        self,
        driver: DriverProfile,
        loads: list[Load],
        period_start: date,
        period_end: date,
        deductions: Optional[DeductionBreakdown] = None,
        other_earnings: Optional[list[OtherEarning]] = None,
    ) -> DriverSettlement:
        """
        Calculate a driver settlement for a period.

        Args:
            driver: Driver being settled
            loads: Loads in the settlement (already derived by the cascade)
            period_start: Settlement period start
            period_end: Settlement period end
            deductions: Deductions; defaults to the configured default deductions
            other_earnings: Additional earnings

        Returns:
            DriverSettlement with complete calculation

        Raises:
            ValidationError: If there are no loads, the period is inverted, or a
                load is assigned to another driver
        """
        start_time = time()

        if not loads:
            raise ValidationError("At least one load is required for settlement", field="loads")
        if period_end < period_start:
            raise ValidationError("Settlement period ends before it starts", field="period_end")

        other_earnings = other_earnings or []
        if deductions is None:
            deductions = DeductionBreakdown(**self.config_manager.get_settlement_defaults())

        self.logger.info(
            "calculating_settlement",
            driver_id=driver.id,
            loads=len(loads),
            other_earnings=len(other_earnings),
        )

        warnings = self._validate_loads(driver, loads)

        entries = [self._settle_load(load, driver) for load in loads]
        gross_pay = sum((entry.total_pay for entry in entries), ZERO)
        total_miles = sum((entry.miles for entry in entries), ZERO)
        total_deductions = deductions.total
        total_other_earnings = sum((earning.amount for earning in other_earnings), ZERO)

        # Calculate net pay
        net_pay = gross_pay + total_other_earnings - total_deductions

        # Determine pay status
        if net_pay > 0:
            pay_status = "owed_to_driver"
        elif net_pay < 0:
            pay_status = "driver_owes"
        else:
            pay_status = "settled"

        effective_rate = to_money(gross_pay / total_miles) if total_miles > 0 else ZERO

        settlement = DriverSettlement(
            settlement_id=f"SETTLE-{driver.id}-{period_end.strftime('%Y%m%d')}",
            driver_id=driver.id,
            driver_name=driver.name,
            period_start=period_start,
            period_end=period_end,
            loads=entries,
            total_loads=len(entries),
            total_miles=total_miles,
            gross_pay=gross_pay,
            deductions=deductions,
            total_deductions=total_deductions,
            other_earnings=other_earnings,
            total_other_earnings=total_other_earnings,
            net_pay=net_pay,
            effective_rate=effective_rate,
            pay_status=pay_status,
            notes=self._generate_settlement_notes(driver, gross_pay, total_deductions, net_pay),
            warnings=warnings,
        )

        self.log_warnings(warnings, entity_id=settlement.settlement_id)
        self.record_operation(
            OperationRecord(
                timestamp=self.now(),
                service_name=self.service_name,
                operation="settlement_calculation",
                entity_id=settlement.settlement_id,
                details={
                    "driver_id": driver.id,
                    "gross_pay": str(gross_pay),
                    "net_pay": str(net_pay),
                    "pay_status": pay_status,
                },
                warnings=warnings,
                execution_time_seconds=time() - start_time,
            )
        )
        return settlement

    def _validate_loads(self, driver: DriverProfile, loads: list[Load]) -> list[CalculationWarning]:
        """Reject foreign loads; warn about undelivered or already settled ones."""
        foreign = [load.load_number for load in loads if driver.id not in (load.driver_id, load.driver2_id)]
        if foreign:
            raise ValidationError(
                f"{len(foreign)} load(s) are assigned to a different driver: {', '.join(foreign)}",
                field="loads",
            )

        warnings: list[CalculationWarning] = []
        undelivered = [load.load_number for load in loads if load.status not in LOCKED_STATUSES]
        if undelivered:
            warnings.append(
                CalculationWarning(
                    code="undelivered_loads",
                    field="loads",
                    message=f"{len(undelivered)} load(s) are not yet delivered: {', '.join(undelivered)}",
                )
            )
        settled = [load.load_number for load in loads if load.settlement_id]
        if settled:
            warnings.append(
                CalculationWarning(
                    code="already_settled",
                    field="loads",
                    message=f"{len(settled)} load(s) already have settlements: {', '.join(settled)}",
                )
            )
        return warnings

    def _settle_load(self, load: Load, driver: DriverProfile) -> SettlementLoadEntry:
        """Driver pay for a single load, taken from the load's derived fields."""
        if load.driver_id == driver.id:
            slot = DriverSlot.PRIMARY
            base_pay = load.driver_base_pay
            detention = load.driver_detention_pay
            layover = load.driver_layover_pay
            tonu = load.effective_tonu_fee
        else:
            slot = DriverSlot.TEAM
            base_pay = load.driver2_earnings if load.is_team_load else ZERO
            detention = layover = tonu = ZERO

        return SettlementLoadEntry(
            load_id=load.id,
            load_number=load.load_number,
            slot=slot,
            base_pay=base_pay,
            detention=detention,
            layover=layover,
            tonu=tonu,
            total_pay=base_pay + detention + layover + tonu,
            miles=load.miles,
            delivery_date=load.delivery_date,
        )

    def _generate_settlement_notes(
        self,
        driver: DriverProfile,
        gross_pay: Decimal,
        total_deductions: Decimal,
        net_pay: Decimal,
    ) -> list[str]:
        """Generate helpful notes for the settlement."""
        notes = []

        # Pay rate note
        payment = driver.payment
        if payment.type == PayType.PER_MILE and payment.per_mile_rate is not None:
            notes.append(f"Pay rate: ${payment.per_mile_rate}/mile")
        elif payment.type == PayType.FLAT_RATE and payment.flat_rate is not None:
            notes.append(f"Pay rate: ${payment.flat_rate} flat per load")
        else:
            percentage = payment.percentage if payment.percentage is not None else driver.pay_percentage
            if percentage is not None:
                notes.append(f"Pay rate: {normalize_pay_percentage(percentage) * 100:.0f}% of line haul")

        # Earnings note
        notes.append(f"Gross pay: ${gross_pay:.2f}")

        # Deductions note
        if total_deductions > 0:
            notes.append(f"Total deductions: ${total_deductions:.2f}")

        # Net pay note
        if net_pay > 0:
            notes.append(f"Amount owed to driver: ${net_pay:.2f}")
        elif net_pay < 0:
            notes.append(f"Driver owes company: ${abs(net_pay):.2f}")
        else:
            notes.append("Settlement is balanced")

        notes.append("Detention, layover and TONU are passed through at 100%")
        return notes
