"""
Load calculation cascade.

Runs the calculators in a fixed order on an immutable load snapshot:

    accessorials -> totals -> driver pay (primary, team) -> dispatcher -> factoring

Every stage reads the figures written by the stage before it, so ``rate`` and
``grand_total`` come from exactly one place. The cascade is pure: the same
load and context always produce an identical result.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from freight_ledger.data.models.load import Load
from freight_ledger.data.models.reference import (
    DispatcherProfile,
    DriverProfile,
    FactoringCompany,
    TenantConfig,
)
from freight_ledger.engine.common import ZERO, CalculationWarning
from freight_ledger.engine.dispatcher import compute_dispatcher_commission
from freight_ledger.engine.driver_pay import DriverSlot, compute_driver_pay
from freight_ledger.engine.factoring import (
    compute_factoring,
    factoring_load_update,
    resolve_default_factoring_company,
)
from freight_ledger.engine.totals import compute_load_totals


class CalculationContext(BaseModel):
    """Reference data the cascade needs for one load."""

    model_config = ConfigDict(frozen=True)

    driver: Optional[DriverProfile] = None
    driver2: Optional[DriverProfile] = None
    dispatcher: Optional[DispatcherProfile] = None
    factoring_company: Optional[FactoringCompany] = None
    tenant_config: TenantConfig = Field(default_factory=TenantConfig)


class CalculationResult(BaseModel):
    """A fully derived load plus any configuration warnings."""

    model_config = ConfigDict(frozen=True)

    load: Load
    warnings: list[CalculationWarning] = Field(default_factory=list)


def _resolve_factoring_company(load: Load, context: CalculationContext) -> Optional[FactoringCompany]:
    if not load.is_factored:
        return None
    company = context.factoring_company
    if company is not None and load.factoring_company_id in (None, company.id):
        return company
    if load.factoring_company_id is not None:
        return context.tenant_config.get_factoring_company(load.factoring_company_id)
    return resolve_default_factoring_company(context.tenant_config)


def calculate_load(load: Load, context: Optional[CalculationContext] = None) -> CalculationResult:
    """
    Recompute every derived field of a load.

    Args:
        load: Load snapshot with raw inputs (derived fields may be stale)
        context: Driver, dispatcher and factoring reference data

    Returns:
        CalculationResult with the derived load and collected warnings

    Raises:
        ValidationError: If any calculator rejects its inputs
    """
    context = context or CalculationContext()
    warnings: list[CalculationWarning] = []

    totals = compute_load_totals(load)
    warnings.extend(totals.warnings)
    current = load.model_copy(update=totals.as_load_update())

    primary = compute_driver_pay(current, context.driver, DriverSlot.PRIMARY)
    team = compute_driver_pay(current, context.driver2, DriverSlot.TEAM)
    warnings.extend(primary.warnings)
    warnings.extend(team.warnings)
    driver2_earnings = team.total_gross if current.is_team_load else ZERO
    current = current.model_copy(
        update={
            "driver_base_pay": primary.base_pay,
            "driver_detention_pay": primary.detention_pay,
            "driver_layover_pay": primary.layover_pay,
            "driver_total_gross": primary.total_gross,
            "driver2_earnings": driver2_earnings,
            "total_driver_pay": primary.total_gross + driver2_earnings,
        }
    )

    dispatcher_profile = context.dispatcher if current.dispatcher_id is not None else None
    commission = compute_dispatcher_commission(current, dispatcher_profile)
    warnings.extend(commission.warnings)
    current = current.model_copy(update=commission.as_load_update())

    factoring = compute_factoring(current, _resolve_factoring_company(current, context))
    warnings.extend(factoring.warnings)
    current = current.model_copy(update=factoring_load_update(current, factoring))

    return CalculationResult(load=current, warnings=warnings)


def verify_invariants(load: Load) -> list[str]:
    """
    Check the money invariants of a derived load.

    Returns:
        Human-readable descriptions of every violated invariant (empty if sound)
    """
    violations: list[str] = []
    tonu_amount = load.tonu_fee if load.has_tonu else ZERO
    accessorial_sum = (
        load.detention_amount
        + load.layover_amount
        + load.lumper_amount
        + load.fsc_amount
        + tonu_amount
        + load.other_accessorials
    )
    if load.total_accessorials != accessorial_sum:
        violations.append(
            f"total_accessorials {load.total_accessorials} != sum of accessorials {accessorial_sum}"
        )
    if load.grand_total != load.rate + load.total_accessorials:
        violations.append(
            f"grand_total {load.grand_total} != rate + total_accessorials "
            f"{load.rate + load.total_accessorials}"
        )
    gross = load.driver_base_pay + load.driver_detention_pay + load.driver_layover_pay
    if load.driver_total_gross != gross:
        violations.append(f"driver_total_gross {load.driver_total_gross} != {gross}")
    team_pay = load.driver2_earnings if load.is_team_load else ZERO
    if load.total_driver_pay != load.driver_total_gross + team_pay:
        violations.append(
            f"total_driver_pay {load.total_driver_pay} != {load.driver_total_gross + team_pay}"
        )
    if load.is_factored and abs(load.factoring_fee + load.factored_amount - load.grand_total) > Decimal("0.01"):
        violations.append(
            f"factoring_fee + factored_amount {load.factoring_fee + load.factored_amount} "
            f"!= grand_total {load.grand_total}"
        )
    return violations
