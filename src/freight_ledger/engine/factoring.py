"""
Factoring calculator - fee and net amount when a load's invoice is sold.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from freight_ledger.data.models.load import Load
from freight_ledger.data.models.reference import FactoringCompany, TenantConfig
from freight_ledger.engine.common import (
    HUNDRED,
    ZERO,
    CalculationWarning,
    require_non_negative,
    to_money,
)


class FactoringResult(BaseModel):
    """Factoring figures for a load."""

    model_config = ConfigDict(frozen=True)

    fee: Decimal = ZERO
    net_amount: Decimal = ZERO
    fee_percentage: Optional[Decimal] = None
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    warnings: list[CalculationWarning] = Field(default_factory=list)


# Applied when factoring is switched off; every factoring field is reset.
CLEARED_FACTORING_FIELDS: dict[str, Optional[object]] = {
    "factoring_company_id": None,
    "factoring_company_name": None,
    "factoring_fee_percent": None,
    "factored_date": None,
    "factoring_fee": ZERO,
    "factored_amount": ZERO,
}


def resolve_default_factoring_company(tenant_config: TenantConfig) -> Optional[FactoringCompany]:
    """
    Return the tenant's configured default factoring company.

    Only an explicitly configured default is used; list order never decides.
    """
    return tenant_config.get_factoring_company(tenant_config.default_factoring_company_id)


def compute_factoring(
    load: Load, factoring_company: Optional[FactoringCompany] = None
) -> FactoringResult:
    """
    Compute the factoring fee and net factored amount.

    Args:
        load: Load with a computed grand_total
        factoring_company: Selected factoring company, if any

    Returns:
        FactoringResult; all zeros when the load is not factored

    Raises:
        ValidationError: If the effective fee percentage is negative
    """
    if not load.is_factored:
        return FactoringResult()

    warnings: list[CalculationWarning] = []
    fee_percentage = load.factoring_fee_percent
    if fee_percentage is None and factoring_company is not None:
        fee_percentage = factoring_company.fee_percentage

    if fee_percentage is None:
        warnings.append(
            CalculationWarning(
                code="missing_factoring_fee",
                field="factoring_fee_percent",
                message="Load is factored but no fee percentage is set; fee is 0",
            )
        )
        effective = ZERO
    else:
        effective = require_non_negative(fee_percentage, "factoring_fee_percent")

    fee = to_money(load.grand_total * effective / HUNDRED)
    return FactoringResult(
        fee=fee,
        net_amount=load.grand_total - fee,
        fee_percentage=fee_percentage,
        company_id=factoring_company.id if factoring_company else load.factoring_company_id,
        company_name=factoring_company.name if factoring_company else load.factoring_company_name,
        warnings=warnings,
    )


def factoring_load_update(load: Load, result: FactoringResult) -> dict[str, object]:
    """Fields to write back onto the load for a factoring result."""
    if not load.is_factored:
        return dict(CLEARED_FACTORING_FIELDS)
    return {
        "factoring_company_id": result.company_id,
        "factoring_company_name": result.company_name,
        "factoring_fee": result.fee,
        "factored_amount": result.net_amount,
    }
