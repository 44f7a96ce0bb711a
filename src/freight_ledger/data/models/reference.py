"""
Reference data consumed by the calculation cascade.

Drivers, dispatchers and factoring companies are owned by other parts of the
TMS; the cascade only reads their pay/fee configuration.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PayType(str, Enum):
    """How a driver slot is paid."""

    PERCENTAGE = "percentage"
    PER_MILE = "per_mile"
    FLAT_RATE = "flat_rate"


class DriverType(str, Enum):
    """Employment relationship of a driver."""

    COMPANY = "company"
    OWNER_OPERATOR = "owner_operator"
    OWNER = "owner"


class CommissionType(str, Enum):
    """How a dispatcher's commission is computed."""

    PERCENTAGE = "percentage"
    FLAT_FEE = "flat_fee"
    PER_MILE = "per_mile"


class PaymentProfile(BaseModel):
    """Driver payment configuration."""

    type: Optional[PayType] = None
    percentage: Optional[Decimal] = Field(
        None, description="Share of base rate; 0-1 fraction or legacy 0-100 integer"
    )
    per_mile_rate: Optional[Decimal] = None
    flat_rate: Optional[Decimal] = None


class DriverProfile(BaseModel):
    """Driver (employee) record as seen by the pay calculator."""

    id: str
    name: str
    driver_type: DriverType = DriverType.COMPANY
    payment: PaymentProfile = Field(default_factory=PaymentProfile)
    pay_percentage: Optional[Decimal] = Field(
        None, description="Legacy top-level percentage, used when payment.percentage is unset"
    )
    current_truck_id: Optional[str] = None
    truck_id: Optional[str] = None


class DispatcherProfile(BaseModel):
    """Employee with employee_type=dispatcher."""

    id: str
    name: str
    commission_type: Optional[CommissionType] = None
    commission_rate: Optional[Decimal] = None


class FactoringCompany(BaseModel):
    """Company that buys load receivables."""

    id: str
    name: str
    fee_percentage: Optional[Decimal] = Field(
        None, description="Default fee as a percentage of grand total (3 means 3%)"
    )


class TenantConfig(BaseModel):
    """Per-tenant settings the cascade depends on."""

    tenant_id: str = "default"
    default_factoring_company_id: Optional[str] = None
    factoring_companies: list[FactoringCompany] = Field(default_factory=list)

    def get_factoring_company(self, company_id: Optional[str]) -> Optional[FactoringCompany]:
        """Look up a factoring company by id."""
        if company_id is None:
            return None
        for company in self.factoring_companies:
            if company.id == company_id:
                return company
        return None
