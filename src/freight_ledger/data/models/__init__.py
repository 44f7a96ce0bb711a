"""
Pydantic data models for the freight ledger.

Core models:
- Load: Freight shipment, its inputs and derived money figures
- Reference: Driver, dispatcher and factoring company configuration
- Audit: Audit trail entries and actors
- Adjustment: Reasoned post-delivery change requests
"""

from .adjustment import AdjustmentRequest, AdjustmentStatus
from .audit import Actor, AuditAction, AuditEntry
from .load import (
    BOOKKEEPING_FIELDS,
    DERIVED_FIELDS,
    LOCKED_STATUSES,
    FscType,
    Load,
    LoadStatus,
    StatusHistoryEntry,
)
from .reference import (
    CommissionType,
    DispatcherProfile,
    DriverProfile,
    DriverType,
    FactoringCompany,
    PaymentProfile,
    PayType,
    TenantConfig,
)

__all__ = [
    "Actor",
    "AdjustmentRequest",
    "AdjustmentStatus",
    "AuditAction",
    "AuditEntry",
    "BOOKKEEPING_FIELDS",
    "CommissionType",
    "DERIVED_FIELDS",
    "DispatcherProfile",
    "DriverProfile",
    "DriverType",
    "FactoringCompany",
    "FscType",
    "LOCKED_STATUSES",
    "Load",
    "LoadStatus",
    "PaymentProfile",
    "PayType",
    "StatusHistoryEntry",
    "TenantConfig",
]
