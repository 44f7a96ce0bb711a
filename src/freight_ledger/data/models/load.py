"""
Load data model - represents a freight shipment and its money figures.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from freight_ledger.data.models.reference import CommissionType, PayType


class LoadStatus(str, Enum):
    """Load status enumeration."""

    AVAILABLE = "available"
    DISPATCHED = "dispatched"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    TONU = "tonu"


LOCKED_STATUSES = frozenset({LoadStatus.DELIVERED, LoadStatus.COMPLETED})


class FscType(str, Enum):
    """Fuel surcharge basis."""

    PERCENTAGE = "percentage"
    PER_MILE = "per_mile"
    FLAT = "flat"


class StatusHistoryEntry(BaseModel):
    """One status transition of a load."""

    model_config = ConfigDict(frozen=True)

    status: LoadStatus
    timestamp: datetime
    changed_by: str
    changed_by_role: str
    changed_by_user_id: Optional[str] = None
    note: Optional[str] = None


# Fields the cascade owns. A patch may never set these directly.
DERIVED_FIELDS = frozenset(
    {
        "detention_amount",
        "layover_amount",
        "lumper_amount",
        "fsc_amount",
        "total_accessorials",
        "grand_total",
        "driver_base_pay",
        "driver_detention_pay",
        "driver_layover_pay",
        "driver_total_gross",
        "driver2_earnings",
        "total_driver_pay",
        "dispatcher_commission_amount",
        "factoring_fee",
        "factored_amount",
    }
)

# Managed by the store and the service, not by callers.
BOOKKEEPING_FIELDS = frozenset(
    {"id", "version", "created_at", "created_by", "updated_at", "status_history", "locked_at"}
)


class Load(BaseModel):
    """
    Represents a freight load/shipment.

    Loads are immutable snapshots: every edit produces a new instance via
    ``model_copy(update=...)`` and the calculation cascade fills in the
    derived money fields.
    """

    model_config = ConfigDict(frozen=True)

    # Identification
    id: str = Field(..., description="Opaque system-generated identifier")
    load_number: str = Field(..., description="Human-facing load number")
    version: int = Field(0, description="Store revision used for optimistic concurrency")

    # Status
    status: LoadStatus = Field(LoadStatus.AVAILABLE, description="Current load status")
    is_locked: bool = Field(False, description="Explicit lock independent of status")
    locked_at: Optional[datetime] = None
    status_history: tuple[StatusHistoryEntry, ...] = ()

    # Parties
    customer_name: Optional[str] = None
    broker_id: Optional[str] = None
    broker_name: Optional[str] = Field(None, description="Broker or shipper name")

    # Route
    origin_city: str = ""
    origin_state: str = ""
    dest_city: str = ""
    dest_state: str = ""

    # Timing
    pickup_date: Optional[date] = None
    delivery_date: Optional[date] = None

    # Financial inputs
    rate: Decimal = Field(Decimal("0"), description="Base line-haul amount the broker pays (USD)")
    miles: Decimal = Field(Decimal("0"), description="Loaded miles")

    # Primary driver
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    driver_pay_type: Optional[PayType] = Field(None, description="Overrides the driver profile")
    driver_pay_rate: Optional[Decimal] = Field(None, description="Overrides the driver profile")

    # Team driver
    is_team_load: bool = False
    driver2_id: Optional[str] = None
    driver2_name: Optional[str] = None
    driver2_pay_type: Optional[PayType] = None
    driver2_pay_rate: Optional[Decimal] = None

    # Equipment
    truck_id: Optional[str] = None
    trailer_id: Optional[str] = None

    # Dispatcher
    dispatcher_id: Optional[str] = None
    dispatcher_name: Optional[str] = None
    dispatcher_commission_type: Optional[CommissionType] = None
    dispatcher_commission_rate: Optional[Decimal] = None

    # Factoring inputs
    is_factored: bool = False
    factoring_company_id: Optional[str] = None
    factoring_company_name: Optional[str] = None
    factoring_fee_percent: Optional[Decimal] = Field(
        None, description="Load-level fee override, percent of grand total"
    )
    factored_date: Optional[date] = None

    # Accessorial inputs
    has_detention: bool = False
    detention_hours: Decimal = Decimal("0")
    detention_rate: Decimal = Decimal("0")
    has_layover: bool = False
    layover_days: Decimal = Decimal("0")
    layover_rate: Decimal = Decimal("0")
    has_lumper: bool = False
    lumper_fee: Decimal = Decimal("0")
    has_fsc: bool = False
    fsc_type: Optional[FscType] = None
    fsc_rate: Decimal = Decimal("0")
    has_tonu: bool = False
    tonu_fee: Decimal = Decimal("0")
    other_accessorials: Decimal = Decimal("0")

    # Derived accessorials and totals
    detention_amount: Decimal = Decimal("0")
    layover_amount: Decimal = Decimal("0")
    lumper_amount: Decimal = Decimal("0")
    fsc_amount: Decimal = Decimal("0")
    total_accessorials: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")

    # Derived driver pay
    driver_base_pay: Decimal = Decimal("0")
    driver_detention_pay: Decimal = Decimal("0")
    driver_layover_pay: Decimal = Decimal("0")
    driver_total_gross: Decimal = Decimal("0")
    driver2_earnings: Decimal = Decimal("0")
    total_driver_pay: Decimal = Decimal("0")

    # Derived dispatcher and factoring
    dispatcher_commission_amount: Decimal = Decimal("0")
    factoring_fee: Decimal = Decimal("0")
    factored_amount: Decimal = Decimal("0")

    # Non-material paperwork
    notes: Optional[str] = Field(None, description="Internal notes")
    documents: tuple[str, ...] = Field((), description="Stored document ids")
    bol_number: Optional[str] = None
    po_number: Optional[str] = None
    pod_number: Optional[str] = None
    invoice_id: Optional[str] = None
    settlement_id: Optional[str] = None

    # Metadata
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def effective_tonu_fee(self) -> Decimal:
        """TONU fee counted toward accessorials (0 when the flag is off)."""
        return self.tonu_fee if self.has_tonu else Decimal("0")

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe dict of the load, used for audit before/after payloads."""
        return self.model_dump(mode="json")
