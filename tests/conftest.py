"""
Pytest fixtures for the freight ledger test suite.

Provides:
- An in-memory tenant: drivers, dispatchers and factoring companies
- Load, audit and adjustment services wired to in-memory stores
- A load factory for calculator-level tests
"""

from decimal import Decimal
from typing import Any

import pytest
import structlog

from freight_ledger.audit import AdjustmentAuditWriter, AuditOutbox, InMemoryAuditSink
from freight_ledger.core.config import ConfigManager, EnvironmentSettings
from freight_ledger.data.directory import ReferenceDirectory
from freight_ledger.data.models import (
    Actor,
    CommissionType,
    DispatcherProfile,
    DriverProfile,
    DriverType,
    Load,
    PaymentProfile,
    PayType,
)
from freight_ledger.data.store import InMemoryLoadStore
from freight_ledger.engine import CalculationContext
from freight_ledger.services import AdjustmentService, LoadService, SettlementService

BUSINESS_CONFIG: dict[str, Any] = {
    "tenant": {"id": "acme-trucking", "default_factoring_company_id": "rts"},
    "factoring_companies": [
        {"id": "rts", "name": "RTS Financial", "fee_percentage": 3},
        {"id": "triumph", "name": "Triumph Business Capital", "fee_percentage": 2.5},
    ],
    "audit": {"entity_type": "load"},
    "logging": {"level": "DEBUG", "json": False},
    "settlement": {"default_deductions": {"insurance": 150}},
}


@pytest.fixture(autouse=True)
def reset_structlog():
    """Each test starts with structlog's default configuration."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def config_manager(tmp_path, monkeypatch) -> ConfigManager:
    """Config manager backed by an inline business config."""
    for var in (
        "FREIGHT_LEDGER_TENANT_ID",
        "FREIGHT_LEDGER_AUDIT_OUTBOX_PATH",
        "FREIGHT_LEDGER_LOG_LEVEL",
        "FREIGHT_LEDGER_LOG_JSON",
    ):
        monkeypatch.delenv(var, raising=False)
    return ConfigManager(
        config_dir=tmp_path,
        business_config=BUSINESS_CONFIG,
        env_settings=EnvironmentSettings(_env_file=None),
    )


@pytest.fixture
def tenant_config(config_manager):
    return config_manager.get_tenant_config()


@pytest.fixture
def owner_operator() -> DriverProfile:
    """Owner-operator with a legacy whole-number percentage (88 = 88%)."""
    return DriverProfile(
        id="drv-1",
        name="Olivia Owner",
        driver_type=DriverType.OWNER_OPERATOR,
        payment=PaymentProfile(type=PayType.PERCENTAGE, percentage=Decimal("88")),
    )


@pytest.fixture
def company_driver() -> DriverProfile:
    return DriverProfile(
        id="drv-2",
        name="Carlos Company",
        driver_type=DriverType.COMPANY,
        payment=PaymentProfile(type=PayType.PER_MILE, per_mile_rate=Decimal("0.55")),
    )


@pytest.fixture
def team_driver() -> DriverProfile:
    return DriverProfile(
        id="drv-3",
        name="Terry Team",
        driver_type=DriverType.COMPANY,
        payment=PaymentProfile(type=PayType.FLAT_RATE, flat_rate=Decimal("500")),
    )


@pytest.fixture
def per_mile_dispatcher() -> DispatcherProfile:
    return DispatcherProfile(
        id="dsp-1",
        name="Pat Permile",
        commission_type=CommissionType.PER_MILE,
        commission_rate=Decimal("0.05"),
    )


@pytest.fixture
def percentage_dispatcher() -> DispatcherProfile:
    return DispatcherProfile(
        id="dsp-2",
        name="Percy Percent",
        commission_type=CommissionType.PERCENTAGE,
        commission_rate=Decimal("5"),
    )


@pytest.fixture
def directory(
    tenant_config,
    owner_operator,
    company_driver,
    team_driver,
    per_mile_dispatcher,
    percentage_dispatcher,
) -> ReferenceDirectory:
    return ReferenceDirectory(
        tenant_config=tenant_config,
        drivers=[owner_operator, company_driver, team_driver],
        dispatchers=[per_mile_dispatcher, percentage_dispatcher],
    )


@pytest.fixture
def context(directory) -> CalculationContext:
    """Calculation context with the tenant config but no selected profiles."""
    return CalculationContext(tenant_config=directory.tenant_config)


@pytest.fixture
def make_load():
    """Factory for load snapshots used by calculator tests."""

    def _make(**fields: Any) -> Load:
        fields.setdefault("id", "load-1")
        fields.setdefault("load_number", "L-00001")
        return Load(**fields)

    return _make


@pytest.fixture
def actor() -> Actor:
    return Actor(uid="user-1", role="dispatcher", name="Dana Dispatcher")


@pytest.fixture
def admin() -> Actor:
    return Actor(uid="user-2", role="admin", name="Alex Admin")


@pytest.fixture
def store() -> InMemoryLoadStore:
    return InMemoryLoadStore()


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def outbox(tmp_path) -> AuditOutbox:
    return AuditOutbox(tmp_path / "audit" / "outbox.jsonl")


@pytest.fixture
def audit_writer(audit_sink, outbox, tenant_config) -> AdjustmentAuditWriter:
    return AdjustmentAuditWriter(audit_sink, outbox, tenant_id=tenant_config.tenant_id)


@pytest.fixture
def load_service(store, directory, audit_writer, config_manager) -> LoadService:
    return LoadService(store, directory, audit_writer, config_manager=config_manager)


@pytest.fixture
def adjustment_service(load_service) -> AdjustmentService:
    return AdjustmentService(load_service)


@pytest.fixture
def settlement_service(config_manager) -> SettlementService:
    return SettlementService(config_manager=config_manager)


@pytest.fixture
def load_data() -> dict[str, Any]:
    """Raw inputs for a typical dry-van load booked by the owner-operator."""
    return {
        "customer_name": "Acme Foods",
        "broker_id": "brk-1",
        "broker_name": "Prime Logistics",
        "origin_city": "Dallas",
        "origin_state": "TX",
        "dest_city": "Atlanta",
        "dest_state": "GA",
        "rate": Decimal("1000"),
        "miles": Decimal("500"),
        "driver_id": "drv-1",
        "driver_name": "Olivia Owner",
        "truck_id": "trk-7",
        "trailer_id": "trl-3",
    }


@pytest.fixture
def delivered_load(load_service, load_data, actor) -> Load:
    """A stored load already in the locked (delivered) regime."""
    return load_service.create_load({**load_data, "status": "delivered"}, actor)
