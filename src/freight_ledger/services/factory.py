"""
Service wiring - builds the load, adjustment and settlement services for one
tenant from configuration.
"""

from typing import Iterable, NamedTuple, Optional

from freight_ledger.audit.outbox import AuditOutbox
from freight_ledger.audit.sinks import AuditSink, InMemoryAuditSink
from freight_ledger.audit.writer import AdjustmentAuditWriter
from freight_ledger.core.config import ConfigManager, get_config
from freight_ledger.data.directory import ReferenceDirectory
from freight_ledger.data.models.reference import DispatcherProfile, DriverProfile
from freight_ledger.data.store import InMemoryLoadStore, LoadStore
from freight_ledger.services.adjustments import AdjustmentService
from freight_ledger.services.loads import LoadService
from freight_ledger.services.settlement import SettlementService


class Services(NamedTuple):
    """The wired services plus the collaborators they share."""

    loads: LoadService
    adjustments: AdjustmentService
    settlement: SettlementService
    audit_writer: AdjustmentAuditWriter
    directory: ReferenceDirectory


def build_services(
    config_manager: Optional[ConfigManager] = None,
    store: Optional[LoadStore] = None,
    audit_sink: Optional[AuditSink] = None,
    drivers: Iterable[DriverProfile] = (),
    dispatchers: Iterable[DispatcherProfile] = (),
) -> Services:
    """
    Build the services for the configured tenant.

    Args:
        config_manager: Optional config manager (defaults to global instance)
        store: Load store (defaults to an in-memory store)
        audit_sink: Primary audit sink (defaults to an in-memory sink)
        drivers: Driver profiles to register
        dispatchers: Dispatcher profiles to register

    Returns:
        Services sharing one store, directory and audit writer
    """
    config_manager = config_manager or get_config()
    tenant_config = config_manager.get_tenant_config()
    audit_config = config_manager.get_audit_config()

    directory = ReferenceDirectory(tenant_config, drivers=drivers, dispatchers=dispatchers)
    audit_writer = AdjustmentAuditWriter(
        audit_sink if audit_sink is not None else InMemoryAuditSink(),
        AuditOutbox(audit_config.outbox_path),
        tenant_id=tenant_config.tenant_id,
        entity_type=audit_config.entity_type,
    )
    loads = LoadService(
        store if store is not None else InMemoryLoadStore(),
        directory,
        audit_writer,
        config_manager=config_manager,
    )
    return Services(
        loads=loads,
        adjustments=AdjustmentService(loads),
        settlement=SettlementService(config_manager=config_manager),
        audit_writer=audit_writer,
        directory=directory,
    )
