"""
Audit sink contract and an in-process implementation.
"""

import threading
from typing import Protocol

from freight_ledger.core.exceptions import AuditWriteFailure
from freight_ledger.data.models.audit import AuditEntry


class AuditSink(Protocol):
    """Primary destination for audit entries (e.g. the tenant's auditLogs collection)."""

    def write(self, entry: AuditEntry) -> None:
        """Persist one entry; raise on failure."""
        ...


class InMemoryAuditSink:
    """Audit sink backed by a list. ``available = False`` simulates an outage."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []
        self.available = True
        self._lock = threading.Lock()

    def write(self, entry: AuditEntry) -> None:
        if not self.available:
            raise AuditWriteFailure("Audit sink unavailable", entry_id=entry.id)
        with self._lock:
            self.entries.append(entry)

    def for_entity(self, entity_id: str) -> list[AuditEntry]:
        """Entries recorded for one entity, oldest first."""
        return [entry for entry in self.entries if entry.entity_id == entity_id]
