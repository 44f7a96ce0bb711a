"""
Audit trail: sinks, durable outbox and the adjustment audit writer.
"""

from .outbox import AuditOutbox
from .sinks import AuditSink, InMemoryAuditSink
from .writer import AdjustmentAuditWriter

__all__ = ["AdjustmentAuditWriter", "AuditOutbox", "AuditSink", "InMemoryAuditSink"]
