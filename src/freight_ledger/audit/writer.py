"""
Adjustment audit writer.

Turns before/after payloads into immutable audit entries and hands them to
the primary sink. A sink failure is never surfaced to the caller: the entry
is logged and queued in the durable outbox for replay.
"""

from typing import Any, Optional

import structlog

from freight_ledger.audit.outbox import AuditOutbox
from freight_ledger.audit.sinks import AuditSink
from freight_ledger.data.models.audit import Actor, AuditAction, AuditEntry


class AdjustmentAuditWriter:
    """Writes CREATE/UPDATE/DELETE/STATUS_CHANGE/ADJUSTMENT entries for one tenant."""

    def __init__(
        self,
        sink: AuditSink,
        outbox: AuditOutbox,
        tenant_id: str,
        entity_type: str = "load",
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """
        Initialize the writer.

        Args:
            sink: Primary audit sink
            outbox: Fallback queue for entries the sink rejects
            tenant_id: Tenant every entry is recorded under
            entity_type: Entity type stamped on entries
            logger: Optional structured logger
        """
        self.sink = sink
        self.outbox = outbox
        self.tenant_id = tenant_id
        self.entity_type = entity_type
        self.logger = logger or structlog.get_logger(component="audit_writer")

    def write_audit(
        self,
        actor: Actor,
        entity_id: str,
        action: AuditAction,
        before: Optional[dict[str, Any]] = None,
        after: Optional[dict[str, Any]] = None,
        reason: Optional[str] = None,
        summary: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Optional[AuditEntry]:
        """
        Record an audit entry. Never raises.

        Returns:
            The entry that was written or queued, or None if it could not even
            be built (the failure is logged)
        """
        try:
            entry = AuditEntry(
                tenant_id=self.tenant_id,
                actor_uid=actor.uid,
                actor_role=actor.role,
                entity_type=self.entity_type,
                entity_id=entity_id,
                action=action,
                summary=summary or f"{action.value.title()} {self.entity_type} {entity_id}",
                before=before,
                after=after,
                reason=reason.strip() if reason else None,
                metadata=metadata,
            )
        except Exception as e:
            self.logger.error(
                "audit_entry_invalid", entity_id=entity_id, action=action.value, error=str(e)
            )
            return None

        try:
            self.sink.write(entry)
            self.logger.debug("audit_written", entry_id=entry.id, action=action.value)
        except Exception as e:
            self.logger.warning(
                "audit_write_failed",
                entry_id=entry.id,
                entity_id=entity_id,
                action=action.value,
                error=str(e),
            )
            try:
                self.outbox.append(entry)
            except Exception as outbox_error:
                self.logger.error(
                    "audit_outbox_write_failed",
                    entry_id=entry.id,
                    entity_id=entity_id,
                    error=str(outbox_error),
                    entry=entry.model_dump(mode="json"),
                )
        return entry

    def audit_create(self, actor: Actor, entity_id: str, entity_data: dict[str, Any]) -> Optional[AuditEntry]:
        """Record a CREATE."""
        return self.write_audit(actor, entity_id, AuditAction.CREATE, after=entity_data)

    def audit_update(
        self,
        actor: Actor,
        entity_id: str,
        before: dict[str, Any],
        after: dict[str, Any],
        reason: Optional[str] = None,
    ) -> Optional[AuditEntry]:
        """Record an UPDATE."""
        return self.write_audit(
            actor, entity_id, AuditAction.UPDATE, before=before, after=after, reason=reason
        )

    def audit_delete(
        self, actor: Actor, entity_id: str, entity_data: dict[str, Any], reason: Optional[str] = None
    ) -> Optional[AuditEntry]:
        """Record a DELETE."""
        return self.write_audit(
            actor, entity_id, AuditAction.DELETE, before=entity_data, reason=reason
        )

    def audit_status_change(
        self,
        actor: Actor,
        entity_id: str,
        old_status: str,
        new_status: str,
        note: Optional[str] = None,
    ) -> Optional[AuditEntry]:
        """Record a STATUS_CHANGE."""
        return self.write_audit(
            actor,
            entity_id,
            AuditAction.STATUS_CHANGE,
            before={"status": old_status},
            after={"status": new_status},
            summary=f"Changed {self.entity_type} {entity_id} status from {old_status} to {new_status}",
            metadata={"note": note} if note else None,
        )

    def audit_adjustment(
        self,
        actor: Actor,
        entity_id: str,
        before: dict[str, Any],
        after: dict[str, Any],
        reason: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Optional[AuditEntry]:
        """Record an ADJUSTMENT to a locked entity."""
        return self.write_audit(
            actor,
            entity_id,
            AuditAction.ADJUSTMENT,
            before=before,
            after=after,
            reason=reason,
            metadata=metadata,
        )

    def flush_outbox(self) -> int:
        """Replay queued entries into the primary sink; returns how many were delivered."""
        return self.outbox.drain(self.sink)
