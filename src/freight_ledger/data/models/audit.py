"""
Audit trail data models.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class AuditAction(str, Enum):
    """What happened to the audited entity."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STATUS_CHANGE = "STATUS_CHANGE"
    ADJUSTMENT = "ADJUSTMENT"


class Actor(BaseModel):
    """The user (or system process) performing an operation."""

    model_config = ConfigDict(frozen=True)

    uid: str
    role: str = "dispatcher"
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name shown in status history."""
        return self.name or self.uid


class AuditEntry(BaseModel):
    """Immutable, append-only audit record."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    tenant_id: str
    actor_uid: str
    actor_role: str
    entity_type: str = "load"
    entity_id: str
    action: AuditAction
    summary: str = ""
    before: Optional[dict[str, Any]] = None
    after: Optional[dict[str, Any]] = None
    reason: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
