"""
Adjustment request model - a reasoned, optionally approved change to a delivered load.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class AdjustmentStatus(str, Enum):
    """Adjustment request lifecycle."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    APPLIED = "applied"


class AdjustmentRequest(BaseModel):
    """A patch to a load plus the reason for it."""

    id: str
    load_id: str
    patch: dict[str, Any]
    reason: str
    status: AdjustmentStatus = AdjustmentStatus.PENDING
    require_approval: bool = False
    created_by: str
    created_at: datetime
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    applied_at: Optional[datetime] = None
    applied_version: Optional[int] = Field(None, description="Load version produced by the apply")
