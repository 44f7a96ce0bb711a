"""
Load lock policy - which changes to a delivered load need a reason.

A load is Open until its status reaches delivered or completed; from then on
it is Locked. Nothing is ever hard-blocked: changes to material fields of a
locked load simply need a reason so the adjustment can be audited. Moving a
locked load back to an open status counts as a material change too.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from freight_ledger.data.models.audit import AuditAction
from freight_ledger.data.models.load import BOOKKEEPING_FIELDS, LOCKED_STATUSES, Load

# Financial and operational fields; changing any of these on a locked load
# requires a reason.
MATERIAL_FIELDS: tuple[str, ...] = (
    "rate",
    "miles",
    "origin_city",
    "origin_state",
    "dest_city",
    "dest_state",
    "pickup_date",
    "delivery_date",
    "driver_id",
    "driver_name",
    "broker_name",
    "broker_id",
    "grand_total",
    "customer_name",
    "dispatcher_id",
    "truck_id",
    "trailer_id",
)

# Material only when the change takes the load out of the locked regime.
LOCK_RELEASE_FIELDS: tuple[str, ...] = ("status", "is_locked")


class FieldChange(BaseModel):
    """Before and after value of one field."""

    model_config = ConfigDict(frozen=True)

    before: Any = None
    after: Any = None


class UpdateEvaluation(BaseModel):
    """Outcome of checking a candidate load against the stored one."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    locked: bool
    requires_reason: bool = False
    changed_fields: list[str] = Field(
        default_factory=list, description="Material fields that need a reason"
    )
    diff: dict[str, FieldChange] = Field(default_factory=dict)
    action: AuditAction = AuditAction.UPDATE


def is_load_locked(load: Load) -> bool:
    """Check if a load is in the locked (delivered/completed) regime."""
    return load.status in LOCKED_STATUSES or load.is_locked


def has_reason(reason: Optional[str]) -> bool:
    """A reason counts only if it has non-whitespace content."""
    return bool(reason and reason.strip())


def diff_loads(stored: Load, candidate: Load) -> dict[str, FieldChange]:
    """
    Field-level diff between two load snapshots.

    Bookkeeping fields (version, timestamps, status history) are ignored.

    Returns:
        Changed fields in model field order, mapped to their before/after values
    """
    diff: dict[str, FieldChange] = {}
    for field in Load.model_fields:
        if field in BOOKKEEPING_FIELDS:
            continue
        before = getattr(stored, field)
        after = getattr(candidate, field)
        if before != after:
            diff[field] = FieldChange(before=before, after=after)
    return diff


def material_changes(candidate: Load, diff: dict[str, FieldChange]) -> list[str]:
    """
    Material fields in a diff, in the order they appear in the diff.

    Only meaningful when the stored load is locked.
    """
    releases_lock = not is_load_locked(candidate)
    changed: list[str] = []
    for field in diff:
        if field in MATERIAL_FIELDS:
            changed.append(field)
        elif field in LOCK_RELEASE_FIELDS and releases_lock:
            changed.append(field)
    return changed


def evaluate_update(
    stored: Load,
    candidate: Load,
    reason: Optional[str] = None,
    recomputed: Optional[Load] = None,
) -> UpdateEvaluation:
    """
    Classify an update to a load.

    Args:
        stored: Load as currently persisted
        candidate: Proposed new snapshot, as requested by the caller
        reason: Caller-supplied justification, if any
        recomputed: The candidate after the calculation cascade. When given,
            a material derived field (``grand_total``) moved by a non-material
            input change also needs a reason.

    Returns:
        UpdateEvaluation. ``allowed`` is False only when material fields of a
        locked load changed and no reason was given; ``changed_fields`` then
        lists those fields so the caller can prompt for a reason. Fields the
        caller asked to change are listed in preference to derived ones.
    """
    final = recomputed if recomputed is not None else candidate
    diff = diff_loads(stored, final)
    locked = is_load_locked(stored)
    if not locked:
        return UpdateEvaluation(allowed=True, locked=False, diff=diff)

    changed = material_changes(candidate, diff_loads(stored, candidate))
    if not changed and recomputed is not None:
        changed = material_changes(final, diff)
    if not changed:
        return UpdateEvaluation(allowed=True, locked=True, diff=diff)

    return UpdateEvaluation(
        allowed=has_reason(reason),
        locked=True,
        requires_reason=True,
        changed_fields=changed,
        diff=diff,
        action=AuditAction.ADJUSTMENT,
    )
