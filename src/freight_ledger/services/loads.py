"""
Load Service - creates and updates loads through the calculation cascade.

This service:
- Recomputes every derived money field on each write
- Applies the post-delivery lock policy (reason-gated adjustments)
- Commits through the store's optimistic-concurrency check
- Records every change in the audit trail without letting audit failures
  affect the write
"""

from datetime import datetime
from time import time
from typing import Any, Optional
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from freight_ledger.audit.writer import AdjustmentAuditWriter
from freight_ledger.core.exceptions import (
    ConflictError,
    ReasonRequiredError,
    ValidationError,
)
from freight_ledger.data.directory import ReferenceDirectory
from freight_ledger.data.models.audit import Actor, AuditAction
from freight_ledger.data.models.load import (
    BOOKKEEPING_FIELDS,
    DERIVED_FIELDS,
    Load,
    LoadStatus,
    StatusHistoryEntry,
)
from freight_ledger.data.store import LoadStore
from freight_ledger.engine.cascade import CalculationResult, calculate_load, verify_invariants
from freight_ledger.locking.policy import (
    UpdateEvaluation,
    evaluate_update,
    is_load_locked,
)
from freight_ledger.services.base import BaseService, OperationRecord


def _build_load(fields: dict[str, Any]) -> Load:
    try:
        return Load.model_validate(fields)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(f"Invalid load data: {first['msg']}", field=field) from e


def _payload(load: Load, fields: list[str]) -> dict[str, Any]:
    snapshot = load.snapshot()
    return {field: snapshot[field] for field in fields}


def _with_dispatcher_reset(stored: Load, patch: dict[str, Any]) -> dict[str, Any]:
    """
    Drop the previous dispatcher's commission terms when the dispatcher changes.

    The cascade stores the resolved terms on the load, so without the reset
    the old dispatcher's terms would override the new dispatcher's profile.
    """
    if "dispatcher_id" not in patch or patch["dispatcher_id"] == stored.dispatcher_id:
        return patch
    return {"dispatcher_commission_type": None, "dispatcher_commission_rate": None, **patch}


class LoadService(BaseService):
    """
    Load Service for load writes.

    All loads are scoped to the configured tenant; tenant isolation itself is
    enforced by the data-access layer behind the store.
    """

    def __init__(
        self,
        store: LoadStore,
        directory: ReferenceDirectory,
        audit_writer: AdjustmentAuditWriter,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the load service.

        Args:
            store: Versioned load store
            directory: Driver, dispatcher and factoring company lookups
            audit_writer: Audit trail writer
        """
        super().__init__(service_name="loads", **kwargs)
        self.store = store
        self.directory = directory
        self.audit_writer = audit_writer

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    def calculate(self, load: Load) -> CalculationResult:
        """
        Run the calculation cascade for a load using the directory's profiles.

        Args:
            load: Load snapshot with raw inputs

        Returns:
            CalculationResult with the derived load and any warnings
        """
        self.logger.debug("calculating_load", load_id=load.id, status=load.status.value)
        result = calculate_load(load, self.directory.context_for(load))
        self.log_warnings(result.warnings, entity_id=load.id)
        violations = verify_invariants(result.load)
        if violations:
            self.logger.error("load_invariant_violation", load_id=load.id, violations=violations)
            raise ValidationError("Derived load fields are inconsistent: " + "; ".join(violations))
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_load(self, load_id: str) -> Load:
        """Return the stored load or raise LoadNotFoundError."""
        return self.store.get(load_id)

    def evaluate(self, load_id: str, patch: dict[str, Any], reason: Optional[str] = None) -> UpdateEvaluation:
        """
        Preview how an update would be classified, without writing anything.

        Args:
            load_id: Load to update
            patch: Fields to change
            reason: Optional reason

        Returns:
            UpdateEvaluation for the patch against the current stored load
        """
        self._check_patch(patch)
        stored = self.store.get(load_id)
        candidate = _build_load({**stored.model_dump(), **_with_dispatcher_reset(stored, patch)})
        recomputed = self.calculate(candidate).load
        return evaluate_update(stored, candidate, reason, recomputed=recomputed)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_load(self, data: dict[str, Any], actor: Actor) -> Load:
        """
        Create a load with all derived fields computed.

        Args:
            data: Raw load inputs; ``id`` and ``load_number`` are generated when absent
            actor: User creating the load

        Returns:
            The stored load (version 1)

        Raises:
            ValidationError: If the data sets derived or bookkeeping fields or is invalid
        """
        start_time = time()
        forbidden = sorted((set(data) & (DERIVED_FIELDS | BOOKKEEPING_FIELDS)) - {"id"})
        if forbidden:
            raise ValidationError(
                "Derived and bookkeeping fields cannot be set directly: " + ", ".join(forbidden),
                field=forbidden[0],
            )

        now = self.now()
        fields = dict(data)
        fields.setdefault("id", uuid4().hex)
        if not fields.get("load_number"):
            fields["load_number"] = self.store.next_load_number()
        fields.update(created_at=now, created_by=actor.uid, updated_at=now)

        load = _build_load(fields)
        load = load.model_copy(
            update={
                "status_history": (self._history_entry(load.status, actor, now, "Load created"),),
                "locked_at": now if is_load_locked(load) else None,
            }
        )
        result = self.calculate(load)
        stored = self.store.insert(result.load)

        self.logger.info(
            "load_created",
            load_id=stored.id,
            load_number=stored.load_number,
            grand_total=str(stored.grand_total),
        )
        self.audit_writer.audit_create(actor, stored.id, stored.snapshot())
        self._record("create_load", stored.id, start_time, result, {"load_number": stored.load_number})
        return stored

    def apply_update(
        self,
        load_id: str,
        patch: dict[str, Any],
        actor: Actor,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Load:
        """
        Apply a patch to a load.

        The patch is merged onto the stored snapshot, the cascade recomputes
        every derived field, the lock policy decides whether a reason is
        needed, and the result is committed only if the stored version still
        matches the one the diff was computed against.

        Args:
            load_id: Load to update
            patch: Input fields to change (derived fields are rejected)
            actor: User making the change
            reason: Required when material fields of a locked load change
            expected_version: Version the caller read; defaults to the version
                read here

        Returns:
            The committed load

        Raises:
            ValidationError: If the patch is invalid or touches derived fields
            ReasonRequiredError: If a locked load's material fields change without a reason
            ConflictError: If the load changed since it was read
            LoadNotFoundError: If the load does not exist
        """
        start_time = time()
        self._check_patch(patch)

        stored = self.store.get(load_id)
        base_version = stored.version if expected_version is None else expected_version
        if base_version != stored.version:
            self.logger.info(
                "load_update_conflict",
                load_id=load_id,
                expected_version=base_version,
                actual_version=stored.version,
            )
            raise ConflictError(load_id, base_version, stored.version)

        candidate = _build_load({**stored.model_dump(), **_with_dispatcher_reset(stored, patch)})
        result = self.calculate(candidate)
        evaluation = evaluate_update(stored, candidate, reason, recomputed=result.load)

        if not evaluation.allowed:
            self.logger.info(
                "reason_required",
                load_id=load_id,
                changed_fields=evaluation.changed_fields,
            )
            raise ReasonRequiredError(load_id, evaluation.changed_fields)

        if not evaluation.diff:
            self.logger.debug("load_update_noop", load_id=load_id)
            return stored

        now = self.now()
        updated = self._with_status_transition(stored, result.load, actor, now, note=reason)
        committed = self._commit(load_id, base_version, updated.model_copy(update={"updated_at": now}))

        changed = list(evaluation.diff)
        before = _payload(stored, changed)
        after = _payload(committed, changed)
        if evaluation.action == AuditAction.ADJUSTMENT:
            self.audit_writer.audit_adjustment(
                actor,
                load_id,
                before,
                after,
                reason or "",
                metadata={"changed_fields": evaluation.changed_fields},
            )
        else:
            self.audit_writer.audit_update(actor, load_id, before, after, reason=reason)

        self.logger.info(
            "load_updated",
            load_id=load_id,
            version=committed.version,
            action=evaluation.action.value,
            fields=changed,
        )
        self._record(
            "apply_update",
            load_id,
            start_time,
            result,
            {"action": evaluation.action.value, "fields": changed},
        )
        return committed

    def change_status(
        self,
        load_id: str,
        new_status: LoadStatus,
        actor: Actor,
        note: Optional[str] = None,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Load:
        """
        Move a load to a new status and record it in the status history.

        Entering delivered/completed locks the load. Moving a locked load back
        to an open status is an adjustment and needs a reason.

        Args:
            load_id: Load to update
            new_status: Target status
            actor: User making the change
            note: Optional note stored in the status history
            reason: Required when un-delivering a locked load
            expected_version: Version the caller read

        Returns:
            The committed load

        Raises:
            ReasonRequiredError: If a locked load is reopened without a reason
            ConflictError: If the load changed since it was read
        """
        stored = self.store.get(load_id)
        base_version = stored.version if expected_version is None else expected_version
        if new_status == stored.status:
            return stored

        candidate = stored.model_copy(update={"status": new_status})
        evaluation = evaluate_update(stored, candidate, reason)
        if not evaluation.allowed:
            raise ReasonRequiredError(load_id, evaluation.changed_fields)

        now = self.now()
        updated = self._with_status_transition(stored, candidate, actor, now, note=note or reason)
        committed = self._commit(load_id, base_version, updated.model_copy(update={"updated_at": now}))

        if evaluation.action == AuditAction.ADJUSTMENT:
            self.audit_writer.audit_adjustment(
                actor,
                load_id,
                _payload(stored, list(evaluation.diff)),
                _payload(committed, list(evaluation.diff)),
                reason or "",
                metadata={"changed_fields": evaluation.changed_fields, "note": note},
            )
        else:
            self.audit_writer.audit_status_change(
                actor, load_id, stored.status.value, new_status.value, note=note
            )

        self.logger.info(
            "load_status_changed",
            load_id=load_id,
            old_status=stored.status.value,
            new_status=new_status.value,
            locked=is_load_locked(committed),
        )
        return committed

    def delete_load(
        self,
        load_id: str,
        actor: Actor,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Load:
        """
        Delete a load.

        Returns:
            The deleted snapshot

        Raises:
            ConflictError: If the load changed since it was read
        """
        stored = self.store.get(load_id)
        base_version = stored.version if expected_version is None else expected_version
        try:
            deleted = self.store.delete(load_id, base_version)
        except ConflictError:
            self.logger.info("load_delete_conflict", load_id=load_id, expected_version=base_version)
            raise
        self.audit_writer.audit_delete(actor, load_id, deleted.snapshot(), reason=reason)
        self.logger.info("load_deleted", load_id=load_id)
        return deleted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_patch(patch: dict[str, Any]) -> None:
        if not patch:
            raise ValidationError("Update patch cannot be empty")
        unknown = sorted(field for field in patch if field not in Load.model_fields)
        if unknown:
            raise ValidationError("Unknown load fields: " + ", ".join(unknown), field=unknown[0])
        forbidden = sorted(set(patch) & (DERIVED_FIELDS | BOOKKEEPING_FIELDS))
        if forbidden:
            raise ValidationError(
                "Derived and bookkeeping fields cannot be set directly: " + ", ".join(forbidden),
                field=forbidden[0],
            )

    @staticmethod
    def _history_entry(
        status: LoadStatus, actor: Actor, when: datetime, note: Optional[str]
    ) -> StatusHistoryEntry:
        return StatusHistoryEntry(
            status=status,
            timestamp=when,
            changed_by=actor.display_name,
            changed_by_role=actor.role,
            changed_by_user_id=actor.uid,
            note=note,
        )

    def _with_status_transition(
        self, stored: Load, updated: Load, actor: Actor, when: datetime, note: Optional[str]
    ) -> Load:
        if updated.status == stored.status:
            return updated
        locked = is_load_locked(updated)
        locked_at = (stored.locked_at or when) if is_load_locked(stored) else when
        return updated.model_copy(
            update={
                "status_history": (
                    *stored.status_history,
                    self._history_entry(updated.status, actor, when, note),
                ),
                "locked_at": locked_at if locked else None,
            }
        )

    def _commit(self, load_id: str, base_version: int, load: Load) -> Load:
        try:
            return self.store.compare_and_set(load_id, base_version, load)
        except ConflictError as e:
            self.logger.info(
                "load_update_conflict",
                load_id=load_id,
                expected_version=e.expected_version,
                actual_version=e.actual_version,
            )
            raise

    def _record(
        self,
        operation: str,
        load_id: str,
        start_time: float,
        result: CalculationResult,
        details: dict[str, Any],
    ) -> None:
        self.record_operation(
            OperationRecord(
                timestamp=self.now(),
                service_name=self.service_name,
                operation=operation,
                entity_id=load_id,
                details=details,
                warnings=result.warnings,
                execution_time_seconds=time() - start_time,
            )
        )
