"""
Typed exceptions for the freight ledger.

Every error carries a machine-readable ``code`` so callers can branch on the
type instead of parsing messages:

    FreightLedgerError
    +-- ValidationError          bad calculation input or forbidden patch
    +-- ReasonRequiredError      material change to a locked load, no reason
    +-- ConflictError            optimistic-concurrency check failed (retryable)
    +-- LoadNotFoundError
    +-- AdjustmentError          adjustment request in the wrong state
    +-- AuditWriteFailure        audit sink failed (never leaves the audit layer)
"""

from typing import Any, Optional


class FreightLedgerError(Exception):
    """Base class for all freight ledger errors."""

    code: str = "FREIGHT_LEDGER_ERROR"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for API responses and structured logs."""
        return {"code": self.code, "message": self.message, **self.details}


class ValidationError(FreightLedgerError, ValueError):
    """Input rejected by a calculator or by the load update path."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, **details: Any) -> None:
        super().__init__(message, field=field, **details)
        self.field = field


class ReasonRequiredError(FreightLedgerError):
    """A locked load had material fields changed without a reason."""

    code = "REASON_REQUIRED"

    def __init__(self, load_id: str, changed_fields: list[str]) -> None:
        super().__init__(
            "Changes to delivered load require a reason for: " + ", ".join(changed_fields),
            load_id=load_id,
            changed_fields=list(changed_fields),
        )
        self.load_id = load_id
        self.changed_fields = list(changed_fields)


class ConflictError(FreightLedgerError):
    """The stored load changed between read and write."""

    code = "CONFLICT"
    retryable = True

    def __init__(self, load_id: str, expected_version: int, actual_version: int) -> None:
        super().__init__(
            f"Load {load_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})",
            load_id=load_id,
            expected_version=expected_version,
            actual_version=actual_version,
        )
        self.load_id = load_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class LoadNotFoundError(FreightLedgerError):
    """No load exists with the given id."""

    code = "NOT_FOUND"

    def __init__(self, load_id: str) -> None:
        super().__init__(f"Load not found: {load_id}", load_id=load_id)
        self.load_id = load_id


class AdjustmentError(FreightLedgerError):
    """Adjustment request missing or not in a state that allows the action."""

    code = "ADJUSTMENT_ERROR"


class AuditWriteFailure(FreightLedgerError):
    """The primary audit sink rejected an entry."""

    code = "AUDIT_WRITE_FAILURE"
