"""
Adjustment Service - reasoned post-delivery changes with optional approval.

An adjustment request carries a patch and a reason. Without approval it is
applied straight away; with approval it waits as ``pending`` until someone
approves (applies) or rejects it.
"""

import threading
from typing import Any, Optional
from uuid import uuid4

from freight_ledger.core.exceptions import AdjustmentError, ValidationError
from freight_ledger.data.models.adjustment import AdjustmentRequest, AdjustmentStatus
from freight_ledger.data.models.audit import Actor
from freight_ledger.locking.policy import has_reason
from freight_ledger.services.base import BaseService
from freight_ledger.services.loads import LoadService


class AdjustmentService(BaseService):
    """Manages adjustment requests for loads."""

    def __init__(self, load_service: LoadService, **kwargs: Any) -> None:
        """
        Initialize the adjustment service.

        Args:
            load_service: Service used to apply approved patches
        """
        kwargs.setdefault("config_manager", load_service.config_manager)
        super().__init__(service_name="adjustments", **kwargs)
        self.load_service = load_service
        self._requests: dict[str, AdjustmentRequest] = {}
        self._lock = threading.Lock()

    def create_adjustment(
        self,
        load_id: str,
        patch: dict[str, Any],
        reason: str,
        created_by: Actor,
        require_approval: bool = False,
    ) -> AdjustmentRequest:
        """
        Create an adjustment request for a load.

        Args:
            load_id: Load to adjust
            patch: Fields to change (e.g. {"rate": Decimal("1200")})
            reason: Required justification
            created_by: User requesting the adjustment
            require_approval: If True, the request waits for approval

        Returns:
            The request; ``applied`` when no approval was required

        Raises:
            ValidationError: If the reason is blank or the patch is empty
        """
        if not has_reason(reason):
            raise ValidationError("Adjustment reason is required", field="reason")
        if not patch:
            raise ValidationError("Adjustment patch cannot be empty", field="patch")

        # Fail fast on a missing load.
        self.load_service.get_load(load_id)

        request = AdjustmentRequest(
            id=uuid4().hex,
            load_id=load_id,
            patch=dict(patch),
            reason=reason.strip(),
            status=AdjustmentStatus.PENDING if require_approval else AdjustmentStatus.APPROVED,
            require_approval=require_approval,
            created_by=created_by.uid,
            created_at=self.now(),
        )
        self._save(request)
        self.logger.info(
            "adjustment_created",
            adjustment_id=request.id,
            load_id=load_id,
            require_approval=require_approval,
            fields=sorted(patch),
        )

        if not require_approval:
            return self._apply(request, created_by)
        return request

    def approve_adjustment(self, adjustment_id: str, approved_by: Actor) -> AdjustmentRequest:
        """
        Approve a pending request and apply it to the load.

        Raises:
            AdjustmentError: If the request does not exist or is not pending
        """
        request = self._pending(adjustment_id)
        request = request.model_copy(
            update={
                "status": AdjustmentStatus.APPROVED,
                "approved_by": approved_by.uid,
                "approved_at": self.now(),
            }
        )
        self._save(request)
        self.logger.info("adjustment_approved", adjustment_id=adjustment_id, approved_by=approved_by.uid)
        return self._apply(request, approved_by)

    def reject_adjustment(
        self, adjustment_id: str, rejected_by: Actor, rejection_reason: str
    ) -> AdjustmentRequest:
        """
        Reject a pending request. The load is left untouched.

        Raises:
            AdjustmentError: If the request does not exist or is not pending
        """
        request = self._pending(adjustment_id)
        request = request.model_copy(
            update={
                "status": AdjustmentStatus.REJECTED,
                "rejected_by": rejected_by.uid,
                "rejected_at": self.now(),
                "rejection_reason": rejection_reason.strip(),
            }
        )
        self._save(request)
        self.logger.info("adjustment_rejected", adjustment_id=adjustment_id, rejected_by=rejected_by.uid)
        return request

    def get_adjustment(self, adjustment_id: str) -> AdjustmentRequest:
        """Return a request or raise AdjustmentError."""
        with self._lock:
            request = self._requests.get(adjustment_id)
        if request is None:
            raise AdjustmentError(f"Adjustment not found: {adjustment_id}", adjustment_id=adjustment_id)
        return request

    def list_adjustments(
        self, load_id: str, status: Optional[AdjustmentStatus] = None
    ) -> list[AdjustmentRequest]:
        """Requests for a load, newest first, optionally filtered by status."""
        with self._lock:
            requests = [r for r in self._requests.values() if r.load_id == load_id]
        if status is not None:
            requests = [r for r in requests if r.status == status]
        return sorted(requests, key=lambda r: r.created_at, reverse=True)

    def list_pending_adjustments(self) -> list[AdjustmentRequest]:
        """
        Requests awaiting approval across every load, oldest first.

        Returns:
            Pending requests in the order an approver should work through them
        """
        with self._lock:
            pending = [r for r in self._requests.values() if r.status == AdjustmentStatus.PENDING]
        return sorted(pending, key=lambda r: r.created_at)

    def _pending(self, adjustment_id: str) -> AdjustmentRequest:
        request = self.get_adjustment(adjustment_id)
        if request.status != AdjustmentStatus.PENDING:
            raise AdjustmentError(
                f"Adjustment is already {request.status.value}",
                adjustment_id=adjustment_id,
                status=request.status.value,
            )
        return request

    def _apply(self, request: AdjustmentRequest, actor: Actor) -> AdjustmentRequest:
        load = self.load_service.apply_update(
            request.load_id, request.patch, actor, reason=request.reason
        )
        applied = request.model_copy(
            update={
                "status": AdjustmentStatus.APPLIED,
                "applied_at": self.now(),
                "applied_version": load.version,
            }
        )
        self._save(applied)
        self.logger.info(
            "adjustment_applied",
            adjustment_id=request.id,
            load_id=request.load_id,
            version=load.version,
        )
        return applied

    def _save(self, request: AdjustmentRequest) -> None:
        with self._lock:
            self._requests[request.id] = request
