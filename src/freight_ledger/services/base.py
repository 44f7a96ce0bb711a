"""
Base service class for freight ledger services.

Provides common functionality:
- Configuration access
- Structured logging
- Operation tracking
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from pydantic import BaseModel

from freight_ledger.core.config import ConfigManager, get_config
from freight_ledger.engine.common import CalculationWarning


class OperationRecord(BaseModel):
    """
    Structured record of a completed service operation.

    Kept in memory for debugging and exported on demand.
    """

    timestamp: datetime
    service_name: str
    operation: str
    entity_id: Optional[str] = None
    details: dict[str, Any]
    warnings: list[CalculationWarning]
    execution_time_seconds: float


class BaseService:
    """
    Base class for freight ledger services.

    Provides:
    - Configuration loading
    - Operation logging
    - Calculation warning reporting
    """

    def __init__(
        self,
        service_name: str,
        config_manager: Optional[ConfigManager] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """
        Initialize the base service.

        Args:
            service_name: Name of the service (e.g., "loads", "settlement")
            config_manager: Optional config manager (defaults to global instance)
            logger: Optional structured logger
        """
        self.service_name = service_name
        self.config_manager = config_manager or get_config()
        self.logger = logger or structlog.get_logger(service=service_name)

        # Operation history (for debugging)
        self.operation_history: list[OperationRecord] = []

    @staticmethod
    def now() -> datetime:
        """Current UTC time."""
        return datetime.now(timezone.utc)

    def log_warnings(self, warnings: list[CalculationWarning], entity_id: Optional[str] = None) -> None:
        """Surface calculation warnings in the log."""
        for warning in warnings:
            self.logger.warning(
                "calculation_warning",
                entity_id=entity_id,
                code=warning.code,
                field=warning.field,
                message=warning.message,
            )

    def record_operation(self, record: OperationRecord) -> None:
        """
        Log a completed operation.

        Args:
            record: OperationRecord with operation details
        """
        self.operation_history.append(record)
        self.logger.info(
            "operation_completed",
            operation=record.operation,
            entity_id=record.entity_id,
            warnings=len(record.warnings),
            execution_time=record.execution_time_seconds,
        )

    def __repr__(self) -> str:
        """String representation of the service."""
        return f"{self.__class__.__name__}(service_name='{self.service_name}')"
