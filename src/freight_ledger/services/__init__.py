"""
Freight ledger services.

This module contains services for:
- Loads: create, update, status changes and deletion through the cascade
- Adjustments: reasoned post-delivery changes with optional approval
- Settlement: driver pay settlements
- Migration: legacy pay percentage cleanup
"""

from .adjustments import AdjustmentService
from .base import BaseService, OperationRecord
from .factory import Services, build_services
from .loads import LoadService
from .migration import MigrationReport, migrate_driver_percentages
from .settlement import (
    DeductionBreakdown,
    DriverSettlement,
    OtherEarning,
    SettlementLoadEntry,
    SettlementService,
)

__all__ = [
    "BaseService",
    "OperationRecord",
    "LoadService",
    "AdjustmentService",
    "SettlementService",
    "DeductionBreakdown",
    "DriverSettlement",
    "OtherEarning",
    "SettlementLoadEntry",
    "MigrationReport",
    "migrate_driver_percentages",
    "Services",
    "build_services",
]
