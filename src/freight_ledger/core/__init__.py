"""
Core infrastructure for the freight ledger.

This module provides:
- Config: Configuration management
- Logging: structlog setup
- Exceptions: Typed error hierarchy
"""

from .config import ConfigManager, get_config
from .exceptions import (
    AdjustmentError,
    AuditWriteFailure,
    ConflictError,
    FreightLedgerError,
    LoadNotFoundError,
    ReasonRequiredError,
    ValidationError,
)

__all__ = [
    "ConfigManager",
    "get_config",
    "FreightLedgerError",
    "ValidationError",
    "ReasonRequiredError",
    "ConflictError",
    "LoadNotFoundError",
    "AdjustmentError",
    "AuditWriteFailure",
]
