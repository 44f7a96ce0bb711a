"""
Post-delivery lock policy.
"""

from .policy import (
    MATERIAL_FIELDS,
    FieldChange,
    UpdateEvaluation,
    diff_loads,
    evaluate_update,
    has_reason,
    is_load_locked,
)

__all__ = [
    "MATERIAL_FIELDS",
    "FieldChange",
    "UpdateEvaluation",
    "diff_loads",
    "evaluate_update",
    "has_reason",
    "is_load_locked",
]
