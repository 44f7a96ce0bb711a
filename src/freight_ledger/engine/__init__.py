"""
Load financial calculation engine.

Pure calculators, applied in order by the cascade:
- Accessorials: detention, layover, lumper, FSC, TONU
- Totals: total accessorials and grand total
- Driver pay: primary and team driver
- Dispatcher: booking commission
- Factoring: fee and net factored amount
"""

from .accessorials import AccessorialAmounts, compute_accessorials
from .cascade import CalculationContext, CalculationResult, calculate_load, verify_invariants
from .common import CalculationWarning, to_money
from .dispatcher import DispatcherCommission, compute_dispatcher_commission
from .driver_pay import DriverPay, DriverSlot, compute_driver_pay, normalize_pay_percentage
from .factoring import (
    FactoringResult,
    compute_factoring,
    resolve_default_factoring_company,
)
from .totals import DerivedLoadFields, compute_load_totals

__all__ = [
    "AccessorialAmounts",
    "CalculationContext",
    "CalculationResult",
    "CalculationWarning",
    "DerivedLoadFields",
    "DispatcherCommission",
    "DriverPay",
    "DriverSlot",
    "FactoringResult",
    "calculate_load",
    "compute_accessorials",
    "compute_dispatcher_commission",
    "compute_driver_pay",
    "compute_factoring",
    "compute_load_totals",
    "normalize_pay_percentage",
    "resolve_default_factoring_company",
    "to_money",
    "verify_invariants",
]
