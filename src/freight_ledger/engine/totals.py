"""
Load totals calculator - accessorial total and grand total.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from freight_ledger.data.models.load import Load
from freight_ledger.engine.accessorials import compute_accessorials
from freight_ledger.engine.common import ZERO, CalculationWarning


class DerivedLoadFields(BaseModel):
    """Accessorial amounts plus the totals every other calculator reads."""

    model_config = ConfigDict(frozen=True)

    detention_amount: Decimal = ZERO
    layover_amount: Decimal = ZERO
    lumper_amount: Decimal = ZERO
    fsc_amount: Decimal = ZERO
    tonu_amount: Decimal = ZERO
    other_accessorials: Decimal = ZERO
    total_accessorials: Decimal = ZERO
    grand_total: Decimal = ZERO
    warnings: list[CalculationWarning] = Field(default_factory=list)

    def as_load_update(self) -> dict[str, Decimal]:
        """Fields to write back onto the load."""
        return {
            "detention_amount": self.detention_amount,
            "layover_amount": self.layover_amount,
            "lumper_amount": self.lumper_amount,
            "fsc_amount": self.fsc_amount,
            "total_accessorials": self.total_accessorials,
            "grand_total": self.grand_total,
        }


def compute_load_totals(load: Load) -> DerivedLoadFields:
    """
    Compute accessorials, total accessorials and grand total.

    Args:
        load: Load with raw inputs

    Returns:
        DerivedLoadFields; ``grand_total == rate + total_accessorials``
    """
    amounts = compute_accessorials(load)
    total_accessorials = amounts.total
    return DerivedLoadFields(
        detention_amount=amounts.detention_amount,
        layover_amount=amounts.layover_amount,
        lumper_amount=amounts.lumper_amount,
        fsc_amount=amounts.fsc_amount,
        tonu_amount=amounts.tonu_amount,
        other_accessorials=amounts.other_accessorials,
        total_accessorials=total_accessorials,
        grand_total=load.rate + total_accessorials,
        warnings=amounts.warnings,
    )
