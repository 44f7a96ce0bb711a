"""
Tests for driver settlements.
"""

from datetime import date
from decimal import Decimal

import pytest

from freight_ledger.core.exceptions import ValidationError
from freight_ledger.engine import DriverSlot
from freight_ledger.services import DeductionBreakdown, OtherEarning

PERIOD = {"period_start": date(2026, 10, 5), "period_end": date(2026, 10, 11)}


@pytest.fixture
def settled_loads(load_service, load_data, actor):
    """Two delivered loads for the owner-operator."""
    first = load_service.create_load(
        {
            **load_data,
            "status": "delivered",
            "has_detention": True,
            "detention_hours": Decimal("3"),
            "detention_rate": Decimal("45"),
        },
        actor,
    )
    second = load_service.create_load(
        {
            **load_data,
            "status": "delivered",
            "rate": Decimal("2000"),
            "miles": Decimal("1000"),
            "has_layover": True,
            "layover_days": Decimal("1"),
            "layover_rate": Decimal("150"),
        },
        actor,
    )
    return [first, second]


class TestSettlementCalculation:

    def test_gross_deductions_and_net(self, settlement_service, owner_operator, settled_loads):
        settlement = settlement_service.calculate_settlement(
            owner_operator,
            settled_loads,
            deductions=DeductionBreakdown(insurance=Decimal("200"), fuel=Decimal("300")),
            other_earnings=[OtherEarning(type="bonus", description="Safety bonus", amount=Decimal("100"))],
            **PERIOD,
        )
        assert [entry.total_pay for entry in settlement.loads] == [Decimal("1015.00"), Decimal("1910.00")]
        assert settlement.gross_pay == Decimal("2925.00")
        assert settlement.total_deductions == Decimal("500")
        assert settlement.total_other_earnings == Decimal("100")
        assert settlement.net_pay == Decimal("2525.00")
        assert settlement.pay_status == "owed_to_driver"
        assert settlement.total_miles == Decimal("1500")
        assert settlement.effective_rate == Decimal("1.95")
        assert settlement.settlement_id == "SETTLE-drv-1-20261011"
        assert settlement.warnings == []
        assert "Pay rate: 88% of line haul" in settlement.notes

    def test_detention_and_layover_pass_through(self, settlement_service, owner_operator, settled_loads):
        settlement = settlement_service.calculate_settlement(
            owner_operator, settled_loads, deductions=DeductionBreakdown(), **PERIOD
        )
        first, second = settlement.loads
        assert (first.base_pay, first.detention, first.layover) == (Decimal("880.00"), Decimal("135.00"), 0)
        assert (second.base_pay, second.detention, second.layover) == (Decimal("1760.00"), 0, Decimal("150.00"))

    def test_tonu_passes_through(self, settlement_service, owner_operator, load_service, load_data, actor):
        load = load_service.create_load(
            {**load_data, "status": "delivered", "rate": Decimal("0"), "has_tonu": True, "tonu_fee": Decimal("250")},
            actor,
        )
        settlement = settlement_service.calculate_settlement(
            owner_operator, [load], deductions=DeductionBreakdown(), **PERIOD
        )
        assert settlement.loads[0].tonu == Decimal("250")
        assert settlement.gross_pay == Decimal("250")

    def test_team_driver_is_paid_from_second_slot(
        self, settlement_service, team_driver, load_service, load_data, actor
    ):
        load = load_service.create_load(
            {**load_data, "status": "delivered", "is_team_load": True, "driver2_id": "drv-3"}, actor
        )
        settlement = settlement_service.calculate_settlement(
            team_driver, [load], deductions=DeductionBreakdown(), **PERIOD
        )
        entry = settlement.loads[0]
        assert entry.slot == DriverSlot.TEAM
        assert entry.total_pay == Decimal("500.00")
        assert entry.detention == 0

    def test_default_deductions_come_from_config(self, settlement_service, owner_operator, settled_loads):
        settlement = settlement_service.calculate_settlement(owner_operator, settled_loads, **PERIOD)
        assert settlement.deductions.insurance == Decimal("150")
        assert settlement.total_deductions == Decimal("150")

    def test_driver_owes(self, settlement_service, owner_operator, settled_loads):
        settlement = settlement_service.calculate_settlement(
            owner_operator,
            settled_loads,
            deductions=DeductionBreakdown(cash_advance=Decimal("3000")),
            **PERIOD,
        )
        assert settlement.net_pay == Decimal("-75.00")
        assert settlement.pay_status == "driver_owes"
        assert "Driver owes company: $75.00" in settlement.notes

    def test_operation_is_recorded(self, settlement_service, owner_operator, settled_loads):
        settlement_service.calculate_settlement(owner_operator, settled_loads, **PERIOD)
        record = settlement_service.operation_history[-1]
        assert record.operation == "settlement_calculation"
        assert record.details["pay_status"] == "owed_to_driver"


class TestSettlementValidation:

    def test_load_for_another_driver_is_rejected(
        self, settlement_service, company_driver, settled_loads
    ):
        with pytest.raises(ValidationError, match="different driver"):
            settlement_service.calculate_settlement(company_driver, settled_loads, **PERIOD)

    def test_no_loads(self, settlement_service, owner_operator):
        with pytest.raises(ValidationError):
            settlement_service.calculate_settlement(owner_operator, [], **PERIOD)

    def test_inverted_period(self, settlement_service, owner_operator, settled_loads):
        with pytest.raises(ValidationError):
            settlement_service.calculate_settlement(
                owner_operator,
                settled_loads,
                period_start=date(2026, 10, 11),
                period_end=date(2026, 10, 5),
            )

    def test_undelivered_and_settled_loads_warn(
        self, settlement_service, owner_operator, load_service, load_data, actor
    ):
        in_transit = load_service.create_load({**load_data, "status": "in_transit"}, actor)
        settled = load_service.create_load(
            {**load_data, "status": "delivered", "settlement_id": "SETTLE-drv-1-20261004"}, actor
        )
        settlement = settlement_service.calculate_settlement(
            owner_operator, [in_transit, settled], deductions=DeductionBreakdown(), **PERIOD
        )
        assert [w.code for w in settlement.warnings] == ["undelivered_loads", "already_settled"]
