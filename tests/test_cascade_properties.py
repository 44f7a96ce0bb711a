"""
Property-based tests for the calculation cascade.

Hypothesis generates arbitrary non-negative load inputs and checks that the
money invariants hold and that recomputation is stable.
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from freight_ledger.core.exceptions import ValidationError
from freight_ledger.data.models import (
    CommissionType,
    DERIVED_FIELDS,
    DispatcherProfile,
    DriverProfile,
    FactoringCompany,
    FscType,
    Load,
    PaymentProfile,
    PayType,
    TenantConfig,
)
from freight_ledger.engine import CalculationContext, calculate_load, to_money, verify_invariants

money = st.decimals(min_value=Decimal("0"), max_value=Decimal("250000"), places=2)
quantity = st.decimals(min_value=Decimal("0"), max_value=Decimal("5000"), places=3)
percent = st.decimals(min_value=Decimal("0"), max_value=Decimal("100"), places=2)
unit_rate = st.decimals(min_value=Decimal("0"), max_value=Decimal("1000"), places=4)
sub_cent = st.decimals(min_value=Decimal("0"), max_value=Decimal("250000"), places=4).filter(
    lambda value: to_money(value) != value
)

DRIVER = DriverProfile(
    id="drv-1",
    name="Olivia Owner",
    payment=PaymentProfile(type=PayType.PERCENTAGE, percentage=Decimal("88")),
)
TEAM_DRIVER = DriverProfile(
    id="drv-3",
    name="Terry Team",
    payment=PaymentProfile(type=PayType.PER_MILE, per_mile_rate=Decimal("0.30")),
)
DISPATCHER = DispatcherProfile(
    id="dsp-2", name="Percy Percent", commission_type=CommissionType.PERCENTAGE, commission_rate=Decimal("5")
)
TENANT = TenantConfig(
    default_factoring_company_id="rts",
    factoring_companies=[FactoringCompany(id="rts", name="RTS Financial", fee_percentage=Decimal("3"))],
)


@st.composite
def loads(draw):
    return Load(
        id="load-1",
        load_number="L-00001",
        rate=draw(money),
        miles=draw(quantity),
        driver_id="drv-1",
        is_team_load=draw(st.booleans()),
        driver2_id="drv-3",
        dispatcher_id=draw(st.sampled_from([None, "dsp-2"])),
        is_factored=draw(st.booleans()),
        factoring_fee_percent=draw(st.one_of(st.none(), percent)),
        has_detention=draw(st.booleans()),
        detention_hours=draw(quantity),
        detention_rate=draw(unit_rate),
        has_layover=draw(st.booleans()),
        layover_days=draw(quantity),
        layover_rate=draw(unit_rate),
        has_lumper=draw(st.booleans()),
        lumper_fee=draw(money),
        has_fsc=draw(st.booleans()),
        fsc_type=draw(st.one_of(st.none(), st.sampled_from(list(FscType)))),
        fsc_rate=draw(unit_rate),
        has_tonu=draw(st.booleans()),
        tonu_fee=draw(money),
        other_accessorials=draw(money),
    )


def _context(load: Load) -> CalculationContext:
    return CalculationContext(
        driver=DRIVER,
        driver2=TEAM_DRIVER if load.is_team_load else None,
        dispatcher=DISPATCHER if load.dispatcher_id else None,
        tenant_config=TENANT,
    )


class TestCascadeInvariants:

    @given(load=loads())
    @settings(max_examples=200, deadline=None)
    def test_money_invariants_hold(self, load):
        derived = calculate_load(load, _context(load)).load
        assert verify_invariants(derived) == []
        assert derived.grand_total == derived.rate + derived.total_accessorials
        assert derived.total_driver_pay == derived.driver_total_gross + (
            derived.driver2_earnings if derived.is_team_load else 0
        )
        if derived.is_factored:
            assert derived.factoring_fee + derived.factored_amount == derived.grand_total

    @given(load=loads())
    @settings(max_examples=200, deadline=None)
    def test_derived_amounts_are_non_negative(self, load):
        derived = calculate_load(load, _context(load)).load
        for field in (
            "total_accessorials",
            "grand_total",
            "driver_total_gross",
            "driver2_earnings",
            "dispatcher_commission_amount",
            "factoring_fee",
            "factored_amount",
        ):
            assert getattr(derived, field) >= 0, field

    @given(load=loads())
    @settings(max_examples=200, deadline=None)
    def test_derived_amounts_are_whole_cents(self, load):
        derived = calculate_load(load, _context(load)).load
        for field in sorted(DERIVED_FIELDS):
            value = getattr(derived, field)
            assert to_money(value) == value, field

    @given(
        load=loads(),
        field=st.sampled_from(["rate", "lumper_fee", "tonu_fee", "other_accessorials"]),
        amount=sub_cent,
    )
    @settings(max_examples=100, deadline=None)
    def test_fractional_cent_amounts_are_rejected(self, load, field, amount):
        candidate = load.model_copy(update={field: amount})
        with pytest.raises(ValidationError) as exc_info:
            calculate_load(candidate, _context(candidate))
        assert exc_info.value.field == field

    @given(load=loads())
    @settings(max_examples=100, deadline=None)
    def test_recomputation_is_idempotent(self, load):
        context = _context(load)
        first = calculate_load(load, context)
        second = calculate_load(first.load, context)
        assert second.load == first.load
        assert second.warnings == first.warnings

    @given(load=loads())
    @settings(max_examples=100, deadline=None)
    def test_input_snapshot_is_not_mutated(self, load):
        before = load.model_dump()
        calculate_load(load, _context(load))
        assert load.model_dump() == before


class TestRateChangePropagation:

    def test_rate_change_flows_to_every_dependent_field(self, make_load, directory):
        load = make_load(
            rate=Decimal("1000"),
            miles=Decimal("500"),
            driver_id="drv-1",
            dispatcher_id="dsp-2",
            is_factored=True,
            factoring_company_id="rts",
            has_fsc=True,
            fsc_type=FscType.PERCENTAGE,
            fsc_rate=Decimal("10"),
        )
        first = calculate_load(load, directory.context_for(load)).load
        assert first.grand_total == Decimal("1100.00")

        changed = first.model_copy(update={"rate": Decimal("2000")})
        second = calculate_load(changed, directory.context_for(changed)).load
        assert second.fsc_amount == Decimal("200.00")
        assert second.grand_total == Decimal("2200.00")
        assert second.driver_base_pay == Decimal("1760.00")
        assert second.dispatcher_commission_amount == Decimal("100.00")
        assert second.factoring_fee == Decimal("66.00")
        assert second.factored_amount == Decimal("2134.00")
