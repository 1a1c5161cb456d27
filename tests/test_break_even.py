"""
Tests for the Break-Even calculator.

The break-even month is the first month whose planned revenue reaches the
break-even revenue; the series covers at most 36 months.
"""
from decimal import Decimal

import pytest
from hypothesis import given, strategies as st

from finanzplan.break_even import (
    BreakEvenInput,
    SensitivityParameter,
    analyze_scenarios,
    compute_break_even,
    compute_break_even_from_plan,
    find_break_even_month,
    sensitivity_analysis,
    validate_realism,
)
from finanzplan.exceptions import ValidationError
from finanzplan.planung import Umsatzplanung


fixed_costs = st.decimals(min_value=0, max_value=Decimal("1000000"), places=2, allow_nan=False)
variable_percents = st.decimals(min_value=0, max_value=99, places=2, allow_nan=False)


# =============================================================================
# Core formula
# =============================================================================

class TestBreakEven:

    def test_revenue(self):
        result = compute_break_even(3000, 10)
        assert result.break_even_umsatz_monatlich == Decimal("3333.33")
        assert result.break_even_umsatz_jaehrlich == Decimal("40000.00")
        assert result.deckungsbeitrag == Decimal("90.00")

    @given(fixed_costs, variable_percents)
    def test_break_even_revenue_covers_fixed_costs(self, fixed, variable):
        result = compute_break_even(fixed, variable)
        contribution = result.break_even_umsatz_monatlich * (1 - variable / 100)
        assert abs(contribution - fixed) <= Decimal("0.01")

    def test_variable_costs_at_limit(self):
        result = compute_break_even(1000, 99)
        assert result.break_even_umsatz_monatlich == Decimal("100000.00")

    @pytest.mark.parametrize("variable", [Decimal("99.5"), 100, -1])
    def test_variable_out_of_range_raises(self, variable):
        with pytest.raises(ValidationError) as exc_info:
            compute_break_even(3000, variable)
        assert exc_info.value.field == "variableKostenProzent"

    def test_negative_fixed_costs_raise(self):
        with pytest.raises(ValidationError):
            compute_break_even(-1, 10)


# =============================================================================
# Timing
# =============================================================================

class TestBreakEvenMonth:

    def test_first_month_reaching_break_even(self):
        series = [1000, 2000, 4000, 5000]
        result = compute_break_even(3000, 10, series)
        assert result.break_even_monat == 3
        assert result.is_reachable_in_36_months

    def test_first_crossing_wins_for_non_monotonic_series(self):
        assert find_break_even_month([4000, 1000, 1000, 5000], Decimal("3333.33")) == 1

    def test_not_reached_within_horizon(self):
        result = compute_break_even(3000, 10, [1000] * 36 + [10000])
        assert result.break_even_monat is None
        assert not result.is_reachable_in_36_months
        assert result.warnings
        assert result.industry_comparison.is_above_worrying

    def test_estimate_without_series(self):
        result = compute_break_even(3000, 10)
        assert result.break_even_monat is None
        assert result.months_to_break_even == Decimal("3.33")
        assert result.is_reachable_in_36_months

    def test_from_plan(self, kostenplanung, umsatzplanung):
        result = compute_break_even_from_plan(kostenplanung, umsatzplanung)
        assert result.variable_kosten_prozent == Decimal("10.00")
        assert result.break_even_umsatz_monatlich == Decimal("3333.33")
        assert result.break_even_monat == 2
        assert result.industry_comparison.is_below_average

    def test_from_plan_without_revenue_in_year1(self, kostenplanung, umsatzplanung):
        late_start = umsatzplanung.model_copy(update={
            "umsatz_jahr1": [Decimal("0")] * 12,
            "umsatz_jahr2": Decimal("120000"),
        })
        result = compute_break_even_from_plan(kostenplanung, late_start)
        # ratio of year 2: 14.000 material on 120.000 revenue
        assert result.variable_kosten_prozent == Decimal("11.67")
        assert result.break_even_umsatz_monatlich == Decimal("3396.23")
        assert result.break_even_monat == 13

    def test_from_plan_without_any_revenue(self, kostenplanung):
        no_revenue = Umsatzplanung(
            umsatz_jahr1=[Decimal("0")] * 12,
            umsatz_jahr2=Decimal("0"),
            umsatz_jahr3=Decimal("0"),
        )
        result = compute_break_even_from_plan(kostenplanung, no_revenue)
        assert result.variable_kosten_prozent == Decimal("0.00")
        assert result.break_even_monat is None
        assert not result.is_reachable_in_36_months


# =============================================================================
# Sensitivity and scenarios
# =============================================================================

class TestSensitivity:

    def test_fixed_cost_impact_is_proportional(self):
        data = BreakEvenInput(fixkosten_monatlich=Decimal("3000"), variable_kosten_prozent=Decimal("10"))
        result = sensitivity_analysis(data, SensitivityParameter.FIXKOSTEN, changes=[10, -20])
        assert [point.impact for point in result.points] == [Decimal("10.00"), Decimal("-20.00")]
        assert result.base_break_even == Decimal("3333.33")

    def test_variable_changes_beyond_limit_are_skipped(self):
        data = BreakEvenInput(fixkosten_monatlich=Decimal("3000"), variable_kosten_prozent=Decimal("90"))
        result = sensitivity_analysis(data, SensitivityParameter.VARIABLE_KOSTEN, changes=[5, 20])
        assert [point.change for point in result.points] == [Decimal("5.00")]
        assert result.points[0].value == Decimal("94.50")

    def test_scenarios(self):
        data = BreakEvenInput(fixkosten_monatlich=Decimal("3000"), variable_kosten_prozent=Decimal("90"))
        base, optimistic, conservative = analyze_scenarios(data)
        assert base.result.break_even_umsatz_monatlich == Decimal("30000.00")
        assert optimistic.fixkosten_monatlich == Decimal("2400.00")
        assert optimistic.variable_kosten_prozent == Decimal("72.00")
        assert conservative.variable_kosten_prozent == Decimal("95.00")
        assert (
            optimistic.result.break_even_umsatz_monatlich
            < base.result.break_even_umsatz_monatlich
            < conservative.result.break_even_umsatz_monatlich
        )


class TestRealism:

    def test_low_break_even_for_gastronomy(self):
        result = compute_break_even(3000, 10)
        check = validate_realism(result, "restaurant")
        assert check.is_realistic
        assert any("ungewöhnlich niedrig für restaurant" in w for w in check.warnings)

    def test_many_warnings_make_plan_unrealistic(self):
        result = compute_break_even(16000, 80)
        check = validate_realism(result, "gastronomie")
        assert len(check.warnings) > 2
        assert not check.is_realistic

    def test_consulting_within_band(self):
        result = compute_break_even(6000, 35, [10000] * 12)
        assert validate_realism(result, "beratung").is_realistic
