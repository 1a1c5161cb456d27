"""
Tests for the Liquidität cash plan.

The scenario from conftest starts with 40.500 € financing paid out in
month 1, a 45-day customer payment delay (two months) and a 20.000 € loan
whose annuity of 372,86 € is due from month 2.
"""
from datetime import date
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings as hypothesis_settings, strategies as st

from finanzplan.finanzierung import (
    Finanzierungsquelle,
    FinanzierungsquelleTyp,
    compute_finanzierung,
)
from finanzplan.kapitalbedarf import Investition, compute_kapitalbedarf
from finanzplan.liquiditaet import (
    MANDATORY_NEGATIVE_CASH_ACTION,
    PaymentTerms,
    analyze_liquidity_risks,
    apply_seasonal_adjustments,
    calculate_days_of_cash,
    compute_liquiditaet,
    delay_months,
    seasonal_factors,
    validate_liquidity_for_ba,
)
from finanzplan.planung import Kostenplanung, Umsatzplanung
from finanzplan.privatentnahme import compute_privatentnahme


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def kapitalbedarf(kapitalbedarf_input):
    return compute_kapitalbedarf(kapitalbedarf_input)


@pytest.fixture
def finanzierung(quellen, kapitalbedarf):
    return compute_finanzierung(quellen, kapitalbedarf.gesamtkapitalbedarf)


@pytest.fixture
def privatentnahme(privatentnahme_input):
    return compute_privatentnahme(privatentnahme_input)


@pytest.fixture
def liquiditaet(kapitalbedarf, finanzierung, privatentnahme, umsatzplanung, kostenplanung, gz_plan):
    return compute_liquiditaet(
        kapitalbedarf,
        finanzierung,
        privatentnahme,
        umsatzplanung,
        kostenplanung,
        gruendungszuschuss=gz_plan,
    )


def _assert_chained(result):
    assert result.monate[0].anfangsbestand == Decimal("0")
    for month in result.monate:
        assert month.endbestand == (
            month.anfangsbestand + month.einzahlungen_gesamt - month.auszahlungen_gesamt
        )
    for previous, current in zip(result.monate, result.monate[1:]):
        assert current.anfangsbestand == previous.endbestand


# =============================================================================
# Helpers
# =============================================================================

class TestDelayAndSeasonality:

    @pytest.mark.parametrize("days,months", [(0, 0), (1, 1), (30, 1), (31, 2), (45, 2), (60, 2), (61, 3)])
    def test_delay_months(self, days, months):
        assert delay_months(days) == months

    def test_quarterly_factors(self):
        adjusted = apply_seasonal_adjustments([Decimal("1000")] * 12, "handwerk")
        assert adjusted[0] == Decimal("800.0")
        assert adjusted[3] == Decimal("1200.0")
        assert adjusted[6] == Decimal("1100.0")
        assert adjusted[9] == Decimal("900.0")

    def test_start_month_shifts_quarters(self):
        adjusted = apply_seasonal_adjustments([Decimal("1000")] * 12, "handwerk", start_month=7)
        assert adjusted[0] == Decimal("1100.0")
        assert adjusted[6] == Decimal("800.0")

    def test_restaurant_alias_and_unknown_industry(self):
        assert seasonal_factors("Restaurant") == seasonal_factors("gastronomie")
        assert seasonal_factors("raumfahrt") == seasonal_factors(None)


# =============================================================================
# Simulation
# =============================================================================

class TestCashPlan:

    def test_chaining(self, liquiditaet):
        assert len(liquiditaet.monate) == 12
        _assert_chained(liquiditaet)

    def test_month1(self, liquiditaet):
        month = liquiditaet.monate[0]
        assert month.einzahlungen_umsatz == Decimal("0.00")
        assert month.einzahlungen_finanzierung == Decimal("40500.00")
        assert month.einzahlungen_gruendungszuschuss == Decimal("1500.00")
        assert month.auszahlungen_betrieb == Decimal("3300.00")
        assert month.auszahlungen_gruendung == Decimal("5500.00")
        assert month.auszahlungen_investitionen == Decimal("5000.00")
        assert month.auszahlungen_kapitaldienst == Decimal("0.00")
        assert month.auszahlungen_privat == Decimal("1900.00")
        assert month.endbestand == Decimal("26300.00")

    def test_revenue_arrives_after_delay(self, liquiditaet):
        collected = [m.einzahlungen_umsatz for m in liquiditaet.monate]
        assert collected[:3] == [Decimal("0.00"), Decimal("0.00"), Decimal("3000.00")]
        assert collected[11] == Decimal("10000.00")

    def test_loan_service_from_month2(self, liquiditaet):
        service = [m.auszahlungen_kapitaldienst for m in liquiditaet.monate]
        assert service[0] == Decimal("0.00")
        assert service[1:] == [Decimal("372.86")] * 11

    def test_gruendungszuschuss_phases(self, liquiditaet):
        gz = [m.einzahlungen_gruendungszuschuss for m in liquiditaet.monate]
        assert gz[:6] == [Decimal("1500.00")] * 6
        assert gz[6:] == [Decimal("300.00")] * 6

    def test_balances(self, liquiditaet):
        assert liquiditaet.monate[1].endbestand == Decimal("22127.14")
        assert liquiditaet.minimum_liquiditaet == Decimal("20481.42")
        assert liquiditaet.minimum_monat == 4
        assert liquiditaet.monate[-1].endbestand == Decimal("40698.54")
        assert not liquiditaet.hat_negative_liquiditaet

    def test_immediate_payment(
        self, kapitalbedarf, finanzierung, privatentnahme, umsatzplanung, kostenplanung
    ):
        result = compute_liquiditaet(
            kapitalbedarf, finanzierung, privatentnahme, umsatzplanung, kostenplanung,
            payment_terms=PaymentTerms(customer_payment_days=0),
        )
        assert result.monate[0].einzahlungen_umsatz == Decimal("3000.00")
        assert result.monate[0].einzahlungen_gruendungszuschuss == Decimal("0.00")

    def test_investment_in_purchase_month(
        self, kapitalbedarf_input, finanzierung, privatentnahme, umsatzplanung, kostenplanung
    ):
        data = kapitalbedarf_input.model_copy(update={
            "investitionen": [Investition(name="Auto", betrag=Decimal("8000"), anschaffungsmonat=3)],
        })
        result = compute_liquiditaet(
            compute_kapitalbedarf(data), finanzierung, privatentnahme, umsatzplanung, kostenplanung
        )
        outflows = [m.auszahlungen_investitionen for m in result.monate]
        assert outflows[2] == Decimal("8000.00")
        assert sum(outflows) == Decimal("8000.00")

    def test_dates_follow_start(self, liquiditaet, kapitalbedarf, finanzierung, privatentnahme,
                                umsatzplanung, kostenplanung):
        assert liquiditaet.monate[0].datum is None
        result = compute_liquiditaet(
            kapitalbedarf, finanzierung, privatentnahme, umsatzplanung, kostenplanung,
            start_datum=date(2026, 11, 1),
        )
        assert result.monate[0].datum == date(2026, 11, 1)
        assert result.monate[2].datum == date(2027, 1, 1)

    def test_gz_source_without_plan_is_lump_sum(
        self, kapitalbedarf, privatentnahme, umsatzplanung, kostenplanung, quellen
    ):
        gz = Finanzierungsquelle(
            typ=FinanzierungsquelleTyp.GRUENDUNGSZUSCHUSS, bezeichnung="GZ",
            betrag=Decimal("9000"), auszahlungsmonat=2,
        )
        finanzierung = compute_finanzierung(quellen + [gz], kapitalbedarf.gesamtkapitalbedarf)
        result = compute_liquiditaet(
            kapitalbedarf, finanzierung, privatentnahme, umsatzplanung, kostenplanung
        )
        assert result.monate[1].einzahlungen_gruendungszuschuss == Decimal("9000.00")
        assert result.monate[1].einzahlungen_finanzierung == Decimal("0.00")

    @hypothesis_settings(
        max_examples=50,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    @given(
        st.lists(st.decimals(min_value=0, max_value=50000, places=2), min_size=12, max_size=12),
        st.decimals(min_value=0, max_value=20000, places=2),
        st.integers(min_value=0, max_value=120),
    )
    def test_chaining_holds_for_any_plan(
        self, kapitalbedarf, finanzierung, privatentnahme, monthly, fixed, days
    ):
        umsatz = Umsatzplanung(umsatz_jahr1=monthly, umsatz_jahr2=Decimal("0"), umsatz_jahr3=Decimal("0"))
        kosten = Kostenplanung(fixkosten_monatlich=fixed)
        result = compute_liquiditaet(
            kapitalbedarf, finanzierung, privatentnahme, umsatz, kosten,
            payment_terms=PaymentTerms(customer_payment_days=days),
            saisonalitaet="gastronomie",
        )
        _assert_chained(result)
        assert result.hat_negative_liquiditaet == any(m.endbestand < 0 for m in result.monate)


# =============================================================================
# Analysis and BA validation
# =============================================================================

class TestDaysOfCash:

    def test_days(self):
        assert calculate_days_of_cash(3000, 1000) == 90
        assert calculate_days_of_cash(1500, 3000) == 15

    def test_rounds_down(self):
        assert calculate_days_of_cash(1000, 2900) == 10

    @pytest.mark.parametrize("burn", [0, -5])
    def test_no_burn(self, burn):
        assert calculate_days_of_cash(1000, burn) == 999


class TestRiskAnalysis:

    def test_reserve(self, liquiditaet):
        analysis = analyze_liquidity_risks(liquiditaet)
        assert analysis.average_monthly_outflow == Decimal("6883.46")
        assert analysis.recommended_reserve == Decimal("20650.37")
        assert analysis.actual_reserve == Decimal("20481.42")
        assert analysis.months_with_negative_cash == 0
        assert analysis.maximum_cash_need == Decimal("0.00")

    def test_seasonal_swing(self, liquiditaet):
        analysis = analyze_liquidity_risks(liquiditaet)
        assert analysis.seasonality_warnings

    def test_compliant_plan(self, liquiditaet):
        validation = validate_liquidity_for_ba(liquiditaet)
        assert validation.is_ba_compliant
        assert not validation.has_negative_liquidity
        assert not validation.has_tight_cash_flow
        assert validation.has_seasonal_risks


class TestNegativeLiquidity:

    @pytest.fixture
    def underfunded(self, kapitalbedarf, privatentnahme, umsatzplanung, kostenplanung):
        quellen = [
            Finanzierungsquelle(
                typ=FinanzierungsquelleTyp.EIGENKAPITAL, bezeichnung="EK", betrag=Decimal("10000")
            ),
        ]
        finanzierung = compute_finanzierung(quellen, kapitalbedarf.gesamtkapitalbedarf)
        return compute_liquiditaet(
            kapitalbedarf, finanzierung, privatentnahme, umsatzplanung, kostenplanung
        )

    def test_negative_months_reported(self, underfunded):
        assert underfunded.hat_negative_liquiditaet
        assert underfunded.negative_monate[0] == 1
        assert underfunded.monate[0].endbestand == Decimal("-5700.00")
        _assert_chained(underfunded)

    def test_blocker_with_mandatory_action(self, underfunded):
        validation = validate_liquidity_for_ba(underfunded)
        assert not validation.is_ba_compliant
        assert validation.has_negative_liquidity
        assert validation.blockers[0].startswith("Negative Liquidität in Monat 1")
        assert MANDATORY_NEGATIVE_CASH_ACTION in validation.action_items

    def test_any_deficit_blocks(self, kapitalbedarf, privatentnahme, umsatzplanung, kostenplanung):
        # 15.699,99 € cover everything in month 1 except one cent
        quellen = [
            Finanzierungsquelle(
                typ=FinanzierungsquelleTyp.EIGENKAPITAL, bezeichnung="EK", betrag=Decimal("15699.99")
            ),
        ]
        finanzierung = compute_finanzierung(quellen, kapitalbedarf.gesamtkapitalbedarf)
        result = compute_liquiditaet(
            kapitalbedarf, finanzierung, privatentnahme, umsatzplanung, kostenplanung
        )
        assert result.monate[0].endbestand == Decimal("-0.01")
        assert not validate_liquidity_for_ba(result).is_ba_compliant
