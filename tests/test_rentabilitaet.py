"""Tests for the Rentabilität projection."""
from decimal import Decimal

import pytest

from finanzplan.exceptions import ValidationError
from finanzplan.planung import Kostenplanung, Umsatzplanung
from finanzplan.rentabilitaet import (
    MarginTrend,
    TaxRegime,
    analyze_tax_implications,
    compare_with_industry_benchmarks,
    compute_profitability_metrics,
    compute_rentabilitaet,
    effective_tax_rate,
    validate_profitability_for_ba,
)


@pytest.fixture
def rentabilitaet(umsatzplanung, kostenplanung):
    return compute_rentabilitaet(umsatzplanung, kostenplanung, industry="beratung")


def _plan(monthly, jahr2, jahr3):
    return Umsatzplanung(
        umsatz_jahr1=[Decimal(monthly)] * 12,
        umsatz_jahr2=Decimal(jahr2),
        umsatz_jahr3=Decimal(jahr3),
    )


# =============================================================================
# Tax
# =============================================================================

class TestTaxRate:

    def test_gewerbe(self):
        assert effective_tax_rate(TaxRegime.GEWERBE) == Decimal("0.3085")

    def test_freiberuflich(self):
        assert effective_tax_rate(TaxRegime.FREIBERUFLICH) == Decimal("0.2735")

    def test_kleinunternehmer_below_threshold(self):
        assert effective_tax_rate(TaxRegime.KLEINUNTERNEHMER, 22000) == Decimal("0")

    def test_kleinunternehmer_above_threshold_is_gewerbe(self):
        assert effective_tax_rate(TaxRegime.KLEINUNTERNEHMER, 22001) == Decimal("0.3085")

    @pytest.mark.parametrize("override,expected", [
        (50, Decimal("0.35")),
        (10, Decimal("0.25")),
        (30, Decimal("0.3")),
    ])
    def test_override_is_clamped(self, override, expected):
        assert effective_tax_rate(TaxRegime.GEWERBE, override=override) == expected


# =============================================================================
# Projection
# =============================================================================

class TestProjection:

    def test_year1(self, rentabilitaet):
        jahr = rentabilitaet.jahr1
        assert jahr.umsatz == Decimal("92000.00")
        assert jahr.rohertrag == Decimal("82800.00")
        assert jahr.rohertragsmarge == Decimal("90.00")
        assert jahr.fixkosten == Decimal("36000.00")
        assert jahr.ergebnis_vor_steuern == Decimal("46800.00")
        assert jahr.steuersatz == Decimal("30.85")
        assert jahr.steuern == Decimal("14437.80")
        assert jahr.jahresueberschuss == Decimal("32362.20")

    def test_fixed_costs_escalate(self, rentabilitaet):
        assert rentabilitaet.jahr2.fixkosten == Decimal("39600.00")
        assert rentabilitaet.jahr3.fixkosten == Decimal("43200.00")
        assert rentabilitaet.jahr2.jahresueberschuss == Decimal("59745.60")

    def test_break_even_attached(self, rentabilitaet):
        assert rentabilitaet.break_even_monat == 2
        assert rentabilitaet.break_even_umsatz == Decimal("3333.33")

    def test_loss_is_not_taxed(self, umsatzplanung):
        kosten = Kostenplanung(fixkosten_monatlich=Decimal("10000"))
        result = compute_rentabilitaet(umsatzplanung, kosten)
        assert result.jahr1.ergebnis_vor_steuern == Decimal("-28000.00")
        assert result.jahr1.steuern == Decimal("0.00")
        assert result.jahr1.jahresueberschuss == Decimal("-28000.00")

    def test_kleinunternehmer_pays_no_tax_in_small_year(self):
        kosten = Kostenplanung(fixkosten_monatlich=Decimal("500"))
        result = compute_rentabilitaet(
            _plan("1500", "30000", "40000"), kosten, tax_regime=TaxRegime.KLEINUNTERNEHMER
        )
        assert result.jahr1.steuern == Decimal("0.00")
        assert result.jahr2.steuersatz == Decimal("30.85")

    def test_negative_revenue_raises(self, kostenplanung):
        with pytest.raises(ValidationError):
            compute_rentabilitaet(_plan("-1", "0", "0"), kostenplanung)


# =============================================================================
# Metrics and benchmarks
# =============================================================================

class TestMetrics:

    def test_growth_and_trend(self, rentabilitaet):
        metrics = compute_profitability_metrics(rentabilitaet)
        assert metrics.revenue_growth_year2 == Decimal("52.17")
        assert metrics.revenue_growth_year3 == Decimal("21.43")
        assert metrics.margin_trend == MarginTrend.IMPROVING

    def test_benchmarks(self, rentabilitaet):
        comparison = compare_with_industry_benchmarks(rentabilitaet, "beratung")
        assert comparison.gross_margin_typical == Decimal("85.00")
        assert comparison.warnings == []

    def test_tax_analysis(self, rentabilitaet):
        analysis = analyze_tax_implications(rentabilitaet)
        assert analysis.effective_rate == Decimal("30.85")
        assert any("IAB" in item for item in analysis.tax_optimization_potential)


# =============================================================================
# BA validation
# =============================================================================

class TestBAValidation:

    def test_compliant(self, rentabilitaet):
        validation = validate_profitability_for_ba(rentabilitaet, Decimal("22800"))
        assert validation.is_ba_compliant
        assert validation.blockers == []
        assert validation.to_dict()["isBACompliant"] is True

    def test_withdrawal_not_covered_in_year1(self, rentabilitaet):
        validation = validate_profitability_for_ba(rentabilitaet, Decimal("40000"))
        assert not validation.is_ba_compliant
        assert len(validation.blockers) == 1
        assert "Jahr 1" in validation.blockers[0]

    def test_break_even_beyond_limit_blocks(self):
        kosten = Kostenplanung(fixkosten_monatlich=Decimal("20000"))
        result = compute_rentabilitaet(_plan("1000", "12000", "12000"), kosten)
        assert result.break_even_monat is None
        assert not validate_profitability_for_ba(result).is_ba_compliant

    def test_high_growth_warns(self):
        kosten = Kostenplanung(fixkosten_monatlich=Decimal("100"))
        result = compute_rentabilitaet(_plan("1000", "40000", "120000"), kosten)
        validation = validate_profitability_for_ba(result)
        assert validation.is_ba_compliant
        assert any("CAGR" in warning for warning in validation.warnings)
