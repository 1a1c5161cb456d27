"""Tests for the Privatentnahme calculator."""
from decimal import Decimal

import pytest

from finanzplan.exceptions import ValidationError
from finanzplan.privatentnahme import (
    FamilyStatus,
    Privatentnahme,
    Sustainability,
    adjust_for_region,
    analyze_spending_pattern,
    compare_with_averages,
    compute_privatentnahme,
    normalize_city,
    regional_factor,
    subsistence_floor,
    sum_monthly,
    to_annual,
    validate_privatentnahme,
)


# =============================================================================
# Totals
# =============================================================================

class TestTotals:

    def test_monthly_and_annual(self, privatentnahme_input):
        result = compute_privatentnahme(privatentnahme_input)
        assert result.monatliche_privatentnahme == Decimal("1900.00")
        assert result.jaehrliche_privatentnahme == Decimal("22800.00")

    def test_mapping_input(self):
        assert sum_monthly({"miete": 800, "lebensmittel": 0.1}) == Decimal("800.10")

    def test_negative_category_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            compute_privatentnahme(Privatentnahme(miete=Decimal("-1")))
        assert exc_info.value.field == "privatentnahme.miete"

    def test_annual_rejects_negative(self):
        with pytest.raises(ValidationError):
            to_annual(-100)


# =============================================================================
# Regional adjustment
# =============================================================================

class TestRegion:

    @pytest.mark.parametrize("city", ["München", "MÜNCHEN", "muenchen", "Munich", " münchen "])
    def test_city_spellings(self, city):
        assert normalize_city(city) == "muenchen"
        assert regional_factor(city) == Decimal("1.4")

    def test_unknown_city_uses_default(self):
        assert regional_factor("Kleinstadt") == Decimal("0.95")
        assert regional_factor(None) == Decimal("0.95")

    def test_expensive_city_raises_rent(self, privatentnahme_input):
        adjusted = adjust_for_region(privatentnahme_input, "München")
        assert adjusted.miete == Decimal("980.00")
        assert adjusted.lebensmittel == Decimal("448.00")
        assert adjusted.versicherungen == privatentnahme_input.versicherungen
        assert adjusted.sparrate == privatentnahme_input.sparrate

    def test_cheap_city_lowers_rent(self, privatentnahme_input):
        adjusted = adjust_for_region(privatentnahme_input, "Dresden")
        assert adjusted.miete == Decimal("630.00")
        assert adjusted.miete < privatentnahme_input.miete

    def test_subsistence_floor(self):
        assert subsistence_floor() == Decimal("1000.00")
        assert subsistence_floor("München") == Decimal("1400.00")
        assert subsistence_floor("Leipzig") == Decimal("900.00")


# =============================================================================
# Analysis
# =============================================================================

class TestSpendingPattern:

    def test_comfortable(self, privatentnahme_input):
        analysis = analyze_spending_pattern(privatentnahme_input)
        assert analysis.sustainability == Sustainability.COMFORTABLE
        assert analysis.housing_ratio == Decimal("36.84")

    def test_housing_tight(self):
        entry = Privatentnahme(
            miete=Decimal("900"), lebensmittel=Decimal("600"), versicherungen=Decimal("500")
        )
        analysis = analyze_spending_pattern(entry)
        assert analysis.housing_ratio == Decimal("45.00")
        assert analysis.sustainability == Sustainability.TIGHT

    def test_housing_critical(self):
        entry = Privatentnahme(
            miete=Decimal("1100"), lebensmittel=Decimal("400"), versicherungen=Decimal("500")
        )
        assert analyze_spending_pattern(entry).sustainability == Sustainability.CRITICAL

    def test_income_ratio(self, privatentnahme_input):
        analysis = analyze_spending_pattern(privatentnahme_input, income=2000)
        assert analysis.income_ratio == Decimal("95.00")
        assert analysis.sustainability == Sustainability.CRITICAL

    def test_empty_budget_has_zero_shares(self):
        analysis = analyze_spending_pattern(Privatentnahme())
        assert analysis.housing_ratio == Decimal("0.00")


class TestAverages:

    def test_single_reference(self, privatentnahme_input):
        result = compare_with_averages(privatentnahme_input, FamilyStatus.SINGLE)
        assert result.comparison["miete"] == "average"
        assert result.comparison["kommunikation"] == "below"
        assert result.comparison["versicherungen"] == "above"
        assert result.deviations["miete"] == Decimal("-12.50")


class TestValidation:

    def test_plausible(self, privatentnahme_input):
        validation = validate_privatentnahme(privatentnahme_input, "Berlin")
        assert validation.is_realistic
        assert validation.subsistence_floor == Decimal("1150.00")

    def test_below_subsistence(self):
        entry = Privatentnahme(miete=Decimal("500"), versicherungen=Decimal("400"))
        validation = validate_privatentnahme(entry)
        assert not validation.is_realistic
        assert "Existenzminimum" in validation.warnings[0]

    def test_floor_depends_on_region(self):
        entry = Privatentnahme(
            miete=Decimal("600"), lebensmittel=Decimal("300"), versicherungen=Decimal("300")
        )
        assert validate_privatentnahme(entry, "Leipzig").is_realistic
        assert not validate_privatentnahme(entry, "München").is_realistic

    def test_missing_insurance(self, privatentnahme_input):
        entry = privatentnahme_input.model_copy(update={"versicherungen": Decimal("50")})
        validation = validate_privatentnahme(entry)
        assert any("KV" in warning for warning in validation.warnings)
