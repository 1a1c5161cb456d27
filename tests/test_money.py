"""
Tests for the money module.

Covers exact decimal arithmetic, rounding, input validation and the
German EUR formatting and parsing.
"""
import decimal
from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from finanzplan.exceptions import ValidationError
from finanzplan.money import (
    DecimalContext,
    format_eur,
    format_percent,
    parse_eur,
    pct,
    require_non_negative,
    require_percentage,
    round2,
    sum_amounts,
    to_decimal,
)


amounts = st.decimals(
    min_value=Decimal("-1000000000"),
    max_value=Decimal("1000000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


# =============================================================================
# DecimalContext
# =============================================================================

class TestDecimalContext:
    """Arithmetic runs in an explicit context, never the thread-local one."""

    def test_sum_is_exact(self, ctx):
        assert ctx.sum([Decimal("0.1"), Decimal("0.2")]) == Decimal("0.3")

    def test_float_inputs_do_not_drift(self):
        assert sum_amounts([0.1, 0.2]) == Decimal("0.3")

    def test_divide_by_zero_raises_validation_error(self, ctx):
        with pytest.raises(ValidationError):
            ctx.div(Decimal("1"), Decimal("0"))

    def test_pct_of_zero_total_raises(self):
        with pytest.raises(ValidationError):
            pct(5, 0)

    def test_round2_is_half_up(self, ctx):
        assert ctx.round2(Decimal("2.345")) == Decimal("2.35")
        assert ctx.round2(Decimal("2.344")) == Decimal("2.34")
        assert ctx.round2(Decimal("-2.345")) == Decimal("-2.35")

    def test_thread_local_context_untouched(self):
        before = decimal.getcontext().prec
        ctx = DecimalContext(precision=5)
        ctx.div(Decimal("1"), Decimal("3"))
        assert decimal.getcontext().prec == before

    def test_precision_applies_to_division(self):
        ctx = DecimalContext(precision=5)
        assert ctx.div(Decimal("1"), Decimal("3")) == Decimal("0.33333")


# =============================================================================
# Input validation
# =============================================================================

class TestToDecimal:

    def test_float_goes_through_string(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int_and_string(self):
        assert to_decimal(42) == Decimal("42")
        assert to_decimal(" 12.50 ") == Decimal("12.50")

    @pytest.mark.parametrize("value", [True, "abc", None, "NaN", float("inf"), [1]])
    def test_rejects_invalid(self, value):
        with pytest.raises(ValidationError):
            to_decimal(value, "betrag")

    def test_negative_amount_carries_field(self):
        with pytest.raises(ValidationError) as exc_info:
            require_non_negative(-1, "miete")
        assert exc_info.value.field == "miete"

    def test_percentage_bounds(self):
        assert require_percentage(100, "quote") == Decimal("100")
        with pytest.raises(ValidationError):
            require_percentage(Decimal("100.01"), "quote")
        with pytest.raises(ValidationError):
            require_percentage(-1, "quote")

    def test_round2_helper(self):
        assert round2("1.005") == Decimal("1.01")


# =============================================================================
# Formatting
# =============================================================================

class TestFormatEur:

    @pytest.mark.parametrize("amount,expected", [
        (Decimal("1234.56"), "1.234,56 €"),
        (Decimal("0"), "0,00 €"),
        (Decimal("-1234.5"), "-1.234,50 €"),
        (Decimal("1234567.891"), "1.234.567,89 €"),
        (Decimal("999"), "999,00 €"),
    ])
    def test_format(self, amount, expected):
        assert format_eur(amount) == expected

    def test_format_percent(self):
        assert format_percent(Decimal("12.345")) == "12,35 %"


class TestParseEur:

    @pytest.mark.parametrize("text,expected", [
        ("1.234,56 €", Decimal("1234.56")),
        ("1234,56", Decimal("1234.56")),
        ("1.234 €", Decimal("1234")),
        (" 1.234,56 €", Decimal("1234.56")),
        ("-50,00 €", Decimal("-50.00")),
        ("1.000.000,00 EUR", Decimal("1000000.00")),
    ])
    def test_parse(self, text, expected):
        assert parse_eur(text) == expected

    @pytest.mark.parametrize("text", ["abc", "12.34,5", "", "1,2,3", "1.23 €"])
    def test_rejects_malformed(self, text):
        with pytest.raises(ValidationError):
            parse_eur(text)

    def test_rejects_non_string(self):
        with pytest.raises(ValidationError):
            parse_eur(1234)

    @settings(max_examples=1000)
    @given(amounts)
    def test_parse_inverts_format(self, amount):
        assert parse_eur(format_eur(amount)) == amount
