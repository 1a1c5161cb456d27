"""
German currency formatting.

Format examples:
- Currency: 1.234,56 €
- Percentages: 12,34 %
"""
import re
from decimal import Decimal
from typing import Any

from finanzplan.exceptions import ValidationError
from finanzplan.money.arithmetic import to_decimal
from finanzplan.money.context import DEFAULT_CONTEXT, DecimalContext


# Optional sign, integer part with either no grouping or strict groups of
# three digits separated by ".", optional decimal comma.
_GERMAN_AMOUNT = re.compile(r"^([+-]?)(\d{1,3}(?:\.\d{3})+|\d+)(?:,(\d+))?$")

_STRIP_CHARS = ("€", "EUR", " ", "\u00a0", "\u202f", "\t")


def _german_grouping(value: Decimal) -> str:
    """Render a non-negative cent-quantized Decimal as 1.234,56."""
    english = format(value, ",.2f")
    return english.replace(",", "_").replace(".", ",").replace("_", ".")


def format_eur(amount: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> str:
    """
    Format an amount in German EUR notation.

    Example: Decimal("1234.5") -> "1.234,50 €"
    """
    value = ctx.round2(to_decimal(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{_german_grouping(abs(value))} €"


def parse_eur(text: str) -> Decimal:
    """
    Parse a German EUR string back into an exact Decimal.

    Accepts "1.234,56 €", "1234,56", "1.234 €" and "-50,00 €".
    """
    if not isinstance(text, str):
        raise ValidationError(f"Kein EUR-Text: {text!r}")

    cleaned = text
    for chars in _STRIP_CHARS:
        cleaned = cleaned.replace(chars, "")

    match = _GERMAN_AMOUNT.match(cleaned)
    if not match:
        raise ValidationError(f"Ungültiger EUR-Betrag: {text!r}")

    sign, integer_part, fraction = match.groups()
    literal = f"{sign}{integer_part.replace('.', '')}"
    if fraction:
        literal = f"{literal}.{fraction}"
    return Decimal(literal)


def format_percent(value: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> str:
    """Format a percentage in German notation: 12,34 %"""
    rounded = ctx.round2(to_decimal(value))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{_german_grouping(abs(rounded))} %"
