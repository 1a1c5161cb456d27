"""Exact money and percentage operations."""
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from finanzplan.exceptions import ValidationError
from finanzplan.money.context import DEFAULT_CONTEXT, DecimalContext


def to_decimal(value: Any, field: Optional[str] = None) -> Decimal:
    """
    Convert an input value into a Decimal without binary float drift.

    Floats are converted through their shortest string representation,
    so 0.1 becomes Decimal("0.1") and not the binary approximation.
    """
    if value is None:
        raise ValidationError(f"Pflichtwert fehlt: {field or 'Betrag'}", field)
    if isinstance(value, bool):
        raise ValidationError(f"Ungültiger Betrag: {value!r}", field)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(f"Ungültiger Betrag: {value!r}", field)
    else:
        raise ValidationError(f"Ungültiger Betrag: {value!r}", field)

    if not result.is_finite():
        raise ValidationError(f"Ungültiger Betrag: {value!r}", field)
    return result


def require_non_negative(value: Any, field: str) -> Decimal:
    """Return value as Decimal, rejecting negative amounts."""
    amount = to_decimal(value, field)
    if amount < 0:
        raise ValidationError(f"{field} darf nicht negativ sein (erhalten: {amount})", field)
    return amount


def require_percentage(value: Any, field: str, upper: int = 100) -> Decimal:
    """Return value as Decimal, rejecting values outside [0, upper]."""
    percent = to_decimal(value, field)
    if percent < 0 or percent > upper:
        raise ValidationError(
            f"{field} muss zwischen 0 und {upper} liegen (erhalten: {percent})", field
        )
    return percent


def add(a: Any, b: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    return ctx.add(to_decimal(a), to_decimal(b))


def sub(a: Any, b: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    return ctx.sub(to_decimal(a), to_decimal(b))


def mul(a: Any, b: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    return ctx.mul(to_decimal(a), to_decimal(b))


def div(a: Any, b: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    return ctx.div(to_decimal(a), to_decimal(b))


def pct(part: Any, total: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    """Share of part in total, in percent."""
    return ctx.pct(to_decimal(part), to_decimal(total))


def round2(value: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    """Round half up to 2 decimals."""
    return ctx.round2(to_decimal(value))


def sum_amounts(values: Iterable[Any], ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    return ctx.sum(to_decimal(v) for v in values)
