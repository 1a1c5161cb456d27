"""
Decimal Context - the single arithmetic configuration of the core.

All calculators receive a DecimalContext explicitly instead of relying on
the thread-local decimal context, so concurrent computations can never
observe a precision or rounding mode changed by somebody else.
"""
from dataclasses import dataclass, field
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Iterable

from finanzplan.config import settings
from finanzplan.exceptions import ValidationError


CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class DecimalContext:
    """
    Immutable arithmetic configuration.

    Wraps a decimal.Context (precision 28, round half up by default) and
    exposes the operations the calculators need. Every result is computed
    with this context, never with decimal.getcontext().
    """
    precision: int = 28
    rounding: str = ROUND_HALF_UP
    _context: Context = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            "_context",
            Context(prec=self.precision, rounding=self.rounding),
        )

    def add(self, a: Decimal, b: Decimal) -> Decimal:
        return self._context.add(a, b)

    def sub(self, a: Decimal, b: Decimal) -> Decimal:
        return self._context.subtract(a, b)

    def mul(self, a: Decimal, b: Decimal) -> Decimal:
        return self._context.multiply(a, b)

    def div(self, a: Decimal, b: Decimal) -> Decimal:
        if b == 0:
            raise ValidationError("Division durch Null")
        return self._context.divide(a, b)

    def pct(self, part: Decimal, total: Decimal) -> Decimal:
        """part / total × 100."""
        return self.mul(self.div(part, total), HUNDRED)

    def power(self, base: Decimal, exponent: int) -> Decimal:
        return self._context.power(base, Decimal(exponent))

    def sqrt(self, value: Decimal) -> Decimal:
        return self._context.sqrt(value)

    def sum(self, values: Iterable[Decimal]) -> Decimal:
        total = ZERO
        for value in values:
            total = self._context.add(total, value)
        return total

    def round2(self, value: Decimal) -> Decimal:
        """Quantize to cents using this context's rounding mode."""
        return value.quantize(CENT, rounding=self.rounding, context=self._context)


DEFAULT_CONTEXT = DecimalContext(precision=settings.DECIMAL_PRECISION)
