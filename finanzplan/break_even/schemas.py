"""Break-even input and result schemas."""
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from finanzplan.base import FinanzModel, Money


class SensitivityParameter(str, Enum):
    FIXKOSTEN = "fixkosten"
    VARIABLE_KOSTEN = "variable_kosten"


class BreakEvenInput(FinanzModel):
    fixkosten_monatlich: Money
    variable_kosten_prozent: Money
    umsatz_series: Optional[List[Money]] = None  # planned monthly revenue, month 1 first


class IndustryComparison(FinanzModel):
    is_below_average: bool      # faster than the 18-month average
    is_above_worrying: bool     # slower than 24 months
    benchmark_comment: str


class BreakEvenResult(FinanzModel):
    fixkosten_monatlich: Decimal
    variable_kosten_prozent: Decimal
    break_even_umsatz_monatlich: Decimal
    break_even_umsatz_jaehrlich: Decimal
    deckungsbeitrag: Decimal                  # contribution margin in %
    deckungsbeitrag_euro: Decimal             # contribution at break-even revenue
    break_even_monat: Optional[int] = None
    is_reachable_in_36_months: bool
    months_to_break_even: Optional[Decimal] = None
    industry_comparison: IndustryComparison
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class SensitivityPoint(FinanzModel):
    change: Decimal              # relative change of the parameter in %
    value: Decimal               # perturbed parameter value
    new_break_even: Decimal
    impact: Decimal              # change of the break-even revenue in %


class SensitivityResult(FinanzModel):
    parameter: SensitivityParameter
    base_break_even: Decimal
    points: List[SensitivityPoint]


class BreakEvenScenario(FinanzModel):
    name: str
    fixkosten_monatlich: Decimal
    variable_kosten_prozent: Decimal
    result: BreakEvenResult


class RealismCheck(FinanzModel):
    is_realistic: bool
    warnings: List[str] = Field(default_factory=list)
    industry_guidance: List[str] = Field(default_factory=list)
