"""Rentabilität input and result schemas."""
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from finanzplan.base import FinanzModel


class TaxRegime(str, Enum):
    GEWERBE = "gewerbe"
    FREIBERUFLICH = "freiberuflich"
    KLEINUNTERNEHMER = "kleinunternehmer"


class MarginTrend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class ProfitabilityRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    CONCERNING = "concerning"
    POOR = "poor"


class RentabilitaetJahr(FinanzModel):
    """Simplified income statement of one plan year."""
    jahr: int
    umsatz: Decimal
    materialaufwand: Decimal
    rohertrag: Decimal
    rohertragsmarge: Decimal
    fixkosten: Decimal
    sonstige_variable: Decimal
    ergebnis_vor_steuern: Decimal
    steuersatz: Decimal           # effective rate in %
    steuern: Decimal
    jahresueberschuss: Decimal
    umsatzrendite: Decimal


class RentabilitaetResult(FinanzModel):
    jahr1: RentabilitaetJahr
    jahr2: RentabilitaetJahr
    jahr3: RentabilitaetJahr
    tax_regime: TaxRegime
    break_even_monat: Optional[int] = None
    break_even_umsatz: Decimal

    @property
    def jahre(self) -> List[RentabilitaetJahr]:
        return [self.jahr1, self.jahr2, self.jahr3]


class ProfitabilityMetrics(FinanzModel):
    revenue_growth_year2: Decimal
    revenue_growth_year3: Decimal
    avg_annual_growth: Decimal          # CAGR year 1 -> year 3
    avg_gross_margin: Decimal
    avg_operating_margin: Decimal
    avg_net_margin: Decimal
    margin_trend: MarginTrend
    profitability_rating: ProfitabilityRating


class BenchmarkComparison(FinanzModel):
    gross_margin_typical: Decimal
    operating_margin_typical: Decimal
    net_margin_typical: Decimal
    gross_margin_vs_benchmark: Decimal
    operating_margin_vs_benchmark: Decimal
    net_margin_vs_benchmark: Decimal
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class TaxAnalysis(FinanzModel):
    effective_rate: Decimal
    tax_optimization_potential: List[str] = Field(default_factory=list)
    tax_risk_warnings: List[str] = Field(default_factory=list)


class ProfitabilityValidation(FinanzModel):
    is_ba_compliant: bool = Field(alias="isBACompliant")
    blockers: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
