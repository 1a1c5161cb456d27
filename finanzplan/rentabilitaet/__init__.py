# Rentabilität Module
# Three-year income statement, tax, benchmarks and BA validation
#
# Components:
# - schemas.py: yearly statement and analysis records
# - engine.py: projection, metrics, industry comparison, tax hints

from .schemas import (
    TaxRegime,
    MarginTrend,
    ProfitabilityRating,
    RentabilitaetJahr,
    RentabilitaetResult,
    ProfitabilityMetrics,
    BenchmarkComparison,
    TaxAnalysis,
    ProfitabilityValidation,
)
from .engine import (
    INDUSTRY_MARGINS,
    effective_tax_rate,
    compute_year,
    compute_rentabilitaet,
    compute_profitability_metrics,
    compare_with_industry_benchmarks,
    analyze_tax_implications,
    validate_profitability_for_ba,
)

__all__ = [
    # Schemas
    "TaxRegime",
    "MarginTrend",
    "ProfitabilityRating",
    "RentabilitaetJahr",
    "RentabilitaetResult",
    "ProfitabilityMetrics",
    "BenchmarkComparison",
    "TaxAnalysis",
    "ProfitabilityValidation",
    # Engine
    "INDUSTRY_MARGINS",
    "effective_tax_rate",
    "compute_year",
    "compute_rentabilitaet",
    "compute_profitability_metrics",
    "compare_with_industry_benchmarks",
    "analyze_tax_implications",
    "validate_profitability_for_ba",
]
