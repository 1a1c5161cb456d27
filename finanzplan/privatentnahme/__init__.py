# Privatentnahme Module
# Founder's personal withdrawal with regional cost-of-living adjustment
#
# Components:
# - schemas.py: living cost categories and analysis results
# - engine.py: totals, regional factors, spending analysis, plausibility

from .schemas import (
    FamilyStatus,
    Sustainability,
    Privatentnahme,
    PrivatentnahmeResult,
    SpendingAnalysis,
    AverageComparison,
    PrivatentnahmeValidation,
)
from .engine import (
    CATEGORIES,
    REGIONAL_FACTORS,
    sum_monthly,
    to_annual,
    compute_privatentnahme,
    normalize_city,
    regional_factor,
    adjust_for_region,
    subsistence_floor,
    analyze_spending_pattern,
    compare_with_averages,
    validate_privatentnahme,
)

__all__ = [
    # Schemas
    "FamilyStatus",
    "Sustainability",
    "Privatentnahme",
    "PrivatentnahmeResult",
    "SpendingAnalysis",
    "AverageComparison",
    "PrivatentnahmeValidation",
    # Engine
    "CATEGORIES",
    "REGIONAL_FACTORS",
    "sum_monthly",
    "to_annual",
    "compute_privatentnahme",
    "normalize_city",
    "regional_factor",
    "adjust_for_region",
    "subsistence_floor",
    "analyze_spending_pattern",
    "compare_with_averages",
    "validate_privatentnahme",
]
