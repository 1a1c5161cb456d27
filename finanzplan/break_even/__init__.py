# Break-Even Module
# Break-even revenue, timing within 36 months, sensitivity and realism
#
# Components:
# - schemas.py: input, result, sensitivity and scenario records
# - engine.py: break-even calculation and benchmark checks

from .schemas import (
    SensitivityParameter,
    BreakEvenInput,
    IndustryComparison,
    BreakEvenResult,
    SensitivityPoint,
    SensitivityResult,
    BreakEvenScenario,
    RealismCheck,
)
from .engine import (
    INDUSTRY_BENCHMARKS,
    industry_key,
    benchmark_comment,
    find_break_even_month,
    compute_break_even,
    compute_break_even_from_plan,
    sensitivity_analysis,
    analyze_scenarios,
    validate_realism,
)

__all__ = [
    # Schemas
    "SensitivityParameter",
    "BreakEvenInput",
    "IndustryComparison",
    "BreakEvenResult",
    "SensitivityPoint",
    "SensitivityResult",
    "BreakEvenScenario",
    "RealismCheck",
    # Engine
    "INDUSTRY_BENCHMARKS",
    "industry_key",
    "benchmark_comment",
    "find_break_even_month",
    "compute_break_even",
    "compute_break_even_from_plan",
    "sensitivity_analysis",
    "analyze_scenarios",
    "validate_realism",
]
