# Liquidität Module
# Twelve-month cash simulation of the founding year
#
# Components:
# - schemas.py: payment terms, monthly cash rows, analysis records
# - engine.py: simulation, seasonality, risk analysis, BA validation

from .schemas import (
    PaymentTerms,
    LiquiditaetMonat,
    LiquiditaetResult,
    LiquidityAnalysis,
    LiquidityValidation,
)
from .engine import (
    SEASONALITY_PATTERNS,
    MANDATORY_NEGATIVE_CASH_ACTION,
    delay_months,
    seasonal_factors,
    apply_seasonal_adjustments,
    compute_liquiditaet,
    calculate_days_of_cash,
    analyze_liquidity_risks,
    validate_liquidity_for_ba,
)

__all__ = [
    # Schemas
    "PaymentTerms",
    "LiquiditaetMonat",
    "LiquiditaetResult",
    "LiquidityAnalysis",
    "LiquidityValidation",
    # Engine
    "SEASONALITY_PATTERNS",
    "MANDATORY_NEGATIVE_CASH_ACTION",
    "delay_months",
    "seasonal_factors",
    "apply_seasonal_adjustments",
    "compute_liquiditaet",
    "calculate_days_of_cash",
    "analyze_liquidity_risks",
    "validate_liquidity_for_ba",
]
