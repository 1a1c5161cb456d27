# Finanzierung Module
# Financing structure, loans, Gründungszuschuss and risk rating
#
# Components:
# - schemas.py: source types, input and result records
# - engine.py: ratios, gap, annuity loans, GZ schedule, risk assessment

from .schemas import (
    FinanzierungsquelleTyp,
    FinanzierungStatus,
    RiskLevel,
    Finanzierungsquelle,
    GruendungszuschussPlan,
    FinancingRatios,
    LoanPayment,
    AmortizationRow,
    GruendungszuschussResult,
    RiskAssessment,
    SourceValidation,
    KreditUebersicht,
    FinanzierungResult,
)
from .engine import (
    EQUITY_TYPES,
    DEBT_TYPES,
    sum_financing,
    financing_by_type,
    compute_ratios,
    compute_gap,
    compute_loan_payment,
    compute_amortization_schedule,
    is_loan,
    compute_gruendungszuschuss,
    gruendungszuschuss_schedule,
    assess_financing_risk,
    validate_financing_source,
    compute_finanzierung,
)

__all__ = [
    # Schemas
    "FinanzierungsquelleTyp",
    "FinanzierungStatus",
    "RiskLevel",
    "Finanzierungsquelle",
    "GruendungszuschussPlan",
    "FinancingRatios",
    "LoanPayment",
    "AmortizationRow",
    "GruendungszuschussResult",
    "RiskAssessment",
    "SourceValidation",
    "KreditUebersicht",
    "FinanzierungResult",
    # Engine
    "EQUITY_TYPES",
    "DEBT_TYPES",
    "sum_financing",
    "financing_by_type",
    "compute_ratios",
    "compute_gap",
    "compute_loan_payment",
    "compute_amortization_schedule",
    "is_loan",
    "compute_gruendungszuschuss",
    "gruendungszuschuss_schedule",
    "assess_financing_risk",
    "validate_financing_source",
    "compute_finanzierung",
]
