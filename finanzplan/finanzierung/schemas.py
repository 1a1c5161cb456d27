"""Finanzierung input and result schemas."""
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, model_validator

from finanzplan.base import FinanzModel, Money


class FinanzierungsquelleTyp(str, Enum):
    """Types of financing sources."""
    # Equity (including non-repayable grants)
    EIGENKAPITAL = "eigenkapital"
    GRUENDUNGSZUSCHUSS = "gruendungszuschuss"
    BETEILIGUNG = "beteiligung"
    CROWDFUNDING = "crowdfunding"

    # Debt
    BANKKREDIT = "bankkredit"
    FOERDERKREDIT = "foerderkredit"
    FAMILY_FRIENDS = "family_friends"
    ANDERE = "andere"


class FinanzierungStatus(str, Enum):
    GESICHERT = "gesichert"   # Confirmed
    BEANTRAGT = "beantragt"   # Applied for
    GEPLANT = "geplant"       # Planned only


class RiskLevel(str, Enum):
    """Financing risk levels, ascending."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# =============================================================================
# Inputs
# =============================================================================

class Finanzierungsquelle(FinanzModel):
    """A single financing source."""
    typ: FinanzierungsquelleTyp
    bezeichnung: str
    betrag: Money
    status: FinanzierungStatus = FinanzierungStatus.GEPLANT
    zinssatz: Optional[Money] = None         # % p.a.
    laufzeit: Optional[int] = None           # months
    tilgungsfrei: Optional[int] = Field(default=None, ge=0)  # grace months, interest only
    sicherheiten: Optional[str] = None
    auszahlungsmonat: int = Field(default=1, ge=1, le=12)

    @model_validator(mode="after")
    def grace_within_term(self) -> "Finanzierungsquelle":
        if self.tilgungsfrei and self.laufzeit is not None and self.tilgungsfrei >= self.laufzeit:
            raise ValueError(
                f"Tilgungsfreie Zeit ({self.tilgungsfrei}) muss kürzer als die Laufzeit "
                f"({self.laufzeit}) sein"
            )
        return self


class GruendungszuschussPlan(FinanzModel):
    """Parameters of the two-phase Gründungszuschuss."""
    alg1_monatlich: Money
    phase1_monate: int = Field(default=6, ge=0)
    phase2_monate: int = Field(default=9, ge=0)
    startmonat: int = Field(default=1, ge=1, le=12)


# =============================================================================
# Results
# =============================================================================

class FinancingRatios(FinanzModel):
    eigenkapital: Decimal
    fremdkapital: Decimal
    eigenkapital_quote: Decimal
    fremdkapital_quote: Decimal


class LoanPayment(FinanzModel):
    monthly_payment: Decimal
    total_interest: Decimal
    total_payments: Decimal


class AmortizationRow(FinanzModel):
    month: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    balance: Decimal


class GruendungszuschussResult(FinanzModel):
    phase1_monthly: Decimal
    phase1_months: int
    phase1_total: Decimal
    phase2_monthly: Decimal
    phase2_months: int
    phase2_total: Decimal
    total_gz: Decimal = Field(alias="totalGZ")


class RiskAssessment(FinanzModel):
    risk_level: RiskLevel
    risk_factors: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class SourceValidation(FinanzModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)


class KreditUebersicht(FinanzModel):
    """Debt service of one interest-bearing source."""
    bezeichnung: str
    betrag: Decimal
    zinssatz: Decimal
    laufzeit: int
    tilgungsfrei: int
    monthly_payment: Decimal
    total_interest: Decimal
    total_payments: Decimal


class FinanzierungResult(FinanzModel):
    quellen: List[Finanzierungsquelle]
    gesamtfinanzierung: Decimal
    finanzierung_nach_typ: Dict[str, Decimal]
    eigenkapital: Decimal
    fremdkapital: Decimal
    eigenkapital_quote: Decimal
    fremdkapital_quote: Decimal
    kapitalbedarf: Decimal
    finanzierungsluecke: Decimal
    kredite: List[KreditUebersicht] = Field(default_factory=list)
    risiko: RiskAssessment
    warnings: List[str] = Field(default_factory=list)
