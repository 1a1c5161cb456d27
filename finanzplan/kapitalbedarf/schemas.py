"""Kapitalbedarf input and result schemas."""
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from finanzplan.base import FinanzModel, Money


class InvestitionKategorie(str, Enum):
    """Asset categories for start-up investments."""
    ANLAGEN = "anlagen"
    AUSSTATTUNG = "ausstattung"
    FAHRZEUGE = "fahrzeuge"
    IT = "it"
    SONSTIGES = "sonstiges"


class AbschreibungMethode(str, Enum):
    LINEAR = "linear"
    DECLINING = "declining"


# =============================================================================
# Inputs
# =============================================================================

class Gruendungskosten(FinanzModel):
    """One-off founding costs."""
    notar: Money = Decimal("0")
    handelsregister: Money = Decimal("0")
    beratung: Money = Decimal("0")
    marketing: Money = Decimal("0")
    sonstige: Money = Decimal("0")


class Investition(FinanzModel):
    """A single start-up investment."""
    name: str
    kategorie: InvestitionKategorie = InvestitionKategorie.SONSTIGES
    betrag: Money
    nutzungsdauer: Optional[int] = Field(default=None, gt=0)  # years
    anschaffungsmonat: int = Field(default=1, ge=1, le=12)


class Anlaufkosten(FinanzModel):
    """Running costs to be pre-financed until revenue carries the business."""
    monate: int = Field(default=6, ge=0)
    monatliche_kosten: Money
    reserve_percent: Money = Decimal("20")


class KapitalbedarfInput(FinanzModel):
    gruendungskosten: Gruendungskosten = Field(default_factory=Gruendungskosten)
    investitionen: List[Investition] = Field(default_factory=list)
    anlaufkosten: Optional[Anlaufkosten] = None
    rechtsform: Optional[str] = None


# =============================================================================
# Results
# =============================================================================

class PlausibilityCheck(FinanzModel):
    """Advisory plausibility result, never blocking."""
    is_realistic: bool
    warnings: List[str] = Field(default_factory=list)


class GruendungskostenResult(FinanzModel):
    notar: Decimal
    handelsregister: Decimal
    beratung: Decimal
    marketing: Decimal
    sonstige: Decimal
    summe: Decimal


class AnlaufkostenResult(FinanzModel):
    monate: int
    monatliche_kosten: Decimal
    reserve_percent: Decimal
    laufende_kosten: Decimal
    reserve: Decimal
    summe: Decimal


class KapitalbedarfResult(FinanzModel):
    """Total capital requirement with its three components."""
    gruendungskosten: GruendungskostenResult
    investitionen: List[Investition]
    investitionen_summe: Decimal
    investitionen_nach_kategorie: Dict[str, Decimal]
    abschreibung_jaehrlich: Decimal
    anlaufkosten: AnlaufkostenResult
    gesamtkapitalbedarf: Decimal
    warnings: List[str] = Field(default_factory=list)
