"""Privatentnahme input and result schemas."""
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from finanzplan.base import FinanzModel, Money


class FamilyStatus(str, Enum):
    SINGLE = "single"
    PARTNER = "partner"
    FAMILY = "family"


class Sustainability(str, Enum):
    """How sustainable a personal budget is."""
    COMFORTABLE = "comfortable"
    TIGHT = "tight"
    CRITICAL = "critical"


class Privatentnahme(FinanzModel):
    """Itemized monthly living costs of the founder."""
    miete: Money = Decimal("0")
    lebensmittel: Money = Decimal("0")
    versicherungen: Money = Decimal("0")
    mobilitaet: Money = Decimal("0")
    kommunikation: Money = Decimal("0")
    sonstige_ausgaben: Money = Decimal("0")
    sparrate: Money = Decimal("0")


class PrivatentnahmeResult(FinanzModel):
    miete: Decimal
    lebensmittel: Decimal
    versicherungen: Decimal
    mobilitaet: Decimal
    kommunikation: Decimal
    sonstige_ausgaben: Decimal
    sparrate: Decimal
    monatliche_privatentnahme: Decimal
    jaehrliche_privatentnahme: Decimal


class SpendingAnalysis(FinanzModel):
    category_percentages: Dict[str, Decimal]
    housing_ratio: Decimal
    savings_rate: Decimal
    income_ratio: Optional[Decimal] = None
    sustainability: Sustainability
    recommendations: List[str] = Field(default_factory=list)


class AverageComparison(FinanzModel):
    comparison: Dict[str, str]          # below | average | above
    averages: Dict[str, Decimal]
    deviations: Dict[str, Decimal]      # % deviation from the average


class PrivatentnahmeValidation(FinanzModel):
    is_realistic: bool
    subsistence_floor: Decimal
    warnings: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
