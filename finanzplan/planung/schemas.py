"""Revenue and cost plan records (supplied by the coaching layer)."""
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from finanzplan.base import FinanzModel, Money


class Kostenkategorie(str, Enum):
    PERSONAL = "personal"
    MIETE = "miete"
    VERSICHERUNG = "versicherung"
    MARKETING = "marketing"
    MATERIAL = "material"
    ABSCHREIBUNG = "abschreibung"
    ZINSEN = "zinsen"
    STEUERN = "steuern"
    SONSTIGE = "sonstige"


class Umsatzplanung(FinanzModel):
    """
    Planned revenue: twelve monthly values for year 1, annual totals for
    years 2 and 3.
    """
    umsatz_jahr1: List[Money]
    umsatz_jahr2: Money
    umsatz_jahr3: Money
    annahmen: List[str] = Field(default_factory=list)

    @field_validator("umsatz_jahr1")
    @classmethod
    def twelve_months(cls, value: List[Decimal]) -> List[Decimal]:
        if len(value) != 12:
            raise ValueError(f"umsatzJahr1 braucht genau 12 Monatswerte (erhalten: {len(value)})")
        return value


class Kostenposition(FinanzModel):
    """A single monthly fixed cost item."""
    name: str
    kategorie: Kostenkategorie = Kostenkategorie.SONSTIGE
    betrag_monatlich: Money


class Kostenplanung(FinanzModel):
    """
    Planned costs.

    Fixed costs are itemized (fixkosten) or given as one monthly figure
    (fixkosten_monatlich); items take precedence when both are present.
    Variable costs are annual totals per year.
    """
    fixkosten: List[Kostenposition] = Field(default_factory=list)
    fixkosten_monatlich: Optional[Money] = None
    materialaufwand_jahr1: Money = Decimal("0")
    materialaufwand_jahr2: Money = Decimal("0")
    materialaufwand_jahr3: Money = Decimal("0")
    sonstige_variable_jahr1: Money = Decimal("0")
    sonstige_variable_jahr2: Money = Decimal("0")
    sonstige_variable_jahr3: Money = Decimal("0")
    fixkosten_steigerung_jahr2: Money = Decimal("10")  # % over year 1
    fixkosten_steigerung_jahr3: Money = Decimal("20")  # % over year 1


# =============================================================================
# Derived summaries
# =============================================================================

class UmsatzplanungResult(FinanzModel):
    umsatz_jahr1: List[Decimal]
    umsatz_jahr1_summe: Decimal
    umsatz_jahr2: Decimal
    umsatz_jahr3: Decimal
    wachstumsrate_jahr2: Optional[Decimal] = None
    wachstumsrate_jahr3: Optional[Decimal] = None


class KostenplanungResult(FinanzModel):
    fixkosten_monatlich: Decimal
    fixkosten_jahr1: Decimal
    fixkosten_jahr2: Decimal
    fixkosten_jahr3: Decimal
    variable_kosten_jahr1: Decimal
    variable_kosten_jahr2: Decimal
    variable_kosten_jahr3: Decimal
    gesamtkosten_jahr1: Decimal
    gesamtkosten_jahr2: Decimal
    gesamtkosten_jahr3: Decimal
