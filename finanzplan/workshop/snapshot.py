"""
Workshop Snapshot

Accumulated plan inputs of one workshop, assembled turn by turn by the
coaching layer. Every aggregate is optional until its module has been
discussed; an aggregate that still lacks required fields is kept as a draft
(entwuerfe) until a later turn completes it.
"""
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from finanzplan.base import FinanzModel, Money
from finanzplan.exceptions import ValidationError
from finanzplan.finanzierung import Finanzierungsquelle, GruendungszuschussPlan
from finanzplan.kapitalbedarf import KapitalbedarfInput
from finanzplan.liquiditaet import PaymentTerms
from finanzplan.planung import Kostenplanung, Umsatzplanung
from finanzplan.privatentnahme import FamilyStatus, Privatentnahme
from finanzplan.rentabilitaet import TaxRegime


class FinanzierungInput(FinanzModel):
    quellen: List[Finanzierungsquelle] = Field(default_factory=list)


class FinanzplanSnapshot(FinanzModel):
    """
    Inputs of a complete financial plan plus the founder's context.

    saisonalitaet selects the seasonal revenue pattern of the liquidity plan;
    it falls back to the industry when not set.
    """
    # Aggregates
    kapitalbedarf: Optional[KapitalbedarfInput] = None
    finanzierung: Optional[FinanzierungInput] = None
    privatentnahme: Optional[Privatentnahme] = None
    umsatzplanung: Optional[Umsatzplanung] = None
    kostenplanung: Optional[Kostenplanung] = None

    # Context
    industry: Optional[str] = None
    region: Optional[str] = None
    family_status: Optional[FamilyStatus] = None
    tax_regime: TaxRegime = TaxRegime.GEWERBE
    tax_rate: Optional[Money] = None           # explicit effective rate in %
    payment_terms: Optional[PaymentTerms] = None
    gruendungszuschuss: Optional[GruendungszuschussPlan] = None
    saisonalitaet: Optional[str] = None
    start_datum: Optional[date] = None

    # Incomplete records by field name, snake_case keys
    entwuerfe: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    @field_validator("entwuerfe")
    @classmethod
    def known_drafts(cls, value: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        unknown = sorted(set(value) - set(DRAFT_MODELS))
        if unknown:
            raise ValueError(f"Unbekannte Entwürfe: {', '.join(unknown)}")
        return value

    @property
    def seasonal_pattern(self) -> Optional[str]:
        return self.saisonalitaet or self.industry

    @property
    def offene_felder(self) -> Dict[str, List[str]]:
        """Required fields each draft still lacks."""
        return {
            name: missing_fields(DRAFT_MODELS[name], data, name)
            for name, data in self.entwuerfe.items()
        }


# Records that may stay incomplete across conversation turns
DRAFT_MODELS: Dict[str, Type[FinanzModel]] = {
    "kapitalbedarf": KapitalbedarfInput,
    "finanzierung": FinanzierungInput,
    "privatentnahme": Privatentnahme,
    "umsatzplanung": Umsatzplanung,
    "kostenplanung": Kostenplanung,
    "payment_terms": PaymentTerms,
    "gruendungszuschuss": GruendungszuschussPlan,
}


def as_validation_error(error: Mapping[str, Any], prefix: Optional[str] = None) -> ValidationError:
    """Turn one pydantic error into the package's ValidationError."""
    parts = [str(part) for part in error["loc"]]
    if prefix:
        parts.insert(0, prefix)
    field = ".".join(parts)
    return ValidationError(f"Ungültige Eingabe in {field}: {error['msg']}", field)


def missing_fields(
    model: Type[FinanzModel],
    data: Mapping[str, Any],
    prefix: Optional[str] = None,
) -> List[str]:
    """
    Required fields a partial record still lacks, as dotted paths.

    Empty when the record is complete. A present but invalid value raises
    ValidationError; only absent fields are tolerated.
    """
    try:
        model.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors()
        invalid = [error for error in errors if error["type"] != "missing"]
        if invalid:
            raise as_validation_error(invalid[0], prefix) from e
        return [".".join(str(part) for part in error["loc"]) for error in errors]
    return []
