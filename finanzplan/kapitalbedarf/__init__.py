# Kapitalbedarf Module
# Capital requirement: Gründungskosten + Investitionen + Anlaufkosten
#
# Components:
# - schemas.py: input and result records
# - engine.py: calculator and plausibility checks

from .schemas import (
    InvestitionKategorie,
    AbschreibungMethode,
    Gruendungskosten,
    Investition,
    Anlaufkosten,
    KapitalbedarfInput,
    PlausibilityCheck,
    GruendungskostenResult,
    AnlaufkostenResult,
    KapitalbedarfResult,
)
from .engine import (
    calculate_gruendungskosten,
    sum_gruendungskosten,
    validate_gruendungskosten,
    sum_investitionen,
    investitionen_by_category,
    compute_depreciation,
    compute_anlaufkosten,
    validate_anlaufkosten,
    compute_gesamtkapitalbedarf,
    compute_kapitalbedarf,
)

__all__ = [
    # Schemas
    "InvestitionKategorie",
    "AbschreibungMethode",
    "Gruendungskosten",
    "Investition",
    "Anlaufkosten",
    "KapitalbedarfInput",
    "PlausibilityCheck",
    "GruendungskostenResult",
    "AnlaufkostenResult",
    "KapitalbedarfResult",
    # Engine
    "calculate_gruendungskosten",
    "sum_gruendungskosten",
    "validate_gruendungskosten",
    "sum_investitionen",
    "investitionen_by_category",
    "compute_depreciation",
    "compute_anlaufkosten",
    "validate_anlaufkosten",
    "compute_gesamtkapitalbedarf",
    "compute_kapitalbedarf",
]
