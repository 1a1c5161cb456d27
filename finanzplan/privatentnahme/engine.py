"""
Privatentnahme Calculator

The founder's personal withdrawal: itemized monthly living costs, summed to
a monthly and an annual figure. Regional adjustment scales the categories by
a city cost-of-living factor before aggregation.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

from finanzplan.money import (
    DEFAULT_CONTEXT,
    DecimalContext,
    ZERO,
    format_eur,
    require_non_negative,
    to_decimal,
)
from finanzplan.privatentnahme.schemas import (
    AverageComparison,
    FamilyStatus,
    Privatentnahme,
    PrivatentnahmeResult,
    PrivatentnahmeValidation,
    SpendingAnalysis,
    Sustainability,
)

logger = logging.getLogger(__name__)


CATEGORIES = (
    "miete",
    "lebensmittel",
    "versicherungen",
    "mobilitaet",
    "kommunikation",
    "sonstige_ausgaben",
    "sparrate",
)

# Cost-of-living factor per city, applied in full to housing
REGIONAL_FACTORS = {
    "muenchen": Decimal("1.4"),
    "frankfurt": Decimal("1.35"),
    "stuttgart": Decimal("1.25"),
    "hamburg": Decimal("1.2"),
    "berlin": Decimal("1.15"),
    "koeln": Decimal("1.15"),
    "duesseldorf": Decimal("1.2"),
    "hannover": Decimal("1.05"),
    "nuernberg": Decimal("1.05"),
    "bremen": Decimal("1.0"),
    "dresden": Decimal("0.9"),
    "leipzig": Decimal("0.9"),
}
DEFAULT_REGIONAL_FACTOR = Decimal("0.95")

CITY_ALIASES = {
    "munich": "muenchen",
    "munchen": "muenchen",
    "frankfurt am main": "frankfurt",
    "frankfurt a.m.": "frankfurt",
    "cologne": "koeln",
    "koln": "koeln",
    "dusseldorf": "duesseldorf",
    "nuremberg": "nuernberg",
    "nurnberg": "nuernberg",
    "hanover": "hannover",
}

# Share of the regional deviation applied to a category; unlisted categories
# (insurance, communication, savings) are not regionally scaled.
CATEGORY_SENSITIVITY = {
    "miete": Decimal("1"),
    "lebensmittel": Decimal("0.7"),
    "mobilitaet": Decimal("0.5"),
    "sonstige_ausgaben": Decimal("0.6"),
}

SUBSISTENCE_BASE = Decimal("1000")
WITHDRAWAL_HIGH = Decimal("6000")
INSURANCE_MINIMUM = Decimal("200")

# Average monthly budgets by household type
REFERENCE_BUDGETS = {
    FamilyStatus.SINGLE: {
        "miete": Decimal("800"),
        "lebensmittel": Decimal("400"),
        "versicherungen": Decimal("300"),
        "mobilitaet": Decimal("250"),
        "kommunikation": Decimal("80"),
        "sonstige_ausgaben": Decimal("400"),
        "sparrate": Decimal("200"),
    },
    FamilyStatus.PARTNER: {
        "miete": Decimal("1200"),
        "lebensmittel": Decimal("600"),
        "versicherungen": Decimal("450"),
        "mobilitaet": Decimal("350"),
        "kommunikation": Decimal("120"),
        "sonstige_ausgaben": Decimal("600"),
        "sparrate": Decimal("300"),
    },
    FamilyStatus.FAMILY: {
        "miete": Decimal("1500"),
        "lebensmittel": Decimal("800"),
        "versicherungen": Decimal("600"),
        "mobilitaet": Decimal("450"),
        "kommunikation": Decimal("150"),
        "sonstige_ausgaben": Decimal("800"),
        "sparrate": Decimal("200"),
    },
}
AVERAGE_BAND = Decimal("20")  # ± % around the reference budget


# =============================================================================
# Totals
# =============================================================================

def _amounts(entry: Union[Privatentnahme, Mapping[str, Any]]) -> Dict[str, Decimal]:
    if isinstance(entry, Privatentnahme):
        entry = {name: getattr(entry, name) for name in CATEGORIES}
    return {
        name: require_non_negative(entry.get(name) or 0, f"privatentnahme.{name}")
        for name in CATEGORIES
        if name in entry
    }


def sum_monthly(
    entry: Union[Privatentnahme, Mapping[str, Any]],
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """Monthly withdrawal: sum of all categories."""
    return ctx.round2(ctx.sum(_amounts(entry).values()))


def to_annual(monthly: Any, ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    return ctx.round2(ctx.mul(require_non_negative(monthly, "monatlichePrivatentnahme"), Decimal(12)))


def compute_privatentnahme(
    entry: Privatentnahme,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> PrivatentnahmeResult:
    amounts = _amounts(entry)
    monthly = sum_monthly(entry, ctx=ctx)
    logger.debug(f"Privatentnahme: monatlich={monthly}")
    return PrivatentnahmeResult(
        **{name: ctx.round2(value) for name, value in amounts.items()},
        monatliche_privatentnahme=monthly,
        jaehrliche_privatentnahme=to_annual(monthly, ctx=ctx),
    )


# =============================================================================
# Regional adjustment
# =============================================================================

def normalize_city(city: str) -> str:
    """Case- and umlaut-insensitive city key: 'München' -> 'muenchen'."""
    key = city.strip().lower()
    for umlaut, replacement in (("ä", "ae"), ("ö", "oe"), ("ü", "ue"), ("ß", "ss")):
        key = key.replace(umlaut, replacement)
    key = " ".join(key.split())
    return CITY_ALIASES.get(key, key)


def regional_factor(city: Optional[str]) -> Decimal:
    """Cost-of-living factor of a city; unknown cities get 0.95."""
    if not city:
        return DEFAULT_REGIONAL_FACTOR
    return REGIONAL_FACTORS.get(normalize_city(city), DEFAULT_REGIONAL_FACTOR)


def adjust_for_region(
    base: Privatentnahme,
    city: str,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Privatentnahme:
    """
    Scale living costs to a city's cost level.

    Housing takes the full factor; food 70 %, mobility 50 % and other
    spending 60 % of the deviation from 1. Insurance, communication and
    savings stay unchanged.
    """
    factor = regional_factor(city)
    deviation = ctx.sub(factor, Decimal(1))

    adjusted = {}
    for name in CATEGORIES:
        amount = require_non_negative(getattr(base, name), f"privatentnahme.{name}")
        share = CATEGORY_SENSITIVITY.get(name)
        if share is None:
            adjusted[name] = amount
            continue
        category_factor = ctx.add(Decimal(1), ctx.mul(deviation, share))
        adjusted[name] = ctx.round2(ctx.mul(amount, category_factor))

    return Privatentnahme(**adjusted)


def subsistence_floor(city: Optional[str] = None, ctx: DecimalContext = DEFAULT_CONTEXT) -> Decimal:
    """Minimum credible monthly withdrawal: 1.000 € × regional factor."""
    if not city:
        return ctx.round2(SUBSISTENCE_BASE)
    return ctx.round2(ctx.mul(SUBSISTENCE_BASE, regional_factor(city)))


# =============================================================================
# Analysis
# =============================================================================

def analyze_spending_pattern(
    entry: Privatentnahme,
    income: Optional[Any] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> SpendingAnalysis:
    """
    Category shares and sustainability of a budget.

    Housing above 40 % of spending is tight, above 50 % critical. With a
    monthly income given, spending above 80 % of it is tight, above 90 %
    critical.
    """
    amounts = _amounts(entry)
    total = ctx.sum(amounts.values())

    percentages = {
        name: ctx.pct(value, total) if total > 0 else ZERO
        for name, value in amounts.items()
    }
    housing_ratio = percentages["miete"]
    savings_rate = percentages["sparrate"]

    sustainability = Sustainability.COMFORTABLE
    recommendations = []

    if housing_ratio > 50:
        sustainability = Sustainability.CRITICAL
        recommendations.append("Wohnkosten kritisch hoch (>50%) - dringend reduzieren")
    elif housing_ratio > 40:
        sustainability = Sustainability.TIGHT
        recommendations.append(
            "Wohnkosten sind hoch (>40% der Ausgaben) - günstigere Alternativen prüfen"
        )

    if savings_rate < 5:
        recommendations.append("Sehr niedrige Sparrate (<5%) - Notgroschen aufbauen")
    if savings_rate > 30:
        recommendations.append("Sehr hohe Sparrate (>30%) - evtl. zu konservativ für Gründungsphase")
    if percentages["lebensmittel"] > 20:
        recommendations.append("Hohe Lebensmittelkosten (>20%) - Sparpotential durch Selbstkochen")
    if percentages["mobilitaet"] > 15:
        recommendations.append("Hohe Mobilitätskosten (>15%) - günstigere Alternativen prüfen")

    income_ratio = None
    if income is not None:
        monthly_income = to_decimal(income, "income")
        if monthly_income > 0:
            income_ratio = ctx.pct(total, monthly_income)
            if income_ratio > 90:
                sustainability = Sustainability.CRITICAL
                recommendations.append("Ausgaben zu hoch (>90% des Einkommens) - drastisch reduzieren")
            elif income_ratio > 80:
                if sustainability == Sustainability.COMFORTABLE:
                    sustainability = Sustainability.TIGHT
                recommendations.append(
                    "Ausgaben hoch (>80% des Einkommens) - Puffer für Unvorhergesehenes fehlt"
                )

    return SpendingAnalysis(
        category_percentages={name: ctx.round2(value) for name, value in percentages.items()},
        housing_ratio=ctx.round2(housing_ratio),
        savings_rate=ctx.round2(savings_rate),
        income_ratio=ctx.round2(income_ratio) if income_ratio is not None else None,
        sustainability=sustainability,
        recommendations=recommendations,
    )


def compare_with_averages(
    entry: Privatentnahme,
    family_status: FamilyStatus = FamilyStatus.SINGLE,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> AverageComparison:
    """Compare each category with the reference budget (±20 % is average)."""
    averages = REFERENCE_BUDGETS[FamilyStatus(family_status)]
    amounts = _amounts(entry)

    comparison = {}
    deviations = {}
    for name, average in averages.items():
        deviation = ctx.pct(ctx.sub(amounts.get(name, ZERO), average), average)
        deviations[name] = ctx.round2(deviation)
        if deviation < -AVERAGE_BAND:
            comparison[name] = "below"
        elif deviation > AVERAGE_BAND:
            comparison[name] = "above"
        else:
            comparison[name] = "average"

    return AverageComparison(
        comparison=comparison,
        averages={name: ctx.round2(value) for name, value in averages.items()},
        deviations=deviations,
    )


def validate_privatentnahme(
    entry: Privatentnahme,
    region: Optional[str] = None,
    family_status: Optional[FamilyStatus] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> PrivatentnahmeValidation:
    """Plausibility of the withdrawal, including the regional subsistence floor."""
    amounts = _amounts(entry)
    total = ctx.sum(amounts.values())
    floor = subsistence_floor(region, ctx=ctx)

    warnings = []
    suggestions = []

    if total < floor:
        warnings.append(
            f"Privatentnahme unter {format_eur(floor)}/Monat liegt unter dem "
            f"Existenzminimum{' in ' + region if region else ''}"
        )
        suggestions.append("Prüfen Sie, ob alle notwendigen Ausgaben berücksichtigt sind")
    if total > WITHDRAWAL_HIGH:
        warnings.append(f"Privatentnahme über {format_eur(WITHDRAWAL_HIGH)}/Monat ist sehr hoch")
        suggestions.append("Identifizieren Sie Einsparpotential für die Gründungsphase")
    if amounts["miete"] > ctx.mul(total, Decimal("0.5")):
        warnings.append("Wohnkosten über 50% der Privatentnahme")
        suggestions.append("Günstigere Wohnsituation für Gründungsphase suchen")
    if amounts["versicherungen"] < INSURANCE_MINIMUM:
        warnings.append("Versicherungskosten sehr niedrig - KV vergessen?")
        suggestions.append("Krankenversicherung und weitere notwendige Versicherungen prüfen")
    if amounts["sparrate"] > ctx.mul(total, Decimal("0.3")):
        warnings.append("Sparrate sehr hoch für Gründungsphase")
        suggestions.append("Temporär weniger sparen, mehr in Geschäft investieren")

    if region and family_status:
        reference = adjust_for_region(
            Privatentnahme(**REFERENCE_BUDGETS[FamilyStatus(family_status)]), region, ctx=ctx
        )
        reference_total = sum_monthly(reference, ctx=ctx)
        deviation = ctx.pct(ctx.sub(total, reference_total), reference_total)
        if deviation > 50:
            warnings.append(f"Privatentnahme {deviation:.1f}% über {region} Durchschnitt")
        elif deviation < -30:
            warnings.append(f"Privatentnahme {abs(deviation):.1f}% unter {region} Durchschnitt")

    return PrivatentnahmeValidation(
        is_realistic=not warnings,
        subsistence_floor=floor,
        warnings=warnings,
        suggestions=suggestions,
    )
