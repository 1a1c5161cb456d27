"""
Kapitalbedarf Calculator

Total capital requirement of a founding:
1. Gründungskosten - one-off founding costs (notary, register, advice, ...)
2. Investitionen - assets bought at the start
3. Anlaufkosten - running costs of the ramp-up phase plus a safety reserve

gesamtkapitalbedarf = Gründungskosten + Investitionen + Anlaufkosten
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from finanzplan.kapitalbedarf.schemas import (
    AbschreibungMethode,
    Anlaufkosten,
    AnlaufkostenResult,
    Gruendungskosten,
    GruendungskostenResult,
    Investition,
    KapitalbedarfInput,
    KapitalbedarfResult,
    PlausibilityCheck,
)
from finanzplan.money import (
    DEFAULT_CONTEXT,
    DecimalContext,
    HUNDRED,
    ZERO,
    format_eur,
    require_non_negative,
    to_decimal,
)

logger = logging.getLogger(__name__)


# Realistic lower bound of founding costs per legal form
GRUENDUNGSKOSTEN_MINIMUM = {
    "GmbH": Decimal("1500"),
    "UG": Decimal("500"),
    "GbR": Decimal("200"),
    "Einzelunternehmen": Decimal("200"),
}
GRUENDUNGSKOSTEN_MINIMUM_DEFAULT = Decimal("500")
GRUENDUNGSKOSTEN_MAXIMUM = Decimal("10000")

DEFAULT_NUTZUNGSDAUER = 5  # years
DECLINING_RATE = Decimal("0.2")

GRUENDUNGSKOSTEN_FIELDS = ("notar", "handelsregister", "beratung", "marketing", "sonstige")


# =============================================================================
# Gründungskosten
# =============================================================================

def calculate_gruendungskosten(
    notar: Any = 0,
    handelsregister: Any = 0,
    beratung: Any = 0,
    marketing: Any = 0,
    sonstige: Any = 0,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """Sum the five founding cost positions exactly."""
    return sum_gruendungskosten(
        {
            "notar": notar,
            "handelsregister": handelsregister,
            "beratung": beratung,
            "marketing": marketing,
            "sonstige": sonstige,
        },
        ctx=ctx,
    )


def sum_gruendungskosten(
    parts: Union[Gruendungskosten, Mapping[str, Any]],
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """
    Sum founding cost positions.

    Accepts a Gruendungskosten record or a mapping of position -> amount.
    Missing positions count as zero, negative positions are rejected.
    """
    if isinstance(parts, Gruendungskosten):
        parts = {name: getattr(parts, name) for name in GRUENDUNGSKOSTEN_FIELDS}

    amounts = [
        require_non_negative(value if value is not None else 0, f"gruendungskosten.{name}")
        for name, value in parts.items()
    ]
    return ctx.round2(ctx.sum(amounts))


def validate_gruendungskosten(
    amount: Any,
    legal_form: Optional[str] = None,
) -> PlausibilityCheck:
    """Flag founding costs outside the realistic band for the legal form."""
    total = to_decimal(amount, "gruendungskosten")
    minimum = GRUENDUNGSKOSTEN_MINIMUM.get(legal_form or "", GRUENDUNGSKOSTEN_MINIMUM_DEFAULT)
    warnings = []

    if total < minimum:
        warnings.append(
            f"Gründungskosten von {format_eur(total)} erscheinen sehr niedrig "
            f"für {legal_form or 'diese Rechtsform'}"
        )
    if total > GRUENDUNGSKOSTEN_MAXIMUM:
        warnings.append(
            f"Gründungskosten von {format_eur(total)} erscheinen sehr hoch - "
            f"sind alle Posten wirklich Gründungskosten?"
        )

    return PlausibilityCheck(is_realistic=not warnings, warnings=warnings)


# =============================================================================
# Investitionen
# =============================================================================

def sum_investitionen(
    investitionen: Iterable[Investition],
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    amounts = [
        require_non_negative(inv.betrag, f"investitionen[{inv.name}].betrag")
        for inv in investitionen
    ]
    return ctx.round2(ctx.sum(amounts))


def investitionen_by_category(
    investitionen: Iterable[Investition],
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Dict[str, Decimal]:
    """Investment totals per category, in order of first appearance."""
    totals: Dict[str, Decimal] = {}
    for inv in investitionen:
        key = inv.kategorie.value
        amount = require_non_negative(inv.betrag, f"investitionen[{inv.name}].betrag")
        totals[key] = ctx.add(totals.get(key, ZERO), amount)
    return {key: ctx.round2(value) for key, value in totals.items()}


def compute_depreciation(
    investition: Investition,
    method: AbschreibungMethode = AbschreibungMethode.LINEAR,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """
    Annual depreciation of one investment.

    linear: betrag / nutzungsdauer (default 5 years)
    declining: 20% of betrag in the first year
    """
    betrag = require_non_negative(investition.betrag, f"investitionen[{investition.name}].betrag")
    if method == AbschreibungMethode.DECLINING:
        return ctx.round2(ctx.mul(betrag, DECLINING_RATE))

    years = Decimal(investition.nutzungsdauer or DEFAULT_NUTZUNGSDAUER)
    return ctx.round2(ctx.div(betrag, years))


# =============================================================================
# Anlaufkosten
# =============================================================================

def compute_anlaufkosten(
    monate: Any,
    monatliche_kosten: Any,
    reserve_percent: Any = 20,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> AnlaufkostenResult:
    """
    Ramp-up costs with reserve.

    laufende_kosten = monate × monatliche_kosten
    reserve = laufende_kosten × reserve_percent / 100
    summe = laufende_kosten + reserve
    """
    months = require_non_negative(monate, "anlaufkosten.monate")
    monthly = require_non_negative(monatliche_kosten, "anlaufkosten.monatlicheKosten")
    percent = require_non_negative(reserve_percent, "anlaufkosten.reservePercent")

    laufende_kosten = ctx.mul(months, monthly)
    reserve = ctx.div(ctx.mul(laufende_kosten, percent), HUNDRED)

    return AnlaufkostenResult(
        monate=int(months),
        monatliche_kosten=ctx.round2(monthly),
        reserve_percent=ctx.round2(percent),
        laufende_kosten=ctx.round2(laufende_kosten),
        reserve=ctx.round2(reserve),
        summe=ctx.round2(ctx.add(laufende_kosten, reserve)),
    )


def validate_anlaufkosten(monate: Any, monatliche_kosten: Any) -> PlausibilityCheck:
    months = to_decimal(monate, "anlaufkosten.monate")
    monthly = to_decimal(monatliche_kosten, "anlaufkosten.monatlicheKosten")
    warnings = []

    if months < 3:
        warnings.append("Weniger als 3 Monate Anlaufzeit ist sehr optimistisch")
    if months > 18:
        warnings.append("Mehr als 18 Monate Anlaufzeit könnte zu viel Kapital binden")
    if monthly < 1000:
        warnings.append(f"Monatliche Kosten unter {format_eur(1000)} erscheinen sehr niedrig")
    if monthly > 10000:
        warnings.append(
            f"Monatliche Kosten über {format_eur(10000)} sind sehr hoch - alle Posten nötig?"
        )

    return PlausibilityCheck(is_realistic=not warnings, warnings=warnings)


# =============================================================================
# Aggregate
# =============================================================================

def compute_gesamtkapitalbedarf(
    gruendungskosten: Any,
    investitionen: Any,
    anlaufkosten: Any,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    parts = [
        require_non_negative(gruendungskosten, "gruendungskosten"),
        require_non_negative(investitionen, "investitionen"),
        require_non_negative(anlaufkosten, "anlaufkosten"),
    ]
    return ctx.round2(ctx.sum(parts))


def compute_kapitalbedarf(
    data: KapitalbedarfInput,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> KapitalbedarfResult:
    """Compute the full Kapitalbedarf record from its inputs."""
    gk = data.gruendungskosten
    gk_summe = sum_gruendungskosten(gk, ctx=ctx)

    inv_summe = sum_investitionen(data.investitionen, ctx=ctx)
    abschreibung = ctx.round2(
        ctx.sum(compute_depreciation(inv, ctx=ctx) for inv in data.investitionen)
    )

    anlauf_input = data.anlaufkosten or Anlaufkosten(monate=0, monatliche_kosten=ZERO)
    anlauf = compute_anlaufkosten(
        anlauf_input.monate,
        anlauf_input.monatliche_kosten,
        anlauf_input.reserve_percent,
        ctx=ctx,
    )

    gesamt = compute_gesamtkapitalbedarf(gk_summe, inv_summe, anlauf.summe, ctx=ctx)

    warnings = list(validate_gruendungskosten(gk_summe, data.rechtsform).warnings)
    if data.anlaufkosten is not None:
        warnings.extend(
            validate_anlaufkosten(anlauf_input.monate, anlauf_input.monatliche_kosten).warnings
        )

    logger.debug(
        f"Kapitalbedarf: gruendung={gk_summe} investitionen={inv_summe} "
        f"anlauf={anlauf.summe} gesamt={gesamt}"
    )

    return KapitalbedarfResult(
        gruendungskosten=GruendungskostenResult(
            notar=ctx.round2(gk.notar),
            handelsregister=ctx.round2(gk.handelsregister),
            beratung=ctx.round2(gk.beratung),
            marketing=ctx.round2(gk.marketing),
            sonstige=ctx.round2(gk.sonstige),
            summe=gk_summe,
        ),
        investitionen=list(data.investitionen),
        investitionen_summe=inv_summe,
        investitionen_nach_kategorie=investitionen_by_category(data.investitionen, ctx=ctx),
        abschreibung_jaehrlich=abschreibung,
        anlaufkosten=anlauf,
        gesamtkapitalbedarf=gesamt,
        warnings=warnings,
    )
