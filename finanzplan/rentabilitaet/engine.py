"""
Rentabilität Engine

Three-year income statement of the business plan:
    rohertrag           = umsatz - materialaufwand
    ergebnis_vor_steuern = rohertrag - fixkosten - sonstige variable Kosten
    steuern             = ergebnis_vor_steuern × effective rate (0 on a loss)
    jahresueberschuss   = ergebnis_vor_steuern - steuern

The tax model is a deliberately simplified flat rate per regime, clamped to
25-35 %. It is not a progressive income tax calculation.
"""
import logging
from decimal import Decimal
from typing import Any, Optional

from finanzplan.break_even import compute_break_even_from_plan, industry_key
from finanzplan.config import settings
from finanzplan.money import (
    DEFAULT_CONTEXT,
    DecimalContext,
    HUNDRED,
    ZERO,
    format_eur,
    to_decimal,
)
from finanzplan.planung import (
    Kostenplanung,
    Umsatzplanung,
    annual_revenue,
    fixed_costs_annual,
    material_costs,
    other_variable_costs,
)
from finanzplan.rentabilitaet.schemas import (
    BenchmarkComparison,
    MarginTrend,
    ProfitabilityMetrics,
    ProfitabilityRating,
    ProfitabilityValidation,
    RentabilitaetJahr,
    RentabilitaetResult,
    TaxAnalysis,
    TaxRegime,
)

logger = logging.getLogger(__name__)


# Components of the flat rate per regime
TAX_COMPONENTS = {
    TaxRegime.GEWERBE: {
        "einkommensteuer": Decimal("0.25"),
        "gewerbesteuer": Decimal("0.035"),
        "kirchensteuer": Decimal("0.018"),
        "solidaritaetszuschlag": Decimal("0.0055"),
    },
    TaxRegime.FREIBERUFLICH: {
        "einkommensteuer": Decimal("0.25"),
        "kirchensteuer": Decimal("0.018"),
        "solidaritaetszuschlag": Decimal("0.0055"),
    },
}
TAX_RATE_MIN = Decimal("0.25")
TAX_RATE_MAX = Decimal("0.35")

MARGIN_TREND_THRESHOLD = Decimal("2")  # percentage points

# Typical gross / operating / net margins in %
INDUSTRY_MARGINS = {
    "beratung": {"gross": Decimal("85"), "operating": Decimal("25"), "net": Decimal("15")},
    "ecommerce": {"gross": Decimal("45"), "operating": Decimal("12"), "net": Decimal("8")},
    "handwerk": {"gross": Decimal("55"), "operating": Decimal("15"), "net": Decimal("10")},
    "gastronomie": {"gross": Decimal("65"), "operating": Decimal("8"), "net": Decimal("4")},
    "default": {"gross": Decimal("60"), "operating": Decimal("15"), "net": Decimal("8")},
}

UST_SMALL_BUSINESS_RISK = Decimal("400000")
IAB_PROFIT_THRESHOLD = Decimal("50000")


# =============================================================================
# Tax
# =============================================================================

def effective_tax_rate(
    regime: TaxRegime = TaxRegime.GEWERBE,
    annual_revenue_amount: Any = None,
    override: Optional[Any] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """
    Effective tax rate as a fraction.

    0 when the Kleinunternehmer regime is selected and revenue stays within
    the threshold; otherwise the regime's flat rate (a Kleinunternehmer above
    the threshold is taxed as Gewerbe), clamped to 25-35 %. An explicit
    override is given in percent.
    """
    regime = TaxRegime(regime)
    if regime == TaxRegime.KLEINUNTERNEHMER:
        revenue = to_decimal(annual_revenue_amount if annual_revenue_amount is not None else 0, "umsatz")
        if revenue <= Decimal(settings.KLEINUNTERNEHMER_GRENZE):
            return ZERO
        regime = TaxRegime.GEWERBE

    if override is not None:
        rate = ctx.div(to_decimal(override, "taxRate"), HUNDRED)
    else:
        rate = ctx.sum(TAX_COMPONENTS[regime].values())
    return max(TAX_RATE_MIN, min(rate, TAX_RATE_MAX))


# =============================================================================
# Income statement
# =============================================================================

def _margin(value: Decimal, revenue: Decimal, ctx: DecimalContext) -> Decimal:
    return ctx.pct(value, revenue) if revenue > 0 else ZERO


def compute_year(
    year: int,
    umsatzplanung: Umsatzplanung,
    kostenplanung: Kostenplanung,
    tax_regime: TaxRegime = TaxRegime.GEWERBE,
    tax_rate: Optional[Any] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> RentabilitaetJahr:
    umsatz = annual_revenue(umsatzplanung, year, ctx=ctx)
    material = material_costs(kostenplanung, year)
    sonstige = other_variable_costs(kostenplanung, year)
    fixkosten = fixed_costs_annual(kostenplanung, year, ctx=ctx)

    rohertrag = ctx.sub(umsatz, material)
    ebt = ctx.sub(ctx.sub(rohertrag, fixkosten), sonstige)
    rate = effective_tax_rate(tax_regime, umsatz, tax_rate, ctx=ctx)
    steuern = ctx.mul(ebt, rate) if ebt > 0 else ZERO
    ueberschuss = ctx.sub(ebt, steuern)

    return RentabilitaetJahr(
        jahr=year,
        umsatz=ctx.round2(umsatz),
        materialaufwand=ctx.round2(material),
        rohertrag=ctx.round2(rohertrag),
        rohertragsmarge=ctx.round2(_margin(rohertrag, umsatz, ctx)),
        fixkosten=ctx.round2(fixkosten),
        sonstige_variable=ctx.round2(sonstige),
        ergebnis_vor_steuern=ctx.round2(ebt),
        steuersatz=ctx.round2(ctx.mul(rate, HUNDRED)),
        steuern=ctx.round2(steuern),
        jahresueberschuss=ctx.round2(ueberschuss),
        umsatzrendite=ctx.round2(_margin(ueberschuss, umsatz, ctx)),
    )


def compute_rentabilitaet(
    umsatzplanung: Umsatzplanung,
    kostenplanung: Kostenplanung,
    industry: Optional[str] = None,
    tax_regime: TaxRegime = TaxRegime.GEWERBE,
    tax_rate: Optional[Any] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> RentabilitaetResult:
    """Three-year profitability projection with break-even timing."""
    tax_regime = TaxRegime(tax_regime)
    jahre = [
        compute_year(year, umsatzplanung, kostenplanung, tax_regime, tax_rate, ctx=ctx)
        for year in (1, 2, 3)
    ]
    break_even = compute_break_even_from_plan(kostenplanung, umsatzplanung, ctx=ctx)

    logger.debug(
        f"Rentabilität ({industry_key(industry)}): "
        + ", ".join(f"jahr{j.jahr}={j.jahresueberschuss}" for j in jahre)
    )

    return RentabilitaetResult(
        jahr1=jahre[0],
        jahr2=jahre[1],
        jahr3=jahre[2],
        tax_regime=tax_regime,
        break_even_monat=break_even.break_even_monat,
        break_even_umsatz=break_even.break_even_umsatz_monatlich,
    )


# =============================================================================
# Metrics and benchmarks
# =============================================================================

def compute_profitability_metrics(
    result: RentabilitaetResult,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> ProfitabilityMetrics:
    j1, j2, j3 = result.jahre

    growth2 = _margin(ctx.sub(j2.umsatz, j1.umsatz), j1.umsatz, ctx)
    growth3 = _margin(ctx.sub(j3.umsatz, j2.umsatz), j2.umsatz, ctx)
    if j1.umsatz > 0:
        cagr = ctx.mul(ctx.sub(ctx.sqrt(ctx.div(j3.umsatz, j1.umsatz)), Decimal(1)), HUNDRED)
    else:
        cagr = ZERO

    three = Decimal(3)
    avg_gross = ctx.div(ctx.sum(j.rohertragsmarge for j in result.jahre), three)
    avg_operating = ctx.div(
        ctx.sum(_margin(j.ergebnis_vor_steuern, j.umsatz, ctx) for j in result.jahre), three
    )
    avg_net = ctx.div(ctx.sum(j.umsatzrendite for j in result.jahre), three)

    improvement = ctx.sub(j3.umsatzrendite, j1.umsatzrendite)
    if improvement > MARGIN_TREND_THRESHOLD:
        trend = MarginTrend.IMPROVING
    elif improvement < -MARGIN_TREND_THRESHOLD:
        trend = MarginTrend.DECLINING
    else:
        trend = MarginTrend.STABLE

    if avg_net > 15 and avg_operating > 20:
        rating = ProfitabilityRating.EXCELLENT
    elif avg_net > 8 and avg_operating > 12:
        rating = ProfitabilityRating.GOOD
    elif avg_net > 3 and avg_operating > 5:
        rating = ProfitabilityRating.ACCEPTABLE
    elif avg_net > 0:
        rating = ProfitabilityRating.CONCERNING
    else:
        rating = ProfitabilityRating.POOR

    return ProfitabilityMetrics(
        revenue_growth_year2=ctx.round2(growth2),
        revenue_growth_year3=ctx.round2(growth3),
        avg_annual_growth=ctx.round2(cagr),
        avg_gross_margin=ctx.round2(avg_gross),
        avg_operating_margin=ctx.round2(avg_operating),
        avg_net_margin=ctx.round2(avg_net),
        margin_trend=trend,
        profitability_rating=rating,
    )


def compare_with_industry_benchmarks(
    result: RentabilitaetResult,
    industry: Optional[str] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> BenchmarkComparison:
    benchmark = INDUSTRY_MARGINS.get(industry_key(industry), INDUSTRY_MARGINS["default"])
    metrics = compute_profitability_metrics(result, ctx=ctx)

    gross_diff = ctx.sub(metrics.avg_gross_margin, benchmark["gross"])
    operating_diff = ctx.sub(metrics.avg_operating_margin, benchmark["operating"])
    net_diff = ctx.sub(metrics.avg_net_margin, benchmark["net"])

    warnings = []
    recommendations = []

    if gross_diff < -10:
        warnings.append(
            f"Rohertragsmarge ({metrics.avg_gross_margin:.1f}%) deutlich unter "
            f"Branchenschnitt ({benchmark['gross']}%)"
        )
        recommendations.append("Preise erhöhen oder Materialkosten senken")
    if operating_diff < -5:
        warnings.append(
            f"Betriebsergebnis ({metrics.avg_operating_margin:.1f}%) unter "
            f"Branchenschnitt ({benchmark['operating']}%)"
        )
        recommendations.append("Betriebskosten optimieren oder Effizienz steigern")
    if net_diff < -3:
        warnings.append(
            f"Umsatzrendite ({metrics.avg_net_margin:.1f}%) unter "
            f"Branchenschnitt ({benchmark['net']}%)"
        )
        recommendations.append("Gesamte Kostenstrategie überdenken")
    if net_diff > 5:
        recommendations.append(
            f"Ausgezeichnete Rentabilität - {metrics.avg_net_margin:.1f}% über Branchenschnitt"
        )

    return BenchmarkComparison(
        gross_margin_typical=ctx.round2(benchmark["gross"]),
        operating_margin_typical=ctx.round2(benchmark["operating"]),
        net_margin_typical=ctx.round2(benchmark["net"]),
        gross_margin_vs_benchmark=ctx.round2(gross_diff),
        operating_margin_vs_benchmark=ctx.round2(operating_diff),
        net_margin_vs_benchmark=ctx.round2(net_diff),
        warnings=warnings,
        recommendations=recommendations,
    )


def analyze_tax_implications(
    result: RentabilitaetResult,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> TaxAnalysis:
    j1, j2, _ = result.jahre
    total_profit = ctx.sum(j.ergebnis_vor_steuern for j in result.jahre)
    total_taxes = ctx.sum(j.steuern for j in result.jahre)
    effective = ctx.pct(total_taxes, total_profit) if total_profit > 0 else ZERO
    threshold = Decimal(settings.KLEINUNTERNEHMER_GRENZE)

    optimization = []
    risks = []

    if j1.umsatz < threshold:
        optimization.append(
            f"Kleinunternehmerregelung prüfen - keine USt bis {format_eur(threshold)}"
        )
    if j1.umsatz > UST_SMALL_BUSINESS_RISK:
        risks.append(
            f"USt-Schwellenwert {format_eur(UST_SMALL_BUSINESS_RISK)} - "
            f"keine Kleinunternehmerregelung mehr möglich"
        )
    if effective > 35:
        optimization.append("Hohe Steuerlast - Ausgaben und Abschreibungen optimieren")
        optimization.append("Steuerberatung empfohlen für Rechtsformenwahl")
    if total_profit > IAB_PROFIT_THRESHOLD:
        optimization.append("Investitionsabzugsbetrag (IAB) für Anschaffungen prüfen")
        optimization.append("Degressive AfA bei geeigneten Wirtschaftsgütern nutzen")
    if j2.umsatz > threshold and j1.umsatz < threshold:
        risks.append("USt-Pflicht ab Jahr 2 - Preise entsprechend anpassen")

    return TaxAnalysis(
        effective_rate=ctx.round2(effective),
        tax_optimization_potential=optimization,
        tax_risk_warnings=risks,
    )


# =============================================================================
# BA validation
# =============================================================================

def validate_profitability_for_ba(
    result: RentabilitaetResult,
    jaehrliche_privatentnahme: Optional[Any] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> ProfitabilityValidation:
    """
    BA acceptance checks of the profitability projection.

    Blockers: break-even missing or beyond the limit, a year whose surplus
    does not cover the annual Privatentnahme.
    """
    limit = settings.BREAK_EVEN_LIMIT_MONTHS
    blockers = []
    warnings = []
    recommendations = []

    if result.break_even_monat is None or result.break_even_monat > limit:
        blockers.append(f"Break-Even nach {limit} Monaten - BA wird Plan wahrscheinlich ablehnen")
        recommendations.append("Kostenstruktur überarbeiten oder Umsatzprognosen erhöhen")

    if jaehrliche_privatentnahme is not None:
        withdrawal = to_decimal(jaehrliche_privatentnahme, "jaehrlichePrivatentnahme")
        uncovered = [jahr for jahr in result.jahre if jahr.jahresueberschuss < withdrawal]
        for jahr in uncovered:
            blockers.append(
                f"Jahresüberschuss Jahr {jahr.jahr} ({format_eur(jahr.jahresueberschuss)}) "
                f"deckt die Privatentnahme ({format_eur(withdrawal)}) nicht"
            )
        if uncovered:
            recommendations.append("Privatentnahme senken oder Umsatz steigern")

    if result.jahr3.jahresueberschuss <= 0:
        warnings.append("Kein Gewinn in Jahr 3 - langfristige Tragfähigkeit fraglich")
        recommendations.append("Geschäftsmodell und Skalierbarkeit überprüfen")

    metrics = compute_profitability_metrics(result, ctx=ctx)
    if metrics.margin_trend == MarginTrend.DECLINING:
        warnings.append("Sinkende Rentabilität über Zeit - Nachhaltigkeit gefährdet")
        recommendations.append("Kostendisziplin und Effizienzsteigerungen implementieren")
    if metrics.avg_annual_growth > 100:
        warnings.append("Sehr hohes Wachstum (>100% CAGR) - Realismus kritisch hinterfragen")
        recommendations.append("Konservativere Wachstumsannahmen erwägen")
    if metrics.avg_net_margin < 3:
        warnings.append("Sehr niedrige Gewinnmargen (<3%) - Geschäftsrisiko hoch")
        recommendations.append("Preisgestaltung und Kostenstruktur grundlegend überarbeiten")

    return ProfitabilityValidation(
        is_ba_compliant=not blockers,
        blockers=blockers,
        warnings=warnings,
        recommendations=recommendations,
    )
