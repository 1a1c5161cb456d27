"""
Break-Even Engine

break_even_umsatz_monatlich = fixkosten / (1 - variable_kosten_prozent / 100)

With a planned revenue series, the break-even month is the first month whose
planned revenue reaches the break-even revenue (point-in-month crossing,
first crossing wins for non-monotonic series). Without a series the timing
is estimated from a conservative ramp of 1.000 € revenue growth per month.
"""
import logging
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from finanzplan.break_even.schemas import (
    BreakEvenInput,
    BreakEvenResult,
    BreakEvenScenario,
    IndustryComparison,
    RealismCheck,
    SensitivityParameter,
    SensitivityPoint,
    SensitivityResult,
)
from finanzplan.config import settings
from finanzplan.money import (
    DEFAULT_CONTEXT,
    DecimalContext,
    HUNDRED,
    ZERO,
    format_eur,
    require_non_negative,
    require_percentage,
    to_decimal,
)
from finanzplan.planung import (
    Kostenplanung,
    Umsatzplanung,
    fixed_costs_monthly,
    revenue_series,
    variable_cost_percent,
)

logger = logging.getLogger(__name__)


MAX_VARIABLE_PERCENT = 99
RAMP_GROWTH_PER_MONTH = Decimal("1000")

HIGH_BREAK_EVEN_MONTHLY = Decimal("20000")
HIGH_VARIABLE_PERCENT = Decimal("70")
HIGH_FIXED_COSTS = Decimal("15000")
LOW_CONTRIBUTION_MARGIN = Decimal("30")
HIGH_BREAK_EVEN_ANNUAL = Decimal("500000")

DEFAULT_SENSITIVITY_CHANGES = (-20, -10, -5, 5, 10, 20)

SCENARIO_CONSERVATIVE_VARIABLE_CAP = Decimal("95")

# Per-industry realism bands
INDUSTRY_BENCHMARKS = {
    "beratung": {"min_monthly_revenue": Decimal("3000"), "max_break_even_months": 12, "typical_margin": Decimal("60")},
    "ecommerce": {"min_monthly_revenue": Decimal("5000"), "max_break_even_months": 18, "typical_margin": Decimal("40")},
    "handwerk": {"min_monthly_revenue": Decimal("8000"), "max_break_even_months": 24, "typical_margin": Decimal("35")},
    "gastronomie": {"min_monthly_revenue": Decimal("15000"), "max_break_even_months": 18, "typical_margin": Decimal("25")},
    "default": {"min_monthly_revenue": Decimal("5000"), "max_break_even_months": 24, "typical_margin": Decimal("45")},
}
INDUSTRY_ALIASES = {"restaurant": "gastronomie"}
KLEINUNTERNEHMER_RISK_ANNUAL = Decimal("400000")


def industry_key(industry: Optional[str]) -> str:
    key = (industry or "default").strip().lower()
    return INDUSTRY_ALIASES.get(key, key)


def benchmark_comment(months: Optional[Decimal]) -> str:
    """Rate break-even timing; None means beyond the planning horizon."""
    if months is not None and months <= 12:
        return "Ausgezeichnet - Break-Even unter 12 Monaten ist sehr gut"
    if months is not None and months <= 18:
        return "Gut - Break-Even bis 18 Monate ist akzeptabel"
    if months is not None and months <= 24:
        return "Akzeptabel - Break-Even bis 24 Monate noch im Rahmen"
    if months is not None and months <= 36:
        return "Grenzwertig - Break-Even über 24 Monate kritisch prüfen"
    return "Kritisch - Break-Even über 36 Monate unwahrscheinlich für BA-Zustimmung"


def find_break_even_month(
    series: Sequence[Any],
    break_even_monthly: Decimal,
    limit: int = 36,
) -> Optional[int]:
    """First month (1-based) whose planned revenue reaches break-even."""
    for index, revenue in enumerate(series[:limit]):
        if require_non_negative(revenue, f"umsatzSeries[{index}]") >= break_even_monthly:
            return index + 1
    return None


def compute_break_even(
    fixkosten_monatlich: Any,
    variable_kosten_prozent: Any,
    umsatz_series: Optional[Sequence[Any]] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> BreakEvenResult:
    """Break-even revenue, timing and warnings for one cost structure."""
    fixed = require_non_negative(fixkosten_monatlich, "fixkostenMonatlich")
    variable = require_percentage(
        variable_kosten_prozent, "variableKostenProzent", upper=MAX_VARIABLE_PERCENT
    )
    limit = settings.BREAK_EVEN_LIMIT_MONTHS

    margin = ctx.sub(HUNDRED, variable)
    break_even = ctx.div(fixed, ctx.div(margin, HUNDRED))
    break_even_annual = ctx.mul(break_even, Decimal(12))

    warnings = []
    recommendations = []

    if break_even > HIGH_BREAK_EVEN_MONTHLY:
        warnings.append("Sehr hoher Break-Even-Umsatz - Kostenstruktur oder Preise überprüfen")
    if variable > HIGH_VARIABLE_PERCENT:
        warnings.append("Sehr hohe variable Kosten - Skaleneffekte anstreben")
        recommendations.append("Automatisierung und Effizienzsteigerungen prüfen")
    if fixed > HIGH_FIXED_COSTS:
        warnings.append("Hohe Fixkosten - flexible Alternativen erwägen")
        recommendations.append("Variable Kostenstrukturen wo möglich implementieren")

    break_even_monat = None
    if umsatz_series:
        break_even_monat = find_break_even_month(umsatz_series, break_even, limit)
        months = Decimal(break_even_monat) if break_even_monat is not None else None
        reachable = break_even_monat is not None and break_even_monat <= limit
    else:
        months = ctx.div(break_even, RAMP_GROWTH_PER_MONTH)
        reachable = months <= limit

    if not reachable:
        warnings.append(f"Break-Even nach {limit} Monaten - BA könnte dies kritisch bewerten")
        recommendations.append(
            "Kostenreduktion oder Umsatzsteigerung zur Verbesserung der Break-Even-Zeit"
        )
    if margin < LOW_CONTRIBUTION_MARGIN:
        recommendations.append("Deckungsbeitrag unter 30% - Preiserhöhung oder Kostensenkung prüfen")
    if break_even_annual > HIGH_BREAK_EVEN_ANNUAL:
        recommendations.append("Hoher Jahresumsatz für Break-Even - Marktpotenzial validieren")

    comparison = IndustryComparison(
        is_below_average=months is not None and months < 18,
        is_above_worrying=months is None or months > 24,
        benchmark_comment=benchmark_comment(months),
    )

    logger.debug(
        f"Break-even: monatlich={ctx.round2(break_even)} monat={break_even_monat} "
        f"erreichbar={reachable}"
    )

    return BreakEvenResult(
        fixkosten_monatlich=ctx.round2(fixed),
        variable_kosten_prozent=ctx.round2(variable),
        break_even_umsatz_monatlich=ctx.round2(break_even),
        break_even_umsatz_jaehrlich=ctx.round2(break_even_annual),
        deckungsbeitrag=ctx.round2(margin),
        deckungsbeitrag_euro=ctx.round2(ctx.div(ctx.mul(break_even, margin), HUNDRED)),
        break_even_monat=break_even_monat,
        is_reachable_in_36_months=reachable,
        months_to_break_even=ctx.round2(months) if months is not None else None,
        industry_comparison=comparison,
        warnings=warnings,
        recommendations=recommendations,
    )


def compute_break_even_from_plan(
    kostenplanung: Kostenplanung,
    umsatzplanung: Umsatzplanung,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> BreakEvenResult:
    """Break-even from the cost and revenue plan over the 36-month series."""
    variable = min(
        variable_cost_percent(kostenplanung, umsatzplanung, ctx=ctx),
        Decimal(MAX_VARIABLE_PERCENT),
    )
    return compute_break_even(
        fixed_costs_monthly(kostenplanung, ctx=ctx),
        variable,
        revenue_series(umsatzplanung, settings.BREAK_EVEN_LIMIT_MONTHS, ctx=ctx),
        ctx=ctx,
    )


def _from_input(data: BreakEvenInput, ctx: DecimalContext, **overrides) -> BreakEvenResult:
    values = {
        "fixkosten_monatlich": data.fixkosten_monatlich,
        "variable_kosten_prozent": data.variable_kosten_prozent,
        "umsatz_series": data.umsatz_series,
    }
    values.update(overrides)
    return compute_break_even(ctx=ctx, **values)


# =============================================================================
# Sensitivity and scenarios
# =============================================================================

def sensitivity_analysis(
    data: BreakEvenInput,
    parameter: SensitivityParameter = SensitivityParameter.FIXKOSTEN,
    changes: Sequence[Any] = DEFAULT_SENSITIVITY_CHANGES,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> SensitivityResult:
    """
    Perturb one input by relative changes (in %) and report the shift of
    the break-even revenue. Variable cost perturbations that leave the
    valid [0, 99] range are skipped.
    """
    parameter = SensitivityParameter(parameter)
    base = _from_input(data, ctx)
    base_value = (
        data.fixkosten_monatlich
        if parameter == SensitivityParameter.FIXKOSTEN
        else data.variable_kosten_prozent
    )
    field = "fixkosten_monatlich" if parameter == SensitivityParameter.FIXKOSTEN else "variable_kosten_prozent"

    points = []
    for change in changes:
        delta = to_decimal(change, "change")
        factor = ctx.add(Decimal(1), ctx.div(delta, HUNDRED))
        value = ctx.mul(base_value, factor)
        if parameter == SensitivityParameter.VARIABLE_KOSTEN and value > MAX_VARIABLE_PERCENT:
            continue

        result = _from_input(data, ctx, **{field: value})
        if base.break_even_umsatz_monatlich == 0:
            impact = ZERO
        else:
            impact = ctx.pct(
                ctx.sub(result.break_even_umsatz_monatlich, base.break_even_umsatz_monatlich),
                base.break_even_umsatz_monatlich,
            )
        points.append(
            SensitivityPoint(
                change=ctx.round2(delta),
                value=ctx.round2(value),
                new_break_even=result.break_even_umsatz_monatlich,
                impact=ctx.round2(impact),
            )
        )

    return SensitivityResult(
        parameter=parameter,
        base_break_even=base.break_even_umsatz_monatlich,
        points=points,
    )


def analyze_scenarios(
    data: BreakEvenInput,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> List[BreakEvenScenario]:
    """Base case, optimistic (-20 % costs) and conservative (+20 % costs)."""
    fixed = require_non_negative(data.fixkosten_monatlich, "fixkostenMonatlich")
    variable = require_non_negative(data.variable_kosten_prozent, "variableKostenProzent")

    variants = [
        ("Basis-Szenario", fixed, variable),
        (
            "Optimistisch (20% Kostenreduktion)",
            ctx.mul(fixed, Decimal("0.8")),
            ctx.mul(variable, Decimal("0.8")),
        ),
        (
            "Konservativ (20% Kostensteigerung)",
            ctx.mul(fixed, Decimal("1.2")),
            min(ctx.mul(variable, Decimal("1.2")), SCENARIO_CONSERVATIVE_VARIABLE_CAP),
        ),
    ]

    scenarios = []
    for name, scenario_fixed, scenario_variable in variants:
        result = _from_input(
            data, ctx,
            fixkosten_monatlich=scenario_fixed,
            variable_kosten_prozent=scenario_variable,
        )
        scenarios.append(
            BreakEvenScenario(
                name=name,
                fixkosten_monatlich=ctx.round2(scenario_fixed),
                variable_kosten_prozent=ctx.round2(scenario_variable),
                result=result,
            )
        )
    return scenarios


# =============================================================================
# Realism
# =============================================================================

def validate_realism(result: BreakEvenResult, industry: Optional[str] = None) -> RealismCheck:
    """Compare a break-even result with the industry's benchmark band."""
    key = industry_key(industry)
    benchmark = INDUSTRY_BENCHMARKS.get(key, INDUSTRY_BENCHMARKS["default"])
    label = industry or "default"

    warnings = list(result.warnings)
    guidance = []

    if result.break_even_umsatz_monatlich < benchmark["min_monthly_revenue"]:
        warnings.append(
            f"Break-Even-Umsatz unter {format_eur(benchmark['min_monthly_revenue'])}/Monat "
            f"ungewöhnlich niedrig für {label}"
        )

    months = result.months_to_break_even
    if months is not None and months > benchmark["max_break_even_months"]:
        warnings.append(
            f"Break-Even nach {months} Monaten über Branchendurchschnitt "
            f"({benchmark['max_break_even_months']} Monate)"
        )

    if result.deckungsbeitrag < benchmark["typical_margin"]:
        warnings.append(
            f"Deckungsbeitrag {result.deckungsbeitrag:.1f}% unter Branchenschnitt "
            f"({benchmark['typical_margin']}%)"
        )
        guidance.append(f"Für {label}: Deckungsbeitrag von {benchmark['typical_margin']}% anstreben")

    if result.break_even_umsatz_jaehrlich > KLEINUNTERNEHMER_RISK_ANNUAL:
        warnings.append("Break-Even über 400.000,00 €/Jahr - Kleinunternehmerregelung nicht mehr möglich")
        guidance.append("Steuerliche Komplexität steigt erheblich ab 400.000,00 € Jahresumsatz")

    return RealismCheck(
        is_realistic=len(warnings) <= 2,
        warnings=warnings,
        industry_guidance=guidance,
    )
