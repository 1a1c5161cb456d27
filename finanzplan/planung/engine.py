"""
Revenue and cost plan helpers.

Umsatzplanung and Kostenplanung are read-only inputs here. These helpers
derive the figures the engines share: annual totals, growth rates, the
36-month revenue series, fixed costs per year and the variable cost ratio.
"""
from decimal import Decimal
from typing import List, Optional

from finanzplan.exceptions import ValidationError
from finanzplan.money import (
    DEFAULT_CONTEXT,
    DecimalContext,
    HUNDRED,
    ZERO,
    require_non_negative,
)
from finanzplan.planung.schemas import (
    Kostenplanung,
    KostenplanungResult,
    Umsatzplanung,
    UmsatzplanungResult,
)

TWELVE = Decimal("12")
YEARS = (1, 2, 3)


def _require_year(year: int) -> None:
    if year not in YEARS:
        raise ValidationError(f"Planjahr muss 1, 2 oder 3 sein (erhalten: {year})", "jahr")


# =============================================================================
# Umsatz
# =============================================================================

def monthly_revenue_year1(umsatz: Umsatzplanung) -> List[Decimal]:
    return [
        require_non_negative(value, f"umsatzJahr1[{index}]")
        for index, value in enumerate(umsatz.umsatz_jahr1)
    ]


def annual_revenue(
    umsatz: Umsatzplanung,
    year: int,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    _require_year(year)
    if year == 1:
        return ctx.sum(monthly_revenue_year1(umsatz))
    if year == 2:
        return require_non_negative(umsatz.umsatz_jahr2, "umsatzJahr2")
    return require_non_negative(umsatz.umsatz_jahr3, "umsatzJahr3")


def growth_rate(previous: Decimal, current: Decimal, ctx: DecimalContext = DEFAULT_CONTEXT) -> Optional[Decimal]:
    """Year-over-year growth in percent; None without a base year."""
    if previous == 0:
        return None
    return ctx.pct(ctx.sub(current, previous), previous)


def revenue_series(
    umsatz: Umsatzplanung,
    months: int = 36,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> List[Decimal]:
    """
    Monthly revenue for up to 36 months.

    Year 1 uses the planned monthly values; years 2 and 3 spread their
    annual totals evenly across twelve months.
    """
    series = monthly_revenue_year1(umsatz)
    for year in (2, 3):
        monthly = ctx.div(annual_revenue(umsatz, year, ctx=ctx), TWELVE)
        series.extend([monthly] * 12)
    return series[:months]


def summarize_umsatz(
    umsatz: Umsatzplanung,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> UmsatzplanungResult:
    jahr1, jahr2, jahr3 = (annual_revenue(umsatz, year, ctx=ctx) for year in YEARS)
    rate2 = growth_rate(jahr1, jahr2, ctx=ctx)
    rate3 = growth_rate(jahr2, jahr3, ctx=ctx)
    return UmsatzplanungResult(
        umsatz_jahr1=[ctx.round2(value) for value in monthly_revenue_year1(umsatz)],
        umsatz_jahr1_summe=ctx.round2(jahr1),
        umsatz_jahr2=ctx.round2(jahr2),
        umsatz_jahr3=ctx.round2(jahr3),
        wachstumsrate_jahr2=ctx.round2(rate2) if rate2 is not None else None,
        wachstumsrate_jahr3=ctx.round2(rate3) if rate3 is not None else None,
    )


# =============================================================================
# Kosten
# =============================================================================

def fixed_costs_monthly(
    kosten: Kostenplanung,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """Monthly fixed costs in year 1 (itemized positions win over the total)."""
    if kosten.fixkosten:
        return ctx.sum(
            require_non_negative(item.betrag_monatlich, f"fixkosten[{item.name}]")
            for item in kosten.fixkosten
        )
    if kosten.fixkosten_monatlich is None:
        return ZERO
    return require_non_negative(kosten.fixkosten_monatlich, "fixkostenMonatlich")


def fixed_cost_factor(
    kosten: Kostenplanung,
    year: int,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """Escalation factor of fixed costs relative to year 1."""
    _require_year(year)
    if year == 1:
        return Decimal("1")
    increase = kosten.fixkosten_steigerung_jahr2 if year == 2 else kosten.fixkosten_steigerung_jahr3
    return ctx.add(Decimal("1"), ctx.div(increase, HUNDRED))


def fixed_costs_monthly_in_year(
    kosten: Kostenplanung,
    year: int,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    return ctx.mul(fixed_costs_monthly(kosten, ctx=ctx), fixed_cost_factor(kosten, year, ctx=ctx))


def fixed_costs_annual(
    kosten: Kostenplanung,
    year: int,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    return ctx.mul(fixed_costs_monthly_in_year(kosten, year, ctx=ctx), TWELVE)


def material_costs(kosten: Kostenplanung, year: int) -> Decimal:
    _require_year(year)
    value = getattr(kosten, f"materialaufwand_jahr{year}")
    return require_non_negative(value, f"materialaufwandJahr{year}")


def other_variable_costs(kosten: Kostenplanung, year: int) -> Decimal:
    _require_year(year)
    value = getattr(kosten, f"sonstige_variable_jahr{year}")
    return require_non_negative(value, f"sonstigeVariableJahr{year}")


def variable_costs(
    kosten: Kostenplanung,
    year: int,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    return ctx.add(material_costs(kosten, year), other_variable_costs(kosten, year))


def variable_cost_percent(
    kosten: Kostenplanung,
    umsatz: Umsatzplanung,
    year: int = 1,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """
    Variable costs as a percentage of revenue.

    A year without revenue takes the ratio of the next plan year that has
    revenue; a plan without any revenue has a ratio of 0.
    """
    _require_year(year)
    for plan_year in range(year, YEARS[-1] + 1):
        revenue = annual_revenue(umsatz, plan_year, ctx=ctx)
        if revenue > 0:
            return ctx.pct(variable_costs(kosten, plan_year, ctx=ctx), revenue)
    return ZERO


def summarize_kosten(
    kosten: Kostenplanung,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> KostenplanungResult:
    fixed = {year: fixed_costs_annual(kosten, year, ctx=ctx) for year in YEARS}
    variable = {year: variable_costs(kosten, year, ctx=ctx) for year in YEARS}
    return KostenplanungResult(
        fixkosten_monatlich=ctx.round2(fixed_costs_monthly(kosten, ctx=ctx)),
        fixkosten_jahr1=ctx.round2(fixed[1]),
        fixkosten_jahr2=ctx.round2(fixed[2]),
        fixkosten_jahr3=ctx.round2(fixed[3]),
        variable_kosten_jahr1=ctx.round2(variable[1]),
        variable_kosten_jahr2=ctx.round2(variable[2]),
        variable_kosten_jahr3=ctx.round2(variable[3]),
        gesamtkosten_jahr1=ctx.round2(ctx.add(fixed[1], variable[1])),
        gesamtkosten_jahr2=ctx.round2(ctx.add(fixed[2], variable[2])),
        gesamtkosten_jahr3=ctx.round2(ctx.add(fixed[3], variable[3])),
    )
