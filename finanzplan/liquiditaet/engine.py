"""
Liquidität Engine

Twelve-month cash simulation of the founding year.

Per month m:
    einzahlungen = collected revenue + financing + Gründungszuschuss
    auszahlungen = operating costs + Gründungskosten + investments
                   + debt service + Privatentnahme
    endbestand[m] = anfangsbestand[m] + einzahlungen[m] - auszahlungen[m]
    anfangsbestand[m + 1] = endbestand[m]

Revenue is seasonally adjusted first and then shifted by the customer
payment delay, so the first months can show earned but uncollected revenue.
Every line item is rounded to the cent before it is summed, which keeps the
chaining identity exact. Month 1 starts from zero; financing arrives as an
inflow in its disbursement month.
"""
import logging
from datetime import date
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from finanzplan.finanzierung import (
    FinanzierungResult,
    FinanzierungsquelleTyp,
    GruendungszuschussPlan,
    compute_amortization_schedule,
    gruendungszuschuss_schedule,
    is_loan,
)
from finanzplan.kapitalbedarf import KapitalbedarfResult
from finanzplan.liquiditaet.schemas import (
    LiquiditaetMonat,
    LiquiditaetResult,
    LiquidityAnalysis,
    LiquidityValidation,
    PaymentTerms,
)
from finanzplan.money import (
    DEFAULT_CONTEXT,
    DecimalContext,
    ZERO,
    to_decimal,
)
from finanzplan.planung import (
    Kostenplanung,
    Umsatzplanung,
    annual_revenue,
    fixed_costs_monthly,
    monthly_revenue_year1,
    variable_costs,
)
from finanzplan.privatentnahme import PrivatentnahmeResult

logger = logging.getLogger(__name__)


PLAN_MONTHS = 12
DAYS_PER_MONTH = 30
NO_BURN_DAYS = 999

# Quarterly revenue multipliers (Q1..Q4)
SEASONALITY_PATTERNS = {
    "handwerk": (Decimal("0.8"), Decimal("1.2"), Decimal("1.1"), Decimal("0.9")),
    "beratung": (Decimal("1.0"), Decimal("0.9"), Decimal("0.9"), Decimal("1.2")),
    "ecommerce": (Decimal("0.9"), Decimal("1.0"), Decimal("1.0"), Decimal("1.1")),
    "gastronomie": (Decimal("0.9"), Decimal("1.1"), Decimal("1.2"), Decimal("0.8")),
    "default": (Decimal("1.0"), Decimal("1.0"), Decimal("1.0"), Decimal("1.0")),
}
SEASONALITY_ALIASES = {"restaurant": "gastronomie"}

RESERVE_MONTHS = Decimal("3")
TIGHT_RESERVE_SHARE = Decimal("0.5")
HIGH_VOLATILITY_SHARE = Decimal("0.3")
SEASONAL_SWING_SHARE = Decimal("0.3")
PAYMENT_RISK_REVENUE = Decimal("100000")
CLUSTER_RISK_MONTHLY = Decimal("20000")

MANDATORY_NEGATIVE_CASH_ACTION = "Finanzierung erhöhen oder Kosten senken"


def delay_months(days: int) -> int:
    """Payment delay in whole months: ceil(days / 30)."""
    return (int(days) + DAYS_PER_MONTH - 1) // DAYS_PER_MONTH


# =============================================================================
# Seasonality
# =============================================================================

def seasonal_factors(industry: Optional[str]) -> Sequence[Decimal]:
    key = (industry or "default").strip().lower()
    key = SEASONALITY_ALIASES.get(key, key)
    return SEASONALITY_PATTERNS.get(key, SEASONALITY_PATTERNS["default"])


def apply_seasonal_adjustments(
    series: Sequence[Any],
    industry: Optional[str] = None,
    start_month: int = 1,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> List[Decimal]:
    """
    Multiply monthly revenue by the industry's quarterly factor.

    start_month is the calendar month (1-12) of the first value, so a plan
    starting in July applies the Q3 factor first.
    """
    factors = seasonal_factors(industry)
    adjusted = []
    for index, value in enumerate(series):
        quarter = ((start_month - 1 + index) // 3) % 4
        adjusted.append(ctx.mul(to_decimal(value), factors[quarter]))
    return adjusted


# =============================================================================
# Simulation
# =============================================================================

def _financing_inflows(
    finanzierung: FinanzierungResult,
    gz_plan: Optional[GruendungszuschussPlan],
    ctx: DecimalContext,
) -> Dict[str, List[Decimal]]:
    financing = [ZERO] * PLAN_MONTHS
    subsidy = [ZERO] * PLAN_MONTHS

    for quelle in finanzierung.quellen:
        index = quelle.auszahlungsmonat - 1
        if quelle.typ == FinanzierungsquelleTyp.GRUENDUNGSZUSCHUSS:
            if gz_plan is None:
                subsidy[index] = ctx.add(subsidy[index], quelle.betrag)
        else:
            financing[index] = ctx.add(financing[index], quelle.betrag)

    if gz_plan is not None:
        subsidy = gruendungszuschuss_schedule(gz_plan, PLAN_MONTHS, ctx=ctx)

    return {"financing": financing, "subsidy": subsidy}


def _debt_service(finanzierung: FinanzierungResult, ctx: DecimalContext) -> List[Decimal]:
    """Loan payments per plan month, starting the month after disbursement."""
    service = [ZERO] * PLAN_MONTHS
    for quelle in finanzierung.quellen:
        if not is_loan(quelle) or quelle.betrag <= 0:
            continue
        rate = quelle.zinssatz if quelle.zinssatz is not None else ZERO
        remaining_months = PLAN_MONTHS - quelle.auszahlungsmonat
        if remaining_months <= 0:
            continue
        schedule = compute_amortization_schedule(
            quelle.betrag,
            rate,
            quelle.laufzeit,
            tilgungsfrei=quelle.tilgungsfrei or 0,
            months=remaining_months,
            ctx=ctx,
        )
        for row in schedule:
            index = quelle.auszahlungsmonat - 1 + row.month
            service[index] = ctx.add(service[index], row.payment)
    return service


def compute_liquiditaet(
    kapitalbedarf: KapitalbedarfResult,
    finanzierung: FinanzierungResult,
    privatentnahme: PrivatentnahmeResult,
    umsatzplanung: Umsatzplanung,
    kostenplanung: Kostenplanung,
    payment_terms: Optional[PaymentTerms] = None,
    saisonalitaet: Optional[str] = None,
    gruendungszuschuss: Optional[GruendungszuschussPlan] = None,
    start_datum: Optional[date] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> LiquiditaetResult:
    """Simulate the twelve months of the founding year."""
    terms = payment_terms or PaymentTerms()
    revenue_delay = delay_months(terms.customer_payment_days)
    cost_delay = delay_months(terms.variable_cost_payment_days)

    start_month = start_datum.month if start_datum else 1
    earned = apply_seasonal_adjustments(
        monthly_revenue_year1(umsatzplanung), saisonalitaet, start_month, ctx=ctx
    )

    revenue_year1 = annual_revenue(umsatzplanung, 1, ctx=ctx)
    variable_year1 = variable_costs(kostenplanung, 1, ctx=ctx)
    variable_ratio = ctx.div(variable_year1, revenue_year1) if revenue_year1 > 0 else ZERO
    # Without planned revenue the variable costs are spread evenly
    variable_flat = ZERO if revenue_year1 > 0 else ctx.div(variable_year1, Decimal(PLAN_MONTHS))
    fixed_monthly = fixed_costs_monthly(kostenplanung, ctx=ctx)

    inflows = _financing_inflows(finanzierung, gruendungszuschuss, ctx)
    debt_service = _debt_service(finanzierung, ctx)

    investments = [ZERO] * PLAN_MONTHS
    for inv in kapitalbedarf.investitionen:
        index = inv.anschaffungsmonat - 1
        investments[index] = ctx.add(investments[index], inv.betrag)

    months = []
    balance = ctx.round2(ZERO)
    for month in range(1, PLAN_MONTHS + 1):
        index = month - 1
        collected_index = index - revenue_delay
        cost_index = index - cost_delay

        ein_umsatz = ctx.round2(earned[collected_index] if collected_index >= 0 else ZERO)
        ein_finanzierung = ctx.round2(inflows["financing"][index])
        ein_gz = ctx.round2(inflows["subsidy"][index])
        ein_gesamt = ctx.sum([ein_umsatz, ein_finanzierung, ein_gz])

        variable_paid = ctx.mul(earned[cost_index], variable_ratio) if cost_index >= 0 else ZERO
        variable_paid = ctx.add(variable_paid, variable_flat)
        aus_betrieb = ctx.round2(ctx.add(fixed_monthly, variable_paid))
        aus_gruendung = ctx.round2(kapitalbedarf.gruendungskosten.summe if month == 1 else ZERO)
        aus_investitionen = ctx.round2(investments[index])
        aus_kapitaldienst = ctx.round2(debt_service[index])
        aus_privat = ctx.round2(privatentnahme.monatliche_privatentnahme)
        aus_gesamt = ctx.sum(
            [aus_betrieb, aus_gruendung, aus_investitionen, aus_kapitaldienst, aus_privat]
        )

        anfang = balance
        balance = ctx.sub(ctx.add(anfang, ein_gesamt), aus_gesamt)

        months.append(
            LiquiditaetMonat(
                monat=month,
                datum=start_datum + relativedelta(months=index) if start_datum else None,
                umsatz_geplant=ctx.round2(earned[index]),
                anfangsbestand=anfang,
                einzahlungen_umsatz=ein_umsatz,
                einzahlungen_finanzierung=ein_finanzierung,
                einzahlungen_gruendungszuschuss=ein_gz,
                einzahlungen_gesamt=ein_gesamt,
                auszahlungen_betrieb=aus_betrieb,
                auszahlungen_gruendung=aus_gruendung,
                auszahlungen_investitionen=aus_investitionen,
                auszahlungen_kapitaldienst=aus_kapitaldienst,
                auszahlungen_privat=aus_privat,
                auszahlungen_gesamt=aus_gesamt,
                endbestand=balance,
            )
        )

    minimum = min(months, key=lambda m: m.endbestand)
    negative = [m.monat for m in months if m.endbestand < 0]
    average = ctx.div(ctx.sum(m.endbestand for m in months), Decimal(PLAN_MONTHS))

    if negative:
        logger.warning(
            f"Negative Liquidität in Monat(en) {negative}, Minimum {minimum.endbestand} "
            f"in Monat {minimum.monat}"
        )
    else:
        logger.debug(f"Liquidität: Minimum {minimum.endbestand} in Monat {minimum.monat}")

    return LiquiditaetResult(
        monate=months,
        minimum_liquiditaet=minimum.endbestand,
        minimum_monat=minimum.monat,
        durchschnitt_liquiditaet=ctx.round2(average),
        liquiditaets_reserve=max(minimum.endbestand, ctx.round2(ZERO)),
        hat_negative_liquiditaet=bool(negative),
        negative_monate=negative,
    )


# =============================================================================
# Analysis
# =============================================================================

def calculate_days_of_cash(
    cash: Any,
    monthly_burn: Any,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> int:
    """Days the cash covers at the given monthly burn; 999 without burn."""
    burn = to_decimal(monthly_burn, "monthlyBurn")
    if burn <= 0:
        return NO_BURN_DAYS
    days = ctx.mul(ctx.div(to_decimal(cash, "cash"), burn), Decimal(DAYS_PER_MONTH))
    return int(days.to_integral_value(rounding=ROUND_FLOOR))


def analyze_liquidity_risks(
    result: LiquiditaetResult,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> LiquidityAnalysis:
    """Minimum and average cash, volatility and the recommended reserve."""
    months = result.monate
    count = Decimal(len(months))

    net_changes = [ctx.sub(m.einzahlungen_gesamt, m.auszahlungen_gesamt) for m in months]
    mean_change = ctx.div(ctx.sum(net_changes), count)
    variance = ctx.div(
        ctx.sum(ctx.mul(ctx.sub(c, mean_change), ctx.sub(c, mean_change)) for c in net_changes),
        count,
    )
    volatility = ctx.sqrt(variance)

    average_cash = ctx.div(ctx.sum(m.endbestand for m in months), count)
    average_outflow = ctx.div(ctx.sum(m.auszahlungen_gesamt for m in months), count)
    recommended = ctx.mul(average_outflow, RESERVE_MONTHS)
    actual = max(result.minimum_liquiditaet, ZERO)
    shortfall = max(ctx.sub(recommended, actual), ZERO)

    payment_risks = []
    seasonality = []
    compliance = []

    earned_total = ctx.sum(m.umsatz_geplant for m in months)
    if earned_total > PAYMENT_RISK_REVENUE:
        payment_risks.append("Zahlungsausfallrisiko bei B2B-Kunden (>100.000,00 € Umsatz)")
    if ctx.div(earned_total, count) > CLUSTER_RISK_MONTHLY:
        payment_risks.append("Klumpenrisiko bei Großkunden - Diversifizierung empfohlen")

    if len(months) >= 9:
        q1 = ctx.div(ctx.sum(m.umsatz_geplant for m in months[0:3]), Decimal(3))
        q3 = ctx.div(ctx.sum(m.umsatz_geplant for m in months[6:9]), Decimal(3))
        if abs(ctx.sub(q1, q3)) > ctx.mul(q1, SEASONAL_SWING_SHARE):
            seasonality.append("Starke saisonale Schwankungen - Liquiditätspuffer erhöhen")

    if result.hat_negative_liquiditaet:
        compliance.append("KRITISCH: Negative Liquidität = Insolvenzrisiko")
        compliance.append("BA wird Plan mit negativer Liquidität ablehnen")
    if actual < average_outflow:
        compliance.append("Liquiditätsreserve unter 1 Monatskosten - sehr riskant")

    return LiquidityAnalysis(
        minimum_cash=result.minimum_liquiditaet,
        minimum_cash_month=result.minimum_monat,
        average_cash=ctx.round2(average_cash),
        months_with_negative_cash=len(result.negative_monate),
        maximum_cash_need=ctx.round2(abs(min(result.minimum_liquiditaet, ZERO))),
        cash_flow_volatility=ctx.round2(volatility),
        average_monthly_outflow=ctx.round2(average_outflow),
        recommended_reserve=ctx.round2(recommended),
        actual_reserve=ctx.round2(actual),
        reserve_shortfall=ctx.round2(shortfall),
        days_of_cash_at_minimum=calculate_days_of_cash(
            result.minimum_liquiditaet, average_outflow, ctx=ctx
        ),
        payment_risk_factors=payment_risks,
        seasonality_warnings=seasonality,
        compliance_risks=compliance,
    )


def validate_liquidity_for_ba(
    result: LiquiditaetResult,
    analysis: Optional[LiquidityAnalysis] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> LiquidityValidation:
    """
    BA acceptance checks of the cash plan.

    Any month with a negative balance is a blocker, whatever its size.
    """
    analysis = analysis or analyze_liquidity_risks(result, ctx=ctx)
    blockers = []
    warnings = []
    actions = []
    contingency = []

    has_negative = result.hat_negative_liquiditaet
    if has_negative:
        months = ", ".join(str(m) for m in result.negative_monate)
        blockers.append(f"Negative Liquidität in Monat {months}")
        actions.append(MANDATORY_NEGATIVE_CASH_ACTION)
        actions.append("Zahlungskonditionen mit Kunden und Lieferanten neu verhandeln")

    insufficient_startup = result.minimum_liquiditaet < -analysis.recommended_reserve
    if insufficient_startup:
        blockers.append("Startkapital reicht nicht für empfohlenen 3-Monats-Puffer")
        shortfall = ctx.sub(analysis.reserve_shortfall, result.minimum_liquiditaet)
        actions.append(f"Zusätzliche Finanzierung von mindestens {ctx.round2(shortfall)} €")

    tight = analysis.actual_reserve < ctx.mul(analysis.recommended_reserve, TIGHT_RESERVE_SHARE)
    if tight:
        warnings.append("Knapper Liquiditätspuffer - weniger als 1,5 Monate Betriebskosten")
        contingency.append("Kreditlinie oder Kontokorrent für Notfälle vereinbaren")

    volatile = analysis.cash_flow_volatility > ctx.mul(analysis.average_cash, HIGH_VOLATILITY_SHARE)
    if volatile:
        warnings.append("Hohe Liquiditätsschwankungen - Planungsunsicherheit")
        actions.append("Umsatzglättung durch wiederkehrende Kunden/Abos anstreben")

    seasonal = bool(analysis.seasonality_warnings)
    if seasonal:
        warnings.append("Saisonale Liquiditätsrisiken erkannt")
        contingency.append("Saisonkredit oder flexible Finanzierung für schwache Monate")

    if result.minimum_monat <= 3:
        actions.append("Frühe Liquiditätskrise - Anlaufphase länger planen")
    if analysis.payment_risk_factors:
        actions.append("Zahlungsausfallversicherung oder Factoring prüfen")
        contingency.append("Diversifizierung der Kundenbasis forcieren")

    return LiquidityValidation(
        is_ba_compliant=not blockers,
        has_negative_liquidity=has_negative,
        has_insufficient_startup=insufficient_startup,
        has_tight_cash_flow=tight,
        has_high_volatility=volatile,
        has_seasonal_risks=seasonal,
        blockers=blockers,
        warnings=warnings,
        action_items=actions,
        contingency_plans=contingency,
    )
