"""
Finanzierung Calculator

Financing structure for the capital requirement:
- equity/debt split (Gründungszuschuss counts as equity, it is a grant)
- financing gap = Kapitalbedarf - Gesamtfinanzierung (positive = shortfall)
- annuity loans with cent-exact amortization schedules
- the two-phase Gründungszuschuss schedule
- risk rating of the financing mix
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from finanzplan.config import settings
from finanzplan.exceptions import ValidationError
from finanzplan.finanzierung.schemas import (
    AmortizationRow,
    FinancingRatios,
    FinanzierungResult,
    Finanzierungsquelle,
    FinanzierungsquelleTyp,
    GruendungszuschussPlan,
    GruendungszuschussResult,
    KreditUebersicht,
    LoanPayment,
    RiskAssessment,
    RiskLevel,
    SourceValidation,
)
from finanzplan.money import (
    DEFAULT_CONTEXT,
    DecimalContext,
    ZERO,
    require_non_negative,
    to_decimal,
)

logger = logging.getLogger(__name__)


EQUITY_TYPES = (
    FinanzierungsquelleTyp.EIGENKAPITAL,
    FinanzierungsquelleTyp.GRUENDUNGSZUSCHUSS,
    FinanzierungsquelleTyp.BETEILIGUNG,
    FinanzierungsquelleTyp.CROWDFUNDING,
)

DEBT_TYPES = (
    FinanzierungsquelleTyp.BANKKREDIT,
    FinanzierungsquelleTyp.FOERDERKREDIT,
    FinanzierungsquelleTyp.FAMILY_FRIENDS,
    FinanzierungsquelleTyp.ANDERE,
)

GZ_MAXIMUM = Decimal("25000")
MAX_ZINSSATZ = Decimal("50")

ONE = Decimal("1")
MONTHS_TIMES_PERCENT = Decimal("1200")  # 12 months × 100 %


# =============================================================================
# Totals and ratios
# =============================================================================

def sum_financing(
    quellen: Iterable[Finanzierungsquelle],
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    amounts = [require_non_negative(q.betrag, f"quellen[{q.bezeichnung}].betrag") for q in quellen]
    return ctx.round2(ctx.sum(amounts))


def financing_by_type(
    quellen: Iterable[Finanzierungsquelle],
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Dict[str, Decimal]:
    """Totals per source type; every type is present, unused ones are zero."""
    totals = {typ.value: ZERO for typ in FinanzierungsquelleTyp}
    for q in quellen:
        amount = require_non_negative(q.betrag, f"quellen[{q.bezeichnung}].betrag")
        totals[q.typ.value] = ctx.add(totals[q.typ.value], amount)
    return {key: ctx.round2(value) for key, value in totals.items()}


def compute_ratios(
    quellen: Sequence[Finanzierungsquelle],
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> FinancingRatios:
    """
    Equity and debt totals with their share of total financing.

    Both quotes are 0 when there is no financing at all.
    """
    by_type = financing_by_type(quellen, ctx=ctx)
    eigenkapital = ctx.sum(by_type[t.value] for t in EQUITY_TYPES)
    fremdkapital = ctx.sum(by_type[t.value] for t in DEBT_TYPES)
    total = ctx.add(eigenkapital, fremdkapital)

    if total == 0:
        ek_quote = fk_quote = ZERO
    else:
        ek_quote = ctx.pct(eigenkapital, total)
        fk_quote = ctx.pct(fremdkapital, total)

    return FinancingRatios(
        eigenkapital=ctx.round2(eigenkapital),
        fremdkapital=ctx.round2(fremdkapital),
        eigenkapital_quote=ctx.round2(ek_quote),
        fremdkapital_quote=ctx.round2(fk_quote),
    )


def compute_gap(
    kapitalbedarf: Any,
    gesamtfinanzierung: Any,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Decimal:
    """Signed financing gap: positive = shortfall, negative = surplus."""
    need = require_non_negative(kapitalbedarf, "kapitalbedarf")
    funded = require_non_negative(gesamtfinanzierung, "gesamtfinanzierung")
    return ctx.round2(ctx.sub(need, funded))


# =============================================================================
# Loans
# =============================================================================

def _monthly_rate(annual_rate: Decimal, ctx: DecimalContext) -> Decimal:
    return ctx.div(annual_rate, MONTHS_TIMES_PERCENT)


def _require_term(term_months: Any) -> int:
    term = to_decimal(term_months, "laufzeit")
    if term <= 0 or term != term.to_integral_value():
        raise ValidationError(f"Laufzeit muss eine positive Anzahl Monate sein (erhalten: {term})", "laufzeit")
    return int(term)


def compute_loan_payment(
    principal: Any,
    annual_rate: Any,
    term_months: Any,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> LoanPayment:
    """
    Annuity payment: M = P·r(1+r)^n / ((1+r)^n - 1), r = annual_rate/12/100.

    The payment is rounded to the cent first and the totals are derived from
    the rounded payment, as on a bank's amortization table. A zero rate
    repays P/n per month without interest.
    """
    p = require_non_negative(principal, "betrag")
    rate = require_non_negative(annual_rate, "zinssatz")
    n = _require_term(term_months)

    r = _monthly_rate(rate, ctx)
    if r == 0:
        return LoanPayment(
            monthly_payment=ctx.round2(ctx.div(p, Decimal(n))),
            total_interest=ctx.round2(ZERO),
            total_payments=ctx.round2(p),
        )

    factor = ctx.power(ctx.add(ONE, r), n)
    payment = ctx.div(ctx.mul(ctx.mul(p, r), factor), ctx.sub(factor, ONE))
    payment = ctx.round2(payment)
    total_payments = ctx.mul(payment, Decimal(n))

    return LoanPayment(
        monthly_payment=payment,
        total_interest=ctx.round2(ctx.sub(total_payments, p)),
        total_payments=ctx.round2(total_payments),
    )


def compute_amortization_schedule(
    principal: Any,
    annual_rate: Any,
    term_months: Any,
    tilgungsfrei: int = 0,
    months: Optional[int] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> List[AmortizationRow]:
    """
    Month-by-month repayment plan.

    The first `tilgungsfrei` months pay interest only; the annuity runs over
    the remaining term. Interest is rounded to the cent each month and the
    final row clears the remaining balance exactly.
    """
    p = require_non_negative(principal, "betrag")
    rate = require_non_negative(annual_rate, "zinssatz")
    term = _require_term(term_months)
    grace = int(tilgungsfrei or 0)
    if grace < 0 or grace >= term:
        raise ValidationError(
            f"Tilgungsfreie Zeit muss zwischen 0 und {term - 1} Monaten liegen (erhalten: {grace})",
            "tilgungsfrei",
        )

    payment = compute_loan_payment(p, rate, term - grace, ctx=ctx).monthly_payment
    r = _monthly_rate(rate, ctx)
    limit = term if months is None else min(months, term)

    balance = p
    schedule = []
    for month in range(1, limit + 1):
        interest = ctx.round2(ctx.mul(balance, r))
        if month <= grace:
            repaid = ZERO
        elif month == term or ctx.sub(payment, interest) >= balance:
            repaid = balance
        else:
            repaid = ctx.sub(payment, interest)

        balance = ctx.sub(balance, repaid)
        schedule.append(
            AmortizationRow(
                month=month,
                payment=ctx.round2(ctx.add(interest, repaid)),
                interest=interest,
                principal=ctx.round2(repaid),
                balance=ctx.round2(balance),
            )
        )
    return schedule


def is_loan(quelle: Finanzierungsquelle) -> bool:
    """Debt sources with a term are repaid through the liquidity plan."""
    return quelle.typ in DEBT_TYPES and bool(quelle.laufzeit)


# =============================================================================
# Gründungszuschuss
# =============================================================================

def compute_gruendungszuschuss(
    alg1_monatlich: Any,
    phase1_months: int = 6,
    phase2_months: int = 9,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> GruendungszuschussResult:
    """
    Two-phase Gründungszuschuss.

    Phase 1: ALG I + 300 € per month (6 months by default)
    Phase 2: 300 € per month (9 months by default)
    """
    alg1 = require_non_negative(alg1_monatlich, "alg1Monatlich")
    months1 = require_non_negative(phase1_months, "phase1Monate")
    months2 = require_non_negative(phase2_months, "phase2Monate")
    pauschale = Decimal(settings.GZ_PAUSCHALE)

    phase1_monthly = ctx.add(alg1, pauschale)
    phase1_total = ctx.mul(phase1_monthly, months1)
    phase2_total = ctx.mul(pauschale, months2)

    return GruendungszuschussResult(
        phase1_monthly=ctx.round2(phase1_monthly),
        phase1_months=int(months1),
        phase1_total=ctx.round2(phase1_total),
        phase2_monthly=ctx.round2(pauschale),
        phase2_months=int(months2),
        phase2_total=ctx.round2(phase2_total),
        total_gz=ctx.round2(ctx.add(phase1_total, phase2_total)),
    )


def gruendungszuschuss_schedule(
    plan: GruendungszuschussPlan,
    months: int = 12,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> List[Decimal]:
    """Monthly GZ disbursements for months 1..months of the plan."""
    gz = compute_gruendungszuschuss(
        plan.alg1_monatlich, plan.phase1_monate, plan.phase2_monate, ctx=ctx
    )
    schedule = []
    for month in range(1, months + 1):
        offset = month - plan.startmonat
        if 0 <= offset < gz.phase1_months:
            schedule.append(gz.phase1_monthly)
        elif gz.phase1_months <= offset < gz.phase1_months + gz.phase2_months:
            schedule.append(gz.phase2_monthly)
        else:
            schedule.append(ctx.round2(ZERO))
    return schedule


# =============================================================================
# Risk and validation
# =============================================================================

def assess_financing_risk(
    ratios: FinancingRatios,
    kapitalbedarf: Any,
    finanzierungsluecke: Any = 0,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> RiskAssessment:
    """
    Rate the financing mix.

    critical: EK-Quote <= 10 %, FK-Quote >= 90 % or gap > 30 % of the need
    high:     EK-Quote < 15 %, FK-Quote > 85 % or gap > 20 %
    medium:   EK-Quote < 20 %, FK-Quote > 75 % or any open gap
    """
    ek = ratios.eigenkapital_quote
    fk = ratios.fremdkapital_quote
    need = require_non_negative(kapitalbedarf, "kapitalbedarf")
    gap = to_decimal(finanzierungsluecke, "finanzierungsluecke")
    gap_percent = ctx.pct(gap, need) if gap > 0 and need > 0 else ZERO

    risk_factors = []
    recommendations = []

    if ek < 15:
        risk_factors.append("Sehr niedrige Eigenkapitalquote (<15%)")
        recommendations.append("Eigenkapital erhöhen oder Kapitalbedarf reduzieren")
    elif ek < 25:
        risk_factors.append("Niedrige Eigenkapitalquote (<25%)")
        recommendations.append("Sicherheiten oder Bürgen für Kredite organisieren")

    if fk > 85:
        risk_factors.append("Sehr hohe Verschuldung (>85%)")
        recommendations.append("Fremdkapital reduzieren oder alternative Finanzierung suchen")
    elif fk > 75:
        risk_factors.append("Hohe Verschuldung (>75%)")
        recommendations.append("Tilgungsplan konservativ planen")

    if gap_percent > 20:
        risk_factors.append(f"Große Finanzierungslücke ({gap_percent:.1f}%)")
        recommendations.append("Zusätzliche Finanzierungsquellen erschließen")
    elif gap_percent > 10:
        risk_factors.append(f"Finanzierungslücke ({gap_percent:.1f}%)")
        recommendations.append("Reserveplan für Finanzierungslücke entwickeln")
    elif gap > 0:
        risk_factors.append(f"Offene Finanzierungslücke ({gap_percent:.1f}%)")
        recommendations.append("Finanzierungslücke vor Antragstellung schließen")

    if ek <= 10 or fk >= 90 or gap_percent > 30:
        level = RiskLevel.CRITICAL
    elif ek < 15 or fk > 85 or gap_percent > 20:
        level = RiskLevel.HIGH
    elif ek < 20 or fk > 75 or gap > 0:
        level = RiskLevel.MEDIUM
    else:
        level = RiskLevel.LOW

    return RiskAssessment(
        risk_level=level,
        risk_factors=risk_factors,
        recommendations=recommendations,
    )


def validate_financing_source(quelle: Finanzierungsquelle) -> SourceValidation:
    errors = []

    if quelle.betrag <= 0:
        errors.append("Betrag muss größer als 0 sein")
    if quelle.zinssatz is not None and (quelle.zinssatz < 0 or quelle.zinssatz > MAX_ZINSSATZ):
        errors.append("Zinssatz muss zwischen 0% und 50% liegen")
    if quelle.laufzeit is not None and quelle.laufzeit <= 0:
        errors.append("Laufzeit muss positiv sein")
    if quelle.typ == FinanzierungsquelleTyp.GRUENDUNGSZUSCHUSS and quelle.betrag > GZ_MAXIMUM:
        errors.append("Gründungszuschuss kann maximal ca. 25.000,00 € sein")

    return SourceValidation(is_valid=not errors, errors=errors)


# =============================================================================
# Aggregate
# =============================================================================

def _kredit_uebersicht(quelle: Finanzierungsquelle, ctx: DecimalContext) -> KreditUebersicht:
    rate = quelle.zinssatz if quelle.zinssatz is not None else ZERO
    grace = quelle.tilgungsfrei or 0
    payment = compute_loan_payment(quelle.betrag, rate, quelle.laufzeit - grace, ctx=ctx)
    schedule = compute_amortization_schedule(
        quelle.betrag, rate, quelle.laufzeit, tilgungsfrei=grace, ctx=ctx
    )
    total_payments = ctx.sum(row.payment for row in schedule)

    return KreditUebersicht(
        bezeichnung=quelle.bezeichnung,
        betrag=ctx.round2(quelle.betrag),
        zinssatz=ctx.round2(rate),
        laufzeit=quelle.laufzeit,
        tilgungsfrei=grace,
        monthly_payment=payment.monthly_payment,
        total_interest=ctx.round2(ctx.sub(total_payments, quelle.betrag)),
        total_payments=ctx.round2(total_payments),
    )


def compute_finanzierung(
    quellen: Sequence[Finanzierungsquelle],
    kapitalbedarf: Any,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> FinanzierungResult:
    """Compute the financing structure against the capital requirement."""
    quellen = list(quellen)
    gesamt = sum_financing(quellen, ctx=ctx)
    ratios = compute_ratios(quellen, ctx=ctx)
    need = require_non_negative(kapitalbedarf, "kapitalbedarf")
    gap = compute_gap(need, gesamt, ctx=ctx)

    warnings = []
    for quelle in quellen:
        for error in validate_financing_source(quelle).errors:
            warnings.append(f"{quelle.bezeichnung}: {error}")

    kredite = [
        _kredit_uebersicht(q, ctx)
        for q in quellen
        if is_loan(q) and q.betrag > 0 and q.laufzeit > 0
    ]

    logger.debug(
        f"Finanzierung: gesamt={gesamt} ek_quote={ratios.eigenkapital_quote} luecke={gap}"
    )

    return FinanzierungResult(
        quellen=quellen,
        gesamtfinanzierung=gesamt,
        finanzierung_nach_typ=financing_by_type(quellen, ctx=ctx),
        eigenkapital=ratios.eigenkapital,
        fremdkapital=ratios.fremdkapital,
        eigenkapital_quote=ratios.eigenkapital_quote,
        fremdkapital_quote=ratios.fremdkapital_quote,
        kapitalbedarf=ctx.round2(need),
        finanzierungsluecke=gap,
        kredite=kredite,
        risiko=assess_financing_risk(ratios, need, gap, ctx=ctx),
        warnings=warnings,
    )
