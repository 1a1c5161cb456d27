"""
Finanzplan API Routes.

Stateless JSON endpoints over the calculators:
- POST /kapitalbedarf - Capital requirement
- POST /finanzierung - Financing structure against a capital requirement
- POST /finanzierung/kredit - Annuity loan with optional repayment plan
- POST /finanzierung/gruendungszuschuss - Two-phase GZ and its schedule
- POST /privatentnahme - Withdrawal budget, analysis and validation
- POST /break-even - Break-even, sensitivity and scenarios
- POST /rentabilitaet - Three-year projection with BA validation
- POST /liquiditaet - Twelve-month cash plan from a workshop snapshot
- POST /run - Full pipeline with compliance report
- POST /merge - Merge a partial update into a snapshot

Nothing is stored; every request carries all inputs it needs.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import Field

from finanzplan.base import FinanzModel, Money
from finanzplan.break_even import (
    BreakEvenInput,
    SensitivityParameter,
    analyze_scenarios,
    compute_break_even,
    sensitivity_analysis,
    validate_realism,
)
from finanzplan.compliance import validate_liquiditaet_stage
from finanzplan.exceptions import ValidationError
from finanzplan.finanzierung import (
    Finanzierungsquelle,
    GruendungszuschussPlan,
    compute_amortization_schedule,
    compute_finanzierung,
    compute_gruendungszuschuss,
    compute_loan_payment,
    gruendungszuschuss_schedule,
)
from finanzplan.kapitalbedarf import KapitalbedarfInput, compute_kapitalbedarf
from finanzplan.liquiditaet import validate_liquidity_for_ba
from finanzplan.planung import Kostenplanung, Umsatzplanung
from finanzplan.privatentnahme import (
    FamilyStatus,
    Privatentnahme,
    adjust_for_region,
    analyze_spending_pattern,
    compare_with_averages,
    compute_privatentnahme,
    validate_privatentnahme,
)
from finanzplan.rentabilitaet import (
    TaxRegime,
    analyze_tax_implications,
    compare_with_industry_benchmarks,
    compute_profitability_metrics,
    compute_rentabilitaet,
    validate_profitability_for_ba,
)
from finanzplan.workshop import FinanzplanSnapshot, merge_snapshot, run_finanzplan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/finanzplan", tags=["Finanzplan"])


# =============================================================================
# REQUEST MODELS
# =============================================================================

class FinanzierungRequest(FinanzModel):
    """Financing sources and the capital requirement they must cover."""
    quellen: List[Finanzierungsquelle] = Field(default_factory=list)
    kapitalbedarf: Money


class KreditRequest(FinanzModel):
    betrag: Money
    zinssatz: Money
    laufzeit: int
    tilgungsfrei: int = Field(default=0, ge=0)
    mit_tilgungsplan: bool = False


class PrivatentnahmeRequest(FinanzModel):
    privatentnahme: Privatentnahme
    region: Optional[str] = None
    family_status: Optional[FamilyStatus] = None
    einkommen: Optional[Money] = None


class BreakEvenRequest(BreakEvenInput):
    industry: Optional[str] = None


class RentabilitaetRequest(FinanzModel):
    umsatzplanung: Umsatzplanung
    kostenplanung: Kostenplanung
    industry: Optional[str] = None
    tax_regime: TaxRegime = TaxRegime.GEWERBE
    tax_rate: Optional[Money] = None
    jaehrliche_privatentnahme: Optional[Money] = None


class MergeRequest(FinanzModel):
    """Snapshot so far plus the partial update of one conversation turn."""
    existing: Optional[FinanzplanSnapshot] = None
    update: Dict[str, Any] = Field(default_factory=dict)


def _unprocessable(e: ValidationError) -> HTTPException:
    logger.info(f"Rejected input: {e.message} (field={e.field})")
    return HTTPException(status_code=422, detail=e.message)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/kapitalbedarf")
async def kapitalbedarf(request: KapitalbedarfInput):
    """Gründungskosten, investments and ramp-up costs with reserve."""
    try:
        return compute_kapitalbedarf(request).to_dict()
    except ValidationError as e:
        raise _unprocessable(e)


@router.post("/finanzierung")
async def finanzierung(request: FinanzierungRequest):
    try:
        return compute_finanzierung(request.quellen, request.kapitalbedarf).to_dict()
    except ValidationError as e:
        raise _unprocessable(e)


@router.post("/finanzierung/kredit")
async def kredit(request: KreditRequest):
    """
    Annuity payment of a loan.

    The repayment plan is only included on request; it has one row per
    month of the term.
    """
    try:
        payment = compute_loan_payment(
            request.betrag, request.zinssatz, request.laufzeit - request.tilgungsfrei
        )
        response = {"zahlung": payment.to_dict()}
        if request.mit_tilgungsplan:
            schedule = compute_amortization_schedule(
                request.betrag, request.zinssatz, request.laufzeit, request.tilgungsfrei
            )
            response["tilgungsplan"] = [row.to_dict() for row in schedule]
        return response
    except ValidationError as e:
        raise _unprocessable(e)


@router.post("/finanzierung/gruendungszuschuss")
async def gruendungszuschuss(request: GruendungszuschussPlan):
    try:
        result = compute_gruendungszuschuss(
            request.alg1_monatlich, request.phase1_monate, request.phase2_monate
        )
        return {
            "gruendungszuschuss": result.to_dict(),
            "auszahlungen": [str(amount) for amount in gruendungszuschuss_schedule(request)],
        }
    except ValidationError as e:
        raise _unprocessable(e)


@router.post("/privatentnahme")
async def privatentnahme(request: PrivatentnahmeRequest):
    """Withdrawal totals, spending pattern and regional plausibility."""
    entry = request.privatentnahme
    try:
        response = {
            "privatentnahme": compute_privatentnahme(entry).to_dict(),
            "analyse": analyze_spending_pattern(entry, request.einkommen).to_dict(),
            "validierung": validate_privatentnahme(
                entry, request.region, request.family_status
            ).to_dict(),
        }
        if request.region:
            adjusted = adjust_for_region(entry, request.region)
            response["regional"] = compute_privatentnahme(adjusted).to_dict()
        if request.family_status:
            response["vergleich"] = compare_with_averages(entry, request.family_status).to_dict()
        return response
    except ValidationError as e:
        raise _unprocessable(e)


@router.post("/break-even")
async def break_even(request: BreakEvenRequest):
    try:
        result = compute_break_even(
            request.fixkosten_monatlich,
            request.variable_kosten_prozent,
            request.umsatz_series,
        )
        return {
            "breakEven": result.to_dict(),
            "realismus": validate_realism(result, request.industry).to_dict(),
            "sensitivitaet": [
                sensitivity_analysis(request, parameter).to_dict()
                for parameter in SensitivityParameter
            ],
            "szenarien": [scenario.to_dict() for scenario in analyze_scenarios(request)],
        }
    except ValidationError as e:
        raise _unprocessable(e)


@router.post("/rentabilitaet")
async def rentabilitaet(request: RentabilitaetRequest):
    try:
        result = compute_rentabilitaet(
            request.umsatzplanung,
            request.kostenplanung,
            industry=request.industry,
            tax_regime=request.tax_regime,
            tax_rate=request.tax_rate,
        )
        return {
            "rentabilitaet": result.to_dict(),
            "kennzahlen": compute_profitability_metrics(result).to_dict(),
            "branchenvergleich": compare_with_industry_benchmarks(result, request.industry).to_dict(),
            "steuern": analyze_tax_implications(result).to_dict(),
            "validierung": validate_profitability_for_ba(
                result, request.jaehrliche_privatentnahme
            ).to_dict(),
        }
    except ValidationError as e:
        raise _unprocessable(e)


@router.post("/liquiditaet")
async def liquiditaet(request: FinanzplanSnapshot):
    """
    Cash plan of the founding year.

    Needs Kapitalbedarf, Finanzierung, Privatentnahme, Umsatz- and
    Kostenplanung in the snapshot.
    """
    try:
        plan = run_finanzplan(request)
    except ValidationError as e:
        raise _unprocessable(e)

    if plan.liquiditaet is None:
        raise HTTPException(
            status_code=422,
            detail="Liquiditätsplanung braucht Kapitalbedarf, Finanzierung, "
                   "Privatentnahme, Umsatz- und Kostenplanung",
        )
    return {
        "liquiditaet": plan.liquiditaet.to_dict(),
        "analyse": plan.liquiditaet_analyse.to_dict(),
        "validierung": validate_liquidity_for_ba(
            plan.liquiditaet, plan.liquiditaet_analyse
        ).to_dict(),
        "compliance": validate_liquiditaet_stage(
            plan.liquiditaet, plan.liquiditaet_analyse
        ).to_dict(),
    }


@router.post("/run")
async def run(request: FinanzplanSnapshot):
    """All computable stages with stage and holistic compliance reports."""
    try:
        return run_finanzplan(request).to_dict()
    except ValidationError as e:
        raise _unprocessable(e)


@router.post("/merge")
async def merge(request: MergeRequest):
    try:
        return merge_snapshot(request.existing, request.update).to_dict()
    except ValidationError as e:
        raise _unprocessable(e)
