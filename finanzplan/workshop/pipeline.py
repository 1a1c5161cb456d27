"""
Finanzplan Pipeline

Recomputes every stage whose inputs are present, in dependency order:

    Kapitalbedarf -> Finanzierung
    Privatentnahme
    Kostenplanung + Umsatzplanung -> Break-Even -> Rentabilität
    Kapitalbedarf + Finanzierung + Privatentnahme + Umsatz + Kosten -> Liquidität

then validates each stage and the plan as a whole. A record that is still a
draft in the snapshot counts as absent, and its open fields are listed in the
result. Nothing is cached; re-opening an earlier module simply means running
the pipeline again on the merged snapshot.
"""
import logging
from typing import Dict, List, Optional

from pydantic import Field

from finanzplan.base import FinanzModel
from finanzplan.break_even import BreakEvenResult, compute_break_even_from_plan
from finanzplan.compliance import (
    ComplianceReport,
    PlanModule,
    build_compliance_report,
    validate_stages,
)
from finanzplan.finanzierung import FinanzierungResult, compute_finanzierung
from finanzplan.kapitalbedarf import KapitalbedarfResult, compute_kapitalbedarf
from finanzplan.liquiditaet import (
    LiquiditaetResult,
    LiquidityAnalysis,
    analyze_liquidity_risks,
    compute_liquiditaet,
)
from finanzplan.money import DEFAULT_CONTEXT, DecimalContext
from finanzplan.planung import (
    KostenplanungResult,
    UmsatzplanungResult,
    summarize_kosten,
    summarize_umsatz,
)
from finanzplan.privatentnahme import PrivatentnahmeResult, compute_privatentnahme
from finanzplan.rentabilitaet import RentabilitaetResult, compute_rentabilitaet

from .snapshot import FinanzplanSnapshot

logger = logging.getLogger(__name__)


class FinanzplanResult(FinanzModel):
    """
    Results of every computable stage plus compliance.

    A stage is None while its inputs are incomplete.
    """
    kapitalbedarf: Optional[KapitalbedarfResult] = None
    finanzierung: Optional[FinanzierungResult] = None
    privatentnahme: Optional[PrivatentnahmeResult] = None
    umsatzplanung: Optional[UmsatzplanungResult] = None
    kostenplanung: Optional[KostenplanungResult] = None
    break_even: Optional[BreakEvenResult] = None
    rentabilitaet: Optional[RentabilitaetResult] = None
    liquiditaet: Optional[LiquiditaetResult] = None
    liquiditaet_analyse: Optional[LiquidityAnalysis] = None

    stage_reports: Dict[PlanModule, ComplianceReport] = Field(default_factory=dict)
    compliance: ComplianceReport
    offene_felder: Dict[str, List[str]] = Field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return all(
            stage is not None
            for stage in (
                self.kapitalbedarf,
                self.finanzierung,
                self.privatentnahme,
                self.break_even,
                self.rentabilitaet,
                self.liquiditaet,
            )
        )


def run_finanzplan(
    snapshot: FinanzplanSnapshot,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> FinanzplanResult:
    """Run all stages the snapshot allows and attach compliance reports."""
    kapitalbedarf = finanzierung = privatentnahme = None
    umsatz = kosten = break_even = rentabilitaet = None
    liquiditaet = analyse = None

    if snapshot.kapitalbedarf is not None:
        kapitalbedarf = compute_kapitalbedarf(snapshot.kapitalbedarf, ctx=ctx)

    if snapshot.finanzierung is not None and kapitalbedarf is not None:
        finanzierung = compute_finanzierung(
            snapshot.finanzierung.quellen, kapitalbedarf.gesamtkapitalbedarf, ctx=ctx
        )

    if snapshot.privatentnahme is not None:
        privatentnahme = compute_privatentnahme(snapshot.privatentnahme, ctx=ctx)

    if snapshot.umsatzplanung is not None:
        umsatz = summarize_umsatz(snapshot.umsatzplanung, ctx=ctx)

    if snapshot.kostenplanung is not None:
        kosten = summarize_kosten(snapshot.kostenplanung, ctx=ctx)

    if snapshot.umsatzplanung is not None and snapshot.kostenplanung is not None:
        break_even = compute_break_even_from_plan(
            snapshot.kostenplanung, snapshot.umsatzplanung, ctx=ctx
        )
        rentabilitaet = compute_rentabilitaet(
            snapshot.umsatzplanung,
            snapshot.kostenplanung,
            industry=snapshot.industry,
            tax_regime=snapshot.tax_regime,
            tax_rate=snapshot.tax_rate,
            ctx=ctx,
        )

        if all(stage is not None for stage in (kapitalbedarf, finanzierung, privatentnahme)):
            liquiditaet = compute_liquiditaet(
                kapitalbedarf,
                finanzierung,
                privatentnahme,
                snapshot.umsatzplanung,
                snapshot.kostenplanung,
                payment_terms=snapshot.payment_terms,
                saisonalitaet=snapshot.seasonal_pattern,
                gruendungszuschuss=snapshot.gruendungszuschuss,
                start_datum=snapshot.start_datum,
                ctx=ctx,
            )
            analyse = analyze_liquidity_risks(liquiditaet, ctx=ctx)

    stage_reports = validate_stages(
        kapitalbedarf=kapitalbedarf,
        finanzierung=finanzierung,
        privatentnahme=privatentnahme,
        break_even=break_even,
        rentabilitaet=rentabilitaet,
        liquiditaet=liquiditaet,
        gruendungszuschuss=snapshot.gruendungszuschuss,
        region=snapshot.region,
        family_status=snapshot.family_status,
        ctx=ctx,
    )
    compliance = build_compliance_report(stage_reports)

    logger.info(
        f"Finanzplan computed: {len(stage_reports)} stages, "
        f"{len(compliance.blockers)} blockers, {len(compliance.warnings)} warnings"
    )

    return FinanzplanResult(
        kapitalbedarf=kapitalbedarf,
        finanzierung=finanzierung,
        privatentnahme=privatentnahme,
        umsatzplanung=umsatz,
        kostenplanung=kosten,
        break_even=break_even,
        rentabilitaet=rentabilitaet,
        liquiditaet=liquiditaet,
        liquiditaet_analyse=analyse,
        stage_reports=stage_reports,
        compliance=compliance,
        offene_felder=snapshot.offene_felder,
    )
