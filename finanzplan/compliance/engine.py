"""
Compliance Engine

Turns the results of each calculator into coded blockers and warnings and
combines them into the holistic report of the whole plan.

Stage validators only read results; they never recompute a stage and never
raise for a rule violation.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from finanzplan.break_even import BreakEvenResult
from finanzplan.finanzierung import (
    FinanzierungResult,
    FinanzierungsquelleTyp,
    GruendungszuschussPlan,
    RiskLevel,
)
from finanzplan.kapitalbedarf import KapitalbedarfResult
from finanzplan.liquiditaet import (
    MANDATORY_NEGATIVE_CASH_ACTION,
    LiquiditaetResult,
    LiquidityAnalysis,
    validate_liquidity_for_ba,
)
from finanzplan.money import (
    DEFAULT_CONTEXT,
    DecimalContext,
    format_eur,
    format_percent,
    to_decimal,
)
from finanzplan.privatentnahme import (
    CATEGORIES,
    FamilyStatus,
    Privatentnahme,
    PrivatentnahmeResult,
    Sustainability,
    analyze_spending_pattern,
    validate_privatentnahme,
)
from finanzplan.rentabilitaet import RentabilitaetResult, validate_profitability_for_ba

from .models import ComplianceCode, ComplianceIssue, ComplianceReport, PlanModule
from .rules import make_issue, threshold

logger = logging.getLogger(__name__)


# Modules a complete plan must contain, in pipeline order
REQUIRED_MODULES = (
    PlanModule.KAPITALBEDARF,
    PlanModule.FINANZIERUNG,
    PlanModule.PRIVATENTNAHME,
    PlanModule.BREAK_EVEN,
    PlanModule.RENTABILITAET,
    PlanModule.LIQUIDITAET,
)

MODULE_LABELS = {
    PlanModule.KAPITALBEDARF: "Kapitalbedarf",
    PlanModule.FINANZIERUNG: "Finanzierung",
    PlanModule.PRIVATENTNAHME: "Privatentnahme",
    PlanModule.BREAK_EVEN: "Break-Even",
    PlanModule.RENTABILITAET: "Rentabilität",
    PlanModule.LIQUIDITAET: "Liquidität",
}


# =============================================================================
# Stage validators
# =============================================================================

def validate_kapitalbedarf_stage(result: KapitalbedarfResult) -> ComplianceReport:
    return ComplianceReport(
        issues=[
            make_issue(ComplianceCode.KAPITALBEDARF_PLAUSIBILITY, warning)
            for warning in result.warnings
        ]
    )


def validate_finanzierung_stage(
    result: FinanzierungResult,
    gruendungszuschuss: Optional[GruendungszuschussPlan] = None,
) -> ComplianceReport:
    """
    Financing gap is a blocker; low equity, high risk, a missing
    Gründungszuschuss and implausible sources are warnings.
    """
    issues = []

    if result.finanzierungsluecke > threshold(ComplianceCode.FINANCING_GAP, "max_gap"):
        issues.append(make_issue(
            ComplianceCode.FINANCING_GAP,
            f"Finanzierungslücke von {format_eur(result.finanzierungsluecke)} - "
            f"Kapitalbedarf nicht vollständig gedeckt",
            action="Zusätzliche Finanzierungsquellen erschließen oder Kapitalbedarf senken",
        ))

    min_quote = threshold(ComplianceCode.LOW_EQUITY, "min_eigenkapital_quote")
    if result.gesamtfinanzierung > 0 and result.eigenkapital_quote < min_quote:
        issues.append(make_issue(
            ComplianceCode.LOW_EQUITY,
            f"Eigenkapitalquote {format_percent(result.eigenkapital_quote)} unter "
            f"{format_percent(min_quote)}",
            action="Eigenkapital erhöhen oder Fördermittel prüfen",
        ))

    if result.risiko.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        for factor in result.risiko.risk_factors:
            issues.append(make_issue(ComplianceCode.FINANCING_RISK, factor))

    has_gz = any(q.typ == FinanzierungsquelleTyp.GRUENDUNGSZUSCHUSS for q in result.quellen)
    if not has_gz and gruendungszuschuss is None:
        issues.append(make_issue(
            ComplianceCode.NO_GRUENDUNGSZUSCHUSS,
            "Kein Gründungszuschuss in der Finanzierung eingeplant",
            action="Anspruch auf Gründungszuschuss bei der Agentur für Arbeit prüfen",
        ))

    for warning in result.warnings:
        issues.append(make_issue(ComplianceCode.INVALID_SOURCE, warning))

    return ComplianceReport(issues=issues)


def validate_privatentnahme_stage(
    result: PrivatentnahmeResult,
    region: Optional[str] = None,
    family_status: Optional[FamilyStatus] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> ComplianceReport:
    entry = Privatentnahme(**{name: getattr(result, name) for name in CATEGORIES})
    validation = validate_privatentnahme(entry, region, family_status, ctx=ctx)
    issues = [
        make_issue(ComplianceCode.PRIVATENTNAHME_PLAUSIBILITY, warning)
        for warning in validation.warnings
    ]

    spending = analyze_spending_pattern(entry, ctx=ctx)
    if spending.sustainability == Sustainability.CRITICAL:
        issues.append(make_issue(
            ComplianceCode.HOUSING_CRITICAL,
            f"Wohnkosten bei {format_percent(spending.housing_ratio)} der Privatentnahme",
            action="Günstigere Wohnsituation für die Gründungsphase prüfen",
        ))
    return ComplianceReport(issues=issues)


def _break_even_issues(
    break_even_monat: Optional[int],
    module: PlanModule,
) -> List[ComplianceIssue]:
    limit = threshold(ComplianceCode.BREAK_EVEN_NOT_REACHABLE, "max_months")
    late = threshold(ComplianceCode.BREAK_EVEN_LATE, "warn_after_months")

    if break_even_monat is None or break_even_monat > limit:
        return [make_issue(
            ComplianceCode.BREAK_EVEN_NOT_REACHABLE,
            f"Break-Even wird nicht innerhalb von {limit} Monaten erreicht",
            action="Kostenstruktur überarbeiten oder Umsatzprognose erhöhen",
            module=module,
        )]
    if break_even_monat > late:
        return [make_issue(
            ComplianceCode.BREAK_EVEN_LATE,
            f"Break-Even erst in Monat {break_even_monat} (üblich: bis Monat {late})",
            module=module,
        )]
    return []


def validate_break_even_stage(result: BreakEvenResult) -> ComplianceReport:
    """
    With a revenue series the crossing month decides; without one the ramp
    estimate is checked against the limit.
    """
    issues = []
    estimated = result.break_even_monat is None and result.months_to_break_even is not None
    if not estimated:
        issues.extend(_break_even_issues(result.break_even_monat, PlanModule.BREAK_EVEN))
    elif not result.is_reachable_in_36_months:
        issues.append(make_issue(
            ComplianceCode.BREAK_EVEN_NOT_REACHABLE,
            f"Geschätzter Break-Even nach {result.months_to_break_even} Monaten",
            action="Kostenstruktur überarbeiten oder Umsatzprognose erhöhen",
        ))

    for warning in result.warnings:
        issues.append(make_issue(ComplianceCode.BREAK_EVEN_PLAUSIBILITY, warning))
    return ComplianceReport(issues=issues)


def validate_rentabilitaet_stage(
    result: RentabilitaetResult,
    jaehrliche_privatentnahme: Optional[Any] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> ComplianceReport:
    """Break-even limit and Privatentnahme coverage per plan year."""
    issues = list(_break_even_issues(result.break_even_monat, PlanModule.RENTABILITAET))

    if jaehrliche_privatentnahme is not None:
        withdrawal = to_decimal(jaehrliche_privatentnahme, "jaehrlichePrivatentnahme")
        for jahr in result.jahre:
            if jahr.jahresueberschuss < withdrawal:
                issues.append(make_issue(
                    ComplianceCode.PRIVATENTNAHME_NOT_COVERED,
                    f"Jahresüberschuss Jahr {jahr.jahr} ({format_eur(jahr.jahresueberschuss)}) "
                    f"deckt die Privatentnahme ({format_eur(withdrawal)}) nicht",
                    action="Privatentnahme senken oder Umsatz steigern",
                ))

    validation = validate_profitability_for_ba(result, ctx=ctx)
    for warning in validation.warnings:
        issues.append(make_issue(ComplianceCode.PROFITABILITY_WARNING, warning))
    return ComplianceReport(issues=issues)


def validate_liquiditaet_stage(
    result: LiquiditaetResult,
    analysis: Optional[LiquidityAnalysis] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> ComplianceReport:
    """Any negative month is a blocker, whatever the size of the deficit."""
    validation = validate_liquidity_for_ba(result, analysis, ctx=ctx)
    issues = []

    if validation.has_negative_liquidity:
        months = ", ".join(str(m) for m in result.negative_monate)
        issues.append(make_issue(
            ComplianceCode.NEGATIVE_LIQUIDITY,
            f"Negative Liquidität in Monat {months} "
            f"(Minimum {format_eur(result.minimum_liquiditaet)} in Monat {result.minimum_monat})",
            action=MANDATORY_NEGATIVE_CASH_ACTION,
        ))
    if validation.has_insufficient_startup:
        issues.append(make_issue(
            ComplianceCode.INSUFFICIENT_STARTUP_CAPITAL,
            "Startkapital reicht nicht für den empfohlenen 3-Monats-Puffer",
            action=MANDATORY_NEGATIVE_CASH_ACTION,
        ))
    for warning in validation.warnings:
        issues.append(make_issue(ComplianceCode.LIQUIDITY_WARNING, warning))
    return ComplianceReport(issues=issues)


# =============================================================================
# Holistic report
# =============================================================================

def validate_stages(
    kapitalbedarf: Optional[KapitalbedarfResult] = None,
    finanzierung: Optional[FinanzierungResult] = None,
    privatentnahme: Optional[PrivatentnahmeResult] = None,
    break_even: Optional[BreakEvenResult] = None,
    rentabilitaet: Optional[RentabilitaetResult] = None,
    liquiditaet: Optional[LiquiditaetResult] = None,
    gruendungszuschuss: Optional[GruendungszuschussPlan] = None,
    region: Optional[str] = None,
    family_status: Optional[FamilyStatus] = None,
    ctx: DecimalContext = DEFAULT_CONTEXT,
) -> Dict[PlanModule, ComplianceReport]:
    """Stage reports for every result that is present."""
    reports = {}
    if kapitalbedarf is not None:
        reports[PlanModule.KAPITALBEDARF] = validate_kapitalbedarf_stage(kapitalbedarf)
    if finanzierung is not None:
        reports[PlanModule.FINANZIERUNG] = validate_finanzierung_stage(
            finanzierung, gruendungszuschuss
        )
    if privatentnahme is not None:
        reports[PlanModule.PRIVATENTNAHME] = validate_privatentnahme_stage(
            privatentnahme, region, family_status, ctx=ctx
        )
    if break_even is not None:
        reports[PlanModule.BREAK_EVEN] = validate_break_even_stage(break_even)
    if rentabilitaet is not None:
        withdrawal = privatentnahme.jaehrliche_privatentnahme if privatentnahme else None
        reports[PlanModule.RENTABILITAET] = validate_rentabilitaet_stage(
            rentabilitaet, withdrawal, ctx=ctx
        )
    if liquiditaet is not None:
        reports[PlanModule.LIQUIDITAET] = validate_liquiditaet_stage(liquiditaet, ctx=ctx)
    return reports


def build_compliance_report(stage_reports: Mapping[PlanModule, ComplianceReport]) -> ComplianceReport:
    """
    Holistic report of the whole plan.

    Every stage issue is carried over once (the break-even limit is checked
    by two stages) and each missing module adds a blocker.
    """
    issues = []
    seen = set()
    for module in REQUIRED_MODULES:
        report = stage_reports.get(module)
        if report is None:
            issues.append(make_issue(
                ComplianceCode.MODULE_MISSING,
                f"Modul {MODULE_LABELS[module]} fehlt",
                action=f"{MODULE_LABELS[module]} im Workshop ausfüllen",
            ))
            continue
        for issue in report.issues:
            key = (issue.code, issue.message)
            if key in seen:
                continue
            seen.add(key)
            issues.append(issue)

    report = ComplianceReport(issues=issues)
    if report.blockers:
        logger.warning(
            f"Compliance: {len(report.blockers)} Blocker "
            f"({', '.join(issue.code.value for issue in report.blockers)})"
        )
    else:
        logger.debug(f"Compliance: keine Blocker, {len(report.warnings)} Warnungen")
    return report
