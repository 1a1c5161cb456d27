"""
Compliance Models

Blockers and warnings of the BA acceptance rules as tagged data.
A blocker never raises; it is reported so the founder can revise the plan.
"""
from enum import Enum
from typing import List, Optional

from pydantic import Field, computed_field

from finanzplan.base import FinanzModel


class IssueKind(str, Enum):
    """Severity of a compliance finding."""
    BLOCKER = "blocker"    # BA will reject the plan
    WARNING = "warning"    # Advisory, plan can proceed


class PlanModule(str, Enum):
    """Workshop modules in dependency order."""
    KAPITALBEDARF = "kapitalbedarf"
    FINANZIERUNG = "finanzierung"
    PRIVATENTNAHME = "privatentnahme"
    BREAK_EVEN = "break_even"
    RENTABILITAET = "rentabilitaet"
    LIQUIDITAET = "liquiditaet"
    GESAMT = "gesamt"


class ComplianceCode(str, Enum):
    """Stable identifiers of the compliance rules."""
    # Completeness
    MODULE_MISSING = "module_missing"

    # Kapitalbedarf
    KAPITALBEDARF_PLAUSIBILITY = "kapitalbedarf_plausibility"

    # Finanzierung
    FINANCING_GAP = "financing_gap"
    LOW_EQUITY = "low_equity"
    FINANCING_RISK = "financing_risk"
    NO_GRUENDUNGSZUSCHUSS = "no_gruendungszuschuss"
    INVALID_SOURCE = "invalid_source"

    # Privatentnahme
    PRIVATENTNAHME_PLAUSIBILITY = "privatentnahme_plausibility"
    HOUSING_CRITICAL = "housing_critical"

    # Break-Even
    BREAK_EVEN_NOT_REACHABLE = "break_even_not_reachable"
    BREAK_EVEN_LATE = "break_even_late"
    BREAK_EVEN_PLAUSIBILITY = "break_even_plausibility"

    # Rentabilität
    PRIVATENTNAHME_NOT_COVERED = "privatentnahme_not_covered"
    PROFITABILITY_WARNING = "profitability_warning"

    # Liquidität
    NEGATIVE_LIQUIDITY = "negative_liquidity"
    INSUFFICIENT_STARTUP_CAPITAL = "insufficient_startup_capital"
    LIQUIDITY_WARNING = "liquidity_warning"


class ComplianceIssue(FinanzModel):
    kind: IssueKind
    code: ComplianceCode
    message: str
    module: PlanModule
    action: Optional[str] = None


class ComplianceReport(FinanzModel):
    """
    Findings of one stage or of the whole plan.

    blockers and warnings are views on issues; a plan is ready for the next
    module exactly when there is no blocker.
    """
    issues: List[ComplianceIssue] = Field(default_factory=list)

    @computed_field(alias="blockers")
    @property
    def blockers(self) -> List[ComplianceIssue]:
        return [issue for issue in self.issues if issue.kind == IssueKind.BLOCKER]

    @computed_field(alias="warnings")
    @property
    def warnings(self) -> List[ComplianceIssue]:
        return [issue for issue in self.issues if issue.kind == IssueKind.WARNING]

    @computed_field(alias="readyForNextModule")
    @property
    def ready_for_next_module(self) -> bool:
        return not self.blockers

    def codes(self) -> List[ComplianceCode]:
        return [issue.code for issue in self.issues]
