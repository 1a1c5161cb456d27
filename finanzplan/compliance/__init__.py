# Compliance Module
# BA acceptance rules as coded blockers and warnings
#
# Components:
# - models.py: issue kinds, codes, ComplianceIssue and ComplianceReport
# - rules.py: COMPLIANCE_RULES catalogue with thresholds
# - engine.py: per-stage validators and the holistic report

from .models import (
    IssueKind,
    PlanModule,
    ComplianceCode,
    ComplianceIssue,
    ComplianceReport,
)
from .rules import COMPLIANCE_RULES, make_issue, threshold
from .engine import (
    REQUIRED_MODULES,
    validate_kapitalbedarf_stage,
    validate_finanzierung_stage,
    validate_privatentnahme_stage,
    validate_break_even_stage,
    validate_rentabilitaet_stage,
    validate_liquiditaet_stage,
    validate_stages,
    build_compliance_report,
)

__all__ = [
    # Models
    "IssueKind",
    "PlanModule",
    "ComplianceCode",
    "ComplianceIssue",
    "ComplianceReport",
    # Rules
    "COMPLIANCE_RULES",
    "make_issue",
    "threshold",
    # Engine
    "REQUIRED_MODULES",
    "validate_kapitalbedarf_stage",
    "validate_finanzierung_stage",
    "validate_privatentnahme_stage",
    "validate_break_even_stage",
    "validate_rentabilitaet_stage",
    "validate_liquiditaet_stage",
    "validate_stages",
    "build_compliance_report",
]
