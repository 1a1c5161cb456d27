"""
Compliance Rules

Catalogue of the BA acceptance rules and their thresholds.
"""
from decimal import Decimal
from typing import Optional

from finanzplan.config import settings

from .models import ComplianceCode, ComplianceIssue, IssueKind, PlanModule


COMPLIANCE_RULES = {
    ComplianceCode.MODULE_MISSING: {
        "module": PlanModule.GESAMT,
        "kind": IssueKind.BLOCKER,
        "description": "A plan module has not been filled in yet",
        "thresholds": {},
    },

    ComplianceCode.KAPITALBEDARF_PLAUSIBILITY: {
        "module": PlanModule.KAPITALBEDARF,
        "kind": IssueKind.WARNING,
        "description": "Founding or ramp-up costs outside the realistic band",
        "thresholds": {
            "gruendungskosten_max": Decimal("10000"),
            "anlauf_monate": (3, 18),
        },
    },

    ComplianceCode.FINANCING_GAP: {
        "module": PlanModule.FINANZIERUNG,
        "kind": IssueKind.BLOCKER,
        "description": "Financing does not cover the capital requirement",
        "thresholds": {
            "max_gap": Decimal("0"),
        },
    },

    ComplianceCode.LOW_EQUITY: {
        "module": PlanModule.FINANZIERUNG,
        "kind": IssueKind.WARNING,
        "description": "Equity ratio below the level banks expect",
        "thresholds": {
            "min_eigenkapital_quote": Decimal("20"),  # percent
        },
    },

    ComplianceCode.FINANCING_RISK: {
        "module": PlanModule.FINANZIERUNG,
        "kind": IssueKind.WARNING,
        "description": "Financing structure rated high or critical risk",
        "thresholds": {
            "risk_levels": ("high", "critical"),
        },
    },

    ComplianceCode.NO_GRUENDUNGSZUSCHUSS: {
        "module": PlanModule.FINANZIERUNG,
        "kind": IssueKind.WARNING,
        "description": "Gründungszuschuss not part of the financing",
        "thresholds": {},
    },

    ComplianceCode.INVALID_SOURCE: {
        "module": PlanModule.FINANZIERUNG,
        "kind": IssueKind.WARNING,
        "description": "Financing source with implausible terms",
        "thresholds": {
            "zinssatz_max": Decimal("50"),
            "gruendungszuschuss_max": Decimal("25000"),
        },
    },

    ComplianceCode.PRIVATENTNAHME_PLAUSIBILITY: {
        "module": PlanModule.PRIVATENTNAHME,
        "kind": IssueKind.WARNING,
        "description": "Private withdrawal below subsistence or unusually composed",
        "thresholds": {
            "subsistence_base": Decimal("1000"),
        },
    },

    ComplianceCode.HOUSING_CRITICAL: {
        "module": PlanModule.PRIVATENTNAHME,
        "kind": IssueKind.WARNING,
        "description": "Housing costs dominate the personal budget",
        "thresholds": {
            "housing_ratio_critical": Decimal("50"),  # percent
        },
    },

    ComplianceCode.BREAK_EVEN_NOT_REACHABLE: {
        "module": PlanModule.BREAK_EVEN,
        "kind": IssueKind.BLOCKER,
        "description": "Break-even not reached within the BA horizon",
        "thresholds": {
            "max_months": settings.BREAK_EVEN_LIMIT_MONTHS,
        },
    },

    ComplianceCode.BREAK_EVEN_LATE: {
        "module": PlanModule.BREAK_EVEN,
        "kind": IssueKind.WARNING,
        "description": "Break-even later than typical for new businesses",
        "thresholds": {
            "warn_after_months": 18,
        },
    },

    ComplianceCode.BREAK_EVEN_PLAUSIBILITY: {
        "module": PlanModule.BREAK_EVEN,
        "kind": IssueKind.WARNING,
        "description": "Cost structure makes the break-even hard to reach",
        "thresholds": {},
    },

    ComplianceCode.PRIVATENTNAHME_NOT_COVERED: {
        "module": PlanModule.RENTABILITAET,
        "kind": IssueKind.BLOCKER,
        "description": "Annual surplus does not cover the private withdrawal",
        "thresholds": {},
    },

    ComplianceCode.PROFITABILITY_WARNING: {
        "module": PlanModule.RENTABILITAET,
        "kind": IssueKind.WARNING,
        "description": "Growth or margins outside a credible range",
        "thresholds": {
            "max_cagr": Decimal("100"),
            "min_net_margin": Decimal("3"),
        },
    },

    ComplianceCode.NEGATIVE_LIQUIDITY: {
        "module": PlanModule.LIQUIDITAET,
        "kind": IssueKind.BLOCKER,
        "description": "Cash balance below zero in at least one month",
        "thresholds": {
            "min_endbestand": Decimal("0"),
        },
    },

    ComplianceCode.INSUFFICIENT_STARTUP_CAPITAL: {
        "module": PlanModule.LIQUIDITAET,
        "kind": IssueKind.BLOCKER,
        "description": "Deficit larger than the recommended cash reserve",
        "thresholds": {
            "reserve_months": 3,
        },
    },

    ComplianceCode.LIQUIDITY_WARNING: {
        "module": PlanModule.LIQUIDITAET,
        "kind": IssueKind.WARNING,
        "description": "Tight, volatile or seasonal cash flow",
        "thresholds": {
            "tight_reserve_share": Decimal("0.5"),
            "volatility_share": Decimal("0.3"),
        },
    },
}


def threshold(code: ComplianceCode, name: str):
    return COMPLIANCE_RULES[code]["thresholds"][name]


def make_issue(
    code: ComplianceCode,
    message: str,
    action: Optional[str] = None,
    module: Optional[PlanModule] = None,
) -> ComplianceIssue:
    """
    Build an issue with the kind and module of its catalogue entry.

    module overrides the catalogue module for rules that more than one stage
    reports (e.g. the break-even limit in Rentabilität).
    """
    rule = COMPLIANCE_RULES[code]
    return ComplianceIssue(
        kind=rule["kind"],
        code=code,
        message=message,
        module=module or rule["module"],
        action=action,
    )
