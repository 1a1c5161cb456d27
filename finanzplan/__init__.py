"""
Finanzplan - exact-decimal financial plan for Gründungszuschuss applications.

Calculators per workshop module (kapitalbedarf, finanzierung, privatentnahme,
break_even, rentabilitaet, liquiditaet), the BA compliance rules and the
workshop pipeline that ties them together.

Usage:
    from finanzplan import FinanzplanSnapshot, merge_snapshot, run_finanzplan

    snapshot = merge_snapshot(None, {"kapitalbedarf": {...}})
    result = run_finanzplan(snapshot)
    result.compliance.ready_for_next_module
"""
from finanzplan.exceptions import ValidationError
from finanzplan.money import DecimalContext, DEFAULT_CONTEXT, format_eur, parse_eur
from finanzplan.compliance import ComplianceReport, build_compliance_report
from finanzplan.workshop import (
    FinanzplanSnapshot,
    FinanzplanResult,
    merge_snapshot,
    run_finanzplan,
)

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ValidationError",
    # Arithmetic
    "DecimalContext",
    "DEFAULT_CONTEXT",
    "format_eur",
    "parse_eur",
    # Compliance
    "ComplianceReport",
    "build_compliance_report",
    # Workshop
    "FinanzplanSnapshot",
    "FinanzplanResult",
    "merge_snapshot",
    "run_finanzplan",
]
