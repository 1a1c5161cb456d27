# Planung Module
# Umsatzplanung and Kostenplanung inputs and the figures derived from them

from .schemas import (
    Kostenkategorie,
    Umsatzplanung,
    Kostenposition,
    Kostenplanung,
    UmsatzplanungResult,
    KostenplanungResult,
)
from .engine import (
    monthly_revenue_year1,
    annual_revenue,
    growth_rate,
    revenue_series,
    summarize_umsatz,
    fixed_costs_monthly,
    fixed_cost_factor,
    fixed_costs_monthly_in_year,
    fixed_costs_annual,
    material_costs,
    other_variable_costs,
    variable_costs,
    variable_cost_percent,
    summarize_kosten,
)

__all__ = [
    "Kostenkategorie",
    "Umsatzplanung",
    "Kostenposition",
    "Kostenplanung",
    "UmsatzplanungResult",
    "KostenplanungResult",
    "monthly_revenue_year1",
    "annual_revenue",
    "growth_rate",
    "revenue_series",
    "summarize_umsatz",
    "fixed_costs_monthly",
    "fixed_cost_factor",
    "fixed_costs_monthly_in_year",
    "fixed_costs_annual",
    "material_costs",
    "other_variable_costs",
    "variable_costs",
    "variable_cost_percent",
    "summarize_kosten",
]
