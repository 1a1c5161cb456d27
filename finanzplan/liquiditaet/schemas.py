"""Liquidität input and result schemas."""
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from finanzplan.base import FinanzModel
from finanzplan.config import settings


class PaymentTerms(FinanzModel):
    """Payment delays in days; shifted by ceil(days / 30) months."""
    customer_payment_days: int = Field(default_factory=lambda: settings.CUSTOMER_PAYMENT_DAYS, ge=0)
    variable_cost_payment_days: int = Field(
        default_factory=lambda: settings.VARIABLE_COST_PAYMENT_DAYS, ge=0
    )


class LiquiditaetMonat(FinanzModel):
    """
    Cash state of one plan month.

    umsatz_geplant is the seasonally adjusted revenue earned in the month.
    It is informational only; cash arrives as einzahlungen_umsatz after the
    customer payment delay.
    """
    monat: int
    datum: Optional[date] = None
    umsatz_geplant: Decimal
    anfangsbestand: Decimal

    einzahlungen_umsatz: Decimal
    einzahlungen_finanzierung: Decimal
    einzahlungen_gruendungszuschuss: Decimal
    einzahlungen_gesamt: Decimal

    auszahlungen_betrieb: Decimal
    auszahlungen_gruendung: Decimal
    auszahlungen_investitionen: Decimal
    auszahlungen_kapitaldienst: Decimal
    auszahlungen_privat: Decimal
    auszahlungen_gesamt: Decimal

    endbestand: Decimal


class LiquiditaetResult(FinanzModel):
    monate: List[LiquiditaetMonat]
    minimum_liquiditaet: Decimal
    minimum_monat: int
    durchschnitt_liquiditaet: Decimal
    liquiditaets_reserve: Decimal
    hat_negative_liquiditaet: bool
    negative_monate: List[int] = Field(default_factory=list)


class LiquidityAnalysis(FinanzModel):
    minimum_cash: Decimal
    minimum_cash_month: int
    average_cash: Decimal
    months_with_negative_cash: int
    maximum_cash_need: Decimal
    cash_flow_volatility: Decimal        # population stddev of monthly net change
    average_monthly_outflow: Decimal
    recommended_reserve: Decimal         # 3 × average monthly outflow
    actual_reserve: Decimal
    reserve_shortfall: Decimal
    days_of_cash_at_minimum: int
    payment_risk_factors: List[str] = Field(default_factory=list)
    seasonality_warnings: List[str] = Field(default_factory=list)
    compliance_risks: List[str] = Field(default_factory=list)


class LiquidityValidation(FinanzModel):
    is_ba_compliant: bool = Field(alias="isBACompliant")
    has_negative_liquidity: bool
    has_insufficient_startup: bool
    has_tight_cash_flow: bool
    has_high_volatility: bool
    has_seasonal_risks: bool
    blockers: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    action_items: List[str] = Field(default_factory=list)
    contingency_plans: List[str] = Field(default_factory=list)
