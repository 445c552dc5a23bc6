# pricing_engine/eligibility.py

from __future__ import annotations
from dataclasses import dataclass

from .amortization import round_units
from .tariff_tables import (
    AFFORDABILITY_FALLBACK,
    AFFORDABILITY_THRESHOLDS,
    MAX_INCOME_SHARE,
    MAX_INCOME_SHARE_WITH_BATTERY,
)


@dataclass(frozen=True)
class Eligibility:
    minimum_annual_income: int
    affordability_tier: str


def minimum_annual_income(monthly_payment_incl_tax: float, has_physical_battery: bool) -> int:
    """
    Revenus annuels minimum pour que l'abonnement reste sous
    4 % des revenus (7 % avec batterie physique).
    """
    max_share = MAX_INCOME_SHARE_WITH_BATTERY if has_physical_battery else MAX_INCOME_SHARE
    return round_units(monthly_payment_incl_tax * 12 / max_share)


def affordability_tier(monthly_payment_incl_tax: float) -> str:
    for upper_bound, tier in AFFORDABILITY_THRESHOLDS:
        if monthly_payment_incl_tax <= upper_bound:
            return tier
    return AFFORDABILITY_FALLBACK


def classify(monthly_payment_incl_tax: float, has_physical_battery: bool) -> Eligibility:
    return Eligibility(
        minimum_annual_income=minimum_annual_income(monthly_payment_incl_tax, has_physical_battery),
        affordability_tier=affordability_tier(monthly_payment_incl_tax),
    )
