# pricing_engine/types.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Union


# ============================================================
# Type client : particulier (TTC) / entreprise (HT)
# ============================================================

INDIVIDUAL = "individual"
BUSINESS = "business"

CLIENT_TYPES = (INDIVIDUAL, BUSINESS)


# ============================================================
# Requête de tarification
# ============================================================

@dataclass(frozen=True)
class PhysicalBattery:
    power_kwh: Optional[float]     # kWh
    price_excl_tax: Optional[float]  # € HT
    duration: int = 10             # 10 / 15 ans


@dataclass(frozen=True)
class PricingRequest:
    # Panneaux (optionnels si batterie seule)
    power_kwc: Optional[float] = None
    installation_price_excl_tax: Optional[float] = None

    client_type: str = INDIVIDUAL

    # Batteries (exclusives l'une de l'autre)
    virtual_battery_included: bool = False
    physical_battery: Optional[PhysicalBattery] = None

    @property
    def has_panels(self) -> bool:
        return self.power_kwc is not None and self.installation_price_excl_tax is not None

    @property
    def has_physical_battery(self) -> bool:
        return self.physical_battery is not None


# ============================================================
# Mensualité HT / TTC
# ============================================================

@dataclass(frozen=True)
class MonthlyPayment:
    excl_tax: float
    incl_tax: float

    def __add__(self, other: "MonthlyPayment") -> "MonthlyPayment":
        from .amortization import round_currency
        return MonthlyPayment(
            excl_tax=round_currency(self.excl_tax + other.excl_tax),
            incl_tax=round_currency(self.incl_tax + other.incl_tax),
        )

    def to_dict(self):
        return {
            "excl_tax": self.excl_tax,
            "incl_tax": self.incl_tax,
        }


# ============================================================
# Valeurs résiduelles (prix de rachat par année)
# ============================================================

@dataclass(frozen=True)
class ResidualValue:
    year: int
    value_excl_tax: float
    value_incl_tax: float

    def to_dict(self):
        return {
            "year": self.year,
            "value_excl_tax": self.value_excl_tax,
            "value_incl_tax": self.value_incl_tax,
        }


ResidualSchedule = List[ResidualValue]


def schedule_to_dicts(schedule: ResidualSchedule) -> list:
    return [entry.to_dict() for entry in schedule]


# ============================================================
# Quotes : une variante par combinaison d'actifs
# ============================================================

@dataclass(frozen=True)
class PanelsOnlyQuote:
    duration: int
    panel_payment: MonthlyPayment
    panel_residuals: ResidualSchedule
    minimum_annual_income: int
    affordability_tier: str
    provisional_price: bool = False

    kind: str = field(default="panels_only", init=False)

    @property
    def total_payment(self) -> MonthlyPayment:
        return self.panel_payment

    @property
    def total_residuals(self) -> ResidualSchedule:
        return self.panel_residuals

    def to_dict(self):
        return {
            "kind": self.kind,
            "duration": self.duration,
            "panel_payment": self.panel_payment.to_dict(),
            "panel_residuals": schedule_to_dicts(self.panel_residuals),
            "minimum_annual_income": self.minimum_annual_income,
            "affordability_tier": self.affordability_tier,
            "provisional_price": self.provisional_price,
        }


@dataclass(frozen=True)
class BatteryOnlyQuote:
    duration: int
    battery_duration: int
    battery_payment: MonthlyPayment
    battery_residuals: ResidualSchedule
    minimum_annual_income: int
    affordability_tier: str

    kind: str = field(default="battery_only", init=False)

    @property
    def total_payment(self) -> MonthlyPayment:
        return self.battery_payment

    @property
    def total_residuals(self) -> ResidualSchedule:
        return self.battery_residuals

    def to_dict(self):
        return {
            "kind": self.kind,
            "duration": self.duration,
            "battery_duration": self.battery_duration,
            "battery_payment": self.battery_payment.to_dict(),
            "battery_residuals": schedule_to_dicts(self.battery_residuals),
            "minimum_annual_income": self.minimum_annual_income,
            "affordability_tier": self.affordability_tier,
        }


@dataclass(frozen=True)
class CombinedQuote:
    duration: int
    battery_duration: int

    panel_payment: MonthlyPayment
    battery_payment: MonthlyPayment
    combined_payment: MonthlyPayment

    panel_residuals: ResidualSchedule
    battery_residuals: ResidualSchedule
    combined_residuals: ResidualSchedule

    minimum_annual_income: int
    affordability_tier: str
    provisional_price: bool = False

    kind: str = field(default="combined", init=False)

    @property
    def total_payment(self) -> MonthlyPayment:
        return self.combined_payment

    @property
    def total_residuals(self) -> ResidualSchedule:
        return self.combined_residuals

    def to_dict(self):
        return {
            "kind": self.kind,
            "duration": self.duration,
            "battery_duration": self.battery_duration,
            "panel_payment": self.panel_payment.to_dict(),
            "battery_payment": self.battery_payment.to_dict(),
            "combined_payment": self.combined_payment.to_dict(),
            "panel_residuals": schedule_to_dicts(self.panel_residuals),
            "battery_residuals": schedule_to_dicts(self.battery_residuals),
            "combined_residuals": schedule_to_dicts(self.combined_residuals),
            "minimum_annual_income": self.minimum_annual_income,
            "affordability_tier": self.affordability_tier,
            "provisional_price": self.provisional_price,
        }


Quote = Union[PanelsOnlyQuote, BatteryOnlyQuote, CombinedQuote]
