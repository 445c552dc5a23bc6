# pricing_engine/battery_blending.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict

from .amortization import monthly_payment, round_currency, with_vat
from .rate_resolver import battery_rate
from .residual_engine import battery_residual_schedule
from .types import MonthlyPayment, PhysicalBattery, ResidualSchedule, ResidualValue


@dataclass(frozen=True)
class BatteryFinancing:
    """Financement batterie : taux fixe, sa propre durée (10 / 15 ans)."""
    duration: int
    payment: MonthlyPayment
    residuals: ResidualSchedule


def finance_battery(battery: PhysicalBattery, client_type: str) -> BatteryFinancing:
    """
    Même annuité que les panneaux, mais taux fixe par durée
    (15 ans → 10.6 %, 10 ans → 11.5 %) et tables de rachat batterie.
    """
    rate = battery_rate(battery.duration)
    excl = monthly_payment(battery.price_excl_tax, rate, battery.duration * 12)

    return BatteryFinancing(
        duration=battery.duration,
        payment=MonthlyPayment(excl_tax=excl, incl_tax=with_vat(excl)),
        residuals=battery_residual_schedule(
            battery.price_excl_tax, battery.duration, client_type
        ),
    )


def combine_payments(panel: MonthlyPayment, battery: MonthlyPayment) -> MonthlyPayment:
    # Deux annuités indépendantes : somme simple, pas de ré-amortissement
    return panel + battery


def combine_schedules(panel: ResidualSchedule, battery: ResidualSchedule) -> ResidualSchedule:
    """
    Fusionne deux échéanciers sur l'union des années.
    Une année absente d'un côté compte pour 0.
    """
    totals: Dict[int, list] = {}

    for entry in list(panel) + list(battery):
        acc = totals.setdefault(entry.year, [0.0, 0.0])
        acc[0] += entry.value_excl_tax
        acc[1] += entry.value_incl_tax

    return [
        ResidualValue(
            year=year,
            value_excl_tax=round_currency(excl),
            value_incl_tax=round_currency(incl),
        )
        for year, (excl, incl) in sorted(totals.items())
    ]
