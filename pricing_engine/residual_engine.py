# pricing_engine/residual_engine.py

from __future__ import annotations
from typing import Dict, Sequence, Tuple

from .amortization import round_currency
from .tariff_tables import (
    BATTERY_RESIDUAL_PERCENTAGES,
    PANEL_RESIDUAL_PERCENTAGES,
    RESIDUAL_SKIPPED_ENTRIES,
    RESIDUAL_START_YEAR,
    VAT_MULTIPLIER,
)
from .types import BUSINESS, CLIENT_TYPES, INDIVIDUAL, ResidualSchedule, ResidualValue


def residual_amounts(price_excl_tax: float, percentage: float, client_type: str) -> Tuple[float, float]:
    """
    Valeur de rachat (HT, TTC) pour un pourcentage du prix d'origine.

    - Particulier : pourcentage appliqué au prix TTC, HT déduit du TTC arrondi.
    - Entreprise  : pourcentage appliqué au prix HT, TTC déduit du HT arrondi.
    """
    if client_type == INDIVIDUAL:
        base_incl_tax = price_excl_tax * VAT_MULTIPLIER
        value_incl_tax = round_currency(base_incl_tax * percentage / 100.0)
        value_excl_tax = round_currency(value_incl_tax / VAT_MULTIPLIER)
    elif client_type == BUSINESS:
        value_excl_tax = round_currency(price_excl_tax * percentage / 100.0)
        value_incl_tax = round_currency(value_excl_tax * VAT_MULTIPLIER)
    else:
        raise ValueError(f"Type de client inconnu: {client_type}")

    return value_excl_tax, value_incl_tax


def residual_schedule(
    price_excl_tax: float,
    duration: int,
    client_type: str,
    percentages: Sequence[float],
) -> ResidualSchedule:
    """Échéancier de rachat année par année, tronqué à la durée du contrat."""
    if client_type not in CLIENT_TYPES:
        raise ValueError(f"Type de client inconnu: {client_type}")

    start_year = RESIDUAL_START_YEAR[client_type]
    skipped = RESIDUAL_SKIPPED_ENTRIES[client_type]

    schedule: ResidualSchedule = []
    for offset, pct in enumerate(percentages[skipped:]):
        year = start_year + offset
        if year > duration:
            break
        excl, incl = residual_amounts(price_excl_tax, pct, client_type)
        schedule.append(ResidualValue(year=year, value_excl_tax=excl, value_incl_tax=incl))

    return schedule


def _percentages(tables: Dict[int, Tuple[float, ...]], duration: int, asset: str) -> Tuple[float, ...]:
    try:
        return tables[duration]
    except KeyError:
        raise ValueError(f"Pas de table de valeurs résiduelles {asset} pour {duration} ans") from None


def panel_residual_schedule(price_excl_tax: float, duration: int, client_type: str) -> ResidualSchedule:
    return residual_schedule(
        price_excl_tax,
        duration,
        client_type,
        _percentages(PANEL_RESIDUAL_PERCENTAGES, duration, "panneaux"),
    )


def battery_residual_schedule(price_excl_tax: float, duration: int, client_type: str) -> ResidualSchedule:
    return residual_schedule(
        price_excl_tax,
        duration,
        client_type,
        _percentages(BATTERY_RESIDUAL_PERCENTAGES, duration, "batterie"),
    )
