# pricing_engine/rate_resolver.py

from __future__ import annotations

from .tariff_tables import (
    BATTERY_RATES,
    CEILING_MAX_POWER_KWC,
    PANEL_RATE_LAST_INDEX,
    PANEL_RATES_PERCENT,
    bracket_index,
)


def panel_rate_index(power_kwc: float) -> int:
    # > 36 kWc : on reprend les paramètres du dernier palier
    if power_kwc > CEILING_MAX_POWER_KWC:
        return PANEL_RATE_LAST_INDEX
    return max(0, min(bracket_index(power_kwc), PANEL_RATE_LAST_INDEX))


def panel_rate(duration: int, power_kwc: float) -> float:
    """Taux annuel variable (fraction, ex. 0.0975) pour une durée et une puissance."""
    table = PANEL_RATES_PERCENT.get(duration)
    if table is None:
        raise ValueError(f"Durée panneaux inconnue: {duration}")

    # at() retombe sur la dernière valeur si l'index dépasse la table
    return table.at(panel_rate_index(power_kwc)) / 100.0


def battery_rate(duration: int) -> float:
    try:
        return BATTERY_RATES[duration]
    except KeyError:
        raise ValueError(f"Durée batterie inconnue: {duration}") from None
