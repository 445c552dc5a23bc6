# pricing_engine/validator.py

from __future__ import annotations

from .errors import (
    BatteryPriceAboveCeiling,
    IncompleteBatteryConfiguration,
    InvalidAmount,
    MissingConfiguration,
    PanelsRequiredForVirtualBattery,
    PowerBelowMinimum,
    PriceAboveCeiling,
    UnknownBatteryDuration,
    UnknownClientType,
)
from .tariff_tables import (
    BATTERY_DURATIONS,
    BATTERY_MAX_PRICE_PER_KWH,
    CEILING_MAX_POWER_KWC,
    MAX_PRICES_EXCL_TAX,
    MIN_POWER_KWC,
)
from .types import CLIENT_TYPES, PricingRequest


def price_ceiling(power_kwc: float) -> float | None:
    """Plafond HT du palier, ou None au-delà de 36 kWc (prix sur devis)."""
    if power_kwc > CEILING_MAX_POWER_KWC:
        return None
    return MAX_PRICES_EXCL_TAX.lookup(power_kwc)


def battery_price_per_kwh(power_kwh: float, price_excl_tax: float) -> float:
    return price_excl_tax / power_kwh


def validate(request: PricingRequest) -> None:
    """
    Vérifie la requête dans un ordre fixe et lève la première erreur rencontrée.
    Aucune mensualité n'est calculée tant que la requête n'est pas valide :
    tout ce que le calcul pourrait refuser plus loin est refusé ici.
    """
    battery = request.physical_battery

    # 0) Type de client (fixe la base fiscale des valeurs de rachat)
    if request.client_type not in CLIENT_TYPES:
        raise UnknownClientType(request.client_type)

    # 1) Au moins un des deux actifs
    if not request.has_panels and battery is None:
        raise MissingConfiguration()

    # 2) Batterie virtuelle → panneaux obligatoires
    if request.virtual_battery_included and not request.has_panels:
        raise PanelsRequiredForVirtualBattery()

    # 3) + 4) Panneaux : puissance minimum, prix positif, puis plafond de prix
    if request.has_panels:
        if request.power_kwc < MIN_POWER_KWC:
            raise PowerBelowMinimum()

        if request.installation_price_excl_tax <= 0:
            raise InvalidAmount("installation_price_excl_tax", request.installation_price_excl_tax)

        ceiling = price_ceiling(request.power_kwc)
        if ceiling is not None and request.installation_price_excl_tax > ceiling:
            raise PriceAboveCeiling(ceiling=ceiling)

    # 5) Batterie physique : champs complets, valeurs positives, durée, puis prix au kWh
    if battery is not None:
        if battery.power_kwh is None or battery.price_excl_tax is None:
            raise IncompleteBatteryConfiguration()

        if battery.power_kwh <= 0:
            raise InvalidAmount("power_kwh", battery.power_kwh)
        if battery.price_excl_tax <= 0:
            raise InvalidAmount("price_excl_tax", battery.price_excl_tax)

        if battery.duration not in BATTERY_DURATIONS:
            raise UnknownBatteryDuration(battery.duration)

        per_kwh = battery_price_per_kwh(battery.power_kwh, battery.price_excl_tax)
        if per_kwh > BATTERY_MAX_PRICE_PER_KWH:
            raise BatteryPriceAboveCeiling(price_per_kwh=per_kwh)
