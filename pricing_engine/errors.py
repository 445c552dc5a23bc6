# pricing_engine/errors.py

from __future__ import annotations
from typing import Any, Dict

from .formatting import format_thousands


class PricingValidationError(ValueError):
    """
    Erreur de saisie corrigeable par l'utilisateur.
    `kind` est stable (exploitable par le front), `message` est affiché tel quel.
    """

    kind = "validation_error"
    default_message = "Configuration invalide."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind,
            "message": self.message,
            **self.details(),
        }


class MissingConfiguration(PricingValidationError):
    kind = "missing_configuration"
    default_message = "Veuillez renseigner au moins les panneaux ou la batterie physique."


class PanelsRequiredForVirtualBattery(PricingValidationError):
    kind = "panels_required_for_virtual_battery"
    default_message = (
        "Veuillez renseigner les panneaux solaires (puissance et prix d'installation)."
    )


class PowerBelowMinimum(PricingValidationError):
    kind = "power_below_minimum"
    default_message = "La puissance doit être supérieure ou égale à 2 kWc."


class PriceAboveCeiling(PricingValidationError):
    kind = "price_above_ceiling"

    def __init__(self, ceiling: float):
        self.ceiling = ceiling
        super().__init__(
            f"Prix HT dépasse le plafond autorisé ({format_thousands(ceiling)} €). Hors tarif."
        )

    def details(self) -> Dict[str, Any]:
        return {"ceiling": self.ceiling}


class IncompleteBatteryConfiguration(PricingValidationError):
    kind = "incomplete_battery_configuration"
    default_message = "Veuillez remplir tous les champs de la batterie physique."


class BatteryPriceAboveCeiling(PricingValidationError):
    kind = "battery_price_above_ceiling"

    def __init__(self, price_per_kwh: float):
        self.price_per_kwh = price_per_kwh
        super().__init__(
            f"Prix batterie hors tarif ({price_per_kwh:.2f} €/kWh > 500 €/kWh)."
        )

    def details(self) -> Dict[str, Any]:
        return {"price_per_kwh": self.price_per_kwh}


class UnknownClientType(PricingValidationError):
    kind = "unknown_client_type"

    def __init__(self, client_type: str):
        self.client_type = client_type
        super().__init__(f"Type de client inconnu : {client_type}.")

    def details(self) -> Dict[str, Any]:
        return {"client_type": self.client_type}


class InvalidAmount(PricingValidationError):
    kind = "invalid_amount"

    def __init__(self, field: str, value: float):
        self.field = field
        self.value = value
        super().__init__(f"Valeur invalide pour {field} : {value} (doit être strictement positive).")

    def details(self) -> Dict[str, Any]:
        return {"field": self.field, "value": self.value}


class UnknownBatteryDuration(PricingValidationError):
    kind = "unknown_battery_duration"

    def __init__(self, duration: int):
        self.duration = duration
        super().__init__(f"Durée batterie non proposée : {duration} ans (10 ou 15 ans).")

    def details(self) -> Dict[str, Any]:
        return {"duration": self.duration}
