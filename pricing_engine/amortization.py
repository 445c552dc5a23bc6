# pricing_engine/amortization.py

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP

from .tariff_tables import VAT_MULTIPLIER


CENT = Decimal("0.01")
UNIT = Decimal("1")


def round_currency(value: float) -> float:
    """Arrondi au centime, demi-centime vers le haut (pas d'arrondi bancaire)."""
    return float(Decimal(repr(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def round_units(value: float) -> int:
    return int(Decimal(repr(value)).quantize(UNIT, rounding=ROUND_HALF_UP))


def with_vat(amount_excl_tax: float) -> float:
    return round_currency(amount_excl_tax * VAT_MULTIPLIER)


def monthly_payment(principal: float, annual_rate: float, months: int) -> float:
    """
    Mensualité constante (annuité) :
        r = taux_annuel / 12
        M = P * r / (1 - (1 + r)^-n)
    arrondie au centime.
    """
    if principal <= 0:
        raise ValueError(f"Capital à financer invalide: {principal}")
    if months <= 0:
        raise ValueError(f"Durée invalide: {months} mois")
    if annual_rate < 0:
        raise ValueError(f"Taux négatif: {annual_rate}")

    # Taux nul → simple division du capital
    if annual_rate == 0:
        return round_currency(principal / months)

    r = annual_rate / 12.0
    payment = principal * r / (1.0 - (1.0 + r) ** (-months))
    return round_currency(payment)


def principal_from_payment(payment: float, annual_rate: float, months: int) -> float:
    """Inverse de monthly_payment : capital remboursé par une mensualité donnée."""
    if annual_rate == 0:
        return payment * months
    r = annual_rate / 12.0
    return payment * (1.0 - (1.0 + r) ** (-months)) / r
