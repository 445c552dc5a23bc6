# pricing_engine/formatting.py

from __future__ import annotations


def format_thousands(value: float) -> str:
    """Entier au format français : 48000 -> "48 000"."""
    return f"{int(round(value)):,}".replace(",", " ")


def format_amount(value: float) -> str:
    return f"{value:.2f}"


def format_power(value: float) -> str:
    """6.0 -> "6", 6.5 -> "6.5"."""
    return f"{value:g}"
