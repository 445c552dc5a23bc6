# pricing_engine/engine.py

from __future__ import annotations
import logging
from typing import List, Optional

from .amortization import monthly_payment, with_vat
from .battery_blending import BatteryFinancing, combine_payments, combine_schedules, finance_battery
from .eligibility import classify
from .errors import PricingValidationError
from .rate_resolver import panel_rate
from .residual_engine import panel_residual_schedule
from .tariff_tables import BATTERY_DURATIONS, CEILING_MAX_POWER_KWC, PANEL_DURATIONS, VAT_MULTIPLIER
from .types import (
    BatteryOnlyQuote,
    CombinedQuote,
    MonthlyPayment,
    PanelsOnlyQuote,
    PricingRequest,
    Quote,
)
from .validator import validate

logger = logging.getLogger("pricing_engine.engine")


def offered_durations(request: PricingRequest) -> tuple:
    """Panneaux : 10 à 25 ans. Batterie seule : 10 et 15 ans."""
    return PANEL_DURATIONS if request.has_panels else BATTERY_DURATIONS


def _panel_payment(request: PricingRequest, duration: int) -> MonthlyPayment:
    rate = panel_rate(duration, request.power_kwc)
    excl = monthly_payment(request.installation_price_excl_tax, rate, duration * 12)
    return MonthlyPayment(excl_tax=excl, incl_tax=with_vat(excl))


def _eligibility_basis(*payments: MonthlyPayment) -> float:
    # TTC non arrondi (HT × 1.2), cumulé sur les annuités ; l'arrondi reste à l'affichage
    return sum(p.excl_tax * VAT_MULTIPLIER for p in payments)


def _quote_for_duration(
    request: PricingRequest,
    duration: int,
    battery: Optional[BatteryFinancing],
) -> Quote:
    has_battery = battery is not None
    provisional = request.has_panels and request.power_kwc > CEILING_MAX_POWER_KWC

    # -------------------------
    # BATTERIE SEULE
    # -------------------------
    if not request.has_panels:
        eligibility = classify(_eligibility_basis(battery.payment), has_physical_battery=True)
        return BatteryOnlyQuote(
            duration=duration,
            battery_duration=battery.duration,
            battery_payment=battery.payment,
            battery_residuals=battery.residuals,
            minimum_annual_income=eligibility.minimum_annual_income,
            affordability_tier=eligibility.affordability_tier,
        )

    panel_payment = _panel_payment(request, duration)
    panel_residuals = panel_residual_schedule(
        request.installation_price_excl_tax, duration, request.client_type
    )

    # -------------------------
    # PANNEAUX SEULS
    # -------------------------
    if not has_battery:
        eligibility = classify(_eligibility_basis(panel_payment), has_physical_battery=False)
        return PanelsOnlyQuote(
            duration=duration,
            panel_payment=panel_payment,
            panel_residuals=panel_residuals,
            minimum_annual_income=eligibility.minimum_annual_income,
            affordability_tier=eligibility.affordability_tier,
            provisional_price=provisional,
        )

    # -------------------------
    # PANNEAUX + BATTERIE
    # -------------------------
    combined_payment = combine_payments(panel_payment, battery.payment)
    eligibility = classify(
        _eligibility_basis(panel_payment, battery.payment), has_physical_battery=True
    )

    return CombinedQuote(
        duration=duration,
        battery_duration=battery.duration,
        panel_payment=panel_payment,
        battery_payment=battery.payment,
        combined_payment=combined_payment,
        panel_residuals=panel_residuals,
        battery_residuals=battery.residuals,
        combined_residuals=combine_schedules(panel_residuals, battery.residuals),
        minimum_annual_income=eligibility.minimum_annual_income,
        affordability_tier=eligibility.affordability_tier,
        provisional_price=provisional,
    )


def price_configuration(request: PricingRequest) -> List[Quote]:
    """
    Point d'entrée du moteur.

    Valide la requête (lève une PricingValidationError à la première règle
    violée), puis produit une quote par durée proposée. Fonction pure :
    même requête → mêmes quotes.
    """
    try:
        validate(request)
    except PricingValidationError as exc:
        logger.info("Configuration refusée: %s", exc.kind)
        raise

    # La batterie a sa propre durée : un seul financement pour toutes les quotes
    battery = (
        finance_battery(request.physical_battery, request.client_type)
        if request.has_physical_battery
        else None
    )

    durations = offered_durations(request)
    quotes = [_quote_for_duration(request, d, battery) for d in durations]

    logger.info(
        "Tarification: panneaux=%s batterie=%s client=%s durées=%s",
        request.has_panels,
        battery is not None,
        request.client_type,
        list(durations),
    )
    return quotes
