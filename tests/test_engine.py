import logging
import random

import pytest

from pricing_engine.amortization import monthly_payment, round_currency, round_units
from pricing_engine import engine
from pricing_engine.engine import offered_durations, price_configuration
from pricing_engine.errors import PriceAboveCeiling, PricingValidationError
from pricing_engine.types import (
    BatteryOnlyQuote,
    CombinedQuote,
    PanelsOnlyQuote,
    PhysicalBattery,
    PricingRequest,
)

from generators import random_battery, random_panel_request


# ------------------------------------------------------------
# 1. Panneaux seuls
# ------------------------------------------------------------

def test_panels_only_offers_four_durations(panels_request):
    quotes = price_configuration(panels_request)

    assert [q.duration for q in quotes] == [10, 15, 20, 25]
    assert all(isinstance(q, PanelsOnlyQuote) for q in quotes)


def test_panels_only_scenario_6_kwc_20_years(panels_request):
    """
    6 kWc, 10 500 € HT, particulier, 20 ans
    → taux 9.75 % (palier 8), annuité sur 240 mois
    → TTC = HT * 1.2 (non arrondi pour l'éligibilité), revenus min = TTC * 12 / 4 %
    """
    quote = {q.duration: q for q in price_configuration(panels_request)}[20]

    expected_excl = monthly_payment(10500, 0.0975, 240)

    assert quote.panel_payment.excl_tax == expected_excl
    assert quote.panel_payment.incl_tax == round_currency(expected_excl * 1.2)
    assert quote.minimum_annual_income == round_units(expected_excl * 1.2 * 12 / 0.04)
    assert quote.provisional_price is False

    # Rachat dès l'année 2, table 20 ans (18 entrées → années 2 à 19)
    assert quote.panel_residuals[0].year == 2
    assert quote.panel_residuals[-1].year == 19


def test_minimum_income_uses_unrounded_incl_tax(panels_request):
    """
    10 ans : HT 144.64 → TTC 173.568 (et non 173.57)
    → 173.568 * 12 / 0.04 = 52 070.4 → 52 070
    """
    quotes = {q.duration: q for q in price_configuration(panels_request)}

    assert quotes[10].panel_payment.excl_tax == 144.64
    assert quotes[10].panel_payment.incl_tax == 173.57

    incomes = {d: q.minimum_annual_income for d, q in quotes.items()}
    assert incomes == {10: 52070, 15: 40853, 20: 35852, 25: 33026}


def test_panels_only_tier_uses_incl_tax_payment(panels_request):
    for quote in price_configuration(panels_request):
        incl = quote.panel_payment.excl_tax * 1.2
        if incl <= 150:
            assert quote.affordability_tier == "excellent"
        elif incl <= 250:
            assert quote.affordability_tier == "good"
        elif incl <= 400:
            assert quote.affordability_tier == "acceptable"
        else:
            assert quote.affordability_tier == "difficult"


def test_panels_above_36_kwc_are_provisional():
    req = PricingRequest(power_kwc=40.0, installation_price_excl_tax=90000.0)

    quotes = price_configuration(req)

    assert len(quotes) == 4
    assert all(q.provisional_price for q in quotes)


def test_virtual_battery_does_not_change_price(panels_request):
    with_virtual = PricingRequest(
        power_kwc=panels_request.power_kwc,
        installation_price_excl_tax=panels_request.installation_price_excl_tax,
        virtual_battery_included=True,
    )
    assert price_configuration(with_virtual) == price_configuration(panels_request)


# ------------------------------------------------------------
# 2. Batterie seule
# ------------------------------------------------------------

def test_battery_only_scenario(battery_only_request):
    """
    10 kWh @ 4 000 € HT, 10 ans → 400 €/kWh, taux 11.5 %
    8 valeurs résiduelles (années 2 à 9)
    """
    quotes = price_configuration(battery_only_request)

    assert [q.duration for q in quotes] == [10, 15]
    assert all(isinstance(q, BatteryOnlyQuote) for q in quotes)

    quote = quotes[0]
    assert quote.battery_duration == 10
    assert quote.battery_payment.excl_tax == monthly_payment(4000, 0.115, 120)
    assert [r.year for r in quote.battery_residuals] == list(range(2, 10))

    # Batterie physique → 7 % des revenus
    assert quote.minimum_annual_income == round_units(
        quote.battery_payment.excl_tax * 1.2 * 12 / 0.07
    )


def test_offered_durations(panels_request, battery_only_request):
    assert offered_durations(panels_request) == (10, 15, 20, 25)
    assert offered_durations(battery_only_request) == (10, 15)


# ------------------------------------------------------------
# 3. Panneaux + batterie
# ------------------------------------------------------------

def test_combined_quotes(combined_request):
    quotes = price_configuration(combined_request)

    assert [q.duration for q in quotes] == [10, 15, 20, 25]
    assert all(isinstance(q, CombinedQuote) for q in quotes)

    # La batterie garde sa propre durée (15 ans) quelle que soit la durée panneaux
    assert {q.battery_duration for q in quotes} == {15}
    assert len({q.battery_payment for q in quotes}) == 1


def test_combined_payment_is_sum_of_annuities(combined_request):
    for quote in price_configuration(combined_request):
        assert quote.combined_payment.excl_tax == round_currency(
            quote.panel_payment.excl_tax + quote.battery_payment.excl_tax
        )
        assert quote.combined_payment.incl_tax == round_currency(
            quote.panel_payment.incl_tax + quote.battery_payment.incl_tax
        )
        # Éligibilité sur la somme des TTC non arrondis
        incl = quote.panel_payment.excl_tax * 1.2 + quote.battery_payment.excl_tax * 1.2
        assert quote.minimum_annual_income == round_units(incl * 12 / 0.07)


def test_combined_residuals_add_up(combined_request):
    """
    Contrat 10 ans : panneaux années 2–9, batterie (15 ans) années 2–14
    → union 2–14 ; au-delà de 9 seule la batterie compte.
    """
    quote = {q.duration: q for q in price_configuration(combined_request)}[10]

    panel = {r.year: r for r in quote.panel_residuals}
    battery = {r.year: r for r in quote.battery_residuals}

    assert [r.year for r in quote.combined_residuals] == list(range(2, 15))

    for entry in quote.combined_residuals:
        p = panel.get(entry.year)
        b = battery.get(entry.year)
        expected = (p.value_excl_tax if p else 0.0) + (b.value_excl_tax if b else 0.0)
        assert entry.value_excl_tax == round_currency(expected)

    assert quote.combined_residuals[-1] == battery[14]


def test_business_client_combined():
    req = PricingRequest(
        power_kwc=9.0,
        installation_price_excl_tax=12000.0,
        client_type="business",
        physical_battery=PhysicalBattery(power_kwh=10.0, price_excl_tax=4500.0, duration=10),
    )

    for quote in price_configuration(req):
        assert quote.panel_residuals[0].year == 5
        assert quote.battery_residuals[0].year == 5
        assert quote.combined_residuals[0].year == 5


# ------------------------------------------------------------
# 4. Validation & déterminisme
# ------------------------------------------------------------

def test_invalid_request_raises_before_pricing(caplog):
    req = PricingRequest(power_kwc=5.0, installation_price_excl_tax=9300.0)

    with caplog.at_level(logging.INFO, logger="pricing_engine.engine"):
        with pytest.raises(PriceAboveCeiling):
            price_configuration(req)

    assert "price_above_ceiling" in caplog.text


@pytest.mark.parametrize(
    "req",
    [
        PricingRequest(power_kwc=6.0, installation_price_excl_tax=0.0),
        PricingRequest(physical_battery=PhysicalBattery(power_kwh=10.0, price_excl_tax=4000.0, duration=12)),
        PricingRequest(power_kwc=6.0, installation_price_excl_tax=10500.0, client_type="association"),
    ],
)
def test_out_of_range_values_fail_validation_not_pricing(req, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("aucune annuité avant validation")

    monkeypatch.setattr(engine, "monthly_payment", fail)
    monkeypatch.setattr(engine, "finance_battery", fail)

    with pytest.raises(PricingValidationError):
        price_configuration(req)


def test_deterministic():
    rng = random.Random(7)

    for _ in range(20):
        req = random_panel_request(rng, client_type=rng.choice(["individual", "business"]))
        assert price_configuration(req) == price_configuration(req)

        battery_req = PricingRequest(
            power_kwc=req.power_kwc,
            installation_price_excl_tax=req.installation_price_excl_tax,
            client_type=req.client_type,
            physical_battery=random_battery(rng),
        )
        first = price_configuration(battery_req)
        assert first == price_configuration(battery_req)
        assert [q.to_dict() for q in first] == [q.to_dict() for q in price_configuration(battery_req)]


def test_to_dict_shapes(panels_request, battery_only_request, combined_request):
    panels = price_configuration(panels_request)[0].to_dict()
    assert panels["kind"] == "panels_only"
    assert "battery_payment" not in panels

    battery = price_configuration(battery_only_request)[0].to_dict()
    assert battery["kind"] == "battery_only"
    assert "panel_payment" not in battery

    combined = price_configuration(combined_request)[0].to_dict()
    assert combined["kind"] == "combined"
    assert set(combined["combined_payment"]) == {"excl_tax", "incl_tax"}
    assert combined["combined_residuals"][0]["year"] == 2
