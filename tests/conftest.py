import pytest
from pricing_engine.types import PhysicalBattery, PricingRequest


@pytest.fixture
def panels_request():
    # 6 kWc, 10 500 € HT (plafond du palier : 10 833 €), particulier
    return PricingRequest(
        power_kwc=6.0,
        installation_price_excl_tax=10500.0,
        client_type="individual",
    )


@pytest.fixture
def battery_only_request():
    # 10 kWh @ 4 000 € HT → 400 €/kWh, 10 ans
    return PricingRequest(
        client_type="individual",
        physical_battery=PhysicalBattery(power_kwh=10.0, price_excl_tax=4000.0, duration=10),
    )


@pytest.fixture
def combined_request():
    return PricingRequest(
        power_kwc=6.0,
        installation_price_excl_tax=10500.0,
        client_type="individual",
        physical_battery=PhysicalBattery(power_kwh=10.0, price_excl_tax=4000.0, duration=15),
    )
