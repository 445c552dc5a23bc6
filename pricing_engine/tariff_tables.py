# pricing_engine/tariff_tables.py

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple


# ============================================================
# Constantes commerciales
# ============================================================

VAT_RATE = 0.20
VAT_MULTIPLIER = 1.0 + VAT_RATE

MIN_POWER_KWC = 2.0
BRACKET_STEP_KWC = 0.5

# Au-delà de 36 kWc : prix sur devis, pas de plafond, taux du dernier palier
CEILING_MAX_POWER_KWC = 36.0

BATTERY_MAX_PRICE_PER_KWH = 500.0

PANEL_DURATIONS = (10, 15, 20, 25)
BATTERY_DURATIONS = (10, 15)

# Taux fixes batterie (fraction annuelle)
BATTERY_RATES: Dict[int, float] = {
    15: 0.106,
    10: 0.115,
}

# Valeurs résiduelles : première année de rachat par type de client.
# Entreprise : rachat possible à partir de la 5e année, on saute donc les
# 3 premières entrées de la table.
RESIDUAL_START_YEAR = {
    "individual": 2,
    "business": 5,
}
RESIDUAL_SKIPPED_ENTRIES = {
    "individual": 0,
    "business": 3,
}

# Part maximale des revenus annuels consacrée à l'abonnement
MAX_INCOME_SHARE = 0.04
MAX_INCOME_SHARE_WITH_BATTERY = 0.07

# Seuils de solvabilité (mensualité TTC totale, bornes incluses)
AFFORDABILITY_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (150.0, "excellent"),
    (250.0, "good"),
    (400.0, "acceptable"),
)
AFFORDABILITY_FALLBACK = "difficult"


# ============================================================
# Index de palier, partagé par plafonds et taux
# ============================================================

def bracket_index(power_kwc: float) -> int:
    """Palier de 0.5 kWc à partir de 2 kWc : floor((P - 2) / 0.5)."""
    return int(math.floor((power_kwc - MIN_POWER_KWC) / BRACKET_STEP_KWC))


@dataclass(frozen=True)
class TariffTable:
    """
    Table ordonnée de valeurs par palier de 0.5 kWc (index 0 = 2 kWc).
    Toute lecture hors table est ramenée dans [0, last_index].
    """
    values: Tuple[float, ...]

    @property
    def last_index(self) -> int:
        return len(self.values) - 1

    def clamp(self, index: int) -> int:
        return max(0, min(index, self.last_index))

    def at(self, index: int) -> float:
        return self.values[self.clamp(index)]

    def lookup(self, power_kwc: float) -> float:
        return self.at(bracket_index(power_kwc))

    def __len__(self) -> int:
        return len(self.values)


def _table(values: Sequence[float]) -> TariffTable:
    return TariffTable(tuple(float(v) for v in values))


# ============================================================
# Plafonds de prix HT (2 → 36 kWc)
# ============================================================

MAX_PRICES_EXCL_TAX = _table([
    5200, 5500, 6290, 6750, 7542, 8333, 9250, 10083, 10833, 11417, 12000, 12500, 13083, 13667, 14167,
    14635, 15170, 15700, 16230, 16765, 17300, 17833, 18380, 18900, 19450, 20000, 20700, 21390, 22080,
    22770, 23460, 24150, 24840, 25530, 26220, 26910, 27600, 28290, 28980, 29670, 30360, 31050, 31740,
    32430, 33120, 33810, 34500, 35190, 35880, 36570, 37260, 37950, 38640, 39330, 40020, 40710, 41400,
    42090, 42780, 43470, 44160, 44850, 45540, 46230, 46920, 47610, 48300, 48990, 49680,
])


# ============================================================
# Taux variables panneaux (% annuel) par durée
# ============================================================

PANEL_RATE_LAST_INDEX = 25

PANEL_RATES_PERCENT: Dict[int, TariffTable] = {
    25: _table([8.50, 8.50, 8.50, 9.10, 9.20, 9.30, 9.34, 9.39, 9.50, 9.60, 9.71, 9.80, 9.85,
                9.89, 10.00, 10.10, 10.22, 10.30, 10.35, 10.40, 10.48, 10.60, 10.70, 10.80, 10.90, 11.00]),
    20: _table([8.75, 8.75, 8.75, 9.35, 9.45, 9.55, 9.59, 9.64, 9.75, 9.85, 9.96, 10.05, 10.10,
                10.14, 10.25, 10.35, 10.47, 10.55, 10.60, 10.65, 10.73, 10.85, 10.95, 11.05, 11.15, 11.25]),
    15: _table([9.10, 9.10, 9.10, 9.70, 9.80, 9.90, 9.94, 9.99, 10.10, 10.20, 10.31, 10.40, 10.45,
                10.49, 10.60, 10.70, 10.82, 10.90, 10.95, 11.00, 11.08, 11.20, 11.30, 11.40, 11.50, 11.60]),
    10: _table([10.00, 10.00, 10.00, 10.60, 10.70, 10.80, 10.84, 10.89, 11.00, 11.10, 11.21, 11.30, 11.35,
                11.39, 11.50, 11.60, 11.72, 11.80, 11.85, 11.90, 11.98, 12.10, 12.20, 12.30, 12.40, 12.50]),
}


# ============================================================
# Pourcentages de valeur résiduelle (une entrée par année dès l'an 2)
# ============================================================

PANEL_RESIDUAL_PERCENTAGES: Dict[int, Tuple[float, ...]] = {
    25: (106.0, 105.0, 104.0, 103.0, 102.0, 101.0, 99.0, 96.0, 95.0, 94.0, 93.0, 92.0, 91.0, 90.0,
         87.0, 80.0, 71.0, 64.0, 55.0, 46.0, 36.0, 24.0, 12.8),
    20: (106.0, 105.0, 104.0, 103.0, 102.0, 100.0, 96.0, 93.0, 90.0, 86.0, 80.0, 75.0, 66.0, 59.0,
         47.4, 37.8, 24.0, 12.9),
    15: (97.5, 95.0, 93.0, 91.0, 89.0, 86.0, 81.0, 75.0, 69.0, 61.0, 51.0, 37.0, 13.8),
    10: (94.0, 91.0, 87.0, 81.0, 71.0, 60.0, 42.0, 15.5),
}

BATTERY_RESIDUAL_PERCENTAGES: Dict[int, Tuple[float, ...]] = {
    15: (94.5, 93.1, 91.3, 89.1, 86.3, 82.8, 78.4, 72.8, 65.8, 57.1, 46.0, 32.2, 14.8),
    10: (94.0, 91.2, 87.2, 81.4, 64.7, 60.4, 42.2, 15.8),
}
