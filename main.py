# ============================================================
# Tarification abonnement solaire : Backend API
# MAIN.PY (price + offer_summary + generate_offer_text)
# ============================================================

import logging
import os
from typing import Literal, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# OpenAI (optionnel : sans clé API le client reste None)
from openai import OpenAI

# Engine imports
from pricing_engine.engine import price_configuration
from pricing_engine.errors import PricingValidationError
from pricing_engine.offer_summary import build_offer_summary
from pricing_engine.types import PhysicalBattery, PricingRequest

logger = logging.getLogger("pricing_engine.api")


# ============================================================
# FASTAPI INIT
# ============================================================

app = FastAPI()

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("PRICING_ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

ADVICE_MODEL = os.environ.get("PRICING_ADVICE_MODEL", "gpt-4.1")

# Client OpenAI optionnel (pas de clé → client=None, le brouillon est renvoyé tel quel)
client = None
try:
    client = OpenAI()
except Exception as exc:
    logger.warning("OpenAI client indisponible: %s", exc)


# ============================================================
# REQUEST MODELS
# ============================================================

class PhysicalBatteryModel(BaseModel):
    power_kwh: Optional[float] = Field(default=None, gt=0)
    price_excl_tax: Optional[float] = Field(default=None, gt=0)
    duration: Literal[10, 15] = 10


class PriceRequest(BaseModel):
    # PANNEAUX
    power_kwc: Optional[float] = Field(default=None, gt=0)
    installation_price_excl_tax: Optional[float] = Field(default=None, gt=0)

    # CLIENT
    client_type: Literal["individual", "business"] = "individual"

    # BATTERIES
    virtual_battery_included: bool = False
    physical_battery: Optional[PhysicalBatteryModel] = None

    def to_engine(self) -> PricingRequest:
        battery = None
        if self.physical_battery is not None:
            battery = PhysicalBattery(
                power_kwh=self.physical_battery.power_kwh,
                price_excl_tax=self.physical_battery.price_excl_tax,
                duration=self.physical_battery.duration,
            )

        # Les deux options batterie sont exclusives : la batterie physique l'emporte
        virtual = self.virtual_battery_included and battery is None

        return PricingRequest(
            power_kwc=self.power_kwc,
            installation_price_excl_tax=self.installation_price_excl_tax,
            client_type=self.client_type,
            virtual_battery_included=virtual,
            physical_battery=battery,
        )


class OfferSummaryRequest(BaseModel):
    pricing: PriceRequest
    duration: int
    display_mode: Literal["HT", "TTC"] = "TTC"


class OfferTextRequest(BaseModel):
    summary: OfferSummaryRequest
    draft_text: Optional[str] = None
    tone: str = Field(default="professionnel", max_length=40)


# ============================================================
# PRICE ENDPOINT
# ============================================================

@app.post("/price")
def price(req: PriceRequest):
    try:
        quotes = price_configuration(req.to_engine())
    except PricingValidationError as exc:
        return exc.to_dict()

    return {"quotes": [q.to_dict() for q in quotes]}


# ============================================================
# OFFER SUMMARY
# ============================================================

def _summary_for(req: OfferSummaryRequest) -> dict:
    engine_request = req.pricing.to_engine()

    try:
        quotes = price_configuration(engine_request)
    except PricingValidationError as exc:
        return exc.to_dict()

    selected = next((q for q in quotes if q.duration == req.duration), None)
    if selected is None:
        return {
            "error": "UNKNOWN_DURATION",
            "message": f"Durée non proposée: {req.duration} ans",
            "durations": [q.duration for q in quotes],
        }

    battery = engine_request.physical_battery
    summary = build_offer_summary(
        selected,
        client_type=engine_request.client_type,
        display_mode=req.display_mode,
        power_kwc=engine_request.power_kwc if engine_request.has_panels else None,
        virtual_battery=engine_request.virtual_battery_included,
        battery_power_kwh=battery.power_kwh if battery is not None else None,
    )

    return {"quote": selected.to_dict(), **summary.to_dict()}


@app.post("/offer_summary")
def offer_summary(req: OfferSummaryRequest):
    return _summary_for(req)


# ============================================================
# OFFER TEXT GENERATOR
# ============================================================

@app.post("/generate_offer_text")
def generate_offer_text(req: OfferTextRequest):

    summary = _summary_for(req.summary)
    if "error" in summary:
        return summary

    draft = req.draft_text or summary["body"]

    if client is None:
        return {
            "text": draft
        }

    prompt = f"""
ROLE
Tu es conseiller commercial pour une offre d'abonnement solaire (panneaux et batterie).
Tu rédiges le mail de présentation d'une offre chiffrée pour un client.

RÈGLES ABSOLUES (NE PAS ENFREINDRE)
- Tu ne fais AUCUN calcul.
- Tu n'introduis AUCUN nouveau chiffre, montant, taux ou pourcentage.
- Tu reprends les montants EXACTEMENT comme ils figurent dans le CONTEXTE.
- Tu conserves les sections : détails de l'installation, conditions financières,
  avantages, déroulement, contact.

TON
- {req.tone}
- Clair, rassurant, sans pression commerciale.

CONTEXTE (FAITS PRIORITAIRES) :
Objet : {summary["subject"]}
Mensualité affichée ({req.summary.display_mode}) : {summary["display_price"]}
{summary["solvency_line"]}
Valeur de rachat finale : {summary["final_buyout_value"]}

BROUILLON (PEUT ÊTRE REFORMULÉ ET STRUCTURÉ) :
{draft}
"""

    try:
        response = client.chat.completions.create(
            model=ADVICE_MODEL,
            messages=[
                {"role": "system", "content": "Tu es un conseiller commercial spécialisé en abonnements solaires."},
                {"role": "user", "content": prompt}
            ],
            max_tokens=1200,
            temperature=0.3,
        )
        return {"text": response.choices[0].message.content}

    except Exception as e:
        logger.exception("Échec de la reformulation de l'offre")
        return {
            "error": str(e),
            "text": draft
        }
