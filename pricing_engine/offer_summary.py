# pricing_engine/offer_summary.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import quote

from .formatting import format_amount, format_power, format_thousands
from .types import BUSINESS, INDIVIDUAL, Quote


BRAND = "SunLib"
CONTACT_EMAIL = "contact@sunlib.fr"

DISPLAY_MODES = ("HT", "TTC")

CLIENT_LABELS = {
    INDIVIDUAL: "particulier",
    BUSINESS: "entreprise",
}

TIER_LABELS = {
    "excellent": "Excellente solvabilité",
    "good": "Bonne solvabilité",
    "acceptable": "Solvabilité acceptable",
    "difficult": "Solvabilité difficile",
}

BUSINESS_SOLVENCY_LABEL = f"Validation sous réserve étude {BRAND}"

# Mois de caution prélevés à la signature du mandat SEPA
DEPOSIT_MONTHS = {
    INDIVIDUAL: 2,
    BUSINESS: 3,
}


# ============================================================
# Avantages & processus (textes commerciaux)
# ============================================================

ADVANTAGES: Dict[str, List[Dict[str, str]]] = {
    INDIVIDUAL: [
        {"title": "Pas d'apport initial",
         "description": "Zéro investissement initial : votre épargne reste intacte"},
        {"title": "Pas d'emprunt",
         "description": "Préserve la capacité d'endettement et évite des démarches longues "
                        "et complexes de demande de crédit"},
        {"title": "Économies immédiates",
         "description": "Économies immédiates dès la première année • Factures d'électricité réduites"},
        {"title": "Tranquillité d'esprit totale",
         "description": f"En cas de panne, {BRAND} s'occupe de tout • Garantie de bon fonctionnement incluse"},
        {"title": "Offre de service complète",
         "description": f"Service client dédié {BRAND} situé en France • Monitoring 24h/24h • "
                        "Possibilité d'évolution"},
        {"title": "Flexibilité",
         "description": "Choix de la durée d'abonnement de 10 à 25 ans, possibilité d'acquérir "
                        "l'installation au bout de la 2ème année"},
    ],
    BUSINESS: [
        {"title": "Pas d'apport initial",
         "description": "Aucun investissement • Préserve la trésorerie et évite l'immobilisation "
                        "de capital (pas de CAPEX)"},
        {"title": "Pas d'emprunt",
         "description": "Préserve la capacité d'endettement • Pas d'engagement hors bilan pour les TPE/PME"},
        {"title": "Économies immédiates",
         "description": "Économies dès la première année • Factures d'électricité réduites nettes "
                        "des frais d'abonnement"},
        {"title": "Tranquillité d'esprit totale",
         "description": "Garantie de bon fonctionnement • Monitoring 24h/24 et 7j/7 du système"},
        {"title": "Offre de service complète",
         "description": f"APP {BRAND} pour le suivi • Service client dédié en France"},
        {"title": "Avantages professionnels",
         "description": "Possibilité d'acquérir l'installation au bout de la 5ème année • "
                        "Protection contre les fluctuations du prix de l'électricité"},
    ],
}


def process_steps(client_type: str) -> List[str]:
    return [
        "Signature du Devis d'abonnement",
        f"Validation du projet par les équipes {BRAND}",
        f"Réception et signature du contrat d'abonnement {BRAND}",
        f"Signature du mandat SEPA et prélèvement de {DEPOSIT_MONTHS[client_type]} mois de caution",
        "Accord de la mairie",
        "Pose des panneaux et mise en service de l'installation. Démarrage de l'abonnement",
    ]


# ============================================================
# Résumé d'offre
# ============================================================

@dataclass(frozen=True)
class OfferSummary:
    subject: str
    body: str
    mailto_url: str
    display_price: float
    solvency_line: str
    tier_label: str
    advantages: List[Dict[str, str]]
    steps: List[str]
    residuals: List[Dict[str, float]]
    final_buyout_value: Optional[float]

    def to_dict(self):
        return {
            "subject": self.subject,
            "body": self.body,
            "mailto_url": self.mailto_url,
            "display_price": self.display_price,
            "solvency_line": self.solvency_line,
            "tier_label": self.tier_label,
            "advantages": self.advantages,
            "steps": self.steps,
            "residuals": self.residuals,
            "final_buyout_value": self.final_buyout_value,
        }


def display_price(quote_: Quote, display_mode: str) -> float:
    """Mensualité totale affichée selon le mode HT / TTC."""
    payment = quote_.total_payment
    return payment.excl_tax if display_mode == "HT" else payment.incl_tax


def solvency_line(quote_: Quote, client_type: str) -> str:
    # Entreprise : pas de palier affiché, étude interne
    if client_type == BUSINESS:
        return f"Solvabilité : {BUSINESS_SOLVENCY_LABEL}"
    return f"Revenus minimum requis : {format_thousands(quote_.minimum_annual_income)} € / an"


def tier_label(quote_: Quote, client_type: str) -> str:
    if client_type == BUSINESS:
        return BUSINESS_SOLVENCY_LABEL
    return TIER_LABELS[quote_.affordability_tier]


def mailto_url(subject: str, body: str) -> str:
    # Même jeu de caractères non échappés que encodeURIComponent
    safe = "-_.!~*'()"
    return f"mailto:?subject={quote(subject, safe=safe)}&body={quote(body, safe=safe)}"


def build_offer_summary(
    quote_: Quote,
    client_type: str,
    display_mode: str = "TTC",
    power_kwc: Optional[float] = None,
    virtual_battery: bool = False,
    battery_power_kwh: Optional[float] = None,
) -> OfferSummary:
    """Texte de l'offre (objet + corps de mail) pour une quote sélectionnée."""
    if display_mode not in DISPLAY_MODES:
        raise ValueError(f"Mode d'affichage inconnu: {display_mode}")
    if client_type not in CLIENT_LABELS:
        raise ValueError(f"Type de client inconnu: {client_type}")

    price = display_price(quote_, display_mode)
    client_label = CLIENT_LABELS[client_type]

    if power_kwc is not None:
        subject = (
            f"Offre {BRAND} - Abonnement {client_label} {format_power(power_kwc)}kWc "
            f"sur {quote_.duration} ans"
        )
    else:
        subject = f"Offre {BRAND} - Abonnement {client_label} sur {quote_.duration} ans"

    # -------------------------
    # Détails de l'installation
    # -------------------------
    install_lines = []
    if power_kwc is not None:
        install_lines.append(f"- Puissance installée : {format_power(power_kwc)} kWc")
    if virtual_battery:
        install_lines.append("- Batterie virtuelle : Incluse")
    if battery_power_kwh is not None:
        install_lines.append(f"- Batterie physique : {format_power(battery_power_kwh)} kWh")

    solvency = solvency_line(quote_, client_type)
    steps = process_steps(client_type)

    body = (
        "Bonjour,\n\n"
        f"Veuillez trouver ci-dessous le résumé de votre offre {BRAND} :\n\n"
        "DÉTAILS DE L'INSTALLATION\n"
        + "\n".join(install_lines) + "\n\n"
        "CONDITIONS FINANCIÈRES\n"
        f"- Durée du contrat : {quote_.duration} ans\n"
        f"- Mensualité {display_mode} : {format_amount(price)} €\n"
        f"- {solvency}\n\n"
        "AVANTAGES PRINCIPAUX\n"
        + "".join(f"- {adv['title']}\n" for adv in ADVANTAGES[client_type]) + "\n"
        "ET CONCRÈTEMENT, COMMENT ÇA SE PASSE ?\n"
        + "".join(f"{i}. {step}\n" for i, step in enumerate(steps, start=1)) + "\n"
        "Pour plus d'informations, n'hésitez pas à nous contacter.\n\n"
        f"Contact : {CONTACT_EMAIL}\n\n"
        "Cordialement,\n"
        f"L'équipe {BRAND}"
    )

    value_key = "value_excl_tax" if display_mode == "HT" else "value_incl_tax"
    residuals = [
        {"year": entry.year, "value": getattr(entry, value_key)}
        for entry in quote_.total_residuals
    ]

    return OfferSummary(
        subject=subject,
        body=body,
        mailto_url=mailto_url(subject, body),
        display_price=price,
        solvency_line=solvency,
        tier_label=tier_label(quote_, client_type),
        advantages=[dict(adv) for adv in ADVANTAGES[client_type]],
        steps=steps,
        residuals=residuals,
        final_buyout_value=residuals[-1]["value"] if residuals else None,
    )
