"""
services/pdf_settings.py
Présentation des PDF : modèles (pdf_templates) et conditions générales

Un seul modèle porte isdefault = True ; c'est lui qui habille les PDF
exportés. Sans modèle par défaut, le rendu garde sa présentation standard.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from db.data_client import DataClient

logger = logging.getLogger(__name__)

DEFAULT_TERMS = (
    "1. All prices are exclusive of applicable taxes unless stated otherwise.\n"
    "2. 50% advance on confirmation, balance on delivery.\n"
    "3. This quotation is valid for 30 days from the date of issue."
)

# colonne stockée -> clé de présentation du renderer
TEMPLATE_STYLE_KEYS = {
    "companyname": "company_name",
    "accentcolor": "accent_color",
    "headerbg": "header_bg",
    "footertext": "footer_text",
    "currencysymbol": "currency_symbol",
}


def get_default_template(client: DataClient) -> Optional[Dict[str, Any]]:
    rows = client.find("pdf_templates", {"isdefault": True}, order_by="updatedat", descending=True)
    return rows[0] if rows else None


def set_default_template(client: DataClient, template_id: str) -> Dict[str, Any]:
    """
    Désigne le modèle par défaut et retire le drapeau des autres.

    Raises:
        RecordNotFound: modèle inconnu
    """
    client.find_one("pdf_templates", {"id": template_id})
    now = datetime.now(timezone.utc)

    with client.transaction():
        for current in client.find("pdf_templates", {"isdefault": True}):
            if current["id"] != template_id:
                client.update("pdf_templates", {"id": current["id"]}, {"isdefault": False, "updatedat": now})
        row = client.update("pdf_templates", {"id": template_id}, {"isdefault": True, "updatedat": now})

    logger.info(f"🎨 Modèle PDF par défaut: {row['name']}")
    return row


def get_terms(client: DataClient) -> str:
    rows = client.find("terms_conditions")
    if rows and rows[0].get("content"):
        return rows[0]["content"]
    return DEFAULT_TERMS


def save_terms(client: DataClient, content: str) -> str:
    rows = client.find("terms_conditions")
    if rows:
        row = client.update(
            "terms_conditions", {"id": rows[0]["id"]},
            {"content": content, "updatedat": datetime.now(timezone.utc)},
        )
    else:
        row = client.insert("terms_conditions", {"content": content})
    logger.info("📝 Conditions générales mises à jour")
    return row["content"]


def pdf_template_for(client: DataClient) -> Dict[str, Any]:
    """Surcharges de rendu : modèle par défaut (champs renseignés) + conditions."""
    template = {}
    row = get_default_template(client)
    if row:
        template = {
            key: row[column]
            for column, key in TEMPLATE_STYLE_KEYS.items()
            if row.get(column)
        }
    template["terms"] = get_terms(client)
    return template
