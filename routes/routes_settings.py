# routes/routes_settings.py - Réglages : conditions générales imprimées sur les devis

import logging

from fastapi import APIRouter, Depends

from core.security import Actor, get_current_actor
from db.data_client import DataAccessError, DataClient
from models.data_models import TermsIn, TermsOut
from routes.dependencies import get_data_client, http_error, require_permission
from services.pdf_settings import get_terms, save_terms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("/terms", response_model=TermsOut)
def read_terms(
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    """Conditions enregistrées, ou texte standard si aucune."""
    require_permission(actor, "settings", "canRead")
    try:
        return TermsOut(content=get_terms(client))
    except DataAccessError as e:
        raise http_error(e)


@router.put("/terms", response_model=TermsOut)
def update_terms(
    terms: TermsIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "settings", "canEdit")
    try:
        return TermsOut(content=save_terms(client, terms.content))
    except DataAccessError as e:
        raise http_error(e)
