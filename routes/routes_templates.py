# routes/routes_templates.py - Modèles de présentation des PDF de devis

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends

from core.security import Actor, get_current_actor
from db.data_client import DataAccessError, DataClient
from models.data_models import TEMPLATE_COLUMNS, TemplateIn, TemplateOut, from_record, to_record
from routes.dependencies import get_data_client, http_error, require_permission
from services.pdf_settings import set_default_template

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/templates",
    tags=["Templates"],
    responses={404: {"description": "Template not found"}},
)


@router.get("", response_model=List[TemplateOut])
def list_templates(
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "templates", "canRead")
    try:
        rows = client.find("pdf_templates", order_by="createdat", descending=True)
    except DataAccessError as e:
        raise http_error(e)
    return [TemplateOut(**from_record(r, TEMPLATE_COLUMNS)) for r in rows]


@router.post("", response_model=TemplateOut, status_code=201)
def create_template(
    template: TemplateIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "templates", "canCreate")
    record = to_record(template, TEMPLATE_COLUMNS)
    make_default = record.pop("isdefault", False)
    record["createdby"] = actor.id
    try:
        row = client.insert("pdf_templates", record)
        if make_default:
            row = set_default_template(client, row["id"])
    except DataAccessError as e:
        raise http_error(e)
    logger.info(f"✅ Modèle PDF créé: {row['name']}")
    return TemplateOut(**from_record(row, TEMPLATE_COLUMNS))


@router.put("/{template_id}", response_model=TemplateOut)
def update_template(
    template_id: str,
    template: TemplateIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    """isDefault = true passe par set-default (un seul modèle par défaut)."""
    require_permission(actor, "templates", "canEdit")
    patch = to_record(template, TEMPLATE_COLUMNS, exclude_unset=True)
    make_default = patch.pop("isdefault", None)
    if make_default is False:
        patch["isdefault"] = False
    patch["updatedat"] = datetime.now(timezone.utc)
    try:
        row = client.update("pdf_templates", {"id": template_id}, patch)
        if make_default:
            row = set_default_template(client, template_id)
    except DataAccessError as e:
        raise http_error(e)
    return TemplateOut(**from_record(row, TEMPLATE_COLUMNS))


@router.post("/{template_id}/set-default", response_model=TemplateOut)
def make_default_template(
    template_id: str,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "templates", "canEdit")
    try:
        row = set_default_template(client, template_id)
    except DataAccessError as e:
        raise http_error(e)
    return TemplateOut(**from_record(row, TEMPLATE_COLUMNS))
