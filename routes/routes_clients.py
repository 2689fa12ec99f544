# routes/routes_clients.py

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends

from core.security import Actor, get_current_actor
from db.data_client import DataAccessError, DataClient
from models.data_models import CLIENT_COLUMNS, ClientIn, ClientOut, from_record, to_record
from routes.dependencies import get_data_client, http_error, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Clients"])


@router.post("", response_model=ClientOut, status_code=201)
def create_client(
    client_in: ClientIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "clients", "canCreate")
    try:
        row = client.insert("clients", to_record(client_in, CLIENT_COLUMNS))
    except DataAccessError as e:
        raise http_error(e)
    logger.info(f"✅ Client créé: {row['name']}")
    return ClientOut(**from_record(row, CLIENT_COLUMNS))


@router.get("", response_model=List[ClientOut])
def list_clients(
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "clients", "canRead")
    try:
        rows = client.find("clients", {"isactive": True}, order_by="name")
    except DataAccessError as e:
        raise http_error(e)
    return [ClientOut(**from_record(r, CLIENT_COLUMNS)) for r in rows]


@router.get("/{client_id}", response_model=ClientOut)
def get_client(
    client_id: str,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "clients", "canRead")
    try:
        row = client.find_one("clients", {"id": client_id})
    except DataAccessError as e:
        raise http_error(e)
    return ClientOut(**from_record(row, CLIENT_COLUMNS))


@router.put("/{client_id}", response_model=ClientOut)
def update_client(
    client_id: str,
    client_in: ClientIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "clients", "canEdit")
    patch = to_record(client_in, CLIENT_COLUMNS, exclude_unset=True)
    patch["updatedat"] = datetime.now(timezone.utc)
    try:
        row = client.update("clients", {"id": client_id}, patch)
    except DataAccessError as e:
        raise http_error(e)
    return ClientOut(**from_record(row, CLIENT_COLUMNS))
