# routes/dependencies.py - Dépendances FastAPI partagées par les routers

import logging

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from core.security import Actor
from db.data_client import DataAccessError, DataClient, RecordNotFound
from db.session import get_db
from services.permissions import PermissionAction, PermissionResource, has_permission
from services.quote_repository import QuoteRepository
from services.quote_workflow_engine import (
    InvalidTransition,
    NotApproved,
    QuoteNotEditable,
    QuoteWorkflowEngine,
)

logger = logging.getLogger(__name__)


def get_data_client(db: Session = Depends(get_db)) -> DataClient:
    return DataClient(db)


def get_repository(client: DataClient = Depends(get_data_client)) -> QuoteRepository:
    return QuoteRepository(client)


def get_workflow_engine(repository: QuoteRepository = Depends(get_repository)) -> QuoteWorkflowEngine:
    return QuoteWorkflowEngine(repository)


def require_permission(actor: Actor, resource: PermissionResource, action: PermissionAction) -> None:
    """
    Raises:
        HTTPException 403 si le rôle de l'acteur n'a pas le droit demandé
    """
    if not has_permission(actor.role, resource, action):
        logger.warning(f"⛔ {actor.id} ({actor.role}) refusé: {resource}.{action}")
        raise HTTPException(
            status_code=403,
            detail=f"Role '{actor.role}' is not allowed to {action[3:].lower()} {resource}",
        )


def http_error(exc: Exception) -> HTTPException:
    """Traduit une erreur métier / données en HTTPException."""
    if isinstance(exc, InvalidTransition):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotApproved):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, QuoteNotEditable):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, RecordNotFound):
        return HTTPException(status_code=404, detail=f"Not found in {exc.table}")
    if isinstance(exc, DataAccessError):
        logger.error(f"❌ Erreur d'accès aux données: {exc}")
        return HTTPException(status_code=500, detail="Data access error")
    logger.exception(f"❌ Erreur inattendue: {exc}")
    return HTTPException(status_code=500, detail=f"Erreur interne: {exc}")
