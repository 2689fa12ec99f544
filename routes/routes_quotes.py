"""
routes/routes_quotes.py
API devis : aperçu des totaux, CRUD, workflow de statut et PDF
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response

from core.security import Actor, get_current_actor
from db.data_client import DataAccessError
from models.data_models import (
    ApprovalRequest,
    CalculateRequest,
    QuoteCreate,
    QuoteOut,
    QuoteTotalsOut,
    QuoteUpdate,
    RevisionOut,
    TransitionRequest,
    TransitionResponse,
)
from routes.dependencies import get_repository, get_workflow_engine, http_error, require_permission
from services.pdf_renderer import render_quote_pdf
from services.pdf_settings import pdf_template_for
from services.quote_calculator import LineItem, compute_totals
from services.quote_repository import QuoteRepository
from services.quote_workflow_engine import (
    Quote,
    QuoteStatus,
    QuoteWorkflowEngine,
    QuoteWorkflowError,
    WorkflowEvent,
    ensure_final_pdf_available,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/quotes",
    tags=["Quotes"],
    responses={404: {"description": "Quote not found"}},
)

# Champs API -> colonnes stockées modifiables
QUOTE_UPDATE_COLUMNS = {
    "title": "title",
    "client_id": "clientid",
    "discount_mode": "discountmode",
    "overall_discount": "overalldiscount",
    "tax_rate": "taxrate",
}


def _item_records(items) -> List[Dict[str, Any]]:
    return [
        {
            "productid": item.product_id,
            "description": item.description,
            "quantity": item.quantity,
            "rate": item.rate,
            "discount": item.discount,
            "order": item.order if item.order else position,
            "dimensions": item.dimensions,
        }
        for position, item in enumerate(items)
    ]


def _quote_out(repository: QuoteRepository, quote: Quote) -> QuoteOut:
    return QuoteOut.from_domain(quote, repository.get_items(quote.id))


def _pdf_response(repository: QuoteRepository, quote: Quote) -> Response:
    quote_data = _quote_out(repository, quote).model_dump(mode="json")
    if quote.client_id:
        clients = repository.client.find("clients", {"id": quote.client_id})
        if clients:
            quote_data["client"] = clients[0]

    pdf = render_quote_pdf(quote_data, pdf_template_for(repository.client))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="quote-{quote.quote_number}.pdf"'},
    )


def _apply(
    engine: QuoteWorkflowEngine,
    repository: QuoteRepository,
    quote_id: str,
    event: WorkflowEvent,
    actor: Actor,
    notes: Optional[str],
    message: str,
) -> TransitionResponse:
    try:
        quote, revision = engine.apply(quote_id, event, actor, notes=notes)
        return TransitionResponse(
            message=message,
            quote=_quote_out(repository, quote),
            revision=RevisionOut.from_domain(revision),
        )
    except (QuoteWorkflowError, DataAccessError) as e:
        raise http_error(e)


# === Aperçu ===

@router.post("/calculate", response_model=QuoteTotalsOut)
async def calculate_totals(request: CalculateRequest, actor: Actor = Depends(get_current_actor)):
    """Totaux en direct pour l'éditeur (aucune écriture)."""
    require_permission(actor, "quotes", "canRead")
    items = [
        LineItem(
            quantity=item.quantity,
            rate=item.rate,
            discount_percent=item.discount,
            category_id=item.category_id,
            category_name=item.category_name,
        )
        for item in request.items
    ]
    totals = compute_totals(items, request.discount_mode, request.overall_discount, request.tax_rate)
    return QuoteTotalsOut.from_totals(totals)


# === CRUD ===

@router.post("", response_model=QuoteOut, status_code=201)
def create_quote(
    request: QuoteCreate,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
):
    require_permission(actor, "quotes", "canCreate")
    try:
        quote = repository.create_quote(
            title=request.title,
            items=_item_records(request.items),
            discount_mode=request.discount_mode,
            overall_discount=request.overall_discount,
            tax_rate=request.tax_rate,
            client_id=request.client_id,
            created_by=actor.id,
        )
        return _quote_out(repository, quote)
    except (QuoteWorkflowError, DataAccessError) as e:
        raise http_error(e)


@router.get("", response_model=List[QuoteOut])
def list_quotes(
    status: Optional[QuoteStatus] = None,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
):
    require_permission(actor, "quotes", "canRead")
    try:
        quotes = repository.list_quotes(status)
    except DataAccessError as e:
        raise http_error(e)
    return [QuoteOut.from_domain(q) for q in quotes]


@router.get("/{quote_id}", response_model=QuoteOut)
def get_quote(
    quote_id: str,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
):
    require_permission(actor, "quotes", "canRead")
    try:
        return _quote_out(repository, repository.get_quote(quote_id))
    except DataAccessError as e:
        raise http_error(e)


@router.put("/{quote_id}", response_model=QuoteOut)
def update_quote(
    quote_id: str,
    request: QuoteUpdate,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
):
    """Modification d'un devis DRAFT (409 sinon)."""
    require_permission(actor, "quotes", "canEdit")
    data = request.model_dump(exclude_unset=True)
    fields = {column: data[name] for name, column in QUOTE_UPDATE_COLUMNS.items() if name in data}
    items = _item_records(request.items) if request.items is not None else None

    try:
        quote = repository.update_quote(quote_id, fields, items)
        return _quote_out(repository, quote)
    except (QuoteWorkflowError, DataAccessError) as e:
        raise http_error(e)


@router.delete("/{quote_id}", status_code=204)
def delete_quote(
    quote_id: str,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
):
    require_permission(actor, "quotes", "canDelete")
    try:
        repository.delete_quote(quote_id)
    except DataAccessError as e:
        raise http_error(e)
    return Response(status_code=204)


# === Workflow ===

@router.post("/{quote_id}/request-approval", response_model=TransitionResponse)
def request_approval(
    quote_id: str,
    request: Optional[TransitionRequest] = None,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
    engine: QuoteWorkflowEngine = Depends(get_workflow_engine),
):
    require_permission(actor, "quotes", "canEdit")
    notes = request.notes if request else None
    return _apply(
        engine, repository, quote_id, WorkflowEvent.SUBMIT_FOR_APPROVAL, actor, notes,
        "Approval requested",
    )


@router.post("/{quote_id}/approve", response_model=TransitionResponse)
def approve_quote(
    quote_id: str,
    request: ApprovalRequest,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
    engine: QuoteWorkflowEngine = Depends(get_workflow_engine),
):
    """Approbation ou rejet d'un devis PENDING_APPROVAL."""
    require_permission(actor, "quotes", "canApprove")
    if request.action == "approve":
        event, message = WorkflowEvent.APPROVE, "Quote approved successfully"
    else:
        event, message = WorkflowEvent.REJECT, "Quote rejected"
    return _apply(engine, repository, quote_id, event, actor, request.notes, message)


@router.post("/{quote_id}/accept", response_model=TransitionResponse)
def accept_quote(
    quote_id: str,
    request: Optional[TransitionRequest] = None,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
    engine: QuoteWorkflowEngine = Depends(get_workflow_engine),
):
    require_permission(actor, "quotes", "canApprove")
    notes = request.notes if request else None
    return _apply(
        engine, repository, quote_id, WorkflowEvent.CLIENT_ACCEPTS, actor, notes,
        "Quote accepted by client",
    )


@router.post("/{quote_id}/export")
def export_quote(
    quote_id: str,
    request: Optional[TransitionRequest] = None,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
    engine: QuoteWorkflowEngine = Depends(get_workflow_engine),
):
    """Export PDF : DRAFT -> SENT (v1) ou ré-export SENT (version +1)."""
    require_permission(actor, "quotes", "canExport")
    try:
        quote, _ = engine.export(quote_id, actor, notes=request.notes if request else None)
        return _pdf_response(repository, quote)
    except (QuoteWorkflowError, DataAccessError) as e:
        raise http_error(e)


@router.get("/{quote_id}/pdf")
def download_pdf(
    quote_id: str,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
):
    """PDF final, disponible une fois le devis approuvé ou exporté."""
    require_permission(actor, "quotes", "canRead")
    try:
        quote = repository.get_quote(quote_id)
        ensure_final_pdf_available(quote)
        return _pdf_response(repository, quote)
    except (QuoteWorkflowError, DataAccessError) as e:
        raise http_error(e)


@router.get("/{quote_id}/revisions", response_model=List[RevisionOut])
def list_revisions(
    quote_id: str,
    actor: Actor = Depends(get_current_actor),
    repository: QuoteRepository = Depends(get_repository),
):
    require_permission(actor, "quotes", "canRead")
    try:
        repository.get_quote(quote_id)
        revisions = repository.list_revisions(quote_id)
    except DataAccessError as e:
        raise http_error(e)
    return [RevisionOut.from_domain(r) for r in revisions]
