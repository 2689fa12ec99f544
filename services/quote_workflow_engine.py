"""
services/quote_workflow_engine.py
Workflow de statut des devis - Machine à états déterministe

DRAFT -> PENDING_APPROVAL -> SENT | REJECTED, DRAFT -> SENT (premier export),
SENT -> SENT (ré-export, version +1), SENT -> ACCEPTED.

Chaque transition produit une révision (append-only). La persistance
applique d'abord le changement de statut puis ajoute la révision ; un
échec d'ajout de révision est journalisé mais n'annule PAS le changement
de statut (écriture best-effort, deux écritures sans transaction commune).
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, TYPE_CHECKING

from core.logging import log_quote_event
from core.security import Actor
from db.data_client import DataAccessError
from services.quote_calculator import DiscountMode, QuoteTotals, compute_totals

if TYPE_CHECKING:
    from services.quote_repository import QuoteRepository


logger = logging.getLogger(__name__)


class QuoteStatus(str, Enum):
    """Statuts du cycle de vie d'un devis"""
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class WorkflowEvent(str, Enum):
    """Événements déclenchant une transition"""
    SUBMIT_FOR_APPROVAL = "submit-for-approval"
    EXPORT = "export"
    APPROVE = "approve"
    REJECT = "reject"
    RE_EXPORT = "re-export"
    CLIENT_ACCEPTS = "client-accepts"


# (statut courant, événement) -> statut cible
TRANSITIONS = {
    (QuoteStatus.DRAFT, WorkflowEvent.SUBMIT_FOR_APPROVAL): QuoteStatus.PENDING_APPROVAL,
    (QuoteStatus.DRAFT, WorkflowEvent.EXPORT): QuoteStatus.SENT,
    (QuoteStatus.PENDING_APPROVAL, WorkflowEvent.APPROVE): QuoteStatus.SENT,
    (QuoteStatus.PENDING_APPROVAL, WorkflowEvent.REJECT): QuoteStatus.REJECTED,
    (QuoteStatus.SENT, WorkflowEvent.RE_EXPORT): QuoteStatus.SENT,
    (QuoteStatus.SENT, WorkflowEvent.CLIENT_ACCEPTS): QuoteStatus.ACCEPTED,
}

REVISION_CHANGES = {
    WorkflowEvent.SUBMIT_FOR_APPROVAL: "Approval requested - Status changed to PENDING_APPROVAL",
    WorkflowEvent.EXPORT: "Initial export - Status changed to SENT",
    WorkflowEvent.APPROVE: "Approved - Status changed to SENT",
    WorkflowEvent.REJECT: "Rejected - Status changed to REJECTED",
    WorkflowEvent.RE_EXPORT: "Re-exported",
    WorkflowEvent.CLIENT_ACCEPTS: "Accepted by client - Status changed to ACCEPTED",
}

# Le PDF final n'est disponible qu'après approbation ou export
PDF_BLOCKED_STATUSES = (QuoteStatus.DRAFT, QuoteStatus.PENDING_APPROVAL)


class QuoteWorkflowError(Exception):
    """Erreur métier du workflow de devis"""


class InvalidTransition(QuoteWorkflowError):
    """Événement non défini pour le statut courant"""

    def __init__(self, status: QuoteStatus, event: WorkflowEvent):
        self.status = QuoteStatus(status)
        self.event = WorkflowEvent(event)
        super().__init__(
            f"Cannot apply '{self.event.value}' to a quote in {self.status.value} status"
        )


class NotApproved(QuoteWorkflowError):
    """Artefact final demandé pour un devis non encore approuvé"""

    def __init__(self, status: QuoteStatus):
        self.status = QuoteStatus(status)
        super().__init__(
            f"Quote must be approved before exporting to PDF. Current status: {self.status.value}"
        )


class QuoteNotEditable(QuoteWorkflowError):
    """Modification d'un devis sorti de DRAFT"""

    def __init__(self, status: QuoteStatus):
        self.status = QuoteStatus(status)
        super().__init__(
            f"Only DRAFT quotes can be edited. Current status: {self.status.value}"
        )


@dataclass
class Quote:
    """Agrégat devis (vue workflow)"""
    id: str
    quote_number: str
    title: str
    status: QuoteStatus = QuoteStatus.DRAFT
    version: Optional[int] = 1
    client_id: Optional[str] = None
    discount_mode: DiscountMode = DiscountMode.LINE_ITEM
    overall_discount: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")
    is_approved: bool = False
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approval_notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class QuoteRevision:
    """Révision d'audit, jamais modifiée ni supprimée"""
    quote_id: str
    version: int
    status: QuoteStatus
    exported_by: Optional[str]
    exported_at: datetime
    changes: str
    notes: Optional[str] = None
    id: Optional[str] = None


def export_event_for(status: QuoteStatus) -> WorkflowEvent:
    """Premier export depuis DRAFT, ré-export ensuite."""
    if QuoteStatus(status) == QuoteStatus.SENT:
        return WorkflowEvent.RE_EXPORT
    return WorkflowEvent.EXPORT


def ensure_final_pdf_available(quote: Quote) -> None:
    """
    Raises:
        NotApproved: si le devis est encore DRAFT ou PENDING_APPROVAL
    """
    if QuoteStatus(quote.status) in PDF_BLOCKED_STATUSES:
        raise NotApproved(quote.status)


def transition(
    quote: Quote,
    event: WorkflowEvent,
    actor: Actor,
    notes: Optional[str] = None,
    totals: Optional[QuoteTotals] = None,
    now: Optional[datetime] = None,
) -> Tuple[Quote, QuoteRevision]:
    """
    Applique un événement au devis.

    Args:
        quote: Devis courant (non modifié)
        event: Événement du workflow
        actor: Acteur authentifié (attribution de la révision)
        notes: Texte libre (notes d'approbation / de rejet)
        totals: Totaux recalculés à figer sur le devis
        now: Horodatage (défaut: maintenant UTC)

    Returns:
        (devis mis à jour, révision à ajouter)

    Raises:
        InvalidTransition: si l'événement n'est pas défini pour le statut courant
    """
    current = QuoteStatus(quote.status)
    event = WorkflowEvent(event)
    target = TRANSITIONS.get((current, event))
    if target is None:
        raise InvalidTransition(current, event)

    now = now or datetime.now(timezone.utc)
    changes = {"status": target, "updated_at": now}

    if event == WorkflowEvent.EXPORT:
        changes["version"] = 1
    elif event == WorkflowEvent.RE_EXPORT:
        changes["version"] = (quote.version or 1) + 1
    elif event == WorkflowEvent.APPROVE:
        changes["version"] = quote.version or 1
        changes["is_approved"] = True
        changes["approved_by"] = actor.id
        changes["approved_at"] = now
        if notes:
            changes["approval_notes"] = notes
    elif event == WorkflowEvent.REJECT:
        changes["is_approved"] = False
        changes["approved_by"] = actor.id
        changes["approved_at"] = now
        if notes:
            changes["approval_notes"] = notes

    if totals is not None:
        changes["subtotal"] = totals.subtotal
        changes["discount"] = totals.discount_amount
        changes["tax"] = totals.tax
        changes["grand_total"] = totals.grand_total

    updated = replace(quote, **changes)

    revision = QuoteRevision(
        quote_id=quote.id,
        version=updated.version or 1,
        status=target,
        exported_by=actor.id,
        exported_at=now,
        changes=REVISION_CHANGES[event],
        notes=notes,
    )
    return updated, revision


class QuoteWorkflowEngine:
    """
    Workflow persistant : charge le devis, recalcule ses totaux, applique
    la transition, persiste le statut puis ajoute la révision.

    Pas de verrou ni de contrôle de version optimiste : deux transitions
    concurrentes sur le même devis peuvent se chevaucher.
    """

    def __init__(self, repository: "QuoteRepository"):
        self.repository = repository

    def apply(
        self,
        quote_id: str,
        event: WorkflowEvent,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> Tuple[Quote, QuoteRevision]:
        """
        Raises:
            RecordNotFound: devis inconnu
            InvalidTransition: événement refusé
            DataAccessError: échec de la mise à jour du statut
        """
        event = WorkflowEvent(event)
        quote = self.repository.get_quote(quote_id)
        items = self.repository.load_line_items(quote_id)
        totals = compute_totals(items, quote.discount_mode, quote.overall_discount, quote.tax_rate)

        try:
            updated, revision = transition(quote, event, actor, notes=notes, totals=totals)
        except InvalidTransition as e:
            log_quote_event(
                event.value,
                quote_id=quote_id,
                actor_id=actor.id,
                result="refused",
                from_status=quote.status.value,
                reason=str(e),
            )
            raise

        updated = self.repository.save_transition(updated)

        try:
            revision = self.repository.append_revision(revision)
        except DataAccessError as e:
            logger.error(f"❌ Révision non enregistrée pour le devis {quote_id} ({event.value}): {e}")
            log_quote_event(
                event.value,
                quote_id=quote_id,
                actor_id=actor.id,
                result="error",
                from_status=quote.status.value,
                to_status=updated.status.value,
                version=updated.version,
                reason=f"revision append failed: {e}",
            )

        log_quote_event(
            event.value,
            quote_id=quote_id,
            actor_id=actor.id,
            result="success",
            from_status=quote.status.value,
            to_status=updated.status.value,
            version=updated.version,
        )
        logger.info(
            f"✅ Devis {updated.quote_number}: {quote.status.value} -> {updated.status.value} "
            f"(v{updated.version}, {event.value})"
        )
        return updated, revision

    def export(self, quote_id: str, actor: Actor, notes: Optional[str] = None) -> Tuple[Quote, QuoteRevision]:
        """Export PDF : premier export (DRAFT -> SENT) ou ré-export (version +1)."""
        quote = self.repository.get_quote(quote_id)
        return self.apply(quote_id, export_event_for(quote.status), actor, notes=notes)
