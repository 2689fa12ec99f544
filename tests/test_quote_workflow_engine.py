"""
tests/test_quote_workflow_engine.py
Tests de la machine à états des devis (transitions pures et moteur persistant)
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.security import Actor
from db.data_client import DataAccessError, RecordNotFound
from services.quote_calculator import DiscountMode, LineItem
from services.quote_workflow_engine import (
    TRANSITIONS,
    InvalidTransition,
    NotApproved,
    Quote,
    QuoteStatus,
    QuoteWorkflowEngine,
    WorkflowEvent,
    ensure_final_pdf_available,
    export_event_for,
    transition,
)

ACTOR = Actor(id="user-42", name="Priya", role="Designer")
NOW = datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)


def make_quote(status=QuoteStatus.DRAFT, version=1, **kwargs) -> Quote:
    return Quote(id="q-1", quote_number="QT-202405-0001", title="Living room", status=status, version=version, **kwargs)


# === Transitions pures ===

@pytest.mark.parametrize("status,event,target", [
    (QuoteStatus.DRAFT, WorkflowEvent.SUBMIT_FOR_APPROVAL, QuoteStatus.PENDING_APPROVAL),
    (QuoteStatus.DRAFT, WorkflowEvent.EXPORT, QuoteStatus.SENT),
    (QuoteStatus.PENDING_APPROVAL, WorkflowEvent.APPROVE, QuoteStatus.SENT),
    (QuoteStatus.PENDING_APPROVAL, WorkflowEvent.REJECT, QuoteStatus.REJECTED),
    (QuoteStatus.SENT, WorkflowEvent.RE_EXPORT, QuoteStatus.SENT),
    (QuoteStatus.SENT, WorkflowEvent.CLIENT_ACCEPTS, QuoteStatus.ACCEPTED),
])
def test_defined_edges(status, event, target):
    updated, revision = transition(make_quote(status), event, ACTOR, now=NOW)

    assert updated.status == target
    assert revision.status == target
    assert revision.quote_id == "q-1"
    assert revision.exported_by == "user-42"
    assert revision.exported_at == NOW


def test_every_undefined_edge_is_refused():
    for status in QuoteStatus:
        for event in WorkflowEvent:
            if (status, event) in TRANSITIONS:
                continue
            with pytest.raises(InvalidTransition):
                transition(make_quote(status), event, ACTOR)


def test_submit_from_sent_is_refused():
    with pytest.raises(InvalidTransition) as exc_info:
        transition(make_quote(QuoteStatus.SENT), WorkflowEvent.SUBMIT_FOR_APPROVAL, ACTOR)

    assert exc_info.value.status == QuoteStatus.SENT
    assert exc_info.value.event == WorkflowEvent.SUBMIT_FOR_APPROVAL
    assert "SENT" in str(exc_info.value)


def test_terminal_states_have_no_exit():
    for status in (QuoteStatus.ACCEPTED, QuoteStatus.REJECTED):
        assert not [edge for edge in TRANSITIONS if edge[0] == status]


def test_transition_does_not_mutate_input():
    quote = make_quote()
    transition(quote, WorkflowEvent.EXPORT, ACTOR)
    assert quote.status == QuoteStatus.DRAFT


def test_export_sets_version_one():
    updated, revision = transition(make_quote(version=None), WorkflowEvent.EXPORT, ACTOR)

    assert updated.version == 1
    assert revision.version == 1
    assert revision.changes == "Initial export - Status changed to SENT"


def test_re_export_increments_version():
    updated, revision = transition(make_quote(QuoteStatus.SENT, version=3), WorkflowEvent.RE_EXPORT, ACTOR)

    assert updated.version == 4
    assert revision.version == 4
    assert revision.changes == "Re-exported"


def test_approve_sets_version_and_approval_fields():
    quote = make_quote(QuoteStatus.PENDING_APPROVAL, version=None)
    updated, revision = transition(quote, WorkflowEvent.APPROVE, ACTOR, notes="Looks good", now=NOW)

    assert updated.version == 1
    assert updated.is_approved is True
    assert updated.approved_by == "user-42"
    assert updated.approved_at == NOW
    assert updated.approval_notes == "Looks good"
    assert revision.notes == "Looks good"


def test_approve_keeps_existing_version():
    updated, _ = transition(make_quote(QuoteStatus.PENDING_APPROVAL, version=2), WorkflowEvent.APPROVE, ACTOR)
    assert updated.version == 2


def test_reject_records_notes():
    quote = make_quote(QuoteStatus.PENDING_APPROVAL)
    updated, revision = transition(quote, WorkflowEvent.REJECT, ACTOR, notes="Too expensive", now=NOW)

    assert updated.status == QuoteStatus.REJECTED
    assert updated.is_approved is False
    assert updated.approved_by == "user-42"
    assert updated.approval_notes == "Too expensive"
    assert revision.changes == "Rejected - Status changed to REJECTED"


def test_client_accepts_only_logs_revision():
    quote = make_quote(QuoteStatus.SENT, version=2)
    updated, revision = transition(quote, WorkflowEvent.CLIENT_ACCEPTS, ACTOR)

    assert updated.status == QuoteStatus.ACCEPTED
    assert updated.version == 2
    assert updated.is_approved == quote.is_approved
    assert revision.version == 2


def test_event_accepts_text_value():
    updated, _ = transition(make_quote(), "submit-for-approval", ACTOR)
    assert updated.status == QuoteStatus.PENDING_APPROVAL


def test_export_event_for():
    assert export_event_for(QuoteStatus.DRAFT) == WorkflowEvent.EXPORT
    assert export_event_for(QuoteStatus.SENT) == WorkflowEvent.RE_EXPORT

    event = export_event_for(QuoteStatus.ACCEPTED)
    with pytest.raises(InvalidTransition):
        transition(make_quote(QuoteStatus.ACCEPTED), event, ACTOR)


@pytest.mark.parametrize("status", [QuoteStatus.DRAFT, QuoteStatus.PENDING_APPROVAL])
def test_final_pdf_blocked_before_approval(status):
    with pytest.raises(NotApproved) as exc_info:
        ensure_final_pdf_available(make_quote(status))
    assert status.value in str(exc_info.value)


@pytest.mark.parametrize("status", [QuoteStatus.SENT, QuoteStatus.ACCEPTED, QuoteStatus.REJECTED])
def test_final_pdf_available_after_approval(status):
    ensure_final_pdf_available(make_quote(status))


# === Moteur persistant ===

class FakeRepository:
    """Repository en mémoire ; peut simuler l'échec d'écriture des révisions."""

    def __init__(self, quote: Quote, items=None, fail_revisions: bool = False):
        self.quotes = {quote.id: quote}
        self.items = items or []
        self.revisions = []
        self.fail_revisions = fail_revisions

    def get_quote(self, quote_id):
        if quote_id not in self.quotes:
            raise RecordNotFound("quotes", {"id": quote_id})
        return self.quotes[quote_id]

    def load_line_items(self, quote_id):
        return list(self.items)

    def save_transition(self, quote):
        self.quotes[quote.id] = quote
        return quote

    def append_revision(self, revision):
        if self.fail_revisions:
            raise DataAccessError("revision table unavailable")
        revision = replace(revision, id=f"rev-{len(self.revisions) + 1}")
        self.revisions.append(revision)
        return revision


def test_engine_applies_and_records_revision():
    repository = FakeRepository(make_quote())
    engine = QuoteWorkflowEngine(repository)

    updated, revision = engine.apply("q-1", WorkflowEvent.SUBMIT_FOR_APPROVAL, ACTOR)

    assert updated.status == QuoteStatus.PENDING_APPROVAL
    assert repository.quotes["q-1"].status == QuoteStatus.PENDING_APPROVAL
    assert revision.id == "rev-1"
    assert len(repository.revisions) == 1


def test_engine_freezes_recomputed_totals():
    quote = make_quote(discount_mode=DiscountMode.OVERALL, overall_discount=Decimal("10"), tax_rate=Decimal("18"))
    items = [
        LineItem(quantity=2, rate=100, category_id="A"),
        LineItem(quantity=1, rate=50, discount_percent=10, category_id="B"),
    ]
    engine = QuoteWorkflowEngine(FakeRepository(quote, items))

    updated, _ = engine.apply("q-1", WorkflowEvent.EXPORT, ACTOR)

    assert updated.subtotal == Decimal("245.00")
    assert updated.discount == Decimal("24.50")
    assert updated.tax == Decimal("39.69")
    assert updated.grand_total == Decimal("260.19")


def test_engine_refusal_leaves_quote_untouched():
    repository = FakeRepository(make_quote(QuoteStatus.SENT))
    engine = QuoteWorkflowEngine(repository)

    with pytest.raises(InvalidTransition):
        engine.apply("q-1", WorkflowEvent.SUBMIT_FOR_APPROVAL, ACTOR)

    assert repository.quotes["q-1"].status == QuoteStatus.SENT
    assert repository.revisions == []


def test_revision_failure_does_not_roll_back_status():
    repository = FakeRepository(make_quote(QuoteStatus.PENDING_APPROVAL), fail_revisions=True)
    engine = QuoteWorkflowEngine(repository)

    updated, revision = engine.apply("q-1", WorkflowEvent.APPROVE, ACTOR)

    assert updated.status == QuoteStatus.SENT
    assert repository.quotes["q-1"].status == QuoteStatus.SENT
    assert revision.id is None
    assert repository.revisions == []


def test_engine_unknown_quote():
    engine = QuoteWorkflowEngine(FakeRepository(make_quote()))
    with pytest.raises(RecordNotFound):
        engine.apply("missing", WorkflowEvent.EXPORT, ACTOR)


def test_export_then_re_export():
    repository = FakeRepository(make_quote())
    engine = QuoteWorkflowEngine(repository)

    first, first_revision = engine.export("q-1", ACTOR)
    second, second_revision = engine.export("q-1", ACTOR)

    assert (first.status, first.version) == (QuoteStatus.SENT, 1)
    assert (second.status, second.version) == (QuoteStatus.SENT, 2)
    assert first_revision.changes == "Initial export - Status changed to SENT"
    assert second_revision.changes == "Re-exported"
