"""Tests for forward-only status transitions."""

from unittest.mock import patch

import pytest

from ascend_txn.errors import StatusTransitionError
from ascend_txn.models.transaction import TransactionStatus, TransactionType
from ascend_txn.state.transitions import (
    ALLOWED_TRANSITIONS,
    StatusTransitionHandler,
    cancel_transaction,
    complete_transaction,
    status_handler,
)

DRAFT = TransactionStatus.DRAFT
ACTIVE = TransactionStatus.ACTIVE
COMPLETED = TransactionStatus.COMPLETED
CANCELLED = TransactionStatus.CANCELLED


class TestValidateTransition:
    """Test the transition rules."""

    @pytest.mark.parametrize("current,target", [
        (DRAFT, ACTIVE),
        (DRAFT, CANCELLED),
        (ACTIVE, COMPLETED),
    ])
    def test_allowed(self, current, target):
        """Test forward transitions pass."""
        status_handler.validate_transition(current, target, TransactionType.LOAN)

    @pytest.mark.parametrize("current,target", [
        (ACTIVE, DRAFT),
        (COMPLETED, DRAFT),
        (CANCELLED, DRAFT),
        (COMPLETED, ACTIVE),
        (CANCELLED, ACTIVE),
        (ACTIVE, CANCELLED),
        (DRAFT, DRAFT),
    ])
    def test_rejected(self, current, target):
        """Test backward and sideways transitions raise."""
        with pytest.raises(StatusTransitionError) as exc_info:
            status_handler.validate_transition(current, target, TransactionType.LOAN, "txn-1")

        assert exc_info.value.current_status == current.value
        assert exc_info.value.attempted_status == target.value
        assert exc_info.value.context["transaction_id"] == "txn-1"

    def test_no_status_returns_to_draft(self):
        """Test draft is never a transition target."""
        assert all(DRAFT not in targets for targets in ALLOWED_TRANSITIONS.values())

    def test_draft_cannot_skip_active(self):
        """Test stateful types must pass through active."""
        with pytest.raises(StatusTransitionError):
            status_handler.validate_transition(DRAFT, COMPLETED, TransactionType.WITHDRAWAL)

    def test_instantaneous_types_complete_on_submit(self):
        """Test a handler configured with instantaneous types completes them directly."""
        handler = StatusTransitionHandler(instantaneous_types={TransactionType.TRANSFER})

        handler.validate_transition(DRAFT, COMPLETED, TransactionType.TRANSFER)
        assert handler.submission_status(TransactionType.TRANSFER) == COMPLETED
        assert handler.submission_status(TransactionType.LOAN) == ACTIVE


class TestApply:
    """Test applying transitions through the store."""

    def test_submit_transition_writes_extra_fields(self, store):
        """Test extra fields are written in the same update."""
        draft = store.create_draft(TransactionType.LOAN)

        updated = status_handler.apply(store, draft.id, ACTIVE, trigger="submit",
                                       extra_fields={"amount": 1500.0})

        assert updated.status == ACTIVE
        assert updated.amount == 1500.0
        assert store.version(draft.id) == 2

    def test_complete_sets_date(self, store, clock, today):
        """Test completion stamps date_completed."""
        draft = store.create_draft(TransactionType.ROLLOVER)
        status_handler.apply(store, draft.id, ACTIVE, trigger="submit")

        completed = complete_transaction(store, draft.id, clock=clock)

        assert completed.status == COMPLETED
        assert completed.date_completed == today

    def test_cancel_draft(self, store):
        """Test drafts can be cancelled and then stay cancelled."""
        draft = store.create_draft(TransactionType.WITHDRAWAL)

        cancelled = cancel_transaction(store, draft.id)

        assert cancelled.status == CANCELLED
        with pytest.raises(StatusTransitionError):
            status_handler.apply(store, draft.id, ACTIVE, trigger="submit")

    def test_rejected_transition_leaves_record(self, store):
        """Test a refused transition does not touch the store."""
        draft = store.create_draft(TransactionType.LOAN)

        with pytest.raises(StatusTransitionError):
            complete_transaction(store, draft.id)

        assert store.get(draft.id) == draft
        assert store.version(draft.id) == 1

    def test_transition_is_logged(self, store):
        """Test the audit log receives the transition."""
        draft = store.create_draft(TransactionType.LOAN)

        with patch("ascend_txn.state.transitions.log_status_transition") as mock_log:
            status_handler.apply(store, draft.id, ACTIVE, trigger="submit")

        kwargs = mock_log.call_args.kwargs
        assert kwargs["from_status"] == "draft"
        assert kwargs["to_status"] == "active"
        assert kwargs["trigger"] == "submit"
