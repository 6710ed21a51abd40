"""
Status transition handling for the transaction lifecycle.

Status only moves forward: draft → active → completed, or draft →
cancelled. Completion and cancellation are explicit external actions; the
application engine itself only performs the submit transition.
"""

from typing import Any, Optional

from ..errors import StatusTransitionError
from ..logging.config import get_state_logger, log_status_transition
from ..models.transaction import TransactionStatus, TransactionType
from ..persistence.transaction_store import TransactionStore
from ..utils.time import Clock, get_today

state_logger = get_state_logger(__name__)

ALLOWED_TRANSITIONS: dict[TransactionStatus, frozenset] = {
    TransactionStatus.DRAFT: frozenset({
        TransactionStatus.ACTIVE,
        TransactionStatus.COMPLETED,
        TransactionStatus.CANCELLED,
    }),
    TransactionStatus.ACTIVE: frozenset({TransactionStatus.COMPLETED}),
    TransactionStatus.COMPLETED: frozenset(),
    TransactionStatus.CANCELLED: frozenset(),
}

# Types that settle on submission; none of the catalogued types do today
INSTANTANEOUS_TYPES: frozenset = frozenset()


class StatusTransitionHandler:
    """Validates and applies status transitions through the store."""

    def __init__(self, instantaneous_types: Optional[frozenset] = None):
        self.logger = state_logger
        self.instantaneous_types = (
            INSTANTANEOUS_TYPES if instantaneous_types is None else frozenset(instantaneous_types)
        )

    def submission_status(self, transaction_type: TransactionType) -> TransactionStatus:
        """Status a transaction reaches when its application is submitted."""
        if transaction_type in self.instantaneous_types:
            return TransactionStatus.COMPLETED
        return TransactionStatus.ACTIVE

    def validate_transition(
        self,
        current: TransactionStatus,
        target: TransactionStatus,
        transaction_type: TransactionType,
        transaction_id: Optional[str] = None
    ) -> None:
        """
        Check a status change against the forward-only lifecycle.

        Raises:
            StatusTransitionError: if the change is not allowed
        """
        if target not in ALLOWED_TRANSITIONS[current]:
            raise StatusTransitionError(
                f"Invalid status transition from {current.value} to {target.value}",
                current_status=current.value,
                attempted_status=target.value,
                context={"transaction_id": transaction_id}
            )

        # Stateful types must pass through active before completing
        if (current == TransactionStatus.DRAFT
                and target == TransactionStatus.COMPLETED
                and transaction_type not in self.instantaneous_types):
            raise StatusTransitionError(
                f"{transaction_type.value} transactions cannot skip the active status",
                current_status=current.value,
                attempted_status=target.value,
                context={"transaction_id": transaction_id}
            )

    def transition_fields(
        self,
        target: TransactionStatus,
        clock: Optional[Clock] = None
    ) -> dict[str, Any]:
        """Fields written alongside a status change."""
        fields: dict[str, Any] = {"status": target}
        if target == TransactionStatus.COMPLETED:
            fields["date_completed"] = get_today(clock)
        return fields

    def apply(
        self,
        store: TransactionStore,
        transaction_id: str,
        target: TransactionStatus,
        trigger: str,
        extra_fields: Optional[dict[str, Any]] = None,
        expected_version: Optional[int] = None,
        clock: Optional[Clock] = None
    ):
        """
        Validate and persist a status change.

        Args:
            store: Transaction store
            transaction_id: Transaction to move
            target: New status
            trigger: What caused the change (submit, complete, cancel)
            extra_fields: Additional fields written in the same update
            expected_version: Store version the caller last saw
            clock: Optional clock for date_completed

        Returns:
            The updated transaction
        """
        transaction = store.get(transaction_id)
        target = TransactionStatus(target)
        self.validate_transition(transaction.status, target, transaction.type, transaction_id)

        fields = dict(extra_fields or {})
        fields.update(self.transition_fields(target, clock))
        updated = store.update(transaction_id, fields, expected_version=expected_version)

        log_status_transition(
            self.logger,
            transaction_id=transaction_id,
            from_status=transaction.status.value,
            to_status=target.value,
            trigger=trigger,
            context={
                "transaction_type": transaction.type.value,
                "amount": updated.amount,
                "impact_level": updated.retirement_impact.level.value,
            }
        )
        return updated


def complete_transaction(store: TransactionStore, transaction_id: str,
                         clock: Optional[Clock] = None):
    """External action: mark an active transaction as completed."""
    return status_handler.apply(store, transaction_id, TransactionStatus.COMPLETED,
                                trigger="complete", clock=clock)


def cancel_transaction(store: TransactionStore, transaction_id: str):
    """External action: cancel a draft."""
    return status_handler.apply(store, transaction_id, TransactionStatus.CANCELLED,
                                trigger="cancel")


# Global handler instance
status_handler = StatusTransitionHandler()
