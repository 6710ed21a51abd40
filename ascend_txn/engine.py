"""
Transaction application service.

The in-process contract the presentation layer talks to. Transactions are
addressed by id; the service owns one ApplicationSession per open
application and builds each session's step catalog from the plan rules and
the participant's account snapshot.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

import structlog

from .config.loader import ConfigLoader
from .data.account import AccountProvider, AccountSnapshot, StaticAccountProvider
from .errors import NotFoundError, UnknownTransactionTypeError
from .impact.classifier import ImpactClassifier
from .models.transaction import Transaction, TransactionType
from .persistence.transaction_store import TransactionStore
from .reporting.summary import ActivitySummary, summarize_activity
from .state.models import AdvanceResult, ExitSignal, SubmissionResult, ViewState
from .state.session import ApplicationSession
from .state.transitions import cancel_transaction, complete_transaction
from .steps.catalog import StepCatalog
from .utils.time import Clock, get_today

logger = structlog.get_logger(__name__)

# Route segment meaning "no transaction yet"
NEW_TRANSACTION_ID = "start"


@dataclass(frozen=True)
class AttachResult:
    """
    Outcome of create_or_attach.

    redirect=True means a draft was just created and the caller must
    re-invoke with transaction_id before rendering.
    """
    transaction_id: str
    redirect: bool


class TransactionApplicationService:
    """
    Coordinator for multi-step transaction applications.

    Flow: create_or_attach(type) → redirect with new id → create_or_attach
    (type, id) → submit_step_data / advance / back → final advance submits.
    """

    def __init__(
        self,
        store: TransactionStore,
        config_loader: Optional[ConfigLoader] = None,
        account_provider: Optional[AccountProvider] = None,
        classifier: Optional[ImpactClassifier] = None,
        clock: Optional[Clock] = None
    ) -> None:
        self.logger = logger
        self.store = store
        self.config_loader = config_loader or ConfigLoader.create()
        self.account_provider = account_provider or StaticAccountProvider(
            AccountSnapshot(vested_balance=0.0)
        )
        self.classifier = classifier
        self.clock = clock

        # Open applications by transaction id
        self.sessions: dict[str, ApplicationSession] = {}

        self.logger.info("Transaction application service initialized")

    def create_or_attach(
        self,
        transaction_type: Any,
        transaction_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        read_only_override: Optional[bool] = None
    ) -> AttachResult:
        """
        Create a draft or open an application on an existing transaction.

        Raises:
            UnknownTransactionTypeError: creating a draft of an unsupported type
            NotFoundError: transaction_id is unknown
            TypeMismatchError: transaction_type differs from the stored type
        """
        if not transaction_id or transaction_id == NEW_TRANSACTION_ID:
            parsed = TransactionType.parse(transaction_type)
            if parsed is None:
                raise UnknownTransactionTypeError(
                    f"Unsupported transaction type: {transaction_type}",
                    value=str(transaction_type)
                )
            draft = self.store.create_draft(parsed, plan_id=plan_id)
            return AttachResult(transaction_id=draft.id, redirect=True)

        transaction = self.store.get(transaction_id)
        session = ApplicationSession.attach(
            self.store,
            self.catalog_for(transaction.plan_id),
            self.classifier_for(transaction.plan_id),
            transaction_id,
            expected_type=transaction_type,
            read_only_override=read_only_override,
            clock=self.clock,
        )
        self.sessions[transaction_id] = session
        return AttachResult(transaction_id=transaction_id, redirect=False)

    def catalog_for(self, plan_id: Optional[str]) -> StepCatalog:
        """Step catalog bound to a plan's rules and current account balances."""
        return StepCatalog(
            rules=self.config_loader.rules_for(plan_id),
            account=self.account_provider.snapshot(plan_id),
        )

    def classifier_for(self, plan_id: Optional[str]) -> ImpactClassifier:
        if self.classifier is not None:
            return self.classifier
        return ImpactClassifier(self.config_loader.rules_for(plan_id).impact)

    def session(self, transaction_id: str) -> ApplicationSession:
        """
        Open session for a transaction.

        Raises:
            NotFoundError: if no application is open for the id
        """
        session = self.sessions.get(transaction_id)
        if session is None:
            raise NotFoundError(
                f"No open application for transaction {transaction_id}",
                transaction_id=transaction_id
            )
        return session

    def get_view_state(self, transaction_id: str) -> ViewState:
        return self.session(transaction_id).view_state()

    def submit_step_data(self, transaction_id: str, partial: dict[str, Any]) -> None:
        self.session(transaction_id).handle_data_change(partial)

    def advance(self, transaction_id: str) -> AdvanceResult:
        return self.session(transaction_id).advance()

    async def advance_async(self, transaction_id: str) -> AdvanceResult:
        return await self.session(transaction_id).advance_async()

    def back(self, transaction_id: str) -> int:
        return self.session(transaction_id).back()

    def submit(self, transaction_id: str) -> Optional[SubmissionResult]:
        """Terminal advance; None when final-step validation fails."""
        return self.session(transaction_id).submit()

    def save_and_exit(self, transaction_id: str) -> ExitSignal:
        """Leave the application; the draft stays resumable by re-attaching."""
        signal = self.session(transaction_id).save_and_exit()
        self.close(transaction_id)
        return signal

    def close(self, transaction_id: str) -> bool:
        """Drop the in-memory session. Returns False if none was open."""
        return self.sessions.pop(transaction_id, None) is not None

    def complete(self, transaction_id: str) -> Transaction:
        """Mark an active transaction completed."""
        return complete_transaction(self.store, transaction_id, clock=self.clock)

    def cancel(self, transaction_id: str) -> Transaction:
        """Cancel a draft; any open session becomes read-only."""
        return cancel_transaction(self.store, transaction_id)

    def list_transactions(self, plan_id: Optional[str] = None) -> list[Transaction]:
        return self.store.list_by_plan(plan_id)

    def activity_summary(
        self,
        reference_date: Union[date, str, None] = None,
        plan_id: Optional[str] = None
    ) -> ActivitySummary:
        return summarize_activity(
            self.store.list(),
            reference_date or get_today(self.clock),
            plan_id=plan_id,
        )
