"""
Application session: drives one transaction through its steps.

A session holds the working state of an open application (current step
index, accumulated payload, last validation failure). Nothing is persisted
until the final step is submitted. Read-only mode is derived from the stored
status on every access, so a transaction submitted elsewhere turns read-only
here too.
"""

import asyncio
import inspect
import math
from typing import Any, Awaitable, Mapping, Optional

from ..config.defaults import PlanRules
from ..errors import SubmissionError, TypeMismatchError
from ..impact.classifier import ImpactClassifier
from ..logging.config import get_state_logger, get_validation_logger, log_validation_decision
from ..models.payloads import StepPayload, as_number, payload_for
from ..models.transaction import (
    ENGINE_MUTABLE_FIELDS,
    IRREVERSIBLE_TYPES,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from ..persistence.transaction_store import TransactionStore
from ..steps.catalog import StepCatalog, StepDefinition
from ..steps.validators import ValidationIssue
from ..utils.time import Clock
from .models import (
    FINAL_STEP_VALIDATION_MESSAGE,
    STEP_VALIDATION_MESSAGE,
    SUCCESS_KINDS,
    AdvanceOutcome,
    AdvanceResult,
    ExitSignal,
    SubmissionResult,
    ValidationFailure,
    ViewState,
)
from .transitions import status_handler

state_logger = get_state_logger(__name__)
validation_logger = get_validation_logger(__name__)

# Acknowledgement flags and the labels recorded when they are accepted
LEGAL_CONFIRMATION_LABELS = (
    ("agreed_to_terms", "I agree to the loan terms and repayment schedule."),
    ("agreed_to_disclosures", "I have read the loan disclosures."),
    ("spousal_consent", "My spouse has consented to this transaction."),
    ("confirmation_accepted",
     "I confirm that I have reviewed all details and understand the terms of this transaction."),
)


class ApplicationSession:
    """Step engine for a single open transaction."""

    def __init__(
        self,
        store: TransactionStore,
        transaction: Transaction,
        steps: list[StepDefinition],
        classifier: ImpactClassifier,
        rules: PlanRules,
        read_only_override: Optional[bool] = None,
        initial_data: Optional[Mapping[str, Any]] = None,
        clock: Optional[Clock] = None
    ):
        if not steps:
            raise ValueError("A session needs at least one step")

        self.store = store
        self.transaction_id = transaction.id
        self.transaction_type = transaction.type
        self.steps = list(steps)
        self.classifier = classifier
        self.rules = rules
        self.read_only_override = read_only_override
        self.clock = clock
        self.logger = state_logger

        self.current_step_index = 0
        self.payload: StepPayload = payload_for(transaction.type, initial_data)
        self.validation_error: Optional[ValidationFailure] = None
        self._version = store.version(transaction.id)

    @classmethod
    def attach(
        cls,
        store: TransactionStore,
        catalog: StepCatalog,
        classifier: ImpactClassifier,
        transaction_id: str,
        expected_type: Any = None,
        read_only_override: Optional[bool] = None,
        initial_data: Optional[Mapping[str, Any]] = None,
        clock: Optional[Clock] = None
    ) -> "ApplicationSession":
        """
        Open a session on an existing transaction.

        Args:
            store: Transaction store
            catalog: Step catalog for the transaction's plan
            classifier: Impact classifier used at submission
            transaction_id: Transaction to attach to
            expected_type: Type the caller's route/context expects
            read_only_override: True forces read-only; False or None defers to status
            initial_data: Payload to start from
            clock: Optional clock for completion dates

        Raises:
            NotFoundError: if the transaction does not exist
            TypeMismatchError: if expected_type differs from the stored type
        """
        transaction = store.get(transaction_id)

        if expected_type is not None:
            parsed = TransactionType.parse(expected_type)
            if parsed != transaction.type:
                raise TypeMismatchError(
                    f"Transaction {transaction_id} is a {transaction.type.value}, not {expected_type}",
                    transaction_id=transaction_id,
                    expected_type=str(getattr(expected_type, "value", expected_type)),
                    actual_type=transaction.type.value
                )

        session = cls(
            store=store,
            transaction=transaction,
            steps=catalog.steps_for(transaction.type),
            classifier=classifier,
            rules=catalog.rules,
            read_only_override=read_only_override,
            initial_data=initial_data,
            clock=clock,
        )
        state_logger.info(
            "Application session attached",
            transaction_id=transaction_id,
            transaction_type=transaction.type.value,
            status=transaction.status.value,
            read_only=session.read_only,
            total_steps=session.total_steps
        )
        return session

    @property
    def transaction(self) -> Transaction:
        return self.store.get(self.transaction_id)

    @property
    def read_only(self) -> bool:
        """
        True unless the stored transaction is a draft.

        The override can force a draft read-only but never reopens a
        transaction that has left draft.
        """
        if self.read_only_override is True:
            return True
        return self.transaction.status != TransactionStatus.DRAFT

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def current_step(self) -> StepDefinition:
        return self.steps[self.current_step_index]

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index == self.total_steps - 1

    def view_state(self) -> ViewState:
        return ViewState(
            transaction=self.transaction,
            current_step_index=self.current_step_index,
            total_steps=self.total_steps,
            read_only=self.read_only,
            step=self.current_step,
            step_labels=tuple(step.label for step in self.steps),
            validation_error=self.validation_error,
        )

    def handle_data_change(self, partial: Optional[Mapping[str, Any]]) -> None:
        """Merge step-local data into the payload; ignored when read-only."""
        if self.read_only:
            self.logger.debug(
                "Ignoring data change on read-only transaction",
                transaction_id=self.transaction_id,
                fields=sorted(partial or {})
            )
            return
        self.payload = self.payload.merge(partial)

    def advance(self) -> AdvanceResult:
        """
        Move to the next step, validating first unless read-only.

        On the final step a successful validation submits the transaction.
        Async validators are resolved here when no event loop is running;
        inside a running loop use ``advance_async``.
        """
        if self.read_only:
            return self._navigate_forward()

        step = self.current_step
        try:
            result = self._call_validator(step)
            if inspect.isawaitable(result):
                result = self._resolve_sync(result)
        except Exception as e:
            return self._validator_crashed(step, e)

        return self._after_validation(step, result)

    async def advance_async(self) -> AdvanceResult:
        """Async variant of ``advance`` that awaits async validators."""
        if self.read_only:
            return self._navigate_forward()

        step = self.current_step
        try:
            result = self._call_validator(step)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            return self._validator_crashed(step, e)

        return self._after_validation(step, result)

    def back(self) -> int:
        """Step back (floored at 0) and clear any validation error."""
        self.current_step_index = max(0, self.current_step_index - 1)
        self.validation_error = None
        return self.current_step_index

    def submit(self) -> Optional[SubmissionResult]:
        """
        Terminal advance from the final step.

        Returns:
            The submission result, or None if final-step validation failed
            (the failure is exposed in the view state)

        Raises:
            SubmissionError: if read-only or not on the final step
        """
        if self.read_only:
            raise SubmissionError(
                f"Transaction {self.transaction_id} is read-only",
                transaction_id=self.transaction_id,
                step_index=self.current_step_index
            )
        if not self.is_last_step:
            raise SubmissionError(
                f"Transaction {self.transaction_id} can only be submitted from the final step",
                transaction_id=self.transaction_id,
                step_index=self.current_step_index
            )
        return self.advance().submission

    def save_and_exit(self) -> ExitSignal:
        """Leave the application. The draft is already stored; nothing is written."""
        self.logger.info(
            "Application saved and exited",
            transaction_id=self.transaction_id,
            step_index=self.current_step_index
        )
        return ExitSignal(transaction_id=self.transaction_id)

    def restart(self) -> None:
        """Discard the working payload and return to the first step."""
        self.payload = payload_for(self.transaction_type)
        self.current_step_index = 0
        self.validation_error = None

    def _navigate_forward(self) -> AdvanceResult:
        if self.is_last_step:
            return AdvanceResult(outcome=AdvanceOutcome.NO_OP, step_index=self.current_step_index)
        self.current_step_index += 1
        return AdvanceResult(outcome=AdvanceOutcome.ADVANCED, step_index=self.current_step_index)

    def _call_validator(self, step: StepDefinition) -> Any:
        if step.validate is None:
            return True
        return step.validate(self.payload)

    def _resolve_sync(self, awaitable: Awaitable) -> Any:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(_await(awaitable))

        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise RuntimeError("Async validator cannot be resolved inside a running event loop; use advance_async")

    def _validator_crashed(self, step: StepDefinition, error: Exception) -> AdvanceResult:
        self.logger.error(
            "Step validator raised, treating as validation failure",
            transaction_id=self.transaction_id,
            step_id=step.step_id,
            error=str(error),
            error_type=type(error).__name__
        )
        return self._block(step, ())

    def _after_validation(self, step: StepDefinition, result: Any) -> AdvanceResult:
        passed, issues = _normalize_result(result)
        log_validation_decision(
            validation_logger,
            step_id=step.step_id,
            passed=passed,
            transaction_id=self.transaction_id,
            reason="validator passed" if passed else f"{len(issues)} issue(s)",
            context={"issues": [issue.field for issue in issues]} if issues else None
        )

        if not passed:
            return self._block(step, issues)

        self.validation_error = None
        if not self.is_last_step:
            self.current_step_index += 1
            return AdvanceResult(outcome=AdvanceOutcome.ADVANCED, step_index=self.current_step_index)

        amount = self._submission_amount()
        if amount is None or amount < 0:
            return self._block(step, (ValidationIssue(
                field="amount",
                message="Enter a non-negative amount",
                value=self.payload.get("amount"),
            ),))

        submission = self._submit_validated(amount)
        return AdvanceResult(
            outcome=AdvanceOutcome.SUBMITTED,
            step_index=self.current_step_index,
            submission=submission,
        )

    def _block(self, step: StepDefinition, issues: tuple) -> AdvanceResult:
        message = FINAL_STEP_VALIDATION_MESSAGE if self.is_last_step else STEP_VALIDATION_MESSAGE
        self.validation_error = ValidationFailure(step_id=step.step_id, message=message, issues=tuple(issues))
        return AdvanceResult(
            outcome=AdvanceOutcome.BLOCKED,
            step_index=self.current_step_index,
            validation_error=self.validation_error,
        )

    def _submission_amount(self) -> Optional[float]:
        amount = self.payload.submission_amount()
        if amount is None:
            amount = self.transaction.amount
        return amount if math.isfinite(amount) else None

    def _submit_validated(self, amount: float) -> SubmissionResult:
        transaction = self.transaction

        fields: dict[str, Any] = {
            "amount": amount,
            "retirement_impact": self.classifier.classify(transaction.type, amount),
        }
        fields.update(self._derived_fields(transaction.type, amount))

        illegal = set(fields) - ENGINE_MUTABLE_FIELDS
        if illegal:
            raise SubmissionError(
                f"Submission tried to write non-whitelisted fields: {sorted(illegal)}",
                transaction_id=self.transaction_id
            )

        updated = status_handler.apply(
            self.store,
            self.transaction_id,
            status_handler.submission_status(transaction.type),
            trigger="submit",
            extra_fields=fields,
            expected_version=self._version,
            clock=self.clock,
        )
        self._version = self.store.version(self.transaction_id)

        return SubmissionResult(
            success_kind=SUCCESS_KINDS[transaction.type],
            amount=amount,
            transaction=updated,
        )

    def _derived_fields(self, transaction_type: TransactionType, amount: float) -> dict[str, Any]:
        """Breakdown, irreversibility and acknowledgements recorded at submission."""
        fields: dict[str, Any] = {
            "is_irreversible": transaction_type in IRREVERSIBLE_TYPES,
            "legal_confirmations": tuple(
                label for name, label in LEGAL_CONFIRMATION_LABELS
                if self.payload.get(name) is True
            ),
        }

        if transaction_type == TransactionType.LOAN:
            fee = round(amount * self.rules.loan.origination_fee_pct, 2)
            fields.update(
                gross_amount=amount,
                fees=fee,
                tax_withholding=0.0,
                net_amount=round(amount - fee, 2),
            )
        elif transaction_type in (TransactionType.WITHDRAWAL, TransactionType.DISTRIBUTION):
            rules = (self.rules.withdrawal if transaction_type == TransactionType.WITHDRAWAL
                     else self.rules.distribution)
            federal = as_number(self.payload.get("federal_tax_rate"))
            state = as_number(self.payload.get("state_tax_rate"))
            federal = rules.default_federal_rate if federal is None else federal
            state = rules.default_state_rate if state is None else state
            withholding = round(amount * (federal + state) / 100.0, 2)
            fields.update(
                gross_amount=amount,
                fees=0.0,
                tax_withholding=withholding,
                net_amount=round(amount - withholding, 2),
            )

        return fields


async def _await(awaitable: Awaitable) -> Any:
    return await awaitable


def _normalize_result(result: Any) -> tuple[bool, tuple]:
    """Map a validator's return value to (passed, issues); unknown shapes fail closed."""
    if isinstance(result, bool):
        return result, ()
    if isinstance(result, (list, tuple)):
        return len(result) == 0, tuple(result)
    return False, ()
