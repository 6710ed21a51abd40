"""
Application engine data models.

Immutable results handed back to the presentation layer: the view state of
a session, step validation failures, advance outcomes and submission
results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..models.transaction import Transaction, TransactionType
from ..steps.catalog import StepDefinition
from ..steps.validators import ValidationIssue

STEP_VALIDATION_MESSAGE = "Please complete the required information before continuing."
FINAL_STEP_VALIDATION_MESSAGE = "Please confirm the terms to submit."


class SuccessKind(str, Enum):
    """Success screen variants shown after submission."""
    LOAN = "Loan"
    WITHDRAWAL = "Withdrawal"
    TRANSFER = "Transfer"
    ROLLOVER = "Rollover"


SUCCESS_KINDS: dict[TransactionType, SuccessKind] = {
    TransactionType.LOAN: SuccessKind.LOAN,
    TransactionType.WITHDRAWAL: SuccessKind.WITHDRAWAL,
    TransactionType.DISTRIBUTION: SuccessKind.WITHDRAWAL,
    TransactionType.ROLLOVER: SuccessKind.ROLLOVER,
    TransactionType.TRANSFER: SuccessKind.TRANSFER,
    TransactionType.REBALANCE: SuccessKind.TRANSFER,
}


class AdvanceOutcome(str, Enum):
    """What an advance request did."""
    ADVANCED = "advanced"          # moved to the next step
    BLOCKED = "blocked"            # validation failed, stayed put
    NO_OP = "no_op"                # read-only and already on the last step
    SUBMITTED = "submitted"        # final step validated and submitted


@dataclass(frozen=True)
class ValidationFailure:
    """Recoverable, step-local validation error shown next to the action button."""
    step_id: str
    message: str
    issues: tuple[ValidationIssue, ...] = ()


@dataclass(frozen=True)
class SubmissionResult:
    """Signal to the caller that a transaction was submitted."""
    success_kind: SuccessKind
    amount: float
    transaction: Transaction


@dataclass(frozen=True)
class AdvanceResult:
    """Result of an advance request."""
    outcome: AdvanceOutcome
    step_index: int
    validation_error: Optional[ValidationFailure] = None
    submission: Optional[SubmissionResult] = None


@dataclass(frozen=True)
class ExitSignal:
    """Navigation signal emitted by save-and-exit; nothing is persisted."""
    transaction_id: str
    destination: str = "transactions"


@dataclass(frozen=True)
class ViewState:
    """Everything the step renderer needs to draw the current step."""
    transaction: Transaction
    current_step_index: int
    total_steps: int
    read_only: bool
    step: StepDefinition
    step_labels: tuple[str, ...] = field(default=())
    validation_error: Optional[ValidationFailure] = None

    @property
    def is_first_step(self) -> bool:
        return self.current_step_index == 0

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index == self.total_steps - 1
