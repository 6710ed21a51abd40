"""
Per-type step catalogs.

A catalog is built once for a plan's rules and a participant's account
snapshot; the limits validators need are bound in at construction so each
validator stays a pure function of the payload.
"""

from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Optional, Union

from ..config.defaults import PlanRules, get_default_rules
from ..data.account import AccountSnapshot
from ..logging.config import get_logger
from ..models.payloads import StepPayload
from ..models.transaction import TransactionType
from . import validators as v

logger = get_logger(__name__)

ValidatorResult = Union[list, bool]
Validator = Callable[[StepPayload], Union[ValidatorResult, Awaitable[ValidatorResult]]]

# Degraded-mode steps for types without a catalog
PLACEHOLDER_LABELS = ("Details", "Review & Submit")

STEP_LABELS: dict[TransactionType, tuple[str, ...]] = {
    TransactionType.LOAN: ("Strategy", "Money Flow", "Compliance", "Review"),
    TransactionType.WITHDRAWAL: ("Eligibility", "Withdrawal Amount", "Tax Information", "Review & Submit"),
    TransactionType.DISTRIBUTION: ("Eligibility", "Distribution Amount", "Tax Withholding", "Review & Submit"),
    TransactionType.ROLLOVER: ("Eligibility", "Rollover Amount", "Destination Account", "Review & Submit"),
    TransactionType.TRANSFER: ("Eligibility", "Transfer Details", "Investment Selection", "Review & Submit"),
    TransactionType.REBALANCE: ("Eligibility", "Current Allocation", "Target Allocation", "Review & Submit"),
}


@dataclass(frozen=True)
class StepDefinition:
    """One step of a transaction application."""
    step_id: str
    label: str
    validate: Optional[Validator] = None


class StepCatalog:
    """Maps transaction types to ordered step definitions."""

    def __init__(self, rules: Optional[PlanRules] = None,
                 account: Optional[AccountSnapshot] = None):
        self.rules = rules or get_default_rules()
        self.account = account or AccountSnapshot(vested_balance=0.0)
        self._cache: dict[Any, list[StepDefinition]] = {}

    def steps_for(self, transaction_type: Any) -> list[StepDefinition]:
        """
        Ordered steps for a type.

        Unknown types get a placeholder catalog instead of an error so a
        caller can still render something.
        """
        parsed = TransactionType.parse(transaction_type)
        key = parsed if parsed is not None else str(transaction_type)

        if key not in self._cache:
            if parsed is None:
                logger.warning(
                    "No step catalog for transaction type, using placeholder steps",
                    transaction_type=str(transaction_type)
                )
                self._cache[key] = self._placeholder_steps()
            else:
                self._cache[key] = self._build(parsed)

        return list(self._cache[key])

    def labels_for(self, transaction_type: Any) -> list[str]:
        return [step.label for step in self.steps_for(transaction_type)]

    def total_steps(self, transaction_type: Any) -> int:
        return len(self.steps_for(transaction_type))

    def _build(self, transaction_type: TransactionType) -> list[StepDefinition]:
        builders = {
            TransactionType.LOAN: self._loan_steps,
            TransactionType.WITHDRAWAL: self._withdrawal_steps,
            TransactionType.DISTRIBUTION: self._distribution_steps,
            TransactionType.ROLLOVER: self._rollover_steps,
            TransactionType.TRANSFER: self._transfer_steps,
            TransactionType.REBALANCE: self._rebalance_steps,
        }
        step_ids, validators = builders[transaction_type]()
        labels = STEP_LABELS[transaction_type]
        return [
            StepDefinition(step_id=step_id, label=label, validate=validator)
            for step_id, label, validator in zip(step_ids, labels, validators)
        ]

    def _placeholder_steps(self) -> list[StepDefinition]:
        return [
            StepDefinition(step_id=f"step-{index}", label=label)
            for index, label in enumerate(PLACEHOLDER_LABELS[:-1])
        ] + [
            StepDefinition(
                step_id="review-submit",
                label=PLACEHOLDER_LABELS[-1],
                validate=v.validate_confirmation,
            )
        ]

    def loan_limit(self) -> float:
        """Largest loan the account supports under the plan rules."""
        loan = self.rules.loan
        return min(self.account.vested_balance * loan.max_pct_of_vested, loan.max_absolute)

    def _loan_steps(self) -> tuple:
        loan = self.rules.loan
        return (
            ("basics", "payment-setup", "compliance", "review-submit"),
            (
                partial(
                    v.validate_loan_basics,
                    min_amount=loan.min_amount,
                    max_amount=self.loan_limit(),
                    term_years_min=loan.term_years_min,
                    term_years_max=loan.term_years_max,
                ),
                v.validate_payment_setup,
                partial(
                    v.validate_loan_compliance,
                    require_spousal_consent=self.rules.compliance.require_spousal_consent,
                ),
                v.validate_confirmation,
            ),
        )

    def _withholding_steps(self, amount_step: str, tax_step: str, max_pct: float,
                           min_amount: float) -> tuple:
        return (
            ("eligibility", amount_step, tax_step, "review-submit"),
            (
                None,
                partial(
                    v.validate_withdrawal_amount,
                    min_amount=min_amount,
                    max_amount=float(int(self.account.vested_balance * max_pct)),
                ),
                v.validate_tax_withholding,
                v.validate_confirmation,
            ),
        )

    def _withdrawal_steps(self) -> tuple:
        rules = self.rules.withdrawal
        return self._withholding_steps("withdrawal-amount", "tax-information",
                                       rules.max_pct_of_vested, rules.min_amount)

    def _distribution_steps(self) -> tuple:
        rules = self.rules.distribution
        return self._withholding_steps("distribution-amount", "tax-withholding",
                                       rules.max_pct_of_vested, rules.min_amount)

    def _rollover_steps(self) -> tuple:
        return (
            ("eligibility", "rollover-amount", "destination-account", "review-submit"),
            (None, v.validate_rollover_amount, v.validate_rollover_destination, v.validate_confirmation),
        )

    def _transfer_steps(self) -> tuple:
        return (
            ("eligibility", "transfer-details", "investment-selection", "review-submit"),
            (
                None,
                v.validate_transfer_details,
                partial(v.validate_allocations, field="allocations", required=False),
                v.validate_confirmation,
            ),
        )

    def _rebalance_steps(self) -> tuple:
        return (
            ("eligibility", "current-allocation", "target-allocation", "review-submit"),
            (
                None,
                partial(v.validate_allocations, field="current_allocations", required=False),
                partial(v.validate_allocations, field="target_allocations", required=True),
                v.validate_confirmation,
            ),
        )
