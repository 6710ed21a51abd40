"""
Typed step payloads accumulated across a transaction application.

Each transaction type has its own frozen payload dataclass. Step renderers
send partial updates (camelCase keys straight from the UI are accepted);
``merge`` applies them shallowly and returns a new payload, so the last
value for a key always wins. Keys a payload does not model are preserved in
``extras`` rather than dropped.
"""

import math
import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional

from .transaction import TransactionType

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake_case(key: str) -> str:
    """Convert a camelCase UI key to the snake_case field name."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def _finite(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def as_number(value: Any) -> Optional[float]:
    """Coerce numeric input (including numeric strings) to a finite float; None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _finite(float(value))
    if isinstance(value, str):
        text = value.replace(",", "").replace("$", "").strip()
        if not text:
            return None
        try:
            return _finite(float(text))
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class StepPayload:
    """Fields common to every application payload."""
    amount: Any = None
    confirmation_accepted: Optional[bool] = None
    extras: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls) if f.name != "extras")

    def merge(self, partial: Optional[Mapping[str, Any]]) -> "StepPayload":
        """Shallow-merge ``partial`` into a new payload of the same type."""
        if not partial:
            return self

        known = self.field_names()
        updates: dict[str, Any] = {}
        extras = dict(self.extras)
        for key, value in partial.items():
            name = to_snake_case(str(key))
            if name in known:
                updates[name] = value
            else:
                extras[key] = value

        return replace(self, extras=extras, **updates)

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a field by snake_case or camelCase name, then extras."""
        snake = to_snake_case(name)
        if snake in self.field_names():
            value = getattr(self, snake)
            return default if value is None else value
        return self.extras.get(name, default)

    def submission_amount(self) -> Optional[float]:
        """Authoritative amount for submission, if the payload carries one."""
        return as_number(self.amount)

    def as_dict(self) -> dict[str, Any]:
        """Non-empty fields plus extras as a flat dict."""
        result = {
            name: getattr(self, name)
            for name in sorted(self.field_names())
            if getattr(self, name) is not None
        }
        result.update(self.extras)
        return result


@dataclass(frozen=True)
class LoanPayload(StepPayload):
    """Loan application: basics, payment setup, compliance, review."""
    loan_amount: Any = None
    term_years: Any = None
    payroll_frequency: Optional[str] = None
    payment_method: Optional[str] = None
    routing_number: Optional[str] = None
    account_number: Optional[str] = None
    bank_account_type: Optional[str] = None
    agreed_to_terms: Optional[bool] = None
    agreed_to_disclosures: Optional[bool] = None
    spousal_consent: Optional[bool] = None

    def submission_amount(self) -> Optional[float]:
        loan_amount = as_number(self.loan_amount)
        if loan_amount is not None:
            return loan_amount
        return super().submission_amount()


@dataclass(frozen=True)
class WithdrawalPayload(StepPayload):
    """Hardship withdrawal: eligibility, amount, tax withholding, review."""
    hardship_reason: Optional[str] = None
    federal_tax_rate: Any = None
    state_tax_rate: Any = None


@dataclass(frozen=True)
class DistributionPayload(StepPayload):
    """Distribution: eligibility, amount, tax withholding, review."""
    distribution_reason: Optional[str] = None
    federal_tax_rate: Any = None
    state_tax_rate: Any = None


@dataclass(frozen=True)
class RolloverPayload(StepPayload):
    """Rollover in: eligibility, amount, destination, review."""
    estimated_balance: Any = None
    provider_name: Optional[str] = None
    account_type: Optional[str] = None

    def submission_amount(self) -> Optional[float]:
        balance = as_number(self.estimated_balance)
        if balance is not None:
            return balance
        return super().submission_amount()


@dataclass(frozen=True)
class TransferPayload(StepPayload):
    """Investment transfer: eligibility, details, investment selection, review."""
    intent: Optional[str] = None
    allocations: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class RebalancePayload(StepPayload):
    """Portfolio rebalance: eligibility, current allocation, target allocation, review."""
    current_allocations: Optional[Mapping[str, Any]] = None
    target_allocations: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class GenericPayload(StepPayload):
    """Placeholder payload for flows without a dedicated model."""


PAYLOAD_TYPES: dict[TransactionType, type] = {
    TransactionType.LOAN: LoanPayload,
    TransactionType.WITHDRAWAL: WithdrawalPayload,
    TransactionType.DISTRIBUTION: DistributionPayload,
    TransactionType.ROLLOVER: RolloverPayload,
    TransactionType.TRANSFER: TransferPayload,
    TransactionType.REBALANCE: RebalancePayload,
}


def payload_for(transaction_type: Any, initial: Optional[Mapping[str, Any]] = None) -> StepPayload:
    """Create an empty payload for ``transaction_type``, optionally pre-merged."""
    parsed = TransactionType.parse(transaction_type)
    payload_cls = PAYLOAD_TYPES.get(parsed, GenericPayload) if parsed else GenericPayload
    return payload_cls().merge(initial)
