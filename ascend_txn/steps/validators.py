"""
Step validators.

Every validator takes the accumulated payload and returns a list of
ValidationIssue; an empty list means the step may be left. Validators never
mutate the payload and read nothing but their arguments, so the same payload
always produces the same result. Plan limits are bound in by the catalog.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..models.payloads import StepPayload, as_number

PAYMENT_METHODS = frozenset({"EFT", "ACH", "CHECK"})
BANK_PAYMENT_METHODS = frozenset({"EFT", "ACH"})
ALLOCATION_TOLERANCE = 0.01

_ROUTING_NUMBER = re.compile(r"^\d{9}$")
_ACCOUNT_NUMBER = re.compile(r"^\d{4,17}$")


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem with the data entered for a step."""
    field: str
    message: str
    value: Any = None


def _range_issues(field: str, value: Optional[float], minimum: float, maximum: float,
                  raw: Any) -> list[ValidationIssue]:
    if value is None:
        return [ValidationIssue(field=field, message="Enter an amount", value=raw)]
    if maximum < minimum:
        return [ValidationIssue(
            field=field,
            message=f"Balance too low: the minimum of ${minimum:,.0f} exceeds the available ${maximum:,.0f}",
            value=raw
        )]
    if value < minimum:
        return [ValidationIssue(field=field, message=f"Must be at least ${minimum:,.0f}", value=raw)]
    if value > maximum:
        return [ValidationIssue(field=field, message=f"Must not exceed ${maximum:,.0f}", value=raw)]
    return []


def validate_loan_basics(payload: StepPayload, *, min_amount: float, max_amount: float,
                         term_years_min: int, term_years_max: int) -> list[ValidationIssue]:
    """Loan amount within plan limits; term within the allowed years when given."""
    raw_amount = payload.get("loan_amount")
    issues = _range_issues("loan_amount", as_number(raw_amount), min_amount, max_amount, raw_amount)

    raw_term = payload.get("term_years")
    if raw_term is not None:
        term = as_number(raw_term)
        if term is None or term != int(term) or not term_years_min <= term <= term_years_max:
            issues.append(ValidationIssue(
                field="term_years",
                message=f"Choose a term between {term_years_min} and {term_years_max} years",
                value=raw_term
            ))

    return issues


def validate_payment_setup(payload: StepPayload) -> list[ValidationIssue]:
    """Payment method plus bank details for electronic disbursement."""
    issues = []
    method = str(payload.get("payment_method", "")).strip().upper()

    if method not in PAYMENT_METHODS:
        issues.append(ValidationIssue(
            field="payment_method",
            message="Choose EFT, ACH or check",
            value=payload.get("payment_method")
        ))
        return issues

    if method in BANK_PAYMENT_METHODS:
        routing = str(payload.get("routing_number", "")).strip()
        if not _ROUTING_NUMBER.match(routing):
            issues.append(ValidationIssue(
                field="routing_number",
                message="Routing number must be 9 digits",
                value=routing
            ))
        account = str(payload.get("account_number", "")).strip()
        if not _ACCOUNT_NUMBER.match(account):
            issues.append(ValidationIssue(
                field="account_number",
                message="Account number must be 4 to 17 digits",
                value=account
            ))

    return issues


def validate_loan_compliance(payload: StepPayload, *,
                             require_spousal_consent: bool) -> list[ValidationIssue]:
    """Terms and disclosures accepted, spousal consent where the plan requires it."""
    issues = []
    required = ["agreed_to_terms", "agreed_to_disclosures"]
    if require_spousal_consent:
        required.append("spousal_consent")

    for name in required:
        if payload.get(name) is not True:
            issues.append(ValidationIssue(field=name, message="Acknowledgement required", value=payload.get(name)))

    return issues


def validate_withdrawal_amount(payload: StepPayload, *, min_amount: float,
                               max_amount: float) -> list[ValidationIssue]:
    """Amount between the plan minimum and the vested-balance cap."""
    raw_amount = payload.get("amount")
    return _range_issues("amount", as_number(raw_amount), min_amount, max_amount, raw_amount)


def validate_tax_withholding(payload: StepPayload) -> list[ValidationIssue]:
    """Federal and state withholding rates, when given, are percentages."""
    issues = []
    for name in ("federal_tax_rate", "state_tax_rate"):
        raw = payload.get(name)
        if raw is None:
            continue
        rate = as_number(raw)
        if rate is None or not 0 <= rate <= 100:
            issues.append(ValidationIssue(field=name, message="Must be a percentage between 0 and 100", value=raw))
    return issues


def validate_rollover_amount(payload: StepPayload) -> list[ValidationIssue]:
    """An estimated balance (or amount) is present and non-negative."""
    raw = payload.get("estimated_balance")
    if raw is None:
        raw = payload.get("amount")
    value = as_number(raw)
    if value is None or value < 0:
        return [ValidationIssue(field="estimated_balance", message="Enter the estimated balance to roll over", value=raw)]
    return []


def validate_rollover_destination(payload: StepPayload) -> list[ValidationIssue]:
    """Name of the previous provider is at least two characters."""
    provider = str(payload.get("provider_name", "")).strip()
    if len(provider) < 2:
        return [ValidationIssue(field="provider_name", message="Enter the name of your previous plan provider", value=provider)]
    return []


def validate_transfer_details(payload: StepPayload) -> list[ValidationIssue]:
    """A transfer intent has been chosen."""
    intent = str(payload.get("intent", "")).strip()
    if not intent:
        return [ValidationIssue(field="intent", message="Choose what you want to do", value=intent)]
    return []


def validate_allocations(payload: StepPayload, *, field: str, required: bool) -> list[ValidationIssue]:
    """Fund allocations are percentages that add up to 100."""
    allocations = payload.get(field)
    if allocations is None:
        if required:
            return [ValidationIssue(field=field, message="Choose a target allocation", value=None)]
        return []

    if not isinstance(allocations, Mapping) or not allocations:
        return [ValidationIssue(field=field, message="Allocations must map funds to percentages", value=allocations)]

    issues = []
    total = 0.0
    for fund, raw in allocations.items():
        pct = as_number(raw)
        if pct is None or not 0 <= pct <= 100:
            issues.append(ValidationIssue(field=f"{field}.{fund}", message="Must be a percentage between 0 and 100", value=raw))
            continue
        total += pct

    if not issues and abs(total - 100.0) > ALLOCATION_TOLERANCE:
        issues.append(ValidationIssue(field=field, message="Allocations must add up to 100%", value=total))

    return issues


def validate_confirmation(payload: StepPayload) -> list[ValidationIssue]:
    """The participant has confirmed the terms of the transaction."""
    if payload.get("confirmation_accepted") is not True:
        return [ValidationIssue(
            field="confirmation_accepted",
            message="Confirm that you have reviewed the details and understand the terms",
            value=payload.get("confirmation_accepted")
        )]
    return []
