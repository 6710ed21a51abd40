"""
Activity summaries for the transactions dashboard.

Only submitted money movements count: drafts have no authoritative amount
yet and cancelled transactions never moved money.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from ..models.transaction import Transaction, TransactionStatus, TransactionType
from ..persistence.transaction_store import ALL_PLANS_ID
from ..utils.time import is_same_month, parse_date

CONTRIBUTION_TYPES = frozenset({TransactionType.ROLLOVER, TransactionType.TRANSFER})
WITHDRAWAL_TYPES = frozenset({TransactionType.WITHDRAWAL, TransactionType.DISTRIBUTION})
COUNTED_STATUSES = frozenset({TransactionStatus.ACTIVE, TransactionStatus.COMPLETED})


@dataclass(frozen=True)
class ActivitySummary:
    """Month-to-date and year-to-date money movement."""
    reference_date: date
    plan_id: Optional[str]
    contributions: float = 0.0
    withdrawals: float = 0.0
    loans: float = 0.0
    fees: float = 0.0
    transaction_count: int = 0
    ytd_contributions: float = 0.0
    ytd_withdrawals: float = 0.0

    @property
    def net_flow(self) -> float:
        """Money in minus money out (loans and fees leave the account too)."""
        return round(self.contributions - self.withdrawals - self.loans - self.fees, 2)


def filter_by_plan(transactions: Iterable[Transaction],
                   plan_id: Optional[str]) -> list[Transaction]:
    """Transactions for one plan; None or "all" passes everything through."""
    if plan_id is None or plan_id == ALL_PLANS_ID:
        return list(transactions)
    return [t for t in transactions if t.plan_id == plan_id]


def _withdrawn(transaction: Transaction) -> float:
    if transaction.net_amount is not None:
        return transaction.net_amount
    return transaction.amount


def summarize_activity(
    transactions: Iterable[Transaction],
    reference_date: Union[date, str],
    plan_id: Optional[str] = None
) -> ActivitySummary:
    """
    Summarize money movement for the month and year of reference_date.

    Args:
        transactions: Transactions to summarize (typically store.list())
        reference_date: Any day in the month being reported, as a date or
            ISO string
        plan_id: Restrict to one plan; None or "all" covers every plan

    Returns:
        ActivitySummary for the month, with year-to-date totals
    """
    reference_date = parse_date(reference_date)
    contributions = withdrawals = loans = fees = 0.0
    ytd_contributions = ytd_withdrawals = 0.0
    count = 0

    for transaction in filter_by_plan(transactions, plan_id):
        if transaction.status not in COUNTED_STATUSES:
            continue

        initiated = transaction.date_initiated
        if initiated.year != reference_date.year or initiated > reference_date:
            continue

        if transaction.type in CONTRIBUTION_TYPES:
            ytd_contributions += transaction.amount
        elif transaction.type in WITHDRAWAL_TYPES:
            ytd_withdrawals += _withdrawn(transaction)

        if not is_same_month(initiated, reference_date):
            continue

        count += 1
        if transaction.type in CONTRIBUTION_TYPES:
            contributions += transaction.amount
        elif transaction.type in WITHDRAWAL_TYPES:
            withdrawals += _withdrawn(transaction)
        elif transaction.type == TransactionType.LOAN:
            loans += transaction.amount
        fees += transaction.fees or 0.0

    return ActivitySummary(
        reference_date=reference_date,
        plan_id=plan_id,
        contributions=round(contributions, 2),
        withdrawals=round(withdrawals, 2),
        loans=round(loans, 2),
        fees=round(fees, 2),
        transaction_count=count,
        ytd_contributions=round(ytd_contributions, 2),
        ytd_withdrawals=round(ytd_withdrawals, 2),
    )
