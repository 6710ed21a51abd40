"""Tests for activity summaries."""

from datetime import date

import pytest

from ascend_txn.models.transaction import Transaction, TransactionStatus, TransactionType
from ascend_txn.reporting import filter_by_plan, summarize_activity

REFERENCE = date(2024, 3, 15)


def txn(txn_id, transaction_type, amount, initiated=date(2024, 3, 5),
        status=TransactionStatus.ACTIVE, plan_id="current", **fields):
    return Transaction(id=txn_id, type=transaction_type, date_initiated=initiated,
                       status=status, amount=amount, plan_id=plan_id, **fields)


@pytest.fixture
def history():
    return [
        txn("r1", TransactionType.ROLLOVER, 25000.0),
        txn("t1", TransactionType.TRANSFER, 1000.0, status=TransactionStatus.COMPLETED),
        txn("w1", TransactionType.WITHDRAWAL, 10000.0, net_amount=7500.0, tax_withholding=2500.0),
        txn("d1", TransactionType.DISTRIBUTION, 2000.0, plan_id="ira"),
        txn("l1", TransactionType.LOAN, 10000.0, fees=100.0, net_amount=9900.0),
        txn("old", TransactionType.ROLLOVER, 5000.0, initiated=date(2024, 1, 10)),
        txn("lastyear", TransactionType.WITHDRAWAL, 3000.0, initiated=date(2023, 3, 10)),
        txn("draft", TransactionType.ROLLOVER, 99999.0, status=TransactionStatus.DRAFT),
        txn("cancelled", TransactionType.WITHDRAWAL, 88888.0, status=TransactionStatus.CANCELLED),
        txn("future", TransactionType.TRANSFER, 777.0, initiated=date(2024, 3, 20)),
    ]


class TestFilterByPlan:
    """Test plan filtering."""

    def test_all_passes_through(self, history):
        """Test None and "all" keep every transaction."""
        assert len(filter_by_plan(history, None)) == len(history)
        assert len(filter_by_plan(history, "all")) == len(history)

    def test_single_plan(self, history):
        """Test filtering keeps only the plan's transactions."""
        assert [t.id for t in filter_by_plan(history, "ira")] == ["d1"]


class TestSummarizeActivity:
    """Test monthly and year-to-date totals."""

    def test_monthly_totals(self, history):
        """Test month totals exclude drafts, cancellations and other months."""
        summary = summarize_activity(history, REFERENCE)

        assert summary.contributions == 26000.0
        assert summary.withdrawals == 9500.0
        assert summary.loans == 10000.0
        assert summary.fees == 100.0
        assert summary.transaction_count == 5
        assert summary.net_flow == 26000.0 - 9500.0 - 10000.0 - 100.0

    def test_ytd_totals(self, history):
        """Test year-to-date totals include earlier months of the same year only."""
        summary = summarize_activity(history, REFERENCE)

        assert summary.ytd_contributions == 31000.0
        assert summary.ytd_withdrawals == 9500.0

    def test_plan_scoped(self, history):
        """Test a plan id restricts the summary."""
        summary = summarize_activity(history, REFERENCE, plan_id="ira")

        assert summary.withdrawals == 2000.0
        assert summary.contributions == 0.0
        assert summary.plan_id == "ira"

    def test_iso_string_reference_date(self, history):
        """Test an ISO string reference date matches the equivalent date."""
        summary = summarize_activity(history, "2024-03-15")

        assert summary.reference_date == REFERENCE
        assert summary == summarize_activity(history, REFERENCE)

    def test_bad_reference_date(self, history):
        """Test an unparseable reference date raises ValueError."""
        with pytest.raises(ValueError):
            summarize_activity(history, "March")

    def test_empty(self):
        """Test no transactions yields zeros."""
        summary = summarize_activity([], REFERENCE)

        assert summary.transaction_count == 0
        assert summary.net_flow == 0.0
