"""Pytest configuration and shared fixtures."""

import pytest
from datetime import date
from typing import Any, Dict

from ascend_txn.config.defaults import get_default_rules
from ascend_txn.config.loader import ConfigLoader
from ascend_txn.data.account import AccountSnapshot, StaticAccountProvider
from ascend_txn.engine import TransactionApplicationService
from ascend_txn.impact.classifier import ImpactClassifier
from ascend_txn.persistence.transaction_store import TransactionStore
from ascend_txn.steps.catalog import StepCatalog
from ascend_txn.utils.time import fixed_clock


@pytest.fixture
def today() -> date:
    """Pinned calendar date used by the store and status transitions."""
    return date(2024, 3, 15)


@pytest.fixture
def clock(today):
    return fixed_clock(today)


@pytest.fixture
def store(clock) -> TransactionStore:
    """Empty store on the pinned clock."""
    return TransactionStore(clock=clock)


@pytest.fixture
def rules():
    return get_default_rules()


@pytest.fixture
def account() -> AccountSnapshot:
    """Participant with a 100,000 vested balance."""
    return AccountSnapshot(vested_balance=100_000.0, total_balance=120_000.0, ytd_contribution=6_000.0)


@pytest.fixture
def catalog(rules, account) -> StepCatalog:
    return StepCatalog(rules=rules, account=account)


@pytest.fixture
def classifier(rules) -> ImpactClassifier:
    return ImpactClassifier(rules.impact)


@pytest.fixture
def service(store, account, clock) -> TransactionApplicationService:
    """Service on the repository's plans.yaml with a fixed account snapshot."""
    return TransactionApplicationService(
        store,
        config_loader=ConfigLoader.create(),
        account_provider=StaticAccountProvider(account),
        clock=clock,
    )


@pytest.fixture
def loan_step_data() -> Dict[str, Dict[str, Any]]:
    """Step data for a complete loan application, keyed by step id."""
    return {
        "basics": {"loanAmount": 10000, "termYears": 5, "payrollFrequency": "biweekly"},
        "payment-setup": {"paymentMethod": "EFT", "routingNumber": "123456789", "accountNumber": "12345"},
        "compliance": {"agreedToTerms": True, "agreedToDisclosures": True, "spousalConsent": True},
        "review-submit": {"confirmationAccepted": True},
    }


@pytest.fixture
def open_application(service):
    """Create a draft through the service and attach to it; returns the id."""
    def _open(transaction_type: str, plan_id: str = None) -> str:
        created = service.create_or_attach(transaction_type, plan_id=plan_id)
        attached = service.create_or_attach(transaction_type, created.transaction_id)
        assert attached.redirect is False
        return attached.transaction_id
    return _open
