"""In-process transaction store: the single source of truth for transaction records."""

from __future__ import annotations

import threading
import uuid
import warnings
from collections.abc import Iterable
from typing import Any, Optional

from ..errors import ImmutableFieldError, NotFoundError, PersistenceError, StaleWriteWarning
from ..logging.config import get_logger
from ..models.transaction import (
    IMMUTABLE_FIELDS,
    TRANSACTION_FIELDS,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from ..utils.time import Clock, get_today

ALL_PLANS_ID = "all"


class TransactionStore:
    """
    Thread-safe in-memory map of transaction id to Transaction.

    Records are immutable snapshots, so readers never observe a partially
    applied update. Writes to the same id are serialized by a per-id lock;
    writes to different ids proceed independently.
    """

    def __init__(self, seed: Optional[Iterable[Transaction]] = None,
                 clock: Optional[Clock] = None):
        self.logger = get_logger("transaction.store")
        self._clock = clock
        self._transactions: dict[str, Transaction] = {}
        self._versions: dict[str, int] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

        for transaction in seed or ():
            self._insert(transaction)

    def _generate_id(self) -> str:
        """Allocate a transaction id that has never been used by this store."""
        while True:
            candidate = f"txn-{uuid.uuid4().hex[:12]}"
            if candidate not in self._transactions:
                return candidate

    def _insert(self, transaction: Transaction) -> None:
        with self._registry_lock:
            if transaction.id in self._transactions:
                raise PersistenceError(
                    f"Transaction {transaction.id} already exists",
                    operation="insert",
                    target=transaction.id
                )
            self._transactions[transaction.id] = transaction
            self._versions[transaction.id] = 1
            self._locks[transaction.id] = threading.Lock()

    def _lock_for(self, transaction_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(transaction_id)
        if lock is None:
            raise NotFoundError(
                f"Transaction {transaction_id} not found",
                transaction_id=transaction_id
            )
        return lock

    def create_draft(self, transaction_type: TransactionType,
                     plan_id: Optional[str] = None) -> Transaction:
        """
        Create a new draft transaction.

        Args:
            transaction_type: Type of the new transaction
            plan_id: Optional owning plan for multi-plan filtering

        Returns:
            The stored draft
        """
        with self._registry_lock:
            transaction_id = self._generate_id()
            draft = Transaction(
                id=transaction_id,
                type=TransactionType(transaction_type),
                date_initiated=get_today(self._clock),
                status=TransactionStatus.DRAFT,
                amount=0.0,
                is_irreversible=False,
                legal_confirmations=(),
                plan_id=plan_id,
            )
            self._transactions[transaction_id] = draft
            self._versions[transaction_id] = 1
            self._locks[transaction_id] = threading.Lock()

        self.logger.info(
            "Draft transaction created",
            transaction_id=transaction_id,
            transaction_type=draft.type.value,
            plan_id=plan_id
        )
        return draft

    def get(self, transaction_id: str) -> Transaction:
        """
        Get a transaction by id.

        Raises:
            NotFoundError: if the id is unknown
        """
        transaction = self._transactions.get(transaction_id)
        if transaction is None:
            raise NotFoundError(
                f"Transaction {transaction_id} not found",
                transaction_id=transaction_id
            )
        return transaction

    def exists(self, transaction_id: str) -> bool:
        return transaction_id in self._transactions

    def version(self, transaction_id: str) -> int:
        """Write counter for a transaction; bumps on every update."""
        self.get(transaction_id)
        return self._versions[transaction_id]

    def update(self, transaction_id: str, partial: dict[str, Any],
               expected_version: Optional[int] = None) -> Transaction:
        """
        Merge ``partial`` onto the stored record.

        The merge is atomic per call. Field whitelisting is the engine's
        job; the store only refuses identity fields and unknown names.

        Args:
            transaction_id: Transaction to update
            partial: Field name to new value
            expected_version: Version the caller last saw; a mismatch emits
                StaleWriteWarning and the write still wins

        Returns:
            The updated transaction

        Raises:
            NotFoundError: if the id is unknown
            ImmutableFieldError: if partial touches id, type or date_initiated
            PersistenceError: if partial names a field Transaction lacks
        """
        for name in partial:
            if name in IMMUTABLE_FIELDS:
                raise ImmutableFieldError(
                    f"Field '{name}' cannot be changed after creation",
                    field=name,
                    target=transaction_id
                )
            if name not in TRANSACTION_FIELDS:
                raise PersistenceError(
                    f"Unknown transaction field '{name}'",
                    operation="update",
                    target=transaction_id
                )

        with self._lock_for(transaction_id):
            existing = self.get(transaction_id)
            current_version = self._versions[transaction_id]

            if expected_version is not None and expected_version != current_version:
                self.logger.warning(
                    "Stale write detected, applying last-write-wins",
                    transaction_id=transaction_id,
                    expected_version=expected_version,
                    actual_version=current_version
                )
                warnings.warn(StaleWriteWarning(
                    f"Transaction {transaction_id} changed since version {expected_version}",
                    transaction_id=transaction_id,
                    expected_version=expected_version,
                    actual_version=current_version
                ), stacklevel=2)

            updated = existing.with_updates(**partial)
            self._transactions[transaction_id] = updated
            self._versions[transaction_id] = current_version + 1

        self.logger.debug(
            "Transaction updated",
            transaction_id=transaction_id,
            fields=sorted(partial),
            version=current_version + 1
        )
        return updated

    def list(self) -> list[Transaction]:
        """Get all transactions. Ordering is unspecified."""
        return list(self._transactions.values())

    def list_by_status(self, status: TransactionStatus) -> list[Transaction]:
        """Get transactions with the given status."""
        status = TransactionStatus(status)
        return [txn for txn in self.list() if txn.status == status]

    def list_by_type(self, transaction_type: TransactionType) -> list[Transaction]:
        """Get transactions of the given type."""
        transaction_type = TransactionType(transaction_type)
        return [txn for txn in self.list() if txn.type == transaction_type]

    def list_by_plan(self, plan_id: Optional[str]) -> list[Transaction]:
        """Get transactions for a plan; None or "all" returns everything."""
        if plan_id is None or plan_id == ALL_PLANS_ID:
            return self.list()
        return [txn for txn in self.list() if txn.plan_id == plan_id]

    def get_stats(self) -> dict[str, Any]:
        """Counts by status and type."""
        transactions = self.list()
        by_status: dict[str, int] = {}
        by_type: dict[str, int] = {}
        for txn in transactions:
            by_status[txn.status.value] = by_status.get(txn.status.value, 0) + 1
            by_type[txn.type.value] = by_type.get(txn.type.value, 0) + 1
        return {
            "total_transactions": len(transactions),
            "transactions_by_status": by_status,
            "transactions_by_type": by_type,
        }
