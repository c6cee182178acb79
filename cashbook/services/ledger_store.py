"""Ledger store for the Cashbook ledger.

Owns the collection of transactions and the id counter. Every operation
reads the whole collection, changes it, and writes it back.
"""
import logging

from cashbook.config import TRANSACTIONS_KEY, NEXT_ID_KEY
from cashbook.data_structures import Transaction, TransactionType
from cashbook.exceptions import ValidationError, TransactionNotFoundError
from cashbook.timeutils import now_ns, to_timestamp

logger = logging.getLogger(__name__)


def validate_amount(amount) -> int:
    """Accept any non-zero integer; sign is left to the caller's intent."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(f"Amount must be an integer, got {amount!r}", "amount", amount)
    if amount == 0:
        raise ValidationError("Amount cannot be zero", "amount", amount)
    return amount


def coerce_type(transaction_type) -> TransactionType:
    try:
        return TransactionType(transaction_type)
    except ValueError:
        raise ValidationError(
            f"Unknown transaction type {transaction_type!r}", "transaction_type", transaction_type
        ) from None


class LedgerStore:
    """Create/read/update/delete of individual ledger entries."""

    def __init__(self, db_manager):
        """Initialize LedgerStore.

        Args:
            db_manager: DatabaseManager instance for data persistence.
        """
        self.db = db_manager

    def get_all(self):
        """All transactions in storage order (newest insert first)."""
        return [Transaction.from_dict(d) for d in self.db.load_collection(TRANSACTIONS_KEY)]

    def get(self, trans_id):
        for tx in self.get_all():
            if tx.id == trans_id:
                return tx
        raise TransactionNotFoundError(trans_id)

    def _next_id(self, transactions):
        stored = self.db.load_scalar(NEXT_ID_KEY)
        floor = max((t.id for t in transactions), default=-1) + 1
        if stored is None:
            return floor
        return max(int(stored), floor)

    def peek_next_id(self):
        """Id the next added transaction will receive."""
        return self._next_id(self.get_all())

    def _build(self, trans_id, transaction_type, amount, description, date):
        return Transaction(
            id=trans_id,
            type=coerce_type(transaction_type),
            amount=validate_amount(amount),
            description=description or "",
            date=now_ns() if date is None else to_timestamp(date),
        )

    def _save(self, transactions):
        self.db.save_collection(TRANSACTIONS_KEY, [t.to_dict() for t in transactions])

    def add(self, transaction_type, amount, description=None, date=None):
        """Insert a new transaction and return it with its assigned id.

        Raises:
            ValidationError: If the amount is zero or the type/date is malformed.
        """
        with self.db.transaction():
            transactions = self.get_all()
            new_id = self._next_id(transactions)
            tx = self._build(new_id, transaction_type, amount, description, date)
            self._save([tx] + transactions)
            self.db.save_scalar(NEXT_ID_KEY, new_id + 1)
        logger.info("Added transaction %d (%s %d)", tx.id, tx.type.value, tx.amount)
        return tx

    def update(self, trans_id, transaction_type, amount, description=None, date=None):
        """Replace type/amount/description/date of an entry, keeping its id.

        Raises:
            TransactionNotFoundError: If no entry has this id.
            ValidationError: If the new values are rejected.
        """
        with self.db.transaction():
            transactions = self.get_all()
            index = next((i for i, t in enumerate(transactions) if t.id == trans_id), None)
            if index is None:
                raise TransactionNotFoundError(trans_id)
            previous = transactions[index]
            tx = self._build(trans_id, transaction_type, amount, description, date)
            transactions[index] = tx
            self._save(transactions)
        logger.info("Edited transaction %d (%s %d -> %s %d)", trans_id,
                    previous.type.value, previous.amount, tx.type.value, tx.amount)
        return previous, tx

    def delete(self, trans_id):
        """Remove an entry and return it.

        Raises:
            TransactionNotFoundError: If no entry has this id.
        """
        with self.db.transaction():
            transactions = self.get_all()
            remaining = [t for t in transactions if t.id != trans_id]
            if len(remaining) == len(transactions):
                raise TransactionNotFoundError(trans_id)
            self._save(remaining)
        removed = next(t for t in transactions if t.id == trans_id)
        logger.info("Deleted transaction %d", trans_id)
        return removed

    def replace_all(self, transactions, next_id=None):
        """Bulk replace the whole ledger (used by restore)."""
        transactions = list(transactions)
        ids = [t.id for t in transactions]
        if len(ids) != len(set(ids)):
            raise ValidationError("Duplicate transaction ids in bulk replace", "transactions")
        for t in transactions:
            validate_amount(t.amount)
            to_timestamp(t.date)
        floor = max(ids, default=-1) + 1
        with self.db.transaction():
            self._save(transactions)
            self.db.save_scalar(NEXT_ID_KEY, max(floor, next_id or 0))

    def clear(self):
        """Empty the ledger and reset the id counter to 0."""
        with self.db.transaction():
            self._save([])
            self.db.save_scalar(NEXT_ID_KEY, 0)
