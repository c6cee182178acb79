"""Transaction management service for the Cashbook ledger.

This service applies every mutation to the ledger and decides what must be
recomputed afterwards. Balances and reports are pure re-derivations of the
stored state, so the only cache to look after is the per-day 10% savings
map. By default it is refreshed lazily by the daily tracker; in eager mode it
is rebuilt after every transaction change.
"""
import logging

logger = logging.getLogger(__name__)


class TransactionManager:
    """Handles ledger mutations and their recalculation side effects."""

    def __init__(self, db_manager, ledger_store, opening_register, overrides, daily_tracker,
                 eager_recalculation=False):
        """Initialize TransactionManager.

        Args:
            db_manager: DatabaseManager instance.
            ledger_store: LedgerStore for transaction CRUD.
            opening_register: OpeningBalanceRegister for the opening snapshot.
            overrides: DailyOverrides for the per-day maps.
            daily_tracker: DailyTracker used for cache rebuilds in eager mode.
            eager_recalculation: Rebuild the 10% savings cache on every write.
        """
        self.db = db_manager
        self.ledger = ledger_store
        self.opening = opening_register
        self.overrides = overrides
        self.daily_tracker = daily_tracker
        self.eager_recalculation = eager_recalculation

    def _after_transaction_change(self):
        if self.eager_recalculation:
            self.daily_tracker.recalculate_all_days()

    def add_transaction(self, transaction_type, amount, description=None, date=None):
        """Record a new transaction and return its id.

        savingsOut and deductionsOut entries debit the balance formula
        directly; they never touch the override maps.
        """
        tx = self.ledger.add(transaction_type, amount, description, date)
        self._after_transaction_change()
        return tx.id

    def edit_transaction(self, trans_id, transaction_type, amount, description=None, date=None):
        """Replace a transaction in place, preserving its id.

        No balance reversal is needed for the previous type since balances
        are always recomputed from the full ledger.
        """
        self.ledger.update(trans_id, transaction_type, amount, description, date)
        self._after_transaction_change()

    def delete_transaction(self, trans_id):
        self.ledger.delete(trans_id)
        self._after_transaction_change()

    def set_user_deduction(self, day, amount):
        self.overrides.set_user_deduction(day, amount)

    def set_opening_balance(self, cash_balance, upi_balance, savings, user_deductions, date):
        self.opening.set(cash_balance, upi_balance, savings, user_deductions, date)

    def clear_all(self):
        """Empty the ledger and both maps, reset the id counter and opening balance."""
        with self.db.transaction():
            self.ledger.clear()
            self.overrides.clear()
            self.opening.reset()
        logger.info("All ledger data cleared")

    def replace_state(self, transactions, next_id, opening, user_deductions, ten_percent_savings):
        """Overwrite every collection at once (used by restore)."""
        with self.db.transaction():
            self.ledger.replace_all(transactions, next_id)
            self.opening.set(opening.cash_balance, opening.upi_balance, opening.savings,
                             opening.user_deductions, opening.date)
            self.overrides.replace_user_deductions(user_deductions)
            self.overrides.replace_ten_percent_savings(ten_percent_savings)
        self._after_transaction_change()
        logger.info("Ledger state replaced with %d transactions", len(transactions))

    def export_state(self):
        return {
            'transactions': [t.to_dict() for t in self.ledger.get_all()],
            'next_id': self.ledger.peek_next_id(),
            'opening_balance': self.opening.get().to_dict(),
            'user_deductions': {str(k): v for k, v in self.overrides.get_user_deductions().items()},
            'ten_percent_savings': {str(k): v for k, v in self.overrides.get_ten_percent_savings().items()},
        }
