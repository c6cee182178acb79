"""Business logic engine for the Cashbook ledger.

This module provides the LedgerEngine class which acts as a facade over
the focused service classes in cashbook/services/.

Service Classes:
    - LedgerStore: Transaction create/read/update/delete
    - OpeningBalanceRegister: The single opening balance snapshot
    - DailyOverrides: Per-day user deductions and 10% savings cache
    - BalanceAggregator: Balance computation
    - DailyTracker: Per-day summaries and cache refresh
    - TransactionManager: Mutations and their recalculation policy
"""
import logging

from cashbook.backup import BackupManager
from cashbook.database import DatabaseManager
from cashbook.config import get_settings
from cashbook.reports import ReportGenerator, ALL_TYPES
from cashbook.services import (
    LedgerStore, OpeningBalanceRegister, DailyOverrides, BalanceAggregator,
    DailyTracker, TransactionManager,
)

logger = logging.getLogger(__name__)


class LedgerEngine:
    """Single-owner ledger, interfacing with DatabaseManager.

    Balances and reports are re-derived from storage on every read. The
    per-day 10% savings cache is refreshed by get_daily_tracking (or by
    recalculate_all_days); call one of them after changing transactions
    before relying on cached savings in balances or rollups, unless the
    engine was created with ``eager_recalculation=True``.

    Attributes:
        db: DatabaseManager instance for data persistence.
        eager_recalculation: Rebuild the savings cache after each transaction change.
    """

    def __init__(self, db_manager, eager_recalculation=False):
        self.db = db_manager
        self.eager_recalculation = eager_recalculation
        self._ledger_store = None
        self._opening_register = None
        self._overrides = None
        self._balance_aggregator = None
        self._daily_tracker = None
        self._transaction_manager = None
        self._report_generator = None
        self._backup_manager = None

    @classmethod
    def from_settings(cls, eager_recalculation=False):
        """Open the ledger at the configured CASHBOOK_DB_PATH."""
        settings = get_settings()
        logger.debug("Opening ledger database %s", settings.db_path)
        return cls(DatabaseManager(settings.db_path), eager_recalculation=eager_recalculation)

    @property
    def ledger_store(self):
        """Lazy-load LedgerStore instance."""
        if self._ledger_store is None:
            self._ledger_store = LedgerStore(self.db)
        return self._ledger_store

    @property
    def opening_register(self):
        """Lazy-load OpeningBalanceRegister instance."""
        if self._opening_register is None:
            self._opening_register = OpeningBalanceRegister(self.db)
        return self._opening_register

    @property
    def overrides(self):
        """Lazy-load DailyOverrides instance."""
        if self._overrides is None:
            self._overrides = DailyOverrides(self.db)
        return self._overrides

    @property
    def balance_aggregator(self):
        """Lazy-load BalanceAggregator instance."""
        if self._balance_aggregator is None:
            self._balance_aggregator = BalanceAggregator(
                self.ledger_store, self.opening_register, self.overrides
            )
        return self._balance_aggregator

    @property
    def daily_tracker(self):
        """Lazy-load DailyTracker instance."""
        if self._daily_tracker is None:
            self._daily_tracker = DailyTracker(self.ledger_store, self.overrides)
        return self._daily_tracker

    @property
    def transaction_manager(self):
        """Lazy-load TransactionManager instance."""
        if self._transaction_manager is None:
            self._transaction_manager = TransactionManager(
                self.db, self.ledger_store, self.opening_register, self.overrides,
                self.daily_tracker, eager_recalculation=self.eager_recalculation,
            )
        return self._transaction_manager

    @property
    def report_generator(self):
        """Lazy-load ReportGenerator instance."""
        if self._report_generator is None:
            self._report_generator = ReportGenerator(self.ledger_store, self.overrides)
        return self._report_generator

    @property
    def backup_manager(self):
        """Lazy-load BackupManager instance."""
        if self._backup_manager is None:
            self._backup_manager = BackupManager(self.transaction_manager)
        return self._backup_manager

    # Mutations
    def add_transaction(self, transaction_type, amount, description=None, date=None):
        """Record a transaction and return its id. Date defaults to now."""
        return self.transaction_manager.add_transaction(transaction_type, amount, description, date)

    def edit_transaction(self, trans_id, transaction_type, amount, description=None, date=None):
        """Replace a transaction's fields. A missing date is stamped with now."""
        self.transaction_manager.edit_transaction(trans_id, transaction_type, amount, description, date)

    def delete_transaction(self, trans_id):
        self.transaction_manager.delete_transaction(trans_id)

    def set_opening_balance(self, cash_balance, upi_balance, savings, user_deductions, date):
        self.transaction_manager.set_opening_balance(cash_balance, upi_balance, savings, user_deductions, date)

    def set_user_deduction(self, day, amount):
        self.transaction_manager.set_user_deduction(day, amount)

    def clear_all(self):
        self.transaction_manager.clear_all()

    # Reads
    def get_transaction(self, trans_id):
        return self.ledger_store.get(trans_id)

    def get_all_transactions(self):
        return self.report_generator.get_all_transactions()

    def get_transactions_by_type(self, transaction_type):
        return self.report_generator.get_transactions_by_type(transaction_type)

    def get_opening_balance(self):
        return self.opening_register.get()

    def get_user_deduction(self, day):
        return self.overrides.get_user_deduction(day)

    def get_balances(self):
        return self.balance_aggregator.get_balances()

    def get_cumulative_stats(self):
        return self.balance_aggregator.get_cumulative_stats()

    def get_daily_tracking(self, day):
        return self.daily_tracker.track(day)

    def get_daywise(self, day):
        return self.daily_tracker.daywise(day)

    def recalculate_all_days(self):
        return self.daily_tracker.recalculate_all_days()

    def get_range_breakdown(self, start, end):
        return self.report_generator.get_range_breakdown(start, end)

    def get_range_summary(self, start, end):
        return self.report_generator.get_range_summary(start, end)

    def get_range_rows(self, start, end):
        return self.report_generator.get_range_rows(start, end)

    def get_monthly_rollup(self, year, month, type_filter=ALL_TYPES, search=None):
        return self.report_generator.get_monthly_rollup(year, month, type_filter, search)

    def get_yearly_rollup(self, year, type_filter=ALL_TYPES, search=None):
        return self.report_generator.get_yearly_rollup(year, type_filter, search)

    # Backup
    def export_backup(self, path):
        return self.backup_manager.export_backup(path)

    def restore_backup(self, path):
        return self.backup_manager.restore_backup(path)
