"""Services package for Cashbook business logic.

This package contains the focused service classes the LedgerEngine facade
delegates to.
"""

from .deduction import ten_percent
from .ledger_store import LedgerStore
from .opening_balance import OpeningBalanceRegister
from .overrides import DailyOverrides
from .balance_calculator import BalanceAggregator, aggregate_balances
from .daily_tracker import DailyTracker
from .transaction_manager import TransactionManager

__all__ = ['ten_percent', 'LedgerStore', 'OpeningBalanceRegister', 'DailyOverrides',
           'BalanceAggregator', 'aggregate_balances', 'DailyTracker', 'TransactionManager']
