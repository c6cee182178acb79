"""Cashbook: a personal cash/UPI bookkeeping ledger."""

from cashbook.engine import LedgerEngine
from cashbook.database import DatabaseManager

__all__ = ['LedgerEngine', 'DatabaseManager']
