"""Daily tracking service for the Cashbook ledger.

This service handles the per-day view of the ledger:
- Daily inflow/outflow summary and savings deduction
- Refreshing the cached 10% savings value for a day
- Rebuilding the whole 10% savings cache in one sweep
"""
import logging

from cashbook.data_structures import (
    DailyTracking, DaywiseStats, DerivedKind, DerivedRow, RealRow,
    TransactionType, transactions_to_df,
)
from cashbook.services.deduction import ten_percent
from cashbook.timeutils import day_key

logger = logging.getLogger(__name__)


def derived_rows_for_day(key, ten_percent_savings, user_deductions):
    """Display rows for a day's cached deductions.

    Only positive cached values produce a row; the row amount is negated
    since it represents money set aside.
    """
    rows = []
    saved = ten_percent_savings.get(key, 0)
    if saved > 0:
        rows.append(DerivedRow(kind=DerivedKind.TEN_PERCENT_SAVINGS, amount=-saved, date=key))
    deducted = user_deductions.get(key, 0)
    if deducted > 0:
        rows.append(DerivedRow(kind=DerivedKind.USER_DEDUCTION, amount=-deducted, date=key))
    return rows


def sort_rows(rows):
    """Date descending. Stable, so rows on the same date keep their order."""
    return sorted(rows, key=lambda row: row.date, reverse=True)


def _sum_type(transactions, transaction_type):
    return sum(t.amount for t in transactions if t.type == transaction_type)


class DailyTracker:
    """Computes single-day summaries and keeps the 10% savings cache fresh."""

    def __init__(self, ledger_store, overrides):
        """Initialize DailyTracker.

        Args:
            ledger_store: LedgerStore holding the transactions.
            overrides: DailyOverrides with both per-day maps.
        """
        self.ledger = ledger_store
        self.overrides = overrides

    def _transactions_for(self, key):
        return [t for t in self.ledger.get_all() if day_key(t.date) == key]

    def track(self, day) -> DailyTracking:
        """Summarize one calendar day and refresh its cached 10% savings.

        The cache write is the only mutation on this read path. It is
        idempotent: repeated calls with no intervening change store the same
        value.

        Args:
            day: Any timestamp (or datetime/date) inside the target day.

        Returns:
            DailyTracking. Outflows are reported, not netted into net_for_day.
        """
        key = day_key(day)
        transactions = self._transactions_for(key)

        inflow = sum(t.amount for t in transactions if t.type.is_inflow)
        daily_ten_percent = ten_percent(inflow)
        self.overrides.set_ten_percent_saving(key, daily_ten_percent)

        user_specified = self.overrides.get_user_deductions().get(key, 0)
        return DailyTracking(
            day=key,
            total_daily_inflow=inflow,
            daily_ten_percent=daily_ten_percent,
            user_specified=user_specified,
            net_for_day=inflow - daily_ten_percent - user_specified,
            cash_out=_sum_type(transactions, TransactionType.CASH_OUT),
            upi_out=_sum_type(transactions, TransactionType.UPI_OUT),
        )

    def daywise(self, day) -> DaywiseStats:
        """Per-type totals for a day plus its merged real and derived rows."""
        key = day_key(day)
        transactions = self._transactions_for(key)
        cash_in = _sum_type(transactions, TransactionType.CASH_IN)
        upi_in = _sum_type(transactions, TransactionType.UPI_IN)
        user_deductions = self.overrides.get_user_deductions()

        rows = [RealRow(t) for t in transactions]
        rows += derived_rows_for_day(key, self.overrides.get_ten_percent_savings(), user_deductions)

        return DaywiseStats(
            day=key,
            cash_in=cash_in,
            upi_in=upi_in,
            cash_out=_sum_type(transactions, TransactionType.CASH_OUT),
            upi_out=_sum_type(transactions, TransactionType.UPI_OUT),
            combined_total=cash_in + upi_in,
            ten_percent_deduction=ten_percent(cash_in + upi_in),
            user_deduction=user_deductions.get(key, 0),
            rows=sort_rows(rows),
        )

    def recalculate_all_days(self):
        """Rebuild the whole 10% savings cache from the ledger.

        Days whose inflow yields no deduction are dropped from the cache.

        Returns:
            The new cache mapping of day key to amount.
        """
        df = transactions_to_df(self.ledger.get_all())
        inflow_types = [TransactionType.CASH_IN.value, TransactionType.UPI_IN.value]
        inflows = df[df['type'].isin(inflow_types)]

        savings = {}
        if not inflows.empty:
            for key, total in inflows.groupby('day')['amount'].sum().items():
                amount = ten_percent(int(total))
                if amount > 0:
                    savings[int(key)] = amount

        self.overrides.replace_ten_percent_savings(savings)
        logger.debug("Ten percent savings rebuilt for %d days", len(savings))
        return savings
