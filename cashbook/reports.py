"""
Report generation module for the Cashbook ledger.
Handles date-range daily breakdowns and month/year rollups.
"""
import logging

from cashbook.data_structures import (
    DailyBreakdown, DerivedKind, RangeSummary, RealRow, RollupResult,
    TransactionType, transactions_to_df,
)
from cashbook.exceptions import ValidationError
from cashbook.services.daily_tracker import derived_rows_for_day, sort_rows
from cashbook.services.deduction import ten_percent
from cashbook.timeutils import day_key, next_day_key, month_bounds, year_bounds

logger = logging.getLogger(__name__)

ALL_TYPES = "all"


def coerce_type_filter(type_filter):
    """Resolve a rollup filter to ALL_TYPES, a TransactionType or a DerivedKind."""
    if type_filter is None or type_filter == ALL_TYPES:
        return ALL_TYPES
    if isinstance(type_filter, (TransactionType, DerivedKind)):
        return type_filter
    for enum_cls in (TransactionType, DerivedKind):
        try:
            return enum_cls(type_filter)
        except ValueError:
            continue
    raise ValidationError(f"Unknown type filter {type_filter!r}", "type_filter", type_filter)


class ReportGenerator:
    def __init__(self, ledger_store, overrides):
        self.ledger = ledger_store
        self.overrides = overrides

    def _range_window(self, start, end):
        """Half-open window covering every local day from start to end inclusive."""
        start_key = day_key(start)
        end_key = day_key(end)
        if start_key > end_key:
            raise ValidationError("Start date must not be after end date", "start", start)
        return start_key, next_day_key(end_key)

    def get_range_breakdown(self, start, end):
        """
        Per-day inflow statistics for every day in [start, end] that has at
        least one transaction. The 10% deduction is computed fresh from the
        day's inflow, never read from the cache.
        Returns a list of DailyBreakdown sorted by day, most recent first.
        """
        window_start, window_end = self._range_window(start, end)
        df = transactions_to_df(self.ledger.get_all())
        in_range = df[(df['date'] >= window_start) & (df['date'] < window_end)]
        if in_range.empty:
            return []

        user_deductions = self.overrides.get_user_deductions()
        result = []
        for key, group in in_range.groupby('day'):
            key = int(key)
            cash_in = int(group.loc[group['type'] == TransactionType.CASH_IN.value, 'amount'].sum())
            upi_in = int(group.loc[group['type'] == TransactionType.UPI_IN.value, 'amount'].sum())
            total = cash_in + upi_in
            result.append(DailyBreakdown(
                day=key,
                cash_in=cash_in,
                upi_in=upi_in,
                total_inflow=total,
                ten_percent_deduction=ten_percent(total),
                user_deduction=user_deductions.get(key, 0),
            ))
        return sorted(result, key=lambda r: r.day, reverse=True)

    def get_range_summary(self, start, end) -> RangeSummary:
        breakdown = self.get_range_breakdown(start, end)
        return RangeSummary(
            total_cash_in=sum(r.cash_in for r in breakdown),
            total_upi_in=sum(r.upi_in for r in breakdown),
            total_inflow=sum(r.total_inflow for r in breakdown),
            total_deductions=sum(r.ten_percent_deduction + r.user_deduction for r in breakdown),
            days=len(breakdown),
        )

    def get_range_rows(self, start, end):
        """Range breakdown merged with the cached derived rows of the same window."""
        window_start, window_end = self._range_window(start, end)
        rows = list(self.get_range_breakdown(start, end))
        rows += self._derived_rows(window_start, window_end, ALL_TYPES)
        return sort_rows(rows)

    def _derived_rows(self, window_start, window_end, type_filter):
        savings = self.overrides.get_ten_percent_savings()
        deductions = self.overrides.get_user_deductions()
        keys = sorted(
            (k for k in set(savings) | set(deductions) if window_start <= k < window_end),
            reverse=True,
        )
        rows = []
        for key in keys:
            for row in derived_rows_for_day(key, savings, deductions):
                if type_filter == ALL_TYPES or row.kind == type_filter:
                    rows.append(row)
        return rows

    def _rollup(self, window_start, window_end, type_filter, search):
        type_filter = coerce_type_filter(type_filter)
        rows = []

        if type_filter == ALL_TYPES or isinstance(type_filter, TransactionType):
            df = transactions_to_df(self.ledger.get_all())
            selected = df[(df['date'] >= window_start) & (df['date'] < window_end)]
            if isinstance(type_filter, TransactionType):
                selected = selected[selected['type'] == type_filter.value]
            if search and search.strip():
                query = search.strip().lower()
                matches = (
                    selected['description'].astype(str).str.lower().str.contains(query, regex=False)
                    | selected['amount'].astype(str).str.contains(query, regex=False)
                )
                selected = selected[matches]
            rows += [RealRow(tx) for tx in selected['transaction']]

        if type_filter == ALL_TYPES or isinstance(type_filter, DerivedKind):
            rows += self._derived_rows(window_start, window_end, type_filter)

        rows = sort_rows(rows)
        return RollupResult(
            total_amount=sum(row.amount for row in rows),
            transaction_count=len(rows),
            rows=rows,
        )

    def get_monthly_rollup(self, year, month, type_filter=ALL_TYPES, search=None) -> RollupResult:
        """Transactions and/or derived rows dated within one calendar month.

        A TransactionType filter selects real rows only, a DerivedKind filter
        selects derived rows only, and ALL_TYPES selects both.

        total_amount and transaction_count cover every selected row, derived
        rows included, so the negated savings and user deductions reduce the
        total.
        """
        window_start, window_end = month_bounds(year, month)
        result = self._rollup(window_start, window_end, type_filter, search)
        logger.debug("Monthly rollup %04d-%02d (%s): %d rows", year, month, type_filter, result.transaction_count)
        return result

    def get_yearly_rollup(self, year, type_filter=ALL_TYPES, search=None) -> RollupResult:
        window_start, window_end = year_bounds(year)
        return self._rollup(window_start, window_end, type_filter, search)

    def get_transactions_by_type(self, transaction_type):
        transaction_type = coerce_type_filter(transaction_type)
        if not isinstance(transaction_type, TransactionType):
            raise ValidationError(f"Not a transaction type: {transaction_type!r}", "transaction_type", transaction_type)
        return _newest_first([t for t in self.ledger.get_all() if t.type == transaction_type])

    def get_all_transactions(self):
        return _newest_first(self.ledger.get_all())


def _newest_first(transactions):
    return sorted(transactions, key=lambda t: t.date, reverse=True)
