"""Tests for range breakdowns and month/year rollups."""
import unittest
from datetime import datetime

from cashbook.database import DatabaseManager
from cashbook.data_structures import DailyBreakdown, DerivedKind, DerivedRow, RealRow, TransactionType
from cashbook.engine import LedgerEngine
from cashbook.exceptions import ValidationError
from cashbook.reports import coerce_type_filter, ALL_TYPES
from cashbook.timeutils import day_key, next_day_key


class ReportTestCase(unittest.TestCase):
    """March 2024 ledger with one tracked day and one user deduction."""

    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.engine = LedgerEngine(self.db)
        self.mar15 = day_key(datetime(2024, 3, 15))
        self.mar20 = day_key(datetime(2024, 3, 20))

        self.engine.add_transaction(TransactionType.CASH_IN, 1000, "Shop sales", datetime(2024, 3, 15, 9, 0))
        self.engine.add_transaction(TransactionType.UPI_IN, 50, "UPI sale", datetime(2024, 3, 15, 11, 0))
        self.engine.add_transaction(TransactionType.CASH_OUT, 200, "Rent", datetime(2024, 3, 20, 10, 0))
        self.engine.add_transaction(TransactionType.CASH_IN, 500, "April sales", datetime(2024, 4, 2, 10, 0))
        self.engine.get_daily_tracking(self.mar15)
        self.engine.set_user_deduction(self.mar15, 30)

    def tearDown(self):
        self.db.close()


class TestRangeBreakdown(ReportTestCase):

    def test_breakdown_rows(self):
        rows = self.engine.get_range_breakdown(datetime(2024, 3, 1), datetime(2024, 3, 31))

        self.assertEqual([r.day for r in rows], [self.mar20, self.mar15])
        rent_day, sale_day = rows
        self.assertEqual(rent_day.total_inflow, 0)
        self.assertEqual(rent_day.ten_percent_deduction, 0)
        self.assertEqual(sale_day.cash_in, 1000)
        self.assertEqual(sale_day.upi_in, 50)
        self.assertEqual(sale_day.total_inflow, 1050)
        self.assertEqual(sale_day.ten_percent_deduction, 110)
        self.assertEqual(sale_day.user_deduction, 30)

    def test_inflow_sum_matches_ledger(self):
        """Test that total inflow equals the sum of in-range inflow transactions."""
        self.engine.add_transaction(TransactionType.UPI_IN, 70, "Late sale", datetime(2024, 3, 15, 23, 59))
        self.engine.add_transaction(TransactionType.CASH_IN, 900, "Next day", datetime(2024, 3, 16, 0, 0))
        start, end = datetime(2024, 3, 1), datetime(2024, 3, 15)
        rows = self.engine.get_range_breakdown(start, end)
        expected = sum(
            t.amount for t in self.engine.get_all_transactions()
            if t.type.is_inflow and day_key(start) <= t.date < next_day_key(day_key(end))
        )
        self.assertEqual(sum(r.total_inflow for r in rows), expected)
        self.assertEqual(expected, 1000 + 50 + 70)

    def test_ten_percent_computed_fresh(self):
        """Test that the breakdown ignores a stale cache."""
        self.engine.add_transaction(TransactionType.CASH_IN, 1000, "", datetime(2024, 3, 15, 15, 0))
        rows = self.engine.get_range_breakdown(self.mar15, self.mar15)
        self.assertEqual(rows[0].ten_percent_deduction, 210)
        self.assertEqual(self.engine.overrides.get_ten_percent_savings()[self.mar15], 110)

    def test_end_day_is_inclusive(self):
        rows = self.engine.get_range_breakdown(datetime(2024, 3, 10), datetime(2024, 3, 15))
        self.assertEqual([r.day for r in rows], [self.mar15])
        self.assertEqual(rows[0].total_inflow, 1050)

    def test_empty_range(self):
        self.assertEqual(self.engine.get_range_breakdown(datetime(2023, 1, 1), datetime(2023, 12, 31)), [])

    def test_start_after_end_rejected(self):
        with self.assertRaises(ValidationError):
            self.engine.get_range_breakdown(datetime(2024, 3, 31), datetime(2024, 3, 1))

    def test_summary(self):
        summary = self.engine.get_range_summary(datetime(2024, 3, 1), datetime(2024, 3, 31))
        self.assertEqual(summary.total_cash_in, 1000)
        self.assertEqual(summary.total_upi_in, 50)
        self.assertEqual(summary.total_inflow, 1050)
        self.assertEqual(summary.total_deductions, 140)
        self.assertEqual(summary.days, 2)

    def test_range_rows_merge_derived(self):
        rows = self.engine.get_range_rows(datetime(2024, 3, 1), datetime(2024, 3, 31))

        self.assertIsInstance(rows[0], DailyBreakdown)
        self.assertEqual(rows[0].day, self.mar20)
        self.assertIsInstance(rows[1], DailyBreakdown)
        self.assertEqual([(r.kind, r.amount) for r in rows[2:]],
                         [(DerivedKind.TEN_PERCENT_SAVINGS, -110), (DerivedKind.USER_DEDUCTION, -30)])


class TestMonthlyRollup(ReportTestCase):

    def test_all_types(self):
        result = self.engine.get_monthly_rollup(2024, 3)

        self.assertEqual(result.transaction_count, 5)
        self.assertEqual(result.total_amount, 1000 + 50 + 200 - 110 - 30)
        self.assertEqual(len(result.rows), result.transaction_count)

        amounts = [r.amount for r in result.rows]
        self.assertEqual(amounts, [200, 50, 1000, -110, -30])
        dates = [r.date for r in result.rows]
        self.assertEqual(dates, sorted(dates, reverse=True))

    def test_transaction_type_filter(self):
        result = self.engine.get_monthly_rollup(2024, 3, TransactionType.CASH_IN)
        self.assertEqual(result.transaction_count, 1)
        self.assertEqual(result.total_amount, 1000)
        self.assertTrue(all(isinstance(r, RealRow) for r in result.rows))

    def test_string_filter(self):
        result = self.engine.get_monthly_rollup(2024, 3, "cashOut")
        self.assertEqual([r.transaction.description for r in result.rows], ["Rent"])

    def test_derived_kind_filter(self):
        saved = self.engine.get_monthly_rollup(2024, 3, DerivedKind.TEN_PERCENT_SAVINGS)
        self.assertEqual(saved.transaction_count, 1)
        self.assertEqual(saved.total_amount, -110)

        deducted = self.engine.get_monthly_rollup(2024, 3, "userDeduction")
        self.assertEqual(deducted.transaction_count, 1)
        self.assertEqual(deducted.total_amount, -30)
        self.assertTrue(all(isinstance(r, DerivedRow) for r in deducted.rows))

    def test_search_description_case_insensitive(self):
        result = self.engine.get_monthly_rollup(2024, 3, TransactionType.CASH_OUT, "RENT")
        self.assertEqual(result.transaction_count, 1)

        result = self.engine.get_monthly_rollup(2024, 3, TransactionType.CASH_IN, "rent")
        self.assertEqual(result.transaction_count, 0)
        self.assertEqual(result.total_amount, 0)

    def test_search_matches_amount(self):
        result = self.engine.get_monthly_rollup(2024, 3, TransactionType.UPI_IN, "50")
        self.assertEqual([r.amount for r in result.rows], [50])

    def test_search_leaves_derived_rows(self):
        result = self.engine.get_monthly_rollup(2024, 3, ALL_TYPES, "rent")
        real = [r for r in result.rows if isinstance(r, RealRow)]
        self.assertEqual(len(real), 1)
        self.assertEqual(result.transaction_count, 3)

    def test_blank_search_ignored(self):
        self.assertEqual(self.engine.get_monthly_rollup(2024, 3, search="   ").transaction_count, 5)

    def test_other_month(self):
        result = self.engine.get_monthly_rollup(2024, 4)
        self.assertEqual(result.transaction_count, 1)
        self.assertEqual(result.total_amount, 500)

    def test_invalid_month(self):
        with self.assertRaises(ValidationError):
            self.engine.get_monthly_rollup(2024, 13)
        with self.assertRaises(ValidationError):
            self.engine.get_monthly_rollup(2024, 0)

    def test_unknown_filter(self):
        with self.assertRaises(ValidationError):
            self.engine.get_monthly_rollup(2024, 3, "bankIn")


class TestYearlyRollup(ReportTestCase):

    def test_whole_year(self):
        result = self.engine.get_yearly_rollup(2024)
        self.assertEqual(result.transaction_count, 6)
        self.assertEqual(result.total_amount, 1000 + 50 + 200 + 500 - 110 - 30)
        self.assertEqual(result.rows[0].amount, 500)

    def test_other_year_empty(self):
        result = self.engine.get_yearly_rollup(2023)
        self.assertEqual(result.transaction_count, 0)
        self.assertEqual(result.rows, [])

    def test_yearly_search(self):
        result = self.engine.get_yearly_rollup(2024, TransactionType.CASH_IN, "sales")
        self.assertEqual([r.amount for r in result.rows], [500, 1000])


class TestTypeFilter(unittest.TestCase):

    def test_coercion(self):
        self.assertEqual(coerce_type_filter(None), ALL_TYPES)
        self.assertEqual(coerce_type_filter("all"), ALL_TYPES)
        self.assertIs(coerce_type_filter("upiIn"), TransactionType.UPI_IN)
        self.assertIs(coerce_type_filter("tenPercentSavings"), DerivedKind.TEN_PERCENT_SAVINGS)
        self.assertIs(coerce_type_filter(DerivedKind.USER_DEDUCTION), DerivedKind.USER_DEDUCTION)

    def test_unknown(self):
        with self.assertRaises(ValidationError):
            coerce_type_filter("salary")


if __name__ == '__main__':
    unittest.main()
