"""Balance calculation service for the Cashbook ledger.

This service folds the whole ledger into the current balances:
- Per-type raw sums
- Cash, UPI, savings and deductions balances
- Cumulative savings/deduction pools
"""
import logging

from cashbook.data_structures import BalanceSnapshot, CumulativeStats, TransactionType

logger = logging.getLogger(__name__)


def sum_by_type(transactions):
    """Plain per-type sums, sign included as stored."""
    totals = {t: 0 for t in TransactionType}
    for tx in transactions:
        totals[tx.type] += tx.amount
    return totals


def aggregate_balances(transactions, opening, cumulative_ten_percent, cumulative_user_deductions):
    """Compute a BalanceSnapshot from the full ledger state.

    The opening cash and UPI balances are treated as a day-zero inflow. The
    savings and user-deduction pools are funded from cash, so both the pool
    contributions and any savings withdrawal reduce the cash balance.

    Args:
        transactions: Every transaction in the ledger.
        opening: The current OpeningBalance.
        cumulative_ten_percent: Sum of all cached daily 10% savings.
        cumulative_user_deductions: Sum of all user-specified daily deductions.

    Returns:
        BalanceSnapshot. Always recomputed, never cached.
    """
    totals = sum_by_type(transactions)
    cash_in = totals[TransactionType.CASH_IN] + opening.cash_balance
    upi_in = totals[TransactionType.UPI_IN] + opening.upi_balance
    cash_out = totals[TransactionType.CASH_OUT]
    upi_out = totals[TransactionType.UPI_OUT]
    savings_out = totals[TransactionType.SAVINGS_OUT]
    deductions_out = totals[TransactionType.DEDUCTIONS_OUT]

    cash_balance = cash_in - cash_out - cumulative_ten_percent - cumulative_user_deductions - savings_out
    upi_balance = upi_in - upi_out
    savings_balance = opening.savings + cumulative_ten_percent - savings_out
    deductions_balance = opening.user_deductions + cumulative_user_deductions - deductions_out

    return BalanceSnapshot(
        cash_in=cash_in,
        cash_out=cash_out,
        upi_in=upi_in,
        upi_out=upi_out,
        savings_out=savings_out,
        deductions_out=deductions_out,
        cash_balance=cash_balance,
        upi_balance=upi_balance,
        savings_balance=savings_balance,
        deductions_balance=deductions_balance,
        # Savings and deductions are already netted out of cash_balance.
        total_balance=cash_balance + upi_balance,
    )


class BalanceAggregator:
    """Reads current state from storage and derives balances on demand."""

    def __init__(self, ledger_store, opening_register, overrides):
        """Initialize BalanceAggregator.

        Args:
            ledger_store: LedgerStore holding the transactions.
            opening_register: OpeningBalanceRegister with the opening snapshot.
            overrides: DailyOverrides with both per-day maps.
        """
        self.ledger = ledger_store
        self.opening = opening_register
        self.overrides = overrides

    def get_balances(self) -> BalanceSnapshot:
        snapshot = aggregate_balances(
            self.ledger.get_all(),
            self.opening.get(),
            self.overrides.cumulative_ten_percent_savings(),
            self.overrides.cumulative_user_deductions(),
        )
        logger.debug("Balances recomputed: total=%d", snapshot.total_balance)
        return snapshot

    def get_cumulative_stats(self) -> CumulativeStats:
        """Pool totals including the opening savings and deductions."""
        opening = self.opening.get()
        return CumulativeStats(
            cumulative_ten_percent_savings=opening.savings + self.overrides.cumulative_ten_percent_savings(),
            cumulative_user_deductions=opening.user_deductions + self.overrides.cumulative_user_deductions(),
        )
