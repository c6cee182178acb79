from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Dict, Any, Union
import pandas as pd

from cashbook.timeutils import day_key


class TransactionType(str, Enum):
    CASH_IN = "cashIn"
    CASH_OUT = "cashOut"
    UPI_IN = "upiIn"
    UPI_OUT = "upiOut"
    SAVINGS_OUT = "savingsOut"
    DEDUCTIONS_OUT = "deductionsOut"

    @property
    def is_inflow(self) -> bool:
        return self in INFLOW_TYPES


INFLOW_TYPES = frozenset({TransactionType.CASH_IN, TransactionType.UPI_IN})


class DerivedKind(str, Enum):
    """Display-only rows sourced from the per-day override maps."""
    TEN_PERCENT_SAVINGS = "tenPercentSavings"
    USER_DEDUCTION = "userDeduction"


@dataclass(frozen=True)
class Transaction:
    id: int
    type: TransactionType
    amount: int
    description: str
    date: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'transactionType': self.type.value,
            'amount': self.amount,
            'description': self.description,
            'date': self.date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=int(data['id']),
            type=TransactionType(data['transactionType']),
            amount=int(data['amount']),
            description=str(data.get('description') or ""),
            date=int(data['date']),
        )


@dataclass(frozen=True)
class OpeningBalance:
    cash_balance: int = 0
    upi_balance: int = 0
    savings: int = 0
    user_deductions: int = 0
    date: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OpeningBalance':
        return cls(**{k: int(data.get(k, 0)) for k in
                      ('cash_balance', 'upi_balance', 'savings', 'user_deductions', 'date')})


ZERO_OPENING_BALANCE = OpeningBalance()


@dataclass(frozen=True)
class CumulativeStats:
    cumulative_ten_percent_savings: int
    cumulative_user_deductions: int


@dataclass(frozen=True)
class BalanceSnapshot:
    """Derived balances. Raw sums already include the opening cash/UPI figures."""
    cash_in: int
    cash_out: int
    upi_in: int
    upi_out: int
    savings_out: int
    deductions_out: int
    cash_balance: int
    upi_balance: int
    savings_balance: int
    deductions_balance: int
    total_balance: int


@dataclass(frozen=True)
class DailyTracking:
    day: int
    total_daily_inflow: int
    daily_ten_percent: int
    user_specified: int
    net_for_day: int
    cash_out: int
    upi_out: int


@dataclass(frozen=True)
class RealRow:
    transaction: Transaction

    @property
    def date(self) -> int:
        return self.transaction.date

    @property
    def amount(self) -> int:
        return self.transaction.amount


@dataclass(frozen=True)
class DerivedRow:
    kind: DerivedKind
    amount: int
    date: int


DisplayRow = Union[RealRow, DerivedRow]


@dataclass(frozen=True)
class DaywiseStats:
    day: int
    cash_in: int
    upi_in: int
    cash_out: int
    upi_out: int
    combined_total: int
    ten_percent_deduction: int
    user_deduction: int
    rows: List[DisplayRow] = field(default_factory=list)


@dataclass(frozen=True)
class DailyBreakdown:
    day: int
    cash_in: int
    upi_in: int
    total_inflow: int
    ten_percent_deduction: int
    user_deduction: int

    @property
    def date(self) -> int:
        return self.day


@dataclass(frozen=True)
class RangeSummary:
    total_cash_in: int
    total_upi_in: int
    total_inflow: int
    total_deductions: int
    days: int


@dataclass(frozen=True)
class RollupResult:
    total_amount: int
    transaction_count: int
    rows: List[DisplayRow] = field(default_factory=list)


LEDGER_COLUMNS = ['id', 'type', 'amount', 'description', 'date', 'day', 'transaction']


def transactions_to_df(transactions) -> pd.DataFrame:
    """Tabular view of the ledger, one row per transaction, in input order.

    ``day`` is the local day key of ``date``; ``transaction`` keeps the
    original Transaction object for building display rows.
    """
    records = [
        {
            'id': tx.id,
            'type': tx.type.value,
            'amount': tx.amount,
            'description': tx.description,
            'date': tx.date,
            'day': day_key(tx.date),
            'transaction': tx,
        }
        for tx in transactions
    ]
    if not records:
        return pd.DataFrame(columns=LEDGER_COLUMNS)
    return pd.DataFrame.from_records(records, columns=LEDGER_COLUMNS)
