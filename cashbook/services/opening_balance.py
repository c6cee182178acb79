"""Opening balance register: a single replace-only snapshot."""
import logging

from cashbook.config import OPENING_BALANCE_KEY
from cashbook.data_structures import OpeningBalance, ZERO_OPENING_BALANCE
from cashbook.exceptions import ValidationError
from cashbook.timeutils import to_timestamp

logger = logging.getLogger(__name__)


class OpeningBalanceRegister:
    """Holds the most recent opening balance. No history is kept."""

    def __init__(self, db_manager):
        self.db = db_manager

    def get(self) -> OpeningBalance:
        data = self.db.load_scalar(OPENING_BALANCE_KEY)
        if data is None:
            return ZERO_OPENING_BALANCE
        return OpeningBalance.from_dict(data)

    def set(self, cash_balance, upi_balance, savings, user_deductions, date) -> OpeningBalance:
        values = {
            'cash_balance': cash_balance,
            'upi_balance': upi_balance,
            'savings': savings,
            'user_deductions': user_deductions,
        }
        for name, value in values.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"Opening {name} must be an integer, got {value!r}", name, value)
        opening = OpeningBalance(date=to_timestamp(date), **values)
        self.db.save_scalar(OPENING_BALANCE_KEY, opening.to_dict())
        logger.info("Opening balance set: cash=%d upi=%d savings=%d deductions=%d",
                    cash_balance, upi_balance, savings, user_deductions)
        return opening

    def reset(self):
        """Drop the stored snapshot; reads fall back to the zero opening balance."""
        self.db.delete_keys(OPENING_BALANCE_KEY)
