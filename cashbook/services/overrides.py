"""Per-day override maps.

Two independent maps keyed by day key (start of local day, nanoseconds):

- user deductions: explicit amounts entered by the user for a day.
- ten percent savings: a cache of the computed daily savings deduction.

Keys are stored as decimal strings since JSON objects only have string keys.
"""
import logging

from cashbook.config import USER_DEDUCTIONS_KEY, TEN_PERCENT_SAVINGS_KEY
from cashbook.exceptions import ValidationError
from cashbook.timeutils import day_key

logger = logging.getLogger(__name__)


class DailyOverrides:
    """Reads and writes the per-day override maps."""

    def __init__(self, db_manager):
        self.db = db_manager

    def _load(self, key):
        raw = self.db.load_scalar(key, {})
        return {int(k): int(v) for k, v in raw.items()}

    def _save(self, key, mapping):
        self.db.save_scalar(key, {str(k): int(v) for k, v in sorted(mapping.items())})

    # User-specified deductions
    def get_user_deductions(self):
        return self._load(USER_DEDUCTIONS_KEY)

    def get_user_deduction(self, day) -> int:
        return self.get_user_deductions().get(day_key(day), 0)

    def set_user_deduction(self, day, amount):
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError(f"Deduction must be an integer, got {amount!r}", "amount", amount)
        key = day_key(day)
        with self.db.transaction():
            mapping = self.get_user_deductions()
            mapping[key] = amount
            self._save(USER_DEDUCTIONS_KEY, mapping)
        logger.info("User deduction for day %d set to %d", key, amount)
        return key

    # Ten percent savings cache
    def get_ten_percent_savings(self):
        return self._load(TEN_PERCENT_SAVINGS_KEY)

    def set_ten_percent_saving(self, key, amount):
        """Cache one day's value. Skips the write when nothing changed."""
        with self.db.transaction():
            mapping = self.get_ten_percent_savings()
            if mapping.get(key) == amount:
                return
            mapping[key] = amount
            self._save(TEN_PERCENT_SAVINGS_KEY, mapping)
        logger.debug("Ten percent savings for day %d cached as %d", key, amount)

    def replace_ten_percent_savings(self, mapping):
        self._save(TEN_PERCENT_SAVINGS_KEY, mapping)

    def replace_user_deductions(self, mapping):
        self._save(USER_DEDUCTIONS_KEY, mapping)

    # Cumulative pools
    def cumulative_user_deductions(self) -> int:
        return sum(self.get_user_deductions().values())

    def cumulative_ten_percent_savings(self) -> int:
        return sum(self.get_ten_percent_savings().values())

    def clear(self):
        self.db.delete_keys(USER_DEDUCTIONS_KEY, TEN_PERCENT_SAVINGS_KEY)
