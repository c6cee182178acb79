"""Centralized configuration for the Cashbook ledger.

This module contains the business rule constants, storage keys and
environment-driven settings used throughout the codebase.
"""
import logging.config
import os
from functools import lru_cache

# =============================================================================
# DEDUCTION RULES
# =============================================================================

# Share of a day's inflow set aside as savings (percent)
DEDUCTION_PERCENT = 10

# Daily deductions are rounded to the nearest multiple of this step
DEDUCTION_ROUNDING_STEP = 10

# =============================================================================
# TIME
# =============================================================================

# All timestamps are integer nanoseconds since the Unix epoch
NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MICROSECOND = 1_000

# =============================================================================
# STORAGE
# =============================================================================

DEFAULT_DB_NAME = "cashbook.db"

TRANSACTIONS_KEY = "transactions"
NEXT_ID_KEY = "next_transaction_id"
OPENING_BALANCE_KEY = "opening_balance"
USER_DEDUCTIONS_KEY = "user_deductions"
TEN_PERCENT_SAVINGS_KEY = "ten_percent_savings"

# =============================================================================
# BACKUP
# =============================================================================

BACKUP_FORMAT_VERSION = 1

# =============================================================================
# LOGGING
# =============================================================================

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_LOG_LEVEL = "WARNING"


class Settings:
    def __init__(self, db_path: str, log_level: str) -> None:
        self.db_path = db_path
        self.log_level = log_level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    db_path = os.getenv("CASHBOOK_DB_PATH", DEFAULT_DB_NAME)
    log_level = os.getenv("CASHBOOK_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    return Settings(db_path=db_path, log_level=log_level)


def configure_logging(level: str = None) -> None:
    """Install a console handler for the ``cashbook`` logger tree.

    Args:
        level: Log level name. Defaults to the CASHBOOK_LOG_LEVEL setting.
    """
    level = (level or get_settings().log_level).upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "cashbook": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
    })
