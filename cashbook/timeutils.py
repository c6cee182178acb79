"""Timestamp helpers.

Every date in the ledger is an integer count of nanoseconds since the Unix
epoch. Calendar bucketing (days, months, years) uses the local timezone of the
running process, so a "day" is local midnight to local midnight.
"""
import time
from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from cashbook.config import NANOS_PER_SECOND, NANOS_PER_MICROSECOND
from cashbook.exceptions import ValidationError


def now_ns() -> int:
    return time.time_ns()


def to_timestamp(value, field: str = "date") -> int:
    """Coerce an int, datetime or date into a nanosecond timestamp.

    Naive datetimes and plain dates are read as local time.

    Raises:
        ValidationError: If the value is not a supported date representation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}", field, value)
    if isinstance(value, int):
        # Must survive a round trip through a local datetime for day bucketing
        try:
            from_timestamp(value).timestamp()
        except (ValueError, OverflowError, OSError):
            raise ValidationError(f"Invalid {field}: {value!r} is out of range", field, value) from None
        return value
    if isinstance(value, datetime):
        try:
            seconds = int(value.replace(microsecond=0).timestamp())
        except (ValueError, OverflowError, OSError):
            raise ValidationError(f"Invalid {field}: {value!r} is out of range", field, value) from None
        return seconds * NANOS_PER_SECOND + value.microsecond * NANOS_PER_MICROSECOND
    if isinstance(value, date):
        return to_timestamp(datetime(value.year, value.month, value.day), field)
    raise ValidationError(f"Invalid {field}: {value!r}", field, value)


def from_timestamp(ts: int) -> datetime:
    """Local naive datetime for a nanosecond timestamp."""
    seconds, rest = divmod(ts, NANOS_PER_SECOND)
    return datetime.fromtimestamp(seconds).replace(microsecond=rest // NANOS_PER_MICROSECOND)


def day_key(value) -> int:
    """Start of the local calendar day containing ``value``, in nanoseconds."""
    moment = from_timestamp(to_timestamp(value))
    return to_timestamp(moment.replace(hour=0, minute=0, second=0, microsecond=0))


def next_day_key(key: int) -> int:
    start = from_timestamp(key)
    return to_timestamp(start + relativedelta(days=1))


def month_bounds(year: int, month: int):
    """Half-open [start, end) nanosecond window for a calendar month."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}", "month", month)
    start = datetime(year, month, 1)
    end = start + relativedelta(months=1)
    return to_timestamp(start), to_timestamp(end)


def year_bounds(year: int):
    start = datetime(year, 1, 1)
    end = start + relativedelta(years=1)
    return to_timestamp(start), to_timestamp(end)
