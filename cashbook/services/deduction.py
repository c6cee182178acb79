"""Daily savings deduction rule."""
from cashbook.config import DEDUCTION_PERCENT, DEDUCTION_ROUNDING_STEP


def ten_percent(total: int) -> int:
    """Return 10% of a day's inflow, rounded to the nearest 10 (ties round up).

    The percentage is truncated to a whole unit first, then rounded on its
    last digit: 1050 -> 105 -> 110, 1040 -> 104 -> 100. Non-positive totals
    never produce a deduction.
    """
    if total <= 0:
        return 0
    raw = total * DEDUCTION_PERCENT // 100
    remainder = raw % DEDUCTION_ROUNDING_STEP
    if remainder * 2 >= DEDUCTION_ROUNDING_STEP:
        return raw + (DEDUCTION_ROUNDING_STEP - remainder)
    return raw - remainder
