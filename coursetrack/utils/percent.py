"""Integer percentage helpers.

All percentages shown to users are whole numbers rounded half-up
(2.5 -> 3), never banker's rounding. A zero denominator yields 0.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal


Number = int | float | Decimal


def _to_decimal(value: Number) -> Decimal:
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def percentage(part: Number, whole: Number) -> int:
    """Return round_half_up(100 * part / whole), or 0 when whole is 0."""
    whole_d = _to_decimal(whole)
    if whole_d == 0:
        return 0
    ratio = _to_decimal(part) * 100 / whole_d
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def mean_percentage(values: Iterable[Number]) -> int:
    """Round-half-up mean of already computed percentages (0 if empty)."""
    items = [_to_decimal(v) for v in values]
    if not items:
        return 0
    return percentage(sum(items, Decimal(0)), len(items) * 100)


def meets_threshold(score: Number, max_score: Number, threshold: Number) -> bool:
    """Check 100 * score / max_score >= threshold without rounding.

    A zero max_score never meets a threshold.
    """
    max_d = _to_decimal(max_score)
    if max_d <= 0:
        return False
    return _to_decimal(score) * 100 >= _to_decimal(threshold) * max_d
