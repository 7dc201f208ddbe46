from coursetrack.utils.dates import ensure_utc_aware, from_iso, to_iso, utcnow
from coursetrack.utils.percent import mean_percentage, meets_threshold, percentage


__all__ = [
    "ensure_utc_aware",
    "from_iso",
    "mean_percentage",
    "meets_threshold",
    "percentage",
    "to_iso",
    "utcnow",
]
