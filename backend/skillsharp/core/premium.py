"""Premium Window — pure arithmetic for subscription expiry.

Invariants:
    - Extensions stack: a new period starts at the later of now and the current expiry
    - A missing expiry means no premium
"""

from datetime import datetime, timedelta

from skillsharp.core.exam_timing import as_utc


def extend_premium(current_until: datetime | None, now: datetime, days: int) -> datetime:
    start = as_utc(now)
    if current_until is not None and as_utc(current_until) > start:
        start = as_utc(current_until)
    return start + timedelta(days=days)


def is_premium_active(premium_until: datetime | None, now: datetime) -> bool:
    return premium_until is not None and as_utc(premium_until) > as_utc(now)
