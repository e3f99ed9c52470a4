"""Exam Timing — pure window checks and countdown arithmetic for timed exams.

Invariants:
    - All datetimes compared as UTC; naive values are treated as UTC
    - remaining_seconds is never negative
    - closes_at caps the countdown even when duration would allow more time
"""

from datetime import datetime, timezone

from skillsharp.core.errors import BusinessRuleError


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def check_exam_window(
    opens_at: datetime | None, closes_at: datetime | None, now: datetime,
) -> None:
    """Raise if the exam cannot be started at `now`."""
    now = as_utc(now)
    if opens_at is not None and now < as_utc(opens_at):
        raise BusinessRuleError(
            f"This exam hasn't started yet. It opens at {as_utc(opens_at).isoformat()}",
            "EXAM_NOT_OPEN",
        )
    if closes_at is not None and now > as_utc(closes_at):
        raise BusinessRuleError("This exam has already ended.", "EXAM_CLOSED")


def remaining_seconds(
    started_at: datetime,
    duration_minutes: int,
    now: datetime,
    closes_at: datetime | None = None,
) -> int:
    """Seconds left on an attempt's countdown."""
    now = as_utc(now)
    elapsed = int((now - as_utc(started_at)).total_seconds())
    remaining = duration_minutes * 60 - elapsed
    if closes_at is not None:
        until_close = int((as_utc(closes_at) - now).total_seconds())
        remaining = min(remaining, until_close)
    return max(remaining, 0)


def format_clock(seconds: int) -> str:
    """MM:SS rendering used by exam countdown displays."""
    seconds = max(seconds, 0)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def minutes_between(start: datetime | None, end: datetime | None) -> int:
    """Whole minutes from start to end, rounded; 0 when either is missing."""
    if start is None or end is None:
        return 0
    return round((as_utc(end) - as_utc(start)).total_seconds() / 60)
