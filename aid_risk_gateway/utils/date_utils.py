"""Date and time manipulation utilities"""

from datetime import date, datetime, timedelta, timezone
from typing import List, Sequence

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def start_of_day(moment: datetime) -> datetime:
    """UTC midnight of the day containing moment"""
    moment = ensure_utc(moment)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def days_between(earlier: datetime, later: datetime) -> float:
    """Fractional days from earlier to later"""
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def mean_interval_days(timestamps: Sequence[datetime]) -> float:
    """
    Mean gap in days between consecutive timestamps.

    Returns 0.0 when fewer than two timestamps exist, since no interval can be measured.
    """
    if len(timestamps) < 2:
        return 0.0

    ordered = sorted(timestamps)
    intervals = [days_between(a, b) for a, b in zip(ordered, ordered[1:])]
    return sum(intervals) / len(intervals)
