"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone
from typing import List


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def count_workdays(start: date, end: date) -> int:
    """Count Monday-Friday days between start and end (inclusive, no holiday calendar)"""
    return sum(1 for day in generate_date_range(start, end) if day.weekday() < 5)


def years_between(start: date, end: date) -> float:
    return (end - start).days / 365


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
