"""Leave accounting rules - entitlement sizing and request checks"""

from datetime import date
from typing import Iterable, Tuple

from kasa_gateway.domain.exceptions import ValidationError
from kasa_gateway.utils.date_utils import count_workdays, years_between

LEAVE_PENDING = "pending"
LEAVE_APPROVED = "approved"
LEAVE_REJECTED = "rejected"
LEAVE_CANCELLED = "cancelled"

ANNUAL_LEAVE = "annual"

# Statuses that block overlapping requests and can be cancelled
OPEN_LEAVE_STATUSES = (LEAVE_PENDING, LEAVE_APPROVED)


def annual_leave_days(start_date: date, today: date) -> int:
    """
    Yearly paid leave by seniority (Turkish Labour Law, art. 53).

    - under 5 years: 14 days
    - 5 to 15 years: 20 days
    - 15 years and more: 26 days
    """
    years_worked = years_between(start_date, today)
    if years_worked < 5:
        return 14
    if years_worked < 15:
        return 20
    return 26


def parse_iso_date(value: str, field_name: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")


def requested_workdays(start_date: str, end_date: str) -> int:
    start = parse_iso_date(start_date, "startDate")
    end = parse_iso_date(end_date, "endDate")
    if start > end:
        raise ValidationError("End date cannot be before start date")
    return count_workdays(start, end)


def overlaps(start_date: str, end_date: str, existing: Iterable[Tuple[str, str]]) -> bool:
    """True when [start_date, end_date] intersects any existing (start, end) range"""
    return any(start_date <= other_end and end_date >= other_start for other_start, other_end in existing)
