"""Unit tests for leave accounting rules"""

import pytest
from datetime import date
from kasa_gateway.domain.exceptions import ValidationError
from kasa_gateway.domain.leave import annual_leave_days, overlaps, requested_workdays
from kasa_gateway.utils.date_utils import count_workdays, generate_date_range


@pytest.mark.parametrize(
    "start_date,expected",
    [
        (date(2023, 1, 1), 14),
        (date(2019, 6, 1), 14),
        (date(2019, 1, 1), 20),
        (date(2010, 1, 1), 20),
        (date(2008, 1, 1), 26),
    ],
)
def test_annual_leave_days_by_seniority(start_date, expected):
    """Test entitlement tiers at under 5, under 15 and 15+ years"""
    assert annual_leave_days(start_date, date(2024, 3, 1)) == expected


def test_requested_workdays_skips_weekends():
    """Test Friday to Monday counts two workdays"""
    assert requested_workdays("2024-03-01", "2024-03-04") == 2


def test_requested_workdays_single_day():
    assert requested_workdays("2024-03-05", "2024-03-05") == 1


def test_requested_workdays_rejects_reversed_range():
    """Test end before start is a validation error"""
    with pytest.raises(ValidationError):
        requested_workdays("2024-03-10", "2024-03-01")


def test_requested_workdays_rejects_bad_date():
    with pytest.raises(ValidationError):
        requested_workdays("2024-13-01", "2024-13-02")


def test_overlaps():
    """Test inclusive overlap with existing ranges"""
    existing = [("2024-03-04", "2024-03-08")]

    assert overlaps("2024-03-08", "2024-03-12", existing)
    assert overlaps("2024-03-01", "2024-03-04", existing)
    assert overlaps("2024-03-01", "2024-03-31", existing)
    assert overlaps("2024-03-05", "2024-03-06", existing)
    assert not overlaps("2024-03-09", "2024-03-12", existing)
    assert not overlaps("2024-03-01", "2024-03-03", [])


def test_count_workdays_full_week():
    """Test a Monday to Sunday week has five workdays"""
    days = generate_date_range(date(2024, 3, 4), date(2024, 3, 10))

    assert len(days) == 7
    assert count_workdays(date(2024, 3, 4), date(2024, 3, 10)) == 5
