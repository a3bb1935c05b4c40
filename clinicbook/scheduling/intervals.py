"""
Half-open interval arithmetic on naive UTC datetimes.

Every interval is [start, end): it includes its start and excludes its end,
so two back-to-back slots (09:00-09:30, 09:30-10:00) never overlap.
"""
from datetime import date, datetime, time


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    return a_start < b_end and b_start < a_end


def contains(outer_start, outer_end, inner_start, inner_end) -> bool:
    return outer_start <= inner_start and inner_end <= outer_end


def weekday_of(day) -> int:
    """Weekday with 0=Sunday .. 6=Saturday (datetime.weekday() starts at Monday)."""
    return day.isoweekday() % 7


def anchor(day: date, time_of_day: time) -> datetime:
    # Pin a UTC time of day onto a calendar date
    return datetime.combine(day, time_of_day)
