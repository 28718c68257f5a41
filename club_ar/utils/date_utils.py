"""Date manipulation utilities"""

from datetime import date, datetime, timedelta


def as_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar date; dates pass through unchanged"""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative if end precedes start)"""
    return (as_date(end) - as_date(start)).days


def add_days(from_date: date, days: int) -> date:
    """Shift a date by a number of calendar days"""
    return from_date + timedelta(days=days)
