"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import Iterator, List

from dateutil.relativedelta import relativedelta


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Date for `day` in the given month, clamped to the month's last day (Feb 31 -> Feb 28/29)"""
    return date(year, month, min(day, days_in_month(year, month)))


def iter_months(start: date, end: date) -> Iterator[date]:
    """Yield the first day of every month overlapping [start, end]"""
    current = start.replace(day=1)
    while current <= end:
        yield current
        current = current + relativedelta(months=1)


def sunday_based_weekday(day: date) -> int:
    """Weekday with 0 = Sunday ... 6 = Saturday"""
    return (day.weekday() + 1) % 7
