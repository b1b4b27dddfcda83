"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, time
from typing import Tuple


def days_in_month(year: int, month: int) -> int:
    """Number of calendar days in the given month"""
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First and last instant (millisecond precision) of a calendar month, local time"""
    start = datetime.combine(date(year, month, 1), time.min)
    end = datetime.combine(date(year, month, days_in_month(year, month)), time(23, 59, 59, 999000))
    return start, end


def day_in_month(year: int, month: int, day: int) -> date:
    """Date for a day-of-month, clamped to the month's last day (31 in February -> 28/29)"""
    return date(year, month, min(day, days_in_month(year, month)))
