"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, time, timedelta


def add_months(from_date: date, months: int) -> date:
    """Calendar month arithmetic; days past the end of a short month clamp to its last day"""
    month_index = from_date.year * 12 + (from_date.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def cycle_start(now: datetime, anchor_hour: int) -> datetime:
    """Start of the 24-hour cycle containing `now`, anchored at anchor_hour local time"""
    anchor = datetime.combine(now.date(), time(hour=anchor_hour), tzinfo=now.tzinfo)
    if now < anchor:
        return anchor - timedelta(days=1)
    return anchor
