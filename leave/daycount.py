"""
Whole-day calendar arithmetic for leave periods.

All functions take ``date`` values (a ``datetime`` is cut down to its date
first) and treat both ends of a period as inclusive.
"""
from __future__ import annotations
from datetime import date, datetime, timedelta

ONE_DAY = timedelta(days=1)


def as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def total_days(start: date, end: date) -> int:
    start, end = as_day(start), as_day(end)
    if start > end:
        raise ValueError("start must be on or before end")
    return (end - start).days + 1


def working_days(start: date, end: date) -> int:
    """Number of Monday..Friday days in [start, end]. No holiday calendar."""
    start, end = as_day(start), as_day(end)
    if start > end:
        raise ValueError("start must be on or before end")
    count = 0
    current = start
    while current <= end:
        if current.weekday() < 5:  # 0=Mon .. 4=Fri
            count += 1
        current += ONE_DAY
    return count


def year_of(day: date) -> int:
    return as_day(day).year


def format_day(day: date) -> str:
    return as_day(day).strftime("%d/%m/%Y")


def format_period(start: date, end: date) -> str:
    return f"{format_day(start)} - {format_day(end)}"
