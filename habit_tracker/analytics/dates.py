"""Calendar helpers shared by the analytics modules."""

from datetime import date, timedelta
from typing import Iterator

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def days_between(start: date, end: date) -> Iterator[date]:
    """Yield every day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def start_of_week(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def end_of_month(day: date) -> date:
    """Last day of the month containing `day`."""
    if day.month == 12:
        return date(day.year, 12, 31)
    return date(day.year, day.month + 1, 1) - timedelta(days=1)


def percent(numerator: int, denominator: int) -> int:
    """
    100 * numerator / denominator rounded half up.

    Integer arithmetic so 12.5 rounds to 13 (Python's round() would give 12).
    """
    if denominator <= 0:
        return 0
    return (200 * numerator + denominator) // (2 * denominator)
