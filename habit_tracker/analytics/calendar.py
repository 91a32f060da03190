"""Year-to-date activity calendar laid out in Monday-first weeks."""

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from ..store.models import Entry
from .dates import MONTH_NAMES, days_between
from .models import CalendarGrid, DayCell, MonthLabel
from .streaks import dedupe_entries

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


def leading_padding(start: date) -> int:
    """
    Number of blank cells needed before `start` so it lands in its weekday
    column, with column 0 = Monday.
    """
    iso_weekday = start.isoweekday()  # Monday=1, Sunday=7
    return 6 if iso_weekday == 7 else iso_weekday - 1


def month_labels(start: date, today: date, padding_days: int) -> list[MonthLabel]:
    """Anchor each month starting within [start, today] at its week column."""
    labels = []
    month_start = date(start.year, start.month, 1)
    if month_start < start:
        month_start = _next_month(month_start)

    while month_start <= today:
        days_from_start = (month_start - start).days
        labels.append(
            MonthLabel(
                month=MONTH_NAMES[month_start.month - 1],
                week_index=(days_from_start + padding_days) // DAYS_PER_WEEK,
            )
        )
        month_start = _next_month(month_start)
    return labels


def _next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def _build_grid(entries: Iterable[Entry], today: date, start: Optional[date]) -> CalendarGrid:
    start = start or date(today.year, 1, 1)
    padding_days = leading_padding(start)

    completions: dict[date, int] = {}
    for entry in dedupe_entries(entries):
        if entry.completed and start <= entry.date <= today:
            completions[entry.date] = completions.get(entry.date, 0) + 1

    max_completions = max(completions.values(), default=0)

    cells = [
        DayCell(date=start - timedelta(days=padding_days - i), is_padding=True)
        for i in range(padding_days)
    ]

    for day in days_between(start, today):
        count = completions.get(day, 0)
        cells.append(
            DayCell(
                date=day,
                completions=count,
                has_entry=count > 0,
                intensity=count / max_completions if max_completions else 0.0,
            )
        )

    # Fill the last week so every week has exactly seven cells
    trailing = -len(cells) % DAYS_PER_WEEK
    cells.extend(
        DayCell(date=today + timedelta(days=i + 1), is_padding=True)
        for i in range(trailing)
    )

    weeks = [cells[i:i + DAYS_PER_WEEK] for i in range(0, len(cells), DAYS_PER_WEEK)]

    return CalendarGrid(
        weeks=weeks,
        month_labels=month_labels(start, today, padding_days),
        padding_days=padding_days,
        total_completions=sum(completions.values()),
        max_completions=max_completions,
    )


def build_trackable_calendar(
    entries: Iterable[Entry],
    trackable_id: str,
    today: date,
    start: Optional[date] = None,
) -> CalendarGrid:
    """
    Calendar for a single trackable.

    Each real day carries has_entry when that trackable was completed.
    """
    own = [e for e in entries if e.trackable_id == trackable_id]
    grid = _build_grid(own, today, start)
    logger.debug(f"Calendar for {trackable_id}: {grid.total_completions} completions")
    return grid


def build_overview_calendar(
    entries: Iterable[Entry], today: date, start: Optional[date] = None
) -> CalendarGrid:
    """
    Calendar across all trackables.

    Each real day carries the number of completions on that date and an
    intensity relative to the busiest day in range (0 when nothing was done).
    """
    grid = _build_grid(entries, today, start)
    logger.debug(
        f"Overview calendar: {grid.total_completions} completions, "
        f"busiest day {grid.max_completions}"
    )
    return grid
