"""Goal progress within calendar-anchored period windows."""

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from ..store.models import Entry, Goal, TargetPeriod
from .dates import end_of_month, percent, start_of_week
from .models import GoalProgress, ProgressPoint
from .streaks import dedupe_entries

logger = logging.getLogger(__name__)

MIN_CHART_DAYS = 30


def period_window(period: TargetPeriod, today: date) -> tuple[date, date]:
    """
    Get the first and last day of the period containing today.

    Weeks run Monday to Sunday.

    Returns:
        Tuple of (period_start, period_end), both inclusive
    """
    if period == TargetPeriod.DAILY:
        return today, today

    if period == TargetPeriod.WEEKLY:
        week_start = start_of_week(today)
        return week_start, week_start + timedelta(days=6)

    if period == TargetPeriod.MONTHLY:
        return today.replace(day=1), end_of_month(today)

    if period == TargetPeriod.YEARLY:
        return date(today.year, 1, 1), date(today.year, 12, 31)

    raise ValueError(f"Unknown target period: {period}")


def active_goal(goals: Iterable[Goal]) -> Optional[Goal]:
    """
    The goal shown for a trackable: the most recently created one.

    A trackable may hold several goals; only one is ever surfaced.
    """
    goals = list(goals)
    if not goals:
        return None
    # max() keeps the first of equal timestamps, matching newest-first listings
    return max(goals, key=lambda g: g.created_at)


def _completed_days(entries: Iterable[Entry]) -> list[date]:
    return [e.date for e in dedupe_entries(entries) if e.completed]


def calculate_goal_progress(
    goal: Goal, entries: Iterable[Entry], today: date
) -> GoalProgress:
    """
    Count completions inside the goal's current period.

    The percentage may exceed 100 on over-achievement; only the derived
    bar_width is clamped.
    """
    period_start, period_end = period_window(goal.target_period, today)

    current = sum(
        1 for day in _completed_days(entries) if period_start <= day <= period_end
    )

    progress = GoalProgress(
        goal_id=goal.id,
        current=current,
        target=goal.target_value,
        percentage=percent(current, goal.target_value),
        period_start=period_start,
        period_end=period_end,
    )

    logger.debug(
        f"Goal {goal.id}: {current}/{goal.target_value} "
        f"({progress.percentage}%) {period_start}..{period_end}"
    )
    return progress


def goal_progress_series(
    goal: Goal, entries: Iterable[Entry], today: date
) -> list[ProgressPoint]:
    """
    Daily cumulative progress for the trend chart.

    Produces max(30, period length) points ending at today. Points before
    the period start carry progress 0 and no target; points inside the
    period carry the cumulative completed count and the goal target.

    Example:
        weekly goal, today = Wednesday: the last three points hold the
        running count for Monday, Tuesday and Wednesday.
    """
    period_start, period_end = period_window(goal.target_period, today)
    period_days = (period_end - period_start).days + 1
    chart_days = max(MIN_CHART_DAYS, period_days)

    per_day: dict[date, int] = {}
    for day in _completed_days(entries):
        per_day[day] = per_day.get(day, 0) + 1

    points = []
    running = 0
    for offset in range(chart_days - 1, -1, -1):
        day = today - timedelta(days=offset)

        if day < period_start:
            points.append(ProgressPoint(date=day, progress=0, target=None))
            continue

        running += per_day.get(day, 0)
        points.append(ProgressPoint(date=day, progress=running, target=goal.target_value))

    return points
