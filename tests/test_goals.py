"""Tests for goal period windows, progress and trend series."""

from datetime import date, timedelta

import pytest
from conftest import make_entry, make_goal

from habit_tracker.analytics.goals import (
    active_goal,
    calculate_goal_progress,
    goal_progress_series,
    period_window,
)
from habit_tracker.store.models import TargetPeriod


@pytest.mark.parametrize(
    "period, expected",
    [
        (TargetPeriod.DAILY, (date(2026, 10, 14), date(2026, 10, 14))),
        (TargetPeriod.WEEKLY, (date(2026, 10, 12), date(2026, 10, 18))),
        (TargetPeriod.MONTHLY, (date(2026, 10, 1), date(2026, 10, 31))),
        (TargetPeriod.YEARLY, (date(2026, 1, 1), date(2026, 12, 31))),
    ],
)
def test_period_window(today, period, expected):
    assert period_window(period, today) == expected


def test_weekly_window_on_sunday_and_monday():
    sunday = date(2026, 10, 18)
    monday = date(2026, 10, 19)

    assert period_window(TargetPeriod.WEEKLY, sunday) == (date(2026, 10, 12), sunday)
    assert period_window(TargetPeriod.WEEKLY, monday) == (monday, date(2026, 10, 25))


def test_monthly_window_in_leap_february():
    assert period_window(TargetPeriod.MONTHLY, date(2024, 2, 10)) == (
        date(2024, 2, 1),
        date(2024, 2, 29),
    )


def test_monthly_window_in_december():
    assert period_window(TargetPeriod.MONTHLY, date(2025, 12, 5)) == (
        date(2025, 12, 1),
        date(2025, 12, 31),
    )


def test_weekly_progress_counts_current_week_only(today):
    goal = make_goal(5, TargetPeriod.WEEKLY)
    entries = [
        make_entry(date(2026, 10, 11)),  # previous Sunday
        make_entry(date(2026, 10, 12)),
        make_entry(date(2026, 10, 13)),
        make_entry(date(2026, 10, 14)),
    ]

    progress = calculate_goal_progress(goal, entries, today)

    assert progress.current == 3
    assert progress.target == 5
    assert progress.percentage == 60
    assert progress.period_start == date(2026, 10, 12)
    assert progress.period_end == date(2026, 10, 18)
    assert progress.status == "halfway"


def test_uncompleted_entries_do_not_count(today):
    goal = make_goal(2, TargetPeriod.DAILY)
    progress = calculate_goal_progress(goal, [make_entry(today, completed=False)], today)

    assert progress.current == 0
    assert progress.percentage == 0
    assert progress.status == "behind"


def test_over_achievement_is_not_clamped(today):
    goal = make_goal(2, TargetPeriod.WEEKLY)
    entries = [make_entry(date(2026, 10, 12) + timedelta(days=i)) for i in range(3)]

    progress = calculate_goal_progress(goal, entries, today)

    assert progress.percentage == 150
    assert progress.bar_width == 100
    assert progress.status == "achieved"


def test_progress_on_empty_entries(today):
    progress = calculate_goal_progress(make_goal(10, TargetPeriod.YEARLY), [], today)

    assert progress.current == 0
    assert progress.percentage == 0


def test_active_goal_is_most_recent():
    older = make_goal(3, TargetPeriod.WEEKLY, goal_id="old", created_offset=0)
    newer = make_goal(20, TargetPeriod.MONTHLY, goal_id="new", created_offset=5)

    assert active_goal([older, newer]).id == "new"
    assert active_goal([newer, older]).id == "new"
    assert active_goal([]) is None


def test_weekly_series_has_thirty_points(today):
    goal = make_goal(5, TargetPeriod.WEEKLY)
    entries = [
        make_entry(date(2026, 10, 10)),  # before the period
        make_entry(date(2026, 10, 12)),
        make_entry(date(2026, 10, 14)),
    ]

    series = goal_progress_series(goal, entries, today)

    assert len(series) == 30
    assert series[-1].date == today
    assert series[0].date == today - timedelta(days=29)

    by_day = {p.date: p for p in series}
    assert by_day[date(2026, 10, 10)].progress == 0
    assert by_day[date(2026, 10, 11)].target is None
    assert by_day[date(2026, 10, 12)].progress == 1
    assert by_day[date(2026, 10, 12)].target == 5
    assert by_day[date(2026, 10, 13)].progress == 1
    assert by_day[date(2026, 10, 14)].progress == 2


def test_monthly_series_for_long_month(today):
    goal = make_goal(20, TargetPeriod.MONTHLY)

    series = goal_progress_series(goal, [], today)

    # October has 31 days
    assert len(series) == 31
    assert [p.target for p in series[-14:]] == [20] * 14
    assert series[-15].target is None


def test_yearly_series_covers_whole_year(today):
    goal = make_goal(100, TargetPeriod.YEARLY)
    entries = [make_entry(date(2026, 1, 1)), make_entry(date(2026, 6, 1))]

    series = goal_progress_series(goal, entries, today)

    assert len(series) == 365
    assert series[-1].progress == 2
    assert series[0].target is None
