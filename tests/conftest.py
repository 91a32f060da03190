"""Shared fixtures."""

import os
import tempfile
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

# The app opens its database on import; keep it out of the working tree
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.mkdtemp(), "habits.db"))

from habit_tracker.store.database import HabitDatabase
from habit_tracker.store.models import Entry, Goal, TargetPeriod

# A Wednesday
TODAY = date(2026, 10, 14)

_BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_entry(
    day: date,
    completed: bool = True,
    trackable_id: str = "t1",
    created_at: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> Entry:
    return Entry(
        id=f"{trackable_id}-{day.isoformat()}-{completed}",
        owner_id="owner",
        trackable_id=trackable_id,
        date=day,
        completed=completed,
        notes=notes,
        created_at=created_at,
    )


def make_goal(
    target_value: int,
    period: TargetPeriod,
    goal_id: str = "g1",
    created_offset: int = 0,
) -> Goal:
    created = _BASE_TIME + timedelta(days=created_offset)
    return Goal(
        id=goal_id,
        owner_id="owner",
        trackable_id="t1",
        target_value=target_value,
        target_period=period,
        created_at=created,
        updated_at=created,
    )


def days_back(today: date, count: int) -> list[date]:
    """The `count` days ending at today."""
    return [today - timedelta(days=i) for i in range(count)]


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def database(tmp_path) -> HabitDatabase:
    return HabitDatabase(str(tmp_path / "habits.db"))
