"""Read-only in-memory store with fixture data for the demo account."""

import logging
import random
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..errors import NotFoundError, ReadOnlyStoreError
from .base import RecordStore
from .models import (
    DashboardSettings,
    Entry,
    Goal,
    GoalCreate,
    GoalUpdate,
    TargetPeriod,
    Trackable,
    TrackableCreate,
    TrackableUpdate,
)

logger = logging.getLogger(__name__)

DEMO_OWNER = "demo-user"
DEMO_HISTORY_DAYS = 90
_FIXTURE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

# (id, name, description, color, icon, completion rate)
DEMO_TRACKABLES = [
    ("demo-1", "Morning Exercise", "Daily workout routine", "#3b82f6", "dumbbell", 0.8),
    ("demo-2", "Read for 30 min", "Daily reading habit", "#10b981", "book", 0.6),
    ("demo-3", "Drink 8 glasses of water", "Stay hydrated throughout the day", "#06b6d4", "droplets", 0.9),
    ("demo-4", "Meditate", "10 minutes of mindfulness", "#8b5cf6", "brain", 0.7),
]

# (id, trackable id, target value, period)
DEMO_GOALS = [
    ("demo-goal-1", "demo-1", 7, TargetPeriod.WEEKLY),
    ("demo-goal-2", "demo-2", 30, TargetPeriod.MONTHLY),
]


class DemoStore(RecordStore):
    """
    Fixture-backed store served to the demo account.

    Entries cover the DEMO_HISTORY_DAYS days ending at `today` and are drawn
    from a seeded generator, so the same `today` and seed always produce the
    same history. Every write raises ReadOnlyStoreError.
    """

    read_only = True

    def __init__(self, today: date, seed: int = 42):
        self.today = today
        self.trackables = [
            Trackable(
                id=trackable_id,
                owner_id=DEMO_OWNER,
                name=name,
                description=description,
                color=color,
                icon=icon,
                created_at=_FIXTURE_TIME,
                updated_at=_FIXTURE_TIME,
            )
            for trackable_id, name, description, color, icon, _ in DEMO_TRACKABLES
        ]
        self.goals = [
            Goal(
                id=goal_id,
                owner_id=DEMO_OWNER,
                trackable_id=trackable_id,
                target_value=target,
                target_period=period,
                created_at=_FIXTURE_TIME,
                updated_at=_FIXTURE_TIME,
            )
            for goal_id, trackable_id, target, period in DEMO_GOALS
        ]
        self.entries = self._generate_entries(random.Random(seed))
        self.settings = DashboardSettings(
            owner_id=DEMO_OWNER,
            selected_trackables=[t.id for t in self.trackables],
            trackable_order=[t.id for t in self.trackables],
            updated_at=_FIXTURE_TIME,
        )
        logger.debug(f"Demo store built with {len(self.entries)} entries up to {today}")

    def _generate_entries(self, rng: random.Random) -> list[Entry]:
        entries = []
        for offset in range(DEMO_HISTORY_DAYS):
            day = self.today - timedelta(days=offset)
            for trackable_id, _, _, _, _, rate in DEMO_TRACKABLES:
                if rng.random() < rate:
                    entries.append(
                        Entry(
                            id=f"demo-entry-{trackable_id}-{day.isoformat()}",
                            owner_id=DEMO_OWNER,
                            trackable_id=trackable_id,
                            date=day,
                            completed=True,
                            created_at=datetime.combine(day, datetime.min.time(), timezone.utc),
                        )
                    )
        return entries

    def _reject(self, operation: str):
        logger.warning(f"Rejected {operation} in demo mode")
        raise ReadOnlyStoreError(f"Demo data is read-only ({operation})")

    # Trackables

    def list_trackables(self, owner_id: str) -> list[Trackable]:
        return list(self.trackables)

    def get_trackable(self, owner_id: str, trackable_id: str) -> Trackable:
        for trackable in self.trackables:
            if trackable.id == trackable_id:
                return trackable
        raise NotFoundError(f"Trackable not found: {trackable_id}")

    def create_trackable(self, owner_id: str, data: TrackableCreate) -> Trackable:
        self._reject("create trackable")

    def update_trackable(
        self, owner_id: str, trackable_id: str, data: TrackableUpdate
    ) -> Trackable:
        self._reject("update trackable")

    def delete_trackable(self, owner_id: str, trackable_id: str) -> None:
        self._reject("delete trackable")

    # Entries

    def list_entries(
        self,
        owner_id: str,
        trackable_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Entry]:
        entries = [
            e
            for e in self.entries
            if (not trackable_id or e.trackable_id == trackable_id)
            and (not start or e.date >= start)
            and (not end or e.date <= end)
        ]
        return sorted(entries, key=lambda e: e.date, reverse=True)

    def get_entry(self, owner_id: str, trackable_id: str, day: date) -> Optional[Entry]:
        for entry in self.entries:
            if entry.trackable_id == trackable_id and entry.date == day:
                return entry
        return None

    def upsert_entry(
        self,
        owner_id: str,
        trackable_id: str,
        day: date,
        completed: bool = True,
        notes: Optional[str] = None,
    ) -> Entry:
        self._reject("save entry")

    def delete_entry(self, owner_id: str, trackable_id: str, day: date) -> None:
        self._reject("delete entry")

    # Goals

    def list_goals(self, owner_id: str, trackable_id: Optional[str] = None) -> list[Goal]:
        return [g for g in self.goals if not trackable_id or g.trackable_id == trackable_id]

    def get_goal(self, owner_id: str, goal_id: str) -> Goal:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        raise NotFoundError(f"Goal not found: {goal_id}")

    def create_goal(self, owner_id: str, trackable_id: str, data: GoalCreate) -> Goal:
        self._reject("create goal")

    def update_goal(self, owner_id: str, goal_id: str, data: GoalUpdate) -> Goal:
        self._reject("update goal")

    def delete_goal(self, owner_id: str, goal_id: str) -> None:
        self._reject("delete goal")

    # Dashboard settings

    def get_dashboard_settings(self, owner_id: str) -> Optional[DashboardSettings]:
        return self.settings

    def save_dashboard_settings(
        self, owner_id: str, selected: list[str], order: list[str]
    ) -> DashboardSettings:
        self._reject("save dashboard settings")
