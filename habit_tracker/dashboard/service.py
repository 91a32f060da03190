"""Habit operations: validated store mutations and derived views."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..analytics.calendar import build_overview_calendar, build_trackable_calendar
from ..analytics.goals import active_goal, calculate_goal_progress, goal_progress_series
from ..analytics.models import CalendarGrid, GoalProgress, ProgressPoint, StreakStats
from ..analytics.streaks import calculate_streak_stats
from ..errors import ValidationError
from ..store.base import RecordStore
from ..store.models import DashboardSettings, Entry, Goal, Trackable
from .order import (
    default_selection,
    display_trackables,
    move_before,
    prune_selection,
    toggle_selection,
)

logger = logging.getLogger(__name__)


@dataclass
class GoalReport:
    """The active goal of a trackable with its progress and trend."""
    goal: Goal
    progress: GoalProgress
    series: list[ProgressPoint] = field(default_factory=list)


@dataclass
class TrackableCard:
    """One trackable as shown on the dashboard."""
    trackable: Trackable
    stats: StreakStats
    goal: Optional[Goal] = None
    progress: Optional[GoalProgress] = None
    checked_in_today: bool = False


class HabitService:
    """
    Runs owner-scoped operations against a record store.

    Validation happens here before any store call. Derived views always
    re-fetch from the store and recompute; nothing is cached between calls.
    """

    def __init__(self, store: RecordStore):
        """Initialize with a record store."""
        self.store = store

    # Entries

    def check_in(
        self,
        owner_id: str,
        trackable_id: str,
        day: date,
        today: date,
        completed: bool = True,
        notes: Optional[str] = None,
    ) -> Entry:
        """Record (or overwrite) the entry for a trackable on a day."""
        self._reject_future(day, today)
        return self.store.upsert_entry(owner_id, trackable_id, day, completed, notes)

    def uncheck(self, owner_id: str, trackable_id: str, day: date) -> None:
        """Remove the entry for a trackable on a day."""
        self.store.get_trackable(owner_id, trackable_id)
        self.store.delete_entry(owner_id, trackable_id, day)

    def toggle_entry(
        self, owner_id: str, trackable_id: str, day: date, today: date
    ) -> Optional[Entry]:
        """
        Flip the completion state for a day.

        Returns:
            The new entry when checked, None when unchecked
        """
        self._reject_future(day, today)
        existing = self.store.get_entry(owner_id, trackable_id, day)

        if existing and existing.completed:
            self.uncheck(owner_id, trackable_id, day)
            return None

        notes = existing.notes if existing else None
        return self.store.upsert_entry(owner_id, trackable_id, day, True, notes)

    def update_notes(
        self, owner_id: str, trackable_id: str, day: date, today: date, notes: Optional[str]
    ) -> Entry:
        """Replace the notes of a day's entry, keeping its completed state."""
        self._reject_future(day, today)
        existing = self.store.get_entry(owner_id, trackable_id, day)
        completed = existing.completed if existing else True
        return self.store.upsert_entry(owner_id, trackable_id, day, completed, notes)

    def submit_check_in(
        self, owner_id: str, trackable_ids: list[str], today: date
    ) -> list[Entry]:
        """Check in several trackables for today."""
        if not trackable_ids:
            raise ValidationError("Select at least one trackable to check in")

        entries = []
        for trackable_id in dict.fromkeys(trackable_ids):
            existing = self.store.get_entry(owner_id, trackable_id, today)
            notes = existing.notes if existing else None
            entries.append(self.store.upsert_entry(owner_id, trackable_id, today, True, notes))

        logger.info(f"Checked in {len(entries)} trackables for {owner_id} on {today}")
        return entries

    def _reject_future(self, day: date, today: date):
        if day > today:
            logger.warning(f"Rejected check-in for future date {day} (today is {today})")
            raise ValidationError(f"Cannot check in for a future date: {day.isoformat()}")

    # Trackables

    def delete_trackable(self, owner_id: str, trackable_id: str) -> None:
        """Delete a trackable and drop it from the dashboard settings."""
        self.store.delete_trackable(owner_id, trackable_id)

        settings = self.store.get_dashboard_settings(owner_id)
        if settings and (
            trackable_id in settings.selected_trackables
            or trackable_id in settings.trackable_order
        ):
            selected, order = prune_selection(settings, trackable_id)
            self.store.save_dashboard_settings(owner_id, selected, order)

    # Derived views

    def trackable_stats(self, owner_id: str, trackable_id: str, today: date) -> StreakStats:
        """Streak statistics for one trackable."""
        self.store.get_trackable(owner_id, trackable_id)
        entries = self.store.list_entries(owner_id, trackable_id=trackable_id)
        return calculate_streak_stats(entries, today)

    def trackable_goal_report(
        self, owner_id: str, trackable_id: str, today: date
    ) -> Optional[GoalReport]:
        """Progress and trend of the active goal, or None without a goal."""
        self.store.get_trackable(owner_id, trackable_id)
        goal = active_goal(self.store.list_goals(owner_id, trackable_id=trackable_id))
        if goal is None:
            return None

        entries = self.store.list_entries(owner_id, trackable_id=trackable_id)
        return GoalReport(
            goal=goal,
            progress=calculate_goal_progress(goal, entries, today),
            series=goal_progress_series(goal, entries, today),
        )

    def trackable_calendar(self, owner_id: str, trackable_id: str, today: date) -> CalendarGrid:
        """Year-to-date calendar for one trackable."""
        self.store.get_trackable(owner_id, trackable_id)
        entries = self.store.list_entries(
            owner_id, trackable_id=trackable_id, start=date(today.year, 1, 1), end=today
        )
        return build_trackable_calendar(entries, trackable_id, today)

    def overview_calendar(self, owner_id: str, today: date) -> CalendarGrid:
        """Year-to-date calendar across all trackables."""
        entries = self.store.list_entries(owner_id, start=date(today.year, 1, 1), end=today)
        return build_overview_calendar(entries, today)

    def dashboard(self, owner_id: str, today: date) -> list[TrackableCard]:
        """Ordered dashboard cards with stats and active-goal progress."""
        trackables = display_trackables(
            self.store.list_trackables(owner_id),
            self.store.get_dashboard_settings(owner_id),
        )

        entries = self.store.list_entries(owner_id)
        goals = self.store.list_goals(owner_id)

        cards = []
        for trackable in trackables:
            own_entries = [e for e in entries if e.trackable_id == trackable.id]
            goal = active_goal(g for g in goals if g.trackable_id == trackable.id)

            cards.append(
                TrackableCard(
                    trackable=trackable,
                    stats=calculate_streak_stats(own_entries, today),
                    goal=goal,
                    progress=calculate_goal_progress(goal, own_entries, today) if goal else None,
                    checked_in_today=any(e.date == today and e.completed for e in own_entries),
                )
            )

        logger.debug(f"Dashboard for {owner_id}: {len(cards)} cards")
        return cards

    # Dashboard settings

    def dashboard_settings(self, owner_id: str) -> DashboardSettings:
        """Saved settings, or the all-trackables default when never saved."""
        settings = self.store.get_dashboard_settings(owner_id)
        if settings is not None:
            return settings

        selected, order = default_selection([t.id for t in self.store.list_trackables(owner_id)])
        return DashboardSettings(
            owner_id=owner_id, selected_trackables=selected, trackable_order=order
        )

    def save_dashboard_settings(
        self, owner_id: str, selected: list[str], order: list[str]
    ) -> DashboardSettings:
        """Save a selection and order after checking every id is the owner's."""
        known = {t.id for t in self.store.list_trackables(owner_id)}
        unknown = sorted(set(selected) - known)
        if unknown:
            raise ValidationError(f"Unknown trackables in selection: {', '.join(unknown)}")

        # Stale ids in the order are harmless but pointless to keep
        order = [i for i in dict.fromkeys(order) if i in known]
        selected = list(dict.fromkeys(selected))
        return self.store.save_dashboard_settings(owner_id, selected, order)

    def toggle_dashboard_trackable(
        self, owner_id: str, trackable_id: str, checked: bool
    ) -> DashboardSettings:
        """Show or hide one trackable, keeping its place in the order."""
        self.store.get_trackable(owner_id, trackable_id)
        current = self.dashboard_settings(owner_id)
        selected, order = toggle_selection(
            current.selected_trackables, current.trackable_order, trackable_id, checked
        )
        return self.store.save_dashboard_settings(owner_id, selected, order)

    def move_dashboard_trackable(
        self, owner_id: str, dragged_id: str, target_id: str
    ) -> DashboardSettings:
        """Drop one trackable onto another's position in the order."""
        self.store.get_trackable(owner_id, dragged_id)
        self.store.get_trackable(owner_id, target_id)
        current = self.dashboard_settings(owner_id)
        order = move_before(current.trackable_order, dragged_id, target_id)
        return self.store.save_dashboard_settings(owner_id, current.selected_trackables, order)

    def reset_dashboard_settings(self, owner_id: str) -> DashboardSettings:
        """Show every trackable again, in creation order."""
        selected, order = default_selection([t.id for t in self.store.list_trackables(owner_id)])
        logger.info(f"Resetting dashboard settings for {owner_id}")
        return self.store.save_dashboard_settings(owner_id, selected, order)
