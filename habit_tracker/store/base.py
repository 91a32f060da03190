"""Record store interface shared by the live and demo backends."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from .models import (
    DashboardSettings,
    Entry,
    Goal,
    GoalCreate,
    GoalUpdate,
    Trackable,
    TrackableCreate,
    TrackableUpdate,
)


class RecordStore(ABC):
    """
    Owner-scoped storage for trackables, entries, goals and dashboard settings.

    Every method takes the owner id first; no method ever returns or touches
    another owner's rows. Missing records raise NotFoundError, backend
    failures raise StoreError.
    """

    read_only: bool = False

    # Trackables

    @abstractmethod
    def list_trackables(self, owner_id: str) -> list[Trackable]:
        """List trackables in creation order."""

    @abstractmethod
    def get_trackable(self, owner_id: str, trackable_id: str) -> Trackable:
        """Get one trackable."""

    @abstractmethod
    def create_trackable(self, owner_id: str, data: TrackableCreate) -> Trackable:
        """Create a trackable."""

    @abstractmethod
    def update_trackable(
        self, owner_id: str, trackable_id: str, data: TrackableUpdate
    ) -> Trackable:
        """Update the fields set on `data`."""

    @abstractmethod
    def delete_trackable(self, owner_id: str, trackable_id: str) -> None:
        """Delete a trackable together with its entries and goals."""

    # Entries

    @abstractmethod
    def list_entries(
        self,
        owner_id: str,
        trackable_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Entry]:
        """List entries, newest date first, optionally filtered."""

    @abstractmethod
    def get_entry(self, owner_id: str, trackable_id: str, day: date) -> Optional[Entry]:
        """Get the entry for (trackable, date), or None."""

    @abstractmethod
    def upsert_entry(
        self,
        owner_id: str,
        trackable_id: str,
        day: date,
        completed: bool = True,
        notes: Optional[str] = None,
    ) -> Entry:
        """Insert or replace the entry keyed by (trackable, date)."""

    @abstractmethod
    def delete_entry(self, owner_id: str, trackable_id: str, day: date) -> None:
        """Delete the entry for (trackable, date) if present."""

    # Goals

    @abstractmethod
    def list_goals(self, owner_id: str, trackable_id: Optional[str] = None) -> list[Goal]:
        """List goals, most recently created first."""

    @abstractmethod
    def get_goal(self, owner_id: str, goal_id: str) -> Goal:
        """Get one goal."""

    @abstractmethod
    def create_goal(self, owner_id: str, trackable_id: str, data: GoalCreate) -> Goal:
        """Create a goal for a trackable."""

    @abstractmethod
    def update_goal(self, owner_id: str, goal_id: str, data: GoalUpdate) -> Goal:
        """Update the fields set on `data`."""

    @abstractmethod
    def delete_goal(self, owner_id: str, goal_id: str) -> None:
        """Delete a goal."""

    # Dashboard settings

    @abstractmethod
    def get_dashboard_settings(self, owner_id: str) -> Optional[DashboardSettings]:
        """Get saved settings, or None when never saved."""

    @abstractmethod
    def save_dashboard_settings(
        self, owner_id: str, selected: list[str], order: list[str]
    ) -> DashboardSettings:
        """Insert or replace the owner's settings."""
