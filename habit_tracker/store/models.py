"""Record models for trackables, entries, goals and dashboard settings."""

import re
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_COLOR = "#22c55e"
DEFAULT_ICON = "check"

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class TargetPeriod(str, Enum):
    """Recurring period a goal is measured against."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Trackable(BaseModel):
    """A habit definition."""

    id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    color: str = DEFAULT_COLOR
    icon: Optional[str] = DEFAULT_ICON
    created_at: datetime
    updated_at: datetime


class Entry(BaseModel):
    """A single day's completion record for one trackable."""

    id: str
    owner_id: str
    trackable_id: str
    date: date
    completed: bool = True
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class Goal(BaseModel):
    """A target cadence for a trackable."""

    id: str
    owner_id: str
    trackable_id: str
    target_value: int = Field(gt=0)
    target_period: TargetPeriod
    created_at: datetime
    updated_at: datetime


class DashboardSettings(BaseModel):
    """Per-owner dashboard customization."""

    owner_id: str
    selected_trackables: list[str] = Field(default_factory=list)
    trackable_order: list[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("name must not be empty")
    return value


def _check_color(value: str) -> str:
    if not _HEX_COLOR.match(value):
        raise ValueError("color must be a #rrggbb hex value")
    return value.lower()


class TrackableCreate(BaseModel):
    """Payload for creating a trackable."""

    name: str
    description: Optional[str] = None
    color: str = DEFAULT_COLOR
    icon: Optional[str] = DEFAULT_ICON

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("color")
    @classmethod
    def color_is_hex(cls, value: str) -> str:
        return _check_color(value)


class TrackableUpdate(BaseModel):
    """Partial update of a trackable; unset fields are left alone."""

    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _clean_name(value)

    @field_validator("color")
    @classmethod
    def color_is_hex(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_color(value)


class EntryUpsert(BaseModel):
    """Payload for checking in a trackable on a date."""

    completed: bool = True
    notes: Optional[str] = None


class NotesUpdate(BaseModel):
    """Payload for a notes-only edit."""

    notes: Optional[str] = None


class CheckInRequest(BaseModel):
    """Several trackables checked in for today at once."""

    trackable_ids: list[str] = Field(min_length=1)


class GoalCreate(BaseModel):
    """Payload for creating a goal."""

    target_value: int = Field(gt=0)
    target_period: TargetPeriod = TargetPeriod.WEEKLY


class GoalUpdate(BaseModel):
    """Partial update of a goal."""

    target_value: Optional[int] = Field(default=None, gt=0)
    target_period: Optional[TargetPeriod] = None


class DashboardSettingsUpdate(BaseModel):
    """Payload for saving dashboard customization."""

    selected_trackables: list[str] = Field(default_factory=list)
    trackable_order: list[str] = Field(default_factory=list)


class DashboardToggle(BaseModel):
    """Payload for showing or hiding one trackable."""

    trackable_id: str
    checked: bool


class DashboardMove(BaseModel):
    """Payload for a drag-and-drop reorder."""

    dragged_id: str
    target_id: str
