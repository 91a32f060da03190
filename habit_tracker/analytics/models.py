"""Result types produced by the analytics engine."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass
class StreakStats:
    """Streak and completion statistics for one trackable."""
    current_streak: int = 0
    longest_streak: int = 0
    completion_rate_30d: int = 0
    total_completions: int = 0


@dataclass
class GoalProgress:
    """Progress towards a goal within its current period window."""
    goal_id: str
    current: int
    target: int
    percentage: int
    period_start: date
    period_end: date

    # Derived for display; percentage itself is never clamped
    bar_width: int = field(init=False)
    status: str = field(init=False)  # "achieved", "on_track", "halfway", "behind"

    def __post_init__(self):
        self.bar_width = min(self.percentage, 100)

        if self.percentage >= 100:
            self.status = "achieved"
        elif self.percentage >= 75:
            self.status = "on_track"
        elif self.percentage >= 50:
            self.status = "halfway"
        else:
            self.status = "behind"


@dataclass
class ProgressPoint:
    """One day on the goal trend chart."""
    date: date
    progress: int
    target: Optional[int] = None


@dataclass
class DayCell:
    """One square of the calendar grid."""
    date: date
    is_padding: bool = False
    completions: int = 0
    has_entry: bool = False
    intensity: float = 0.0


@dataclass
class MonthLabel:
    """Month name anchored at a week column."""
    month: str
    week_index: int


@dataclass
class CalendarGrid:
    """Monday-first weeks of day cells plus month labels."""
    weeks: list[list[DayCell]]
    month_labels: list[MonthLabel]
    padding_days: int
    total_completions: int = 0
    max_completions: int = 0
