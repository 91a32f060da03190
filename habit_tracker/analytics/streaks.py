"""Streak and completion-rate statistics."""

import logging
from datetime import date, timedelta
from typing import Iterable

from ..store.models import Entry
from .dates import percent
from .models import StreakStats

logger = logging.getLogger(__name__)

RATE_WINDOW_DAYS = 30


def _written_at(entry: Entry) -> float:
    if entry.created_at is None:
        return float("-inf")
    return entry.created_at.timestamp()


def dedupe_entries(entries: Iterable[Entry]) -> list[Entry]:
    """
    Keep at most one entry per (trackable, date).

    The entry with the latest created_at wins; on a tie (or when timestamps
    are missing) the one appearing later in the input wins. First-seen order
    of the surviving keys is preserved.
    """
    kept: dict[tuple[str, date], Entry] = {}
    for entry in entries:
        key = (entry.trackable_id, entry.date)
        current = kept.get(key)
        if current is None or _written_at(entry) >= _written_at(current):
            kept[key] = entry
    return list(kept.values())


def current_streak(entries: Iterable[Entry], today: date) -> int:
    """
    Consecutive days with a completed entry, counting back from today.

    The run must include today itself: no entry today means a streak of 0,
    even if yesterday closed a long run.
    """
    completed_days = {e.date for e in entries if e.completed}

    streak = 0
    while today - timedelta(days=streak) in completed_days:
        streak += 1
    return streak


def longest_streak(entries: Iterable[Entry]) -> int:
    """
    Longest run of completed entries in date order.

    Only an explicit completed=False entry breaks a run; days with no entry
    at all are skipped over rather than treated as breaks.
    """
    longest = 0
    running = 0

    for entry in sorted(entries, key=lambda e: e.date):
        if entry.completed:
            running += 1
            longest = max(longest, running)
        else:
            running = 0

    return longest


def completion_rate(entries: Iterable[Entry], today: date, days: int = RATE_WINDOW_DAYS) -> int:
    """Percentage of the last `days` days (today included) with a completion."""
    window_start = today - timedelta(days=days - 1)
    completed = sum(
        1 for e in entries if e.completed and window_start <= e.date <= today
    )
    return percent(completed, days)


def calculate_streak_stats(entries: Iterable[Entry], today: date) -> StreakStats:
    """
    Calculate streak statistics for one trackable.

    Args:
        entries: Entries of a single trackable, in any order
        today: The user's local calendar date

    Returns:
        StreakStats; all zeros for an empty list
    """
    entries = dedupe_entries(entries)
    if not entries:
        return StreakStats()

    stats = StreakStats(
        current_streak=current_streak(entries, today),
        longest_streak=longest_streak(entries),
        completion_rate_30d=completion_rate(entries, today),
        total_completions=sum(1 for e in entries if e.completed),
    )

    logger.debug(
        f"Streaks: current={stats.current_streak} longest={stats.longest_streak} "
        f"rate={stats.completion_rate_30d}% total={stats.total_completions}"
    )
    return stats
