"""SQLite record store."""

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from ..errors import NotFoundError, StoreError
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

SCHEMA = """
CREATE TABLE IF NOT EXISTS trackables (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    color TEXT NOT NULL,
    icon TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS entries (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    trackable_id TEXT NOT NULL REFERENCES trackables(id) ON DELETE CASCADE,
    date TEXT NOT NULL,
    completed INTEGER NOT NULL,
    notes TEXT,
    created_at TEXT NOT NULL,
    UNIQUE (trackable_id, date)
);

CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    trackable_id TEXT NOT NULL REFERENCES trackables(id) ON DELETE CASCADE,
    target_value INTEGER NOT NULL CHECK (target_value > 0),
    target_period TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS dashboard_settings (
    owner_id TEXT PRIMARY KEY,
    selected_trackables TEXT NOT NULL,
    trackable_order TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_trackables_owner ON trackables(owner_id);
CREATE INDEX IF NOT EXISTS idx_entries_owner_date ON entries(owner_id, date);
CREATE INDEX IF NOT EXISTS idx_goals_trackable ON goals(trackable_id);
"""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class HabitDatabase(RecordStore):
    """Live record store backed by SQLite."""

    def __init__(self, db_path: str = "data/habits.db"):
        """Initialize database."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create database tables if they don't exist."""
        with self._connect() as conn:
            conn.executescript(SCHEMA)
        logger.info(f"Database initialized at {self.db_path}")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success and translate sqlite errors."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}")
            if conn is not None:
                conn.rollback()
            raise StoreError("Storage is temporarily unavailable") from e
        finally:
            if conn is not None:
                conn.close()

    # Row mapping

    def _row_to_trackable(self, row: sqlite3.Row) -> Trackable:
        return Trackable(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            description=row["description"],
            color=row["color"],
            icon=row["icon"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_entry(self, row: sqlite3.Row) -> Entry:
        return Entry(
            id=row["id"],
            owner_id=row["owner_id"],
            trackable_id=row["trackable_id"],
            date=date.fromisoformat(row["date"]),
            completed=bool(row["completed"]),
            notes=row["notes"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_goal(self, row: sqlite3.Row) -> Goal:
        return Goal(
            id=row["id"],
            owner_id=row["owner_id"],
            trackable_id=row["trackable_id"],
            target_value=row["target_value"],
            target_period=TargetPeriod(row["target_period"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    # Trackables

    def list_trackables(self, owner_id: str) -> list[Trackable]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM trackables WHERE owner_id = ? ORDER BY created_at, rowid",
                (owner_id,),
            ).fetchall()
        return [self._row_to_trackable(row) for row in rows]

    def get_trackable(self, owner_id: str, trackable_id: str) -> Trackable:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM trackables WHERE id = ? AND owner_id = ?",
                (trackable_id, owner_id),
            ).fetchone()

        if not row:
            raise NotFoundError(f"Trackable not found: {trackable_id}")

        return self._row_to_trackable(row)

    def create_trackable(self, owner_id: str, data: TrackableCreate) -> Trackable:
        now = _now()
        trackable = Trackable(
            id=_new_id(),
            owner_id=owner_id,
            name=data.name,
            description=data.description,
            color=data.color,
            icon=data.icon,
            created_at=now,
            updated_at=now,
        )

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trackables
                    (id, owner_id, name, description, color, icon, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    trackable.id,
                    owner_id,
                    trackable.name,
                    trackable.description,
                    trackable.color,
                    trackable.icon,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        logger.info(f"Created trackable: {trackable.name} ({trackable.id})")
        return trackable

    def update_trackable(
        self, owner_id: str, trackable_id: str, data: TrackableUpdate
    ) -> Trackable:
        changes = data.model_dump(exclude_unset=True)
        # name and color are NOT NULL; an explicit null leaves them alone
        for column in ("name", "color"):
            if column in changes and changes[column] is None:
                del changes[column]

        updates = [f"{column} = ?" for column in changes]
        params: list = list(changes.values())

        updates.append("updated_at = ?")
        params.append(_now().isoformat())
        params.extend([trackable_id, owner_id])

        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE trackables SET {', '.join(updates)} WHERE id = ? AND owner_id = ?",
                params,
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Trackable not found: {trackable_id}")

        logger.info(f"Updated trackable {trackable_id}: {sorted(changes)}")
        return self.get_trackable(owner_id, trackable_id)

    def delete_trackable(self, owner_id: str, trackable_id: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM trackables WHERE id = ? AND owner_id = ?",
                (trackable_id, owner_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Trackable not found: {trackable_id}")
        logger.info(f"Deleted trackable {trackable_id} with its entries and goals")

    # Entries

    def list_entries(
        self,
        owner_id: str,
        trackable_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Entry]:
        clauses = ["owner_id = ?"]
        params: list = [owner_id]

        if trackable_id:
            clauses.append("trackable_id = ?")
            params.append(trackable_id)

        if start:
            clauses.append("date >= ?")
            params.append(start.isoformat())

        if end:
            clauses.append("date <= ?")
            params.append(end.isoformat())

        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM entries WHERE {' AND '.join(clauses)} ORDER BY date DESC",
                params,
            ).fetchall()

        logger.debug(f"Fetched {len(rows)} entries for {owner_id}")
        return [self._row_to_entry(row) for row in rows]

    def get_entry(self, owner_id: str, trackable_id: str, day: date) -> Optional[Entry]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM entries WHERE owner_id = ? AND trackable_id = ? AND date = ?",
                (owner_id, trackable_id, day.isoformat()),
            ).fetchone()

        return self._row_to_entry(row) if row else None

    def upsert_entry(
        self,
        owner_id: str,
        trackable_id: str,
        day: date,
        completed: bool = True,
        notes: Optional[str] = None,
    ) -> Entry:
        # Raises NotFoundError for another owner's trackable
        self.get_trackable(owner_id, trackable_id)

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO entries
                    (id, owner_id, trackable_id, date, completed, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (trackable_id, date) DO UPDATE SET
                    completed = excluded.completed,
                    notes = excluded.notes
                """,
                (
                    _new_id(),
                    owner_id,
                    trackable_id,
                    day.isoformat(),
                    int(completed),
                    notes,
                    _now().isoformat(),
                ),
            )

        logger.info(f"Upserted entry {trackable_id} @ {day} (completed={completed})")
        return self.get_entry(owner_id, trackable_id, day)

    def delete_entry(self, owner_id: str, trackable_id: str, day: date) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM entries WHERE owner_id = ? AND trackable_id = ? AND date = ?",
                (owner_id, trackable_id, day.isoformat()),
            )
        logger.info(f"Deleted entry {trackable_id} @ {day}")

    # Goals

    def list_goals(self, owner_id: str, trackable_id: Optional[str] = None) -> list[Goal]:
        query = "SELECT * FROM goals WHERE owner_id = ?"
        params: list = [owner_id]

        if trackable_id:
            query += " AND trackable_id = ?"
            params.append(trackable_id)

        with self._connect() as conn:
            rows = conn.execute(
                query + " ORDER BY created_at DESC, rowid DESC", params
            ).fetchall()
        return [self._row_to_goal(row) for row in rows]

    def get_goal(self, owner_id: str, goal_id: str) -> Goal:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM goals WHERE id = ? AND owner_id = ?",
                (goal_id, owner_id),
            ).fetchone()

        if not row:
            raise NotFoundError(f"Goal not found: {goal_id}")

        return self._row_to_goal(row)

    def create_goal(self, owner_id: str, trackable_id: str, data: GoalCreate) -> Goal:
        self.get_trackable(owner_id, trackable_id)

        now = _now()
        goal = Goal(
            id=_new_id(),
            owner_id=owner_id,
            trackable_id=trackable_id,
            target_value=data.target_value,
            target_period=data.target_period,
            created_at=now,
            updated_at=now,
        )

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO goals
                    (id, owner_id, trackable_id, target_value, target_period, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    goal.id,
                    owner_id,
                    trackable_id,
                    goal.target_value,
                    goal.target_period.value,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        logger.info(
            f"Created goal {goal.id}: {goal.target_value} per {goal.target_period.value}"
        )
        return goal

    def update_goal(self, owner_id: str, goal_id: str, data: GoalUpdate) -> Goal:
        updates = []
        params: list = []

        if data.target_value is not None:
            updates.append("target_value = ?")
            params.append(data.target_value)

        if data.target_period is not None:
            updates.append("target_period = ?")
            params.append(data.target_period.value)

        updates.append("updated_at = ?")
        params.append(_now().isoformat())
        params.extend([goal_id, owner_id])

        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE goals SET {', '.join(updates)} WHERE id = ? AND owner_id = ?",
                params,
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Goal not found: {goal_id}")

        logger.info(f"Updated goal {goal_id}")
        return self.get_goal(owner_id, goal_id)

    def delete_goal(self, owner_id: str, goal_id: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM goals WHERE id = ? AND owner_id = ?", (goal_id, owner_id)
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Goal not found: {goal_id}")
        logger.info(f"Deleted goal {goal_id}")

    # Dashboard settings

    def get_dashboard_settings(self, owner_id: str) -> Optional[DashboardSettings]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM dashboard_settings WHERE owner_id = ?", (owner_id,)
            ).fetchone()

        if not row:
            return None

        return DashboardSettings(
            owner_id=row["owner_id"],
            selected_trackables=json.loads(row["selected_trackables"]),
            trackable_order=json.loads(row["trackable_order"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def save_dashboard_settings(
        self, owner_id: str, selected: list[str], order: list[str]
    ) -> DashboardSettings:
        now = _now()

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO dashboard_settings
                    (owner_id, selected_trackables, trackable_order, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (owner_id) DO UPDATE SET
                    selected_trackables = excluded.selected_trackables,
                    trackable_order = excluded.trackable_order,
                    updated_at = excluded.updated_at
                """,
                (owner_id, json.dumps(selected), json.dumps(order), now.isoformat()),
            )

        logger.info(f"Saved dashboard settings for {owner_id} ({len(selected)} selected)")
        return DashboardSettings(
            owner_id=owner_id,
            selected_trackables=list(selected),
            trackable_order=list(order),
            updated_at=now,
        )
