"""SQLite persistence for learned sentences and the daily practice streak."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from typing import Protocol

SCHEMA_VERSION = 1

logger = logging.getLogger(__name__)

TodayFn = Callable[[], date]


class ProgressTracker(Protocol):
    """Progress operations the session engine relies on."""

    def mark_learned(self, sentence_id: str) -> None: ...

    def record_completion_today(self) -> None: ...

    def current_streak(self) -> int: ...


@dataclass(frozen=True)
class StreakState:
    """Streak counter and the day it was last extended."""

    streak: int
    last_completed_on: date | None


def next_streak(streak: int, last_completed_on: date | None, today: date) -> int:
    """Return the streak after completing a session on `today`.

    Same day keeps the streak, the day after extends it, anything else
    (including no previous completion) restarts it at 1.
    """
    if last_completed_on == today:
        return streak
    if last_completed_on is not None and last_completed_on + timedelta(days=1) == today:
        return streak + 1
    return 1


class ProgressStore:
    """Database access layer for learner progress."""

    def __init__(self, db_path: Path | str, today: TodayFn = date.today) -> None:
        """Open database and bring schema up to date."""
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_path)
        else:
            target = db_path
        self._today = today
        self._conn = sqlite3.connect(target)
        self._conn.row_factory = sqlite3.Row
        self._apply_migrations()

    def _apply_migrations(self) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(self._conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            raise RuntimeError(f"Database schema version {current} is newer than supported {SCHEMA_VERSION}.")

        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """)

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                self._migrate_to_v1()
            with self._conn:
                self._conn.execute(f"PRAGMA user_version = {version}")
                self._conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now(UTC).isoformat()),
                )
            logger.debug("Applied progress schema migration %d", version)

    def _migrate_to_v1(self) -> None:
        """Create learned-sentence and streak tables."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS learned_sentences (
                    sentence_id TEXT PRIMARY KEY,
                    learned_at TEXT NOT NULL
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS streak (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    streak INTEGER NOT NULL,
                    last_completed_on TEXT
                )
                """)
            self._conn.execute("INSERT OR IGNORE INTO streak (id, streak, last_completed_on) VALUES (1, 0, NULL)")

    def mark_learned(self, sentence_id: str) -> None:
        """Add sentence to the all-time learned set; repeated calls are no-ops."""
        with self._conn:
            self._conn.execute(
                "INSERT OR IGNORE INTO learned_sentences (sentence_id, learned_at) VALUES (?, ?)",
                (sentence_id, datetime.now(UTC).isoformat()),
            )

    def learned_ids(self) -> set[str]:
        """Return every sentence id ever answered correctly."""
        rows = self._conn.execute("SELECT sentence_id FROM learned_sentences").fetchall()
        return {str(row["sentence_id"]) for row in rows}

    def learned_count(self) -> int:
        return int(self._conn.execute("SELECT COUNT(*) FROM learned_sentences").fetchone()[0])

    def streak_state(self) -> StreakState:
        """Return stored streak counter and last completion day."""
        row = self._conn.execute("SELECT streak, last_completed_on FROM streak WHERE id = 1").fetchone()
        last = row["last_completed_on"]
        return StreakState(
            streak=int(row["streak"]),
            last_completed_on=date.fromisoformat(last) if last else None,
        )

    def current_streak(self) -> int:
        return self.streak_state().streak

    def last_completed_on(self) -> date | None:
        return self.streak_state().last_completed_on

    def record_completion_today(self) -> None:
        """Register a completed session for today and update the streak."""
        today = self._today()
        state = self.streak_state()
        if state.last_completed_on == today:
            return
        streak = next_streak(state.streak, state.last_completed_on, today)
        with self._conn:
            self._conn.execute(
                "UPDATE streak SET streak = ?, last_completed_on = ? WHERE id = 1",
                (streak, today.isoformat()),
            )
        logger.info("Streak updated to %d (last completion %s)", streak, today.isoformat())

    def list_learned_rows(self) -> list[dict[str, object]]:
        """Return learned-sentence rows for export."""
        rows = self._conn.execute(
            "SELECT sentence_id, learned_at FROM learned_sentences ORDER BY learned_at, sentence_id"
        ).fetchall()
        return [{"sentence_id": str(row["sentence_id"]), "learned_at": str(row["learned_at"])} for row in rows]

    def replace_all(self, learned_rows: Iterable[dict[str, object]], state: StreakState) -> None:
        """Replace all stored progress in one transaction."""
        with self._conn:
            self._conn.execute("DELETE FROM learned_sentences")
            self._conn.executemany(
                "INSERT OR IGNORE INTO learned_sentences (sentence_id, learned_at) VALUES (?, ?)",
                [(row["sentence_id"], row["learned_at"]) for row in learned_rows],
            )
            self._conn.execute(
                "UPDATE streak SET streak = ?, last_completed_on = ? WHERE id = 1",
                (
                    state.streak,
                    state.last_completed_on.isoformat() if state.last_completed_on else None,
                ),
            )

    def close(self) -> None:
        """Close db connection."""
        self._conn.close()
