import sqlite3
from datetime import date, timedelta
from pathlib import Path

import pytest
from conftest import FixedToday

from phrasetrainer.progress import SCHEMA_VERSION, ProgressStore, StreakState, next_streak

TODAY = date(2026, 3, 10)


def test_next_streak_policy() -> None:
    assert next_streak(0, None, TODAY) == 1
    assert next_streak(4, TODAY, TODAY) == 4
    assert next_streak(4, TODAY - timedelta(days=1), TODAY) == 5
    assert next_streak(4, TODAY - timedelta(days=2), TODAY) == 1
    assert next_streak(4, TODAY + timedelta(days=1), TODAY) == 1


def test_new_store_has_empty_progress() -> None:
    store = ProgressStore(":memory:")
    assert store.current_streak() == 0
    assert store.last_completed_on() is None
    assert store.learned_ids() == set()
    assert store.learned_count() == 0


def test_migration_sets_user_version_and_schema_history() -> None:
    store = ProgressStore(":memory:")
    version = int(store._conn.execute("PRAGMA user_version").fetchone()[0])  # noqa: SLF001
    assert version == SCHEMA_VERSION
    rows = store._conn.execute("SELECT version FROM schema_migrations ORDER BY version").fetchall()  # noqa: SLF001
    assert [int(row["version"]) for row in rows] == [1]


def test_newer_schema_version_is_rejected(tmp_path: Path) -> None:
    db_path = tmp_path / "future.db"
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
        conn.commit()
    finally:
        conn.close()
    with pytest.raises(RuntimeError, match="newer than supported"):
        ProgressStore(db_path)


def test_mark_learned_is_idempotent() -> None:
    store = ProgressStore(":memory:")
    store.mark_learned("greeting-hello")
    store.mark_learned("greeting-hello")
    store.mark_learned("courtesy-please")
    assert store.learned_ids() == {"greeting-hello", "courtesy-please"}
    assert store.learned_count() == 2


def test_first_completion_starts_streak() -> None:
    store = ProgressStore(":memory:", today=FixedToday(TODAY))
    store.record_completion_today()
    assert store.current_streak() == 1
    assert store.last_completed_on() == TODAY


def test_completion_day_after_yesterday_extends_streak() -> None:
    clock = FixedToday(TODAY - timedelta(days=1))
    store = ProgressStore(":memory:", today=clock)
    store.record_completion_today()
    clock.today = TODAY
    store.record_completion_today()
    assert store.current_streak() == 2
    assert store.last_completed_on() == TODAY


def test_completion_after_gap_resets_streak() -> None:
    clock = FixedToday(TODAY - timedelta(days=3))
    store = ProgressStore(":memory:", today=clock)
    store.record_completion_today()
    clock.today = TODAY - timedelta(days=2)
    store.record_completion_today()
    assert store.current_streak() == 2
    clock.today = TODAY
    store.record_completion_today()
    assert store.current_streak() == 1
    assert store.last_completed_on() == TODAY


def test_same_day_completion_does_not_double_count() -> None:
    clock = FixedToday(TODAY - timedelta(days=1))
    store = ProgressStore(":memory:", today=clock)
    store.record_completion_today()
    clock.today = TODAY
    store.record_completion_today()
    store.record_completion_today()
    assert store.current_streak() == 2


def test_replace_all_overwrites_progress() -> None:
    store = ProgressStore(":memory:")
    store.mark_learned("old")
    store.replace_all(
        [{"sentence_id": "a", "learned_at": "2026-01-01T00:00:00+00:00"}, {"sentence_id": "b", "learned_at": "x"}],
        StreakState(streak=7, last_completed_on=TODAY),
    )
    assert store.learned_ids() == {"a", "b"}
    assert store.streak_state() == StreakState(streak=7, last_completed_on=TODAY)
    rows = store.list_learned_rows()
    assert rows[0] == {"sentence_id": "a", "learned_at": "2026-01-01T00:00:00+00:00"}


def test_path_database_persists_between_stores(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "progress.db"
    store = ProgressStore(db_path, today=FixedToday(TODAY))
    store.mark_learned("greeting-hello")
    store.record_completion_today()
    store.close()

    assert db_path.exists()
    reopened = ProgressStore(db_path)
    assert reopened.learned_ids() == {"greeting-hello"}
    assert reopened.current_streak() == 1
    reopened.close()
