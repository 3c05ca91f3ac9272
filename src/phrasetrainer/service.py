"""Application service wiring catalog, progress store and practice sessions."""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from pathlib import Path
from typing import cast

from . import __version__
from .content_loader import load_catalog
from .models import Direction, Sentence, StudyPlan
from .progress import SCHEMA_VERSION, ProgressStore, StreakState, TodayFn
from .session import AnswerResult, ChoiceSource, SessionEngine, SessionSnapshot, select_active_set

EXPORT_FORMAT_VERSION = 1
# Largest value an SQLite INTEGER column holds.
MAX_STREAK = 2**63 - 1

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressSummary:
    """Learner progress for status display."""

    streak: int
    last_completed_on: date | None
    learned_count: int
    catalog_size: int


@dataclass(frozen=True)
class PlanOverview:
    """What a plan would practise with the current catalog."""

    plan: StudyPlan
    target: int
    sentence_count: int

    @property
    def reachable(self) -> bool:
        """Whether the plan's target can be met by its active set."""
        return self.sentence_count >= self.target


@dataclass(frozen=True)
class ProgressTransferSummary:
    """Result of exporting or importing learner progress."""

    learned_rows: int
    streak: int
    last_completed_on: date | None


class TrainerService:
    """Coordinates practice sessions and learner progress."""

    def __init__(
        self,
        db_path: Path | str,
        catalog: Sequence[Sentence] | None = None,
        rng: ChoiceSource | None = None,
        today: TodayFn = date.today,
    ) -> None:
        """Initialize service with database path and optional catalog override."""
        self.catalog: list[Sentence] = list(catalog) if catalog is not None else load_catalog()
        self.progress = ProgressStore(db_path, today=today)
        self.engine = SessionEngine(self.catalog, self.progress, rng=rng)

    def plan_overview(self) -> list[PlanOverview]:
        """Return every plan with its target and active-set size."""
        return [
            PlanOverview(plan=plan, target=plan.target, sentence_count=len(select_active_set(plan, self.catalog)))
            for plan in StudyPlan
        ]

    def start_session(self, plan: StudyPlan | str) -> SessionSnapshot:
        """Start a session for a plan given as enum or name."""
        return self.engine.start(_coerce_plan(plan))

    def restart_session(self) -> SessionSnapshot:
        return self.engine.restart()

    def submit_answer(self, text: str, direction: Direction) -> AnswerResult:
        """Submit a typed or transcribed answer for the current prompt."""
        return self.engine.submit_answer(text, direction)

    def snapshot(self) -> SessionSnapshot:
        return self.engine.snapshot()

    def progress_summary(self) -> ProgressSummary:
        state = self.progress.streak_state()
        return ProgressSummary(
            streak=state.streak,
            last_completed_on=state.last_completed_on,
            learned_count=self.progress.learned_count(),
            catalog_size=len(self.catalog),
        )

    def export_progress(self, export_path: Path | str) -> ProgressTransferSummary:
        """Export learned sentences and streak state to a JSON file."""
        learned_rows = self.progress.list_learned_rows()
        state = self.progress.streak_state()
        payload = {
            "format_version": EXPORT_FORMAT_VERSION,
            "exported_at": datetime.now(UTC).isoformat(),
            "source": {
                "app_version": __version__,
                "schema_version": SCHEMA_VERSION,
            },
            "streak": {
                "streak": state.streak,
                "last_completed_on": state.last_completed_on.isoformat() if state.last_completed_on else None,
            },
            "learned": learned_rows,
        }

        path = Path(export_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Exported %d learned sentences to %s", len(learned_rows), path)
        return ProgressTransferSummary(
            learned_rows=len(learned_rows),
            streak=state.streak,
            last_completed_on=state.last_completed_on,
        )

    def import_progress(self, import_path: Path | str) -> ProgressTransferSummary:
        """Replace stored progress with the contents of an export file."""
        path = Path(import_path)
        raw_obj: object = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw_obj, dict):
            raise ValueError("Import file root must be a JSON object.")
        raw = cast(dict[str, object], raw_obj)

        format_version = _coerce_int(raw.get("format_version", 0))
        if format_version is None:
            raise ValueError("Import file has invalid format_version.")
        if format_version > EXPORT_FORMAT_VERSION:
            raise ValueError(
                f"Import file format version {format_version} is newer than supported {EXPORT_FORMAT_VERSION}."
            )

        now = datetime.now(UTC).isoformat()
        learned_rows = _normalize_learned_rows(raw.get("learned"), now)
        state = _normalize_streak(raw.get("streak"))

        self.progress.replace_all(learned_rows, state)
        return ProgressTransferSummary(
            learned_rows=len(learned_rows),
            streak=state.streak,
            last_completed_on=state.last_completed_on,
        )

    def close(self) -> None:
        """Close resources."""
        self.progress.close()


def _coerce_plan(plan: StudyPlan | str) -> StudyPlan:
    if isinstance(plan, StudyPlan):
        return plan
    try:
        return StudyPlan(plan.strip().lower())
    except ValueError:
        raise KeyError(plan) from None


def _normalize_learned_rows(raw: object, now: str) -> list[dict[str, object]]:
    """Normalize learned rows from an import payload, skipping malformed entries."""
    if not isinstance(raw, list):
        return []
    rows: list[dict[str, object]] = []
    seen: set[str] = set()
    for item in cast(list[object], raw):
        if not isinstance(item, dict):
            logger.warning("Skipping non-object learned row: %r", item)
            continue
        row = cast(dict[str, object], item)
        sentence_id: object = row.get("sentence_id")
        if not isinstance(sentence_id, str) or not sentence_id.strip():
            logger.warning("Skipping learned row without sentence_id: %r", row)
            continue
        sentence_id = sentence_id.strip()
        if sentence_id in seen:
            continue
        seen.add(sentence_id)
        learned_at: object = row.get("learned_at")
        rows.append(
            {
                "sentence_id": sentence_id,
                "learned_at": learned_at if isinstance(learned_at, str) and learned_at else now,
            }
        )
    return rows


def _normalize_streak(raw: object) -> StreakState:
    """Normalize streak section from an import payload."""
    if not isinstance(raw, dict):
        return StreakState(streak=0, last_completed_on=None)
    section = cast(dict[str, object], raw)
    streak = max(0, _coerce_int(section.get("streak", 0), default=0) or 0)
    if streak > MAX_STREAK:
        raise ValueError(f"Import file streak {streak} is out of range.")
    last_raw: object = section.get("last_completed_on")
    last_completed_on: date | None = None
    if isinstance(last_raw, str) and last_raw:
        try:
            last_completed_on = date.fromisoformat(last_raw)
        except ValueError:
            logger.warning("Ignoring invalid last_completed_on: %r", last_raw)
    if last_completed_on is None:
        streak = 0
    return StreakState(streak=streak, last_completed_on=last_completed_on)


def _coerce_int(value: object, default: int | None = None) -> int | None:
    """Coerce value to int for import normalization."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default
