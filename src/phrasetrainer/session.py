"""Practice session state machine."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeVar

from .matcher import is_close_enough
from .models import Direction, Sentence, StudyPlan
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Source texts of the curated daily set, in presentation order.
DAILY_SOURCE_TEXTS = ("Good morning!", "How are you?", "Thank you very much.")


class ChoiceSource(Protocol):
    """Random source used to pick prompts; `random.Random` satisfies it."""

    def choice(self, seq: Sequence[T]) -> T: ...


class SessionStatus(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    EXHAUSTED = "exhausted"
    FINISHED = "finished"


class InvalidStateError(RuntimeError):
    """Raised when an operation needs a current prompt and there is none."""


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session after a transition."""

    status: SessionStatus
    plan: StudyPlan | None
    current: Sentence | None
    completed_count: int
    target: int
    active_count: int


@dataclass(frozen=True)
class AnswerResult:
    """Outcome of one submitted answer."""

    correct: bool
    expected: str
    feedback: str | None
    snapshot: SessionSnapshot


def select_active_set(plan: StudyPlan, catalog: Sequence[Sentence]) -> list[Sentence]:
    """Return the ordered sentences practised by a plan."""
    if plan is StudyPlan.DAILY:
        by_source = {sentence.source_text: sentence for sentence in reversed(catalog)}
        curated = [by_source[text] for text in DAILY_SOURCE_TEXTS if text in by_source]
        if len(curated) >= plan.target:
            return curated
        logger.warning("Curated daily sentences missing from catalog; using first %d entries", plan.target)
        return list(catalog[: plan.target])
    return list(catalog[: min(plan.target, len(catalog))])


class SessionEngine:
    """Owns one practice session: active set, current prompt and completions."""

    def __init__(
        self,
        catalog: Sequence[Sentence],
        progress: ProgressTracker,
        rng: ChoiceSource | None = None,
    ) -> None:
        self.catalog: tuple[Sentence, ...] = tuple(catalog)
        self.progress = progress
        self._rng: ChoiceSource = rng if rng is not None else random.Random()
        self._plan: StudyPlan | None = None
        self._active_set: tuple[Sentence, ...] = ()
        self._completed_ids: set[str] = set()
        self._current: Sentence | None = None
        self._status = SessionStatus.NOT_STARTED

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def plan(self) -> StudyPlan | None:
        return self._plan

    @property
    def current(self) -> Sentence | None:
        return self._current

    @property
    def active_set(self) -> tuple[Sentence, ...]:
        return self._active_set

    @property
    def completed_ids(self) -> frozenset[str]:
        return frozenset(self._completed_ids)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self._status,
            plan=self._plan,
            current=self._current,
            completed_count=len(self._completed_ids),
            target=self._plan.target if self._plan is not None else 0,
            active_count=len(self._active_set),
        )

    def start(self, plan: StudyPlan) -> SessionSnapshot:
        """Begin a fresh session for `plan`, discarding any session-local state."""
        self._plan = plan
        self._completed_ids = set()
        self._active_set = tuple(select_active_set(plan, self.catalog))
        if self._active_set:
            self._current = self._rng.choice(self._active_set)
            self._status = SessionStatus.IN_PROGRESS
        else:
            self._current = None
            self._status = SessionStatus.EXHAUSTED
        logger.debug("Started %s session with %d sentences", plan.value, len(self._active_set))
        return self.snapshot()

    def restart(self) -> SessionSnapshot:
        """Start again with the last plan."""
        if self._plan is None:
            raise InvalidStateError("No plan has been started yet.")
        return self.start(self._plan)

    def pick_next(self) -> Sentence | None:
        """Return a random not-yet-completed sentence of the active set, if any."""
        remaining = [sentence for sentence in self._active_set if sentence.id not in self._completed_ids]
        if not remaining:
            return None
        return self._rng.choice(remaining)

    def submit_answer(self, candidate: str, direction: Direction) -> AnswerResult:
        """Check an answer against the current prompt and advance on success."""
        current = self._current
        if self._status is not SessionStatus.IN_PROGRESS or current is None or self._plan is None:
            raise InvalidStateError(f"No current prompt (session is {self._status.value}).")

        expected = direction.expected_for(current)
        if not is_close_enough(candidate, expected):
            return AnswerResult(
                correct=False,
                expected=expected,
                feedback=f"Correct answer: {expected}",
                snapshot=self.snapshot(),
            )

        self._completed_ids.add(current.id)
        self.progress.mark_learned(current.id)

        if len(self._completed_ids) >= self._plan.target:
            # The current prompt stays active until the completion is stored.
            self.progress.record_completion_today()
            self._current = None
            self._status = SessionStatus.FINISHED
            logger.info("Finished %s session (%d correct)", self._plan.value, len(self._completed_ids))
        else:
            self._current = self.pick_next()
            if self._current is None:
                self._status = SessionStatus.EXHAUSTED
                logger.info(
                    "%s session exhausted at %d/%d",
                    self._plan.value,
                    len(self._completed_ids),
                    self._plan.target,
                )
        return AnswerResult(correct=True, expected=expected, feedback=None, snapshot=self.snapshot())
