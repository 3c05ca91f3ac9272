"""Core domain models for sentence-pair practice."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Sentence:
    """One source/target sentence pair from the catalog."""

    id: str
    source_text: str
    target_text: str


class StudyPlan(Enum):
    """Practice preset controlling the session target and catalog subset."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def target(self) -> int:
        """Number of distinct correct answers needed to finish a session."""
        return _PLAN_TARGETS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_PLAN_TARGETS = {
    StudyPlan.DAILY: 3,
    StudyPlan.WEEKLY: 10,
    StudyPlan.MONTHLY: 20,
}


class Direction(Enum):
    """Which side of a sentence pair the learner must produce."""

    SOURCE_TO_TARGET = "source_to_target"
    TARGET_TO_SOURCE = "target_to_source"

    def prompt_for(self, sentence: Sentence) -> str:
        """Return the side shown to the learner."""
        if self is Direction.SOURCE_TO_TARGET:
            return sentence.source_text
        return sentence.target_text

    def expected_for(self, sentence: Sentence) -> str:
        """Return the side the learner must answer with."""
        if self is Direction.SOURCE_TO_TARGET:
            return sentence.target_text
        return sentence.source_text

    def flipped(self) -> Direction:
        if self is Direction.SOURCE_TO_TARGET:
            return Direction.TARGET_TO_SOURCE
        return Direction.SOURCE_TO_TARGET
