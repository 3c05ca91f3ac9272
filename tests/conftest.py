from __future__ import annotations

import sys
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import TypeVar

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from phrasetrainer.models import Sentence  # noqa: E402

T = TypeVar("T")


class FirstChoice:
    """Deterministic random source that always takes the first candidate."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []

    def choice(self, seq: Sequence[T]) -> T:
        self.calls.append(tuple(getattr(item, "id", str(item)) for item in seq))
        return seq[0]


class ScriptedChoice:
    """Random source returning candidates by id from a fixed script."""

    def __init__(self, ids: Sequence[str]) -> None:
        self._ids = list(ids)

    def choice(self, seq: Sequence[T]) -> T:
        wanted = self._ids.pop(0)
        for item in seq:
            if getattr(item, "id", None) == wanted:
                return item
        raise AssertionError(f"{wanted} is not a candidate")


class FakeProgress:
    """In-memory progress tracker recording calls."""

    def __init__(self) -> None:
        self.learned: list[str] = []
        self.completions = 0
        self.streak = 0

    def mark_learned(self, sentence_id: str) -> None:
        self.learned.append(sentence_id)

    def record_completion_today(self) -> None:
        self.completions += 1
        self.streak += 1

    def current_streak(self) -> int:
        return self.streak


class FixedToday:
    """Mutable clock for streak tests."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


def make_catalog(count: int) -> list[Sentence]:
    return [Sentence(id=f"s{i}", source_text=f"Sentence {i}", target_text=f"Frase {i}") for i in range(1, count + 1)]


@pytest.fixture
def fake_progress() -> FakeProgress:
    return FakeProgress()


@pytest.fixture
def first_choice() -> FirstChoice:
    return FirstChoice()
