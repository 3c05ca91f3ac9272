"""Typo-tolerant answer matching for typed or transcribed sentences."""

from __future__ import annotations

import math
import re
import unicodedata

TOLERANCE_RATIO = 0.15
MIN_TOLERANCE = 1

_NON_WORD = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Return accent, case and punctuation insensitive form of an answer.

    Steps: lowercase, strip combining marks after NFD decomposition, drop
    anything that is not alphanumeric or whitespace, collapse whitespace runs
    and trim.
    """
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = _NON_WORD.sub("", stripped)
    return _WHITESPACE.sub(" ", cleaned).strip()


def edit_distance(a: str, b: str) -> int:
    """Return Levenshtein distance between two strings using one rolling row."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def tolerance_for(normalized_expected: str) -> int:
    """Maximum accepted distance for an already-normalized expected answer."""
    return max(MIN_TOLERANCE, math.floor(len(normalized_expected) * TOLERANCE_RATIO))


def is_close_enough(candidate: str, expected: str) -> bool:
    """Return whether a candidate answer matches the expected one within tolerance."""
    normalized_candidate = normalize(candidate)
    normalized_expected = normalize(expected)
    if normalized_candidate == normalized_expected:
        return True
    distance = edit_distance(normalized_candidate, normalized_expected)
    return distance <= tolerance_for(normalized_expected)
