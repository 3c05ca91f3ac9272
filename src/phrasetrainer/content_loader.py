"""Load the sentence catalog from bundled JSON resources."""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from .models import Sentence

CONTENT_PACKAGE = "phrasetrainer.content"
CATALOG_RESOURCE = "catalog.json"


def _sentence_from_dict(index: int, raw: Any) -> Sentence:
    """Build one sentence from a raw catalog entry."""
    if not isinstance(raw, dict):
        raise ValueError(f"Catalog entry #{index} must be an object.")
    fields: dict[str, str] = {}
    for key in ("id", "source", "target"):
        value = str(raw.get(key, "")).strip()
        if not value:
            raise ValueError(f"Catalog entry #{index} is missing '{key}'.")
        fields[key] = value
    return Sentence(id=fields["id"], source_text=fields["source"], target_text=fields["target"])


def _catalog_from_payload(raw: Any) -> list[Sentence]:
    """Build the ordered catalog from a decoded JSON document."""
    if isinstance(raw, dict):
        raw = raw.get("sentences")
    if not isinstance(raw, list):
        raise ValueError("Catalog must be a list of sentences or an object with a 'sentences' list.")
    catalog = [_sentence_from_dict(index, item) for index, item in enumerate(raw)]
    _validate_unique_ids(catalog)
    return catalog


def load_catalog() -> list[Sentence]:
    """Load the bundled catalog in file order."""
    entry = resources.files(CONTENT_PACKAGE).joinpath(CATALOG_RESOURCE)
    return _catalog_from_payload(json.loads(entry.read_text(encoding="utf-8-sig")))


def load_catalog_from_file(path: Path | str) -> list[Sentence]:
    """Load a catalog from an arbitrary JSON file for tests/tools."""
    text = Path(path).read_text(encoding="utf-8-sig")
    return _catalog_from_payload(json.loads(text))


def _validate_unique_ids(catalog: list[Sentence]) -> None:
    seen: set[str] = set()
    for sentence in catalog:
        if sentence.id in seen:
            raise ValueError(f"Duplicate sentence id: {sentence.id}")
        seen.add(sentence.id)
