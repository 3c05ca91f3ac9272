"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

HOME_ENV = "PHRASETRAINER_HOME"
LOG_LEVEL_ENV = "PHRASETRAINER_LOG_LEVEL"
DEFAULT_DATA_DIR = Path(".phrasetrainer")
DEFAULT_LOG_LEVEL = "WARNING"
DB_FILENAME = "progress.db"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Where progress lives and how chatty logging is."""

    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def db_path(self) -> Path:
        return self.data_dir / DB_FILENAME


def is_log_level(name: str) -> bool:
    """Return whether `name` is a registered logging level name."""
    return name.upper() in logging.getLevelNamesMapping()


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the environment, falling back to defaults."""
    env = os.environ if environ is None else environ
    home = env.get(HOME_ENV, "").strip()
    level = env.get(LOG_LEVEL_ENV, "").strip().upper()
    if level and not is_log_level(level):
        logger.warning("Ignoring unknown %s value %r", LOG_LEVEL_ENV, level)
        level = ""
    return Settings(
        data_dir=Path(home).expanduser() if home else DEFAULT_DATA_DIR,
        log_level=level or DEFAULT_LOG_LEVEL,
    )
