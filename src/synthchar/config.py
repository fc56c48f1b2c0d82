"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from synthchar.constants import DEFAULT_DESIRED_BATCH, MATRIX_TOLERANCE
from synthchar.periodic import BUNDLED_TABLE_PATH

TABLE_ENV = "SYNTHCHAR_PERIODIC_TABLE"
LOG_LEVEL_ENV = "SYNTHCHAR_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    periodic_table_path: Path = BUNDLED_TABLE_PATH
    log_level: str = "WARNING"
    matrix_tolerance: float = MATRIX_TOLERANCE
    desired_batch: float = DEFAULT_DESIRED_BATCH


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    environ = os.environ if environ is None else environ
    table = environ.get(TABLE_ENV)
    return Settings(
        periodic_table_path=Path(table) if table else BUNDLED_TABLE_PATH,
        log_level=environ.get(LOG_LEVEL_ENV, "WARNING").upper(),
    )


__all__ = ["Settings", "load_settings", "TABLE_ENV", "LOG_LEVEL_ENV"]
