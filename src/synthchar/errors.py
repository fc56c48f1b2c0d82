"""Exceptions and non-fatal issue records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SynthCharError(Exception):
    """Base class for SynthChar exceptions."""


class TableLoadError(SynthCharError):
    """Raised when the periodic table resource cannot be read."""


class RecipeError(SynthCharError):
    """Raised when a batch recipe file is malformed."""


class InvariantViolation(SynthCharError):
    """Raised when an internal invariant of the batch state is broken."""


class IssueKind(str, Enum):
    UNKNOWN_ELEMENT = "unknown_element"
    DIVISION_BY_ZERO = "division_by_zero"
    MATRIX_SUM_MISMATCH = "matrix_sum_mismatch"
    TABLE_LOAD_FAILURE = "table_load_failure"


@dataclass(frozen=True)
class Issue:
    """A recoverable problem found while deriving batch results."""

    kind: IssueKind
    message: str
    formula: str | None = None


__all__ = [
    "SynthCharError",
    "TableLoadError",
    "RecipeError",
    "InvariantViolation",
    "IssueKind",
    "Issue",
]
