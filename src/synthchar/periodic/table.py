"""In-memory periodic table loaded from a CSV resource."""

from __future__ import annotations

import csv
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from synthchar.errors import TableLoadError
from synthchar.models import AtomicEntry
from synthchar.periodic.base import AtomicLookup

logger = logging.getLogger(__name__)

BUNDLED_TABLE_PATH = Path(__file__).resolve().parent / "data" / "periodic_table.csv"

# Normalised header name -> AtomicEntry field
_COLUMNS = {
    "atomicnumber": "atomic_number",
    "element": "element_name",
    "symbol": "symbol",
    "atomicmass": "atomic_mass",
}


class AtomicTable(AtomicLookup):
    """Immutable symbol -> AtomicEntry table."""

    def __init__(self, entries: Iterable[AtomicEntry]):
        by_symbol: dict[str, AtomicEntry] = {}
        for entry in entries:
            if entry.symbol in by_symbol:
                logger.warning("Duplicate symbol %s ignored", entry.symbol)
                continue
            by_symbol[entry.symbol] = entry
        self._entries: Mapping[str, AtomicEntry] = MappingProxyType(by_symbol)

    @property
    def entries(self) -> Mapping[str, AtomicEntry]:
        return self._entries

    def get(self, symbol: str) -> AtomicEntry | None:
        return self._entries.get(symbol)

    def __iter__(self) -> Iterator[AtomicEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AtomicTable({len(self)} elements)"


def _normalise_header(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


def _parse_row(row: Mapping[str, str]) -> AtomicEntry:
    symbol = (row.get("symbol") or "").strip()
    if not symbol:
        raise ValueError("missing symbol")
    mass = float((row.get("atomic_mass") or "").strip())
    if not mass > 0:
        raise ValueError(f"non-positive atomic mass {mass}")
    number_text = (row.get("atomic_number") or "").strip()
    try:
        atomic_number = int(number_text) if number_text else None
    except ValueError:
        atomic_number = None
    return AtomicEntry(
        symbol=symbol,
        atomic_mass=mass,
        element_name=(row.get("element_name") or "").strip(),
        atomic_number=atomic_number,
    )


def parse_atomic_rows(lines: Iterable[str]) -> AtomicTable:
    """Build a table from CSV text lines, skipping malformed rows."""
    reader = csv.reader(lines)
    try:
        header = next(reader)
    except StopIteration as exc:
        raise TableLoadError("Periodic table resource is empty") from exc

    fields = [_COLUMNS.get(_normalise_header(name)) for name in header]
    if "symbol" not in fields or "atomic_mass" not in fields:
        raise TableLoadError(
            f"Periodic table header must name Symbol and AtomicMass columns, got {header}"
        )

    entries = []
    for line_number, values in enumerate(reader, start=2):
        if not any(value.strip() for value in values):
            continue
        row = {field: value for field, value in zip(fields, values) if field}
        try:
            entries.append(_parse_row(row))
        except ValueError as exc:
            logger.warning("Skipping periodic table row %d: %s", line_number, exc)
    return AtomicTable(entries)


def load_atomic_table(path: str | Path = BUNDLED_TABLE_PATH) -> AtomicTable:
    """Load a periodic table CSV (AtomicNumber, Element, Symbol, AtomicMass)."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            table = parse_atomic_rows(f)
    except OSError as exc:
        raise TableLoadError(f"Cannot read periodic table {path}: {exc}") from exc
    logger.info("Loaded %d elements from %s", len(table), path)
    return table


@lru_cache(maxsize=None)
def default_table() -> AtomicTable:
    """Return the bundled table, loaded once per process."""
    return load_atomic_table(BUNDLED_TABLE_PATH)


__all__ = [
    "AtomicTable",
    "BUNDLED_TABLE_PATH",
    "default_table",
    "load_atomic_table",
    "parse_atomic_rows",
]
