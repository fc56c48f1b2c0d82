"""Base interface for atomic mass lookups."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

from synthchar.models import AtomicEntry


class AtomicLookup(ABC):
    """Abstract read-only mapping from element symbol to atomic data."""

    @abstractmethod
    def get(self, symbol: str) -> AtomicEntry | None:
        """Return the entry for ``symbol`` or ``None`` if it is unknown."""
        pass

    @abstractmethod
    def __iter__(self) -> Iterator[AtomicEntry]:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and self.get(symbol) is not None

    def atomic_mass(self, symbol: str) -> float | None:
        entry = self.get(symbol)
        return entry.atomic_mass if entry is not None else None
