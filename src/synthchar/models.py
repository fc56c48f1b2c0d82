"""Data structures for atomic data, batch entries and derived results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

ParsedFormula = Tuple[Tuple[str, int], ...]


@dataclass(frozen=True)
class AtomicEntry:
    symbol: str
    atomic_mass: float  # g/mol
    element_name: str = ""
    atomic_number: int | None = None


@dataclass(frozen=True)
class ElementCount:
    symbol: str
    element_name: str
    count: int


@dataclass(frozen=True)
class ComponentEntry:
    """A precursor row in the batch recipe.

    Attributes:
        formula: Chemical formula as typed by the user (e.g. ``"H3BO3"``).
        matrix: Matrix percentage of this precursor (mol %).
        molecular_weight: Derived molecular weight (g/mol), ``None`` if unresolved.
    """

    formula: str = ""
    matrix: float = 0.0
    molecular_weight: float | None = None


@dataclass(frozen=True)
class ProductEntry:
    """A product row linked to a precursor by formula.

    ``precursor_formula`` is a lookup key into the component list, not an
    ownership link; it is re-resolved on every derivation.
    """

    formula: str = ""
    precursor_formula: str = ""
    precursor_moles: float = 1.0
    product_moles: float = 1.0
    molecular_weight: float | None = None
    gravimetric_factor: float | None = None


@dataclass(frozen=True)
class ComponentResult:
    formula: str
    matrix: float
    molecular_weight: float | None
    molar_quantity: float | None
    scaled_weight: float | None
    product_formula: str | None = None


@dataclass(frozen=True)
class ProductResult:
    formula: str
    precursor_formula: str
    precursor_moles: float
    product_moles: float
    molecular_weight: float | None
    gravimetric_factor: float | None
    molar_quantity: float | None
    scaled_weight: float | None


@dataclass(frozen=True)
class CompositionShare:
    formula: str
    percentage: float
