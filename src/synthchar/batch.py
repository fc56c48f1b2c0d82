"""Batch weight calculations.

This module turns matrix percentages and molecular weights into per-entry molar
quantities and scales them to a desired batch mass.

Three quantity rules are provided:
- Precursor mode: ``q = matrix * MW * moles_factor / 1000``.
- GF-adjusted mode: ``q = matrix * MW_product / 1000`` for precursors linked to a
  product with a resolved gravimetric factor. No moles factor is applied.
- Product mode: ``q = matrix_precursor * (MW * GF) * product_moles / 1000``.

In every mode the batch weight of an entry is ``q / sum(q) * desired_batch``.

Unresolved values (unknown molecular weight) travel through the arrays as
``NaN``; they are excluded from totals and converted back to ``None`` at the
edges with :func:`to_optional`. A total is itself ``None`` when no entry is
resolved or the sum is not finite.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

from synthchar.constants import QUANTITY_SCALE


def as_array(values: Iterable[float | None]) -> np.ndarray:
    """Convert optional floats to an array with ``NaN`` for ``None``."""
    return np.array([np.nan if v is None else float(v) for v in values], dtype=float)


def to_optional(values: np.ndarray) -> List[float | None]:
    return [float(v) if np.isfinite(v) else None for v in values]


@dataclass(frozen=True)
class BatchWeights:
    """Molar quantities, their total and the scaled batch weights."""

    quantities: np.ndarray
    total: float | None
    scaled: np.ndarray

    @property
    def is_scalable(self) -> bool:
        return self.total is not None and self.total != 0.0

    @property
    def overflowed(self) -> bool:
        """Resolved entries exist but their sum is not finite."""
        return self.total is None and bool(np.any(~np.isnan(self.quantities)))

    def quantity_list(self) -> List[float | None]:
        return to_optional(self.quantities)

    def scaled_list(self) -> List[float | None]:
        return to_optional(self.scaled)


def precursor_quantities(
    matrices: Sequence[float],
    molecular_weights: Sequence[float | None],
    mole_factors: Sequence[float],
) -> np.ndarray:
    matrix = np.asarray(matrices, dtype=float)
    weights = as_array(molecular_weights)
    factors = np.asarray(mole_factors, dtype=float)
    return matrix * weights * factors / QUANTITY_SCALE


def gf_adjusted_quantities(
    matrices: Sequence[float],
    effective_weights: Sequence[float | None],
) -> np.ndarray:
    """Quantities for GF mode; ``effective_weights`` already holds product MWs."""
    matrix = np.asarray(matrices, dtype=float)
    weights = as_array(effective_weights)
    return matrix * weights / QUANTITY_SCALE


def product_quantities(
    precursor_matrices: Sequence[float],
    molecular_weights: Sequence[float | None],
    gravimetric_factors: Sequence[float | None],
    precursor_moles: Sequence[float],
    product_moles: Sequence[float],
) -> np.ndarray:
    """Product quantities using the matrix of each linked precursor.

    The GF multiplier only applies where the factor is resolved and both mole
    values are positive; other rows fall back to the bare product MW.
    """
    matrix = np.asarray(precursor_matrices, dtype=float)
    weights = as_array(molecular_weights)
    factors = as_array(gravimetric_factors)
    n_precursor = np.asarray(precursor_moles, dtype=float)
    n_product = np.asarray(product_moles, dtype=float)

    apply_gf = np.isfinite(factors) & (n_precursor > 0) & (n_product > 0)
    effective = np.where(apply_gf, weights * np.nan_to_num(factors), weights)
    return matrix * effective * n_product / QUANTITY_SCALE


def total_weight(quantities: np.ndarray) -> float | None:
    """Sum of resolved quantities.

    ``None`` when every entry is unresolved or the sum overflows; an empty
    batch weighs ``0.0``.
    """
    if len(quantities) == 0:
        return 0.0
    resolved = ~np.isnan(quantities)
    if not resolved.any():
        return None
    total = float(np.sum(quantities[resolved]))
    return total if np.isfinite(total) else None


def scale_weights(quantities: np.ndarray, total: float | None, desired_batch: float) -> np.ndarray:
    """Scale quantities so that the resolved entries sum to ``desired_batch``.

    Returns all-``NaN`` when the total is zero or unresolved.
    """
    if total is None or not np.isfinite(total) or total == 0.0:
        return np.full(len(quantities), np.nan)
    return quantities / total * desired_batch


def batch_weights(quantities: np.ndarray, desired_batch: float) -> BatchWeights:
    total = total_weight(quantities)
    return BatchWeights(
        quantities=quantities,
        total=total,
        scaled=scale_weights(quantities, total, desired_batch),
    )


__all__ = [
    "BatchWeights",
    "as_array",
    "to_optional",
    "precursor_quantities",
    "gf_adjusted_quantities",
    "product_quantities",
    "total_weight",
    "scale_weights",
    "batch_weights",
]
