"""Molecular weight and gravimetric factor calculations.

Every function here returns ``None`` instead of raising when a value cannot be
resolved: an unknown element symbol, a table that has not been loaded yet, or a
zero denominator. Callers display ``None`` as a placeholder.
"""

from __future__ import annotations

import logging

from synthchar.formula import iter_formula
from synthchar.periodic import AtomicLookup

logger = logging.getLogger(__name__)


def molecular_weight(formula: str, table: AtomicLookup | None) -> float | None:
    """Sum of ``count * atomic_mass`` over the formula.

    All-or-nothing: a single unknown symbol makes the whole result ``None``.
    An empty formula weighs ``0.0``.
    """
    if table is None:
        return None
    total = 0.0
    for symbol, count in iter_formula(formula):
        mass = table.atomic_mass(symbol)
        if mass is None:
            logger.debug("Unknown element %s in %r", symbol, formula)
            return None
        total += mass * count
    return total


def gravimetric_factor_from_weights(
    precursor_weight: float | None,
    precursor_moles: float,
    product_weight: float | None,
    product_moles: float,
) -> float | None:
    """GF = (MW_precursor * n_precursor) / (MW_product * n_product)."""
    if not precursor_weight or not product_weight:
        return None
    denominator = product_weight * product_moles
    if denominator == 0:
        return None
    return (precursor_weight * precursor_moles) / denominator


def gravimetric_factor(
    precursor_formula: str,
    product_formula: str,
    precursor_moles: float,
    product_moles: float,
    table: AtomicLookup | None,
) -> float | None:
    """Stoichiometric conversion factor from a precursor to its product.

    Example: 2 H3BO3 -> B2O3 + 3 H2O gives
    ``gravimetric_factor("H3BO3", "B2O3", 2, 1, table)`` of about 1.776.
    """
    return gravimetric_factor_from_weights(
        molecular_weight(precursor_formula, table),
        precursor_moles,
        molecular_weight(product_formula, table),
        product_moles,
    )


def mass_percent(count: int, atomic_mass: float, compound_weight: float | None) -> float | None:
    """Mass percentage of one element in a compound."""
    if not compound_weight:
        return None
    return (count * atomic_mass) / compound_weight * 100.0


__all__ = [
    "molecular_weight",
    "gravimetric_factor",
    "gravimetric_factor_from_weights",
    "mass_percent",
]
