"""SynthChar batch-composition core package."""

from synthchar.chemistry import gravimetric_factor, molecular_weight
from synthchar.formula import parse_formula
from synthchar.models import ComponentEntry, ProductEntry
from synthchar.periodic import AtomicTable, default_table, load_atomic_table
from synthchar.session import BatchSession, derive, reduce

__all__ = [
    "AtomicTable",
    "BatchSession",
    "ComponentEntry",
    "ProductEntry",
    "default_table",
    "derive",
    "gravimetric_factor",
    "load_atomic_table",
    "molecular_weight",
    "parse_formula",
    "reduce",
]
