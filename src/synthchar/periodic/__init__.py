from .base import AtomicLookup
from .table import BUNDLED_TABLE_PATH, AtomicTable, default_table, load_atomic_table

__all__ = [
    "AtomicLookup",
    "AtomicTable",
    "BUNDLED_TABLE_PATH",
    "default_table",
    "load_atomic_table",
]
