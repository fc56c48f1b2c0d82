"""Shared numeric constants for batch calculations."""

# Molar quantities are reported per 1000 (matrix % x g/mol -> g per 10 mol-%).
QUANTITY_SCALE = 1000.0

MATRIX_TARGET = 100.0
MATRIX_TOLERANCE = 1e-3

DEFAULT_DESIRED_BATCH = 5.0  # g

MATRIX_WARNING = "Matrix values do not sum to 100%. Please make total 100."

UNRESOLVED_PLACEHOLDER = "—"
