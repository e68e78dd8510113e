# matrix_oracle/constants.py
# Default values for the oracle configuration and the shipped scenarios.
#
# Standard import pattern:
#   from matrix_oracle.constants import (
#       DEFAULT_TOLERANCE,
#       DEFAULT_SPARSITY,
#       DEFAULT_RUNNER_TIMEOUT_S,
#   )


# ---------------------------------------------------------------------------
# COMPARISON
# ---------------------------------------------------------------------------

# Absolute tolerance for actual vs. expected entries. Covers a decimal
# round-trip of doubles through an engine's text I/O with headroom; the
# reference transforms themselves are exact.
DEFAULT_TOLERANCE: float = 1e-10

# Detailed EntryMismatch records kept per fixture. The mismatch count is
# always exact; only the detail list is capped.
DEFAULT_MAX_REPORTED_MISMATCHES: int = 100


# ---------------------------------------------------------------------------
# EXTERNAL EXECUTION
# ---------------------------------------------------------------------------

DEFAULT_RUNNER_TIMEOUT_S: float = 600.0


# ---------------------------------------------------------------------------
# FIXTURE GENERATION
# ---------------------------------------------------------------------------

DEFAULT_SPARSITY: float = 0.0
DEFAULT_SEED:     int   = 7

DEFAULT_ROWS: int = 10
DEFAULT_COLS: int = 10


# ---------------------------------------------------------------------------
# SIGN REGIMES (min_value, max_value)
# ---------------------------------------------------------------------------

POSITIVE_RANGE: tuple = (0.0, 1.0)
NEGATIVE_RANGE: tuple = (-1.0, 0.0)
MIXED_RANGE:    tuple = (-1.0, 1.0)
