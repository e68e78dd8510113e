# matrix_oracle/data_models/comparison_result.py
# ComparisonResult and EntryMismatch data classes for ResultComparator output.

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class EntryMismatch:
    """
    Record of a single entry outside tolerance.

    Values are kept both as floats and as IEEE 754 hex strings so a report
    shows the exact bit pattern (e.g. -0x0p+0 vs 0x0p+0).
    """
    row:            int
    col:            int
    actual:         float
    expected:       float
    abs_difference: float
    actual_hex:     str
    expected_hex:   str


@dataclass(frozen=True)
class ComparisonResult:
    """
    Outcome of comparing one actual matrix with its expected matrix.

    Fields:
      fixture_name            -- Logical fixture name; empty for ad hoc compares.
      passed                  -- True iff mismatch_count == 0.
      max_absolute_difference -- Largest |actual - expected| over all entries.
                                 NaN when any pair involves NaN.
      first_mismatch_location -- (row, col) of the first row-major mismatch,
                                 or None on pass.
      mismatch_count          -- Total number of entries outside tolerance.
      total_entries           -- rows * cols of the compared matrices.
      tolerance               -- Absolute tolerance applied.
      mismatches              -- Up to max_reported_mismatches EntryMismatch
                                 records in row-major order. Empty on pass.
    """
    fixture_name:            str
    passed:                  bool
    max_absolute_difference: float
    first_mismatch_location: Optional[Tuple[int, int]]
    mismatch_count:          int
    total_entries:           int
    tolerance:               float
    mismatches:              tuple    # tuple of EntryMismatch, immutable

    def summary(self) -> str:
        """One-line human-readable summary."""
        label = self.fixture_name or "(unnamed)"
        if self.passed:
            return (
                f"{label}: PASS ({self.total_entries} entries, "
                f"max |diff|={self.max_absolute_difference:.3e})"
            )
        row, col = self.first_mismatch_location
        return (
            f"{label}: FAIL {self.mismatch_count}/{self.total_entries} entries "
            f"outside tolerance {self.tolerance:g}; first at ({row}, {col}); "
            f"max |diff|={self.max_absolute_difference:.3e}"
        )
