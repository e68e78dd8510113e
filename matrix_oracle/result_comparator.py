# matrix_oracle/result_comparator.py
# ResultComparator -- entrywise actual vs. expected comparison under an
# absolute tolerance.
#
# Match rule per entry pair (a, e):
#   a and e are bit-identical or equal (covers +inf == +inf, 0.0 == -0.0), or
#   |a - e| <= tolerance.
# NaN never matches anything, including NaN.
#
# Shapes are checked first; a shape difference raises ShapeMismatchError
# and no entry is compared. Numeric mismatches are never raised: every one
# is counted, and the first max_reported_mismatches are recorded in
# row-major order.

import math
import struct
from typing import Optional

import numpy as np

from matrix_oracle.constants import DEFAULT_MAX_REPORTED_MISMATCHES, DEFAULT_TOLERANCE
from matrix_oracle.data_models.comparison_result import ComparisonResult, EntryMismatch
from matrix_oracle.data_models.matrix import Matrix
from matrix_oracle.exceptions import InvalidSpecError, ShapeMismatchError


def _float_hex(value: float) -> str:
    """8-byte big-endian IEEE 754 pattern as hex. Distinguishes +0.0 from -0.0."""
    return struct.pack(">d", value).hex()


def _check_tolerance(tolerance: float) -> float:
    if isinstance(tolerance, bool) or not isinstance(tolerance, (int, float)):
        raise InvalidSpecError("tolerance", tolerance, "must be a number")
    if not math.isfinite(tolerance) or tolerance < 0.0:
        raise InvalidSpecError("tolerance", tolerance, "must be finite and >= 0")
    return float(tolerance)


class ResultComparator:
    """
    Compares an actual Matrix with an expected Matrix.

    The tolerance is an explicit construction parameter; compare() uses it
    unless the caller passes an explicit override. Operands are read-only.

    Method:
      compare(actual, expected, tolerance=None, fixture_name="") -> ComparisonResult
    """

    def __init__(
        self,
        tolerance:               float = DEFAULT_TOLERANCE,
        max_reported_mismatches: int   = DEFAULT_MAX_REPORTED_MISMATCHES,
    ) -> None:
        self._tolerance = _check_tolerance(tolerance)
        if isinstance(max_reported_mismatches, bool) or not isinstance(max_reported_mismatches, int) \
                or max_reported_mismatches < 0:
            raise InvalidSpecError(
                "max_reported_mismatches", max_reported_mismatches, "must be an integer >= 0"
            )
        self._max_reported = max_reported_mismatches

    @property
    def tolerance(self) -> float:
        return self._tolerance

    def compare(
        self,
        actual:       Matrix,
        expected:     Matrix,
        tolerance:    Optional[float] = None,
        fixture_name: str = "",
    ) -> ComparisonResult:
        """
        Compare actual against expected. Returns ComparisonResult.

        Raises ShapeMismatchError when the shapes differ, before any entry
        is examined.
        """
        tol = self._tolerance if tolerance is None else _check_tolerance(tolerance)

        if actual.shape != expected.shape:
            raise ShapeMismatchError(actual.shape, expected.shape, fixture_name)

        a = actual.to_array()
        e = expected.to_array()

        with np.errstate(invalid="ignore", over="ignore"):
            equal = a == e
            diff  = np.abs(a - e)
        # Equal infinities give inf - inf = NaN; they are an exact match.
        diff = np.where(equal, 0.0, diff)

        matched  = equal | (diff <= tol)
        mismatch = ~matched
        mismatch_count = int(np.count_nonzero(mismatch))

        # np.max propagates NaN, so a NaN-valued pair shows up in the summary.
        max_diff = float(np.max(diff))

        first_location = None
        details = []
        if mismatch_count:
            rows_idx, cols_idx = np.nonzero(mismatch)    # row-major order
            first_location = (int(rows_idx[0]), int(cols_idx[0]))
            for r, c in zip(rows_idx[: self._max_reported], cols_idx[: self._max_reported]):
                av = float(a[r, c])
                ev = float(e[r, c])
                details.append(EntryMismatch(
                    row=int(r),
                    col=int(c),
                    actual=av,
                    expected=ev,
                    abs_difference=float(diff[r, c]),
                    actual_hex=_float_hex(av),
                    expected_hex=_float_hex(ev),
                ))

        return ComparisonResult(
            fixture_name=fixture_name,
            passed=mismatch_count == 0,
            max_absolute_difference=max_diff,
            first_mismatch_location=first_location,
            mismatch_count=mismatch_count,
            total_entries=actual.rows * actual.cols,
            tolerance=tol,
            mismatches=tuple(details),
        )
