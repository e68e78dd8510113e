# matrix_oracle/data_models/matrix.py
# Matrix data class -- dense, immutable, row-major.

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from matrix_oracle.exceptions import InvalidSpecError


@dataclass(frozen=True)
class Matrix:
    """
    A dense rectangular matrix of doubles.

    Fields:
      rows   -- Number of rows. Strictly positive.
      cols   -- Number of columns. Strictly positive.
      values -- Tuple of exactly rows * cols floats in row-major order.

    Immutable once constructed. Entry (r, c) lives at values[r * cols + c].
    """
    rows:   int
    cols:   int
    values: tuple    # tuple of float, immutable, row-major

    def __post_init__(self) -> None:
        for field_name in ("rows", "cols"):
            dim = getattr(self, field_name)
            if isinstance(dim, bool) or not isinstance(dim, int) or dim <= 0:
                raise InvalidSpecError(field_name, dim, "must be a positive integer")
        try:
            values = tuple(float(v) for v in self.values)
        except (TypeError, ValueError) as exc:
            raise InvalidSpecError(
                "values", type(self.values).__name__, f"entries must be real numbers ({exc})"
            ) from exc
        object.__setattr__(self, "values", values)
        if len(self.values) != self.rows * self.cols:
            raise InvalidSpecError(
                "values",
                len(self.values),
                f"expected exactly {self.rows * self.cols} entries "
                f"for a {self.rows}x{self.cols} matrix",
            )

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    def get(self, row: int, col: int) -> float:
        """Return entry (row, col). Raises IndexError when out of bounds."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"({row}, {col}) outside {self.rows}x{self.cols} matrix"
            )
        return self.values[row * self.cols + col]

    def row(self, index: int) -> tuple:
        if not 0 <= index < self.rows:
            raise IndexError(f"row {index} outside {self.rows}-row matrix")
        start = index * self.cols
        return self.values[start:start + self.cols]

    def to_rows(self) -> List[List[float]]:
        return [list(self.row(r)) for r in range(self.rows)]

    def to_array(self) -> np.ndarray:
        """Return a read-only float64 copy shaped (rows, cols)."""
        arr = np.array(self.values, dtype=np.float64).reshape(self.rows, self.cols)
        arr.setflags(write=False)
        return arr

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        """
        Build a Matrix from a nested sequence. Every row must have the same
        length; ragged input raises InvalidSpecError.
        """
        if len(rows) == 0:
            raise InvalidSpecError("rows", 0, "must be a positive integer")
        width = len(rows[0])
        for index, r in enumerate(rows):
            if len(r) != width:
                raise InvalidSpecError(
                    "rows", index, f"ragged row of length {len(r)}, expected {width}"
                )
        flat: Iterable[float] = (float(v) for r in rows for v in r)
        return cls(rows=len(rows), cols=width, values=tuple(flat))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Matrix":
        """Build a Matrix from a 1-D (treated as a column) or 2-D array."""
        arr = np.asarray(array, dtype=np.float64)
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        if arr.ndim != 2:
            raise InvalidSpecError("ndim", arr.ndim, "must be 1 or 2")
        rows, cols = arr.shape
        return cls(rows=int(rows), cols=int(cols), values=tuple(arr.ravel(order="C").tolist()))
