# matrix_oracle/reference_computer.py
# ReferenceComputer -- expected results computed independently of the engine.
#
# The reference transforms are re-implemented here from first principles.
# Nothing in this module imports, wraps or calls the engine under test: a
# shared defect would otherwise make actual and expected agree.
#
# Registry entries are either
#   elementwise: float -> float, applied to every entry, same shape out, or
#   matrix:      Matrix -> Matrix, for aggregates and shape-changing ops.

import math
from typing import Callable, Dict, Optional, Tuple

from matrix_oracle.data_models.matrix import Matrix
from matrix_oracle.exceptions import InvalidSpecError, UnknownTransformError

ElementwiseFn = Callable[[float], float]
MatrixFn      = Callable[[Matrix], Matrix]

ELEMENTWISE_ABS    = "elementwise-abs"
ELEMENTWISE_NEGATE = "elementwise-negate"
AGGREGATE_SUM      = "aggregate-sum"


# ---------------------------------------------------------------------------
# BUILT-IN TRANSFORMS
# ---------------------------------------------------------------------------

def _abs(value: float) -> float:
    # Clears the sign bit: -0.0 -> 0.0, -inf -> inf, NaN stays NaN.
    return math.copysign(value, 1.0)


def _negate(value: float) -> float:
    return -value


def _sum(m: Matrix) -> Matrix:
    return Matrix(rows=1, cols=1, values=(math.fsum(m.values),))


class ReferenceComputer:
    """
    Applies a registered transform to an input Matrix.

    Each instance owns its registry; registering a transform on one instance
    never affects another. Built-ins are installed at construction.

    Methods:
      compute_expected(input, transform_id) -> Matrix
      register_elementwise(transform_id, fn)
      register_matrix_transform(transform_id, fn)
      has_transform(transform_id) -> bool
      transform_ids() -> tuple
    """

    def __init__(self) -> None:
        self._elementwise: Dict[str, ElementwiseFn] = {}
        self._matrix:      Dict[str, MatrixFn]      = {}
        self.register_elementwise(ELEMENTWISE_ABS, _abs)
        self.register_elementwise(ELEMENTWISE_NEGATE, _negate)
        self.register_matrix_transform(AGGREGATE_SUM, _sum)

    def _check_new_id(self, transform_id: str) -> None:
        if not isinstance(transform_id, str) or not transform_id:
            raise InvalidSpecError("transform_id", transform_id, "must be a non-empty string")
        if self.has_transform(transform_id):
            raise InvalidSpecError("transform_id", transform_id, "already registered")

    def register_elementwise(self, transform_id: str, fn: ElementwiseFn) -> None:
        """Register a pure float -> float function applied per entry."""
        self._check_new_id(transform_id)
        if not callable(fn):
            raise InvalidSpecError("fn", fn, "must be callable")
        self._elementwise[transform_id] = fn

    def register_matrix_transform(self, transform_id: str, fn: MatrixFn) -> None:
        """Register a pure Matrix -> Matrix function."""
        self._check_new_id(transform_id)
        if not callable(fn):
            raise InvalidSpecError("fn", fn, "must be callable")
        self._matrix[transform_id] = fn

    def has_transform(self, transform_id: str) -> bool:
        return transform_id in self._elementwise or transform_id in self._matrix

    def transform_ids(self) -> Tuple[str, ...]:
        return tuple(sorted(list(self._elementwise) + list(self._matrix)))

    def compute_expected(self, input: Matrix, transform_id: str) -> Matrix:
        """
        Return the expected output of transform_id applied to input.

        The input is never mutated. Raises UnknownTransformError for an id
        with no registry entry.
        """
        fn: Optional[ElementwiseFn] = self._elementwise.get(transform_id)
        if fn is not None:
            return Matrix(
                rows=input.rows,
                cols=input.cols,
                values=tuple(float(fn(v)) for v in input.values),
            )
        matrix_fn = self._matrix.get(transform_id)
        if matrix_fn is not None:
            out = matrix_fn(input)
            if not isinstance(out, Matrix):
                raise InvalidSpecError(
                    "transform_id", transform_id, "matrix transform must return a Matrix"
                )
            return out
        raise UnknownTransformError(transform_id, self.transform_ids())
