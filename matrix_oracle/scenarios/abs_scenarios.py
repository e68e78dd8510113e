# matrix_oracle/scenarios/abs_scenarios.py
# Absolute-value scenarios over three sign regimes.
#
# All three are the same scenario shape and differ only in [min, max]:
#   PositiveTest  [0, 1]    -- abs is the identity
#   NegativeTest  [-1, 0]   -- abs is negation
#   RandomTest    [-1, 1]   -- mixed signs, exercises the flip around zero
# Each binds two fixtures: "vector" (rows x 1) and "matrix" (rows x cols),
# and passes rows/cols to the engine script "AbsTest".

from typing import Optional, Tuple

from matrix_oracle.constants import (
    DEFAULT_COLS,
    DEFAULT_ROWS,
    DEFAULT_SEED,
    DEFAULT_SPARSITY,
    MIXED_RANGE,
    NEGATIVE_RANGE,
    POSITIVE_RANGE,
)
from matrix_oracle.data_models.fixture_spec import FixtureSpec
from matrix_oracle.data_models.scenario import Scenario
from matrix_oracle.reference_computer import ELEMENTWISE_ABS

ABS_SCRIPT: str = "AbsTest"

# (scenario name, value range). Execution order follows this tuple.
ABS_REGIMES: Tuple[Tuple[str, tuple], ...] = (
    ("PositiveTest", POSITIVE_RANGE),
    ("NegativeTest", NEGATIVE_RANGE),
    ("RandomTest",   MIXED_RANGE),
)


def make_range_scenario(
    name:         str,
    value_range:  tuple,
    rows:         int = DEFAULT_ROWS,
    cols:         int = DEFAULT_COLS,
    sparsity:     float = DEFAULT_SPARSITY,
    seed:         Optional[int] = DEFAULT_SEED,
    transform_id: str = ELEMENTWISE_ABS,
    script:       str = ABS_SCRIPT,
) -> Scenario:
    """
    Build a vector + matrix scenario over value_range = (min, max).

    With a seed, the vector uses seed and the matrix seed + 1 so the two
    fixtures draw independent streams. seed=None leaves both unresolved;
    fresh seeds are drawn and recorded at generation time.
    """
    min_value, max_value = value_range
    return Scenario(
        name=name,
        transform_id=transform_id,
        fixture_specs=(
            ("vector", FixtureSpec(
                rows=rows, cols=1,
                min_value=min_value, max_value=max_value,
                sparsity=sparsity,
                seed=seed,
            )),
            ("matrix", FixtureSpec(
                rows=rows, cols=cols,
                min_value=min_value, max_value=max_value,
                sparsity=sparsity,
                seed=None if seed is None else seed + 1,
            )),
        ),
        variables=(("rows", rows), ("cols", cols)),
        script=script,
    )


def abs_scenarios(
    rows:     int = DEFAULT_ROWS,
    cols:     int = DEFAULT_COLS,
    sparsity: float = DEFAULT_SPARSITY,
    seed:     Optional[int] = DEFAULT_SEED,
) -> Tuple[Scenario, ...]:
    """The three absolute-value scenarios, in ABS_REGIMES order."""
    return tuple(
        make_range_scenario(name, value_range, rows=rows, cols=cols, sparsity=sparsity, seed=seed)
        for name, value_range in ABS_REGIMES
    )
