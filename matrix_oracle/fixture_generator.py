# matrix_oracle/fixture_generator.py
# MatrixFixtureGenerator -- seeded random dense matrices for the oracle.
#
# Every entry takes two independent draws from one numpy Generator:
#   value = (1 - u) * min_value + u * max_value,  u ~ U[0, 1)
#   keep  ~ U[0, 1)      -- entry forced to +0.0 when keep < sparsity
# Both draws are taken for every entry regardless of sparsity, so the value
# stream for a seed does not depend on the sparsity setting.
# Same seed + same spec -> bit-identical Matrix.

from typing import Optional

import numpy as np

from matrix_oracle.data_models.fixture_spec import FixtureSpec
from matrix_oracle.data_models.matrix import Matrix
from matrix_oracle.exceptions import InvalidSpecError


def fresh_seed() -> int:
    """Draw a new non-negative seed from OS entropy (128 bits)."""
    return int(np.random.SeedSequence().entropy)


def derive_seed(base_seed: int, index: int) -> int:
    """
    Derive a per-fixture seed from a scenario-level seed.

    Deterministic: identical (base_seed, index) always yields the same seed.
    """
    state = np.random.SeedSequence([int(base_seed), int(index)]).generate_state(2, dtype=np.uint32)
    return (int(state[0]) << 32) | int(state[1])


class MatrixFixtureGenerator:
    """
    Produces randomized dense matrices from FixtureSpec instances.

    Method:
      generate(spec)      -> Matrix
      resolve_seed(spec)  -> FixtureSpec with a concrete seed
    """

    def resolve_seed(self, spec: FixtureSpec, seed: Optional[int] = None) -> FixtureSpec:
        """
        Return spec with a concrete seed.

        Precedence: explicit seed argument, then spec.seed, then a fresh
        entropy seed.
        """
        if seed is not None:
            return spec.with_seed(seed)
        if spec.seed is not None:
            return spec
        return spec.with_seed(fresh_seed())

    def generate(self, spec: FixtureSpec) -> Matrix:
        """
        Generate one Matrix for spec.

        Raises InvalidSpecError if spec is not a FixtureSpec. Range and shape
        constraints are enforced by FixtureSpec itself.
        """
        if not isinstance(spec, FixtureSpec):
            raise InvalidSpecError("spec", spec, "must be a FixtureSpec instance")

        rng   = np.random.default_rng(spec.seed)
        shape = (spec.rows, spec.cols)

        if spec.min_value == spec.max_value:
            # Consume the same number of draws as the ranged case.
            rng.random(shape)
            values = np.full(shape, spec.min_value, dtype=np.float64)
        else:
            # Convex combination: finite for any finite bounds, even when
            # max_value - min_value would overflow.
            u = rng.random(shape)
            with np.errstate(over="ignore"):
                values = (1.0 - u) * spec.min_value + u * spec.max_value
            values = np.clip(values, spec.min_value, spec.max_value)

        keep = rng.random(shape)
        values = np.where(keep < spec.sparsity, 0.0, values)

        return Matrix.from_array(values)
