# matrix_oracle/storage/__init__.py

from .fixture_store import (
    EXPECTED_PREFIX,
    INPUT_PREFIX,
    OUTPUT_PREFIX,
    FixtureStore,
    expected_name,
    input_name,
    output_name,
)

__all__ = [
    "EXPECTED_PREFIX",
    "INPUT_PREFIX",
    "OUTPUT_PREFIX",
    "FixtureStore",
    "expected_name",
    "input_name",
    "output_name",
]
