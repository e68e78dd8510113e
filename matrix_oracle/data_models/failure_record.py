# matrix_oracle/data_models/failure_record.py
# FailureRecord data class and failure type registry.

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# FAILURE TYPE REGISTRY
# ---------------------------------------------------------------------------
# Maps each failure type to the exception (or condition) that produces it.
# NUMERIC_MISMATCH is the only type that is not raised: it is derived from
# ComparisonResult records after every fixture has been compared.

FAILURE_TYPES = {
    "NUMERIC_MISMATCH":   "ComparisonResult.passed is False",
    "SHAPE_MISMATCH":     "ShapeMismatchError",
    "RUNNER_TIMEOUT":     "RunnerTimeoutError",
    "RUNNER_FAILURE":     "RunnerError",
    "FIXTURE_IO_FAILURE": "FixtureIOError",
    "FIXTURE_NOT_FOUND":  "FixtureNotFoundError",
}


@dataclass(frozen=True)
class FailureRecord:
    """
    Why a scenario execution failed.

    Fields:
      failure_type_id  -- Key from FAILURE_TYPES.
      scenario_name    -- Scenario that failed.
      run_id           -- Execution identifier (namespaces the fixture store).
      fixture_name     -- Fixture involved. Empty if not applicable.
      detail           -- Human-readable description.
      detected_at_iso  -- UTC ISO-8601 timestamp of detection (audit only).
      oracle_version   -- ORACLE_VERSION at time of failure.
    """
    failure_type_id: str
    scenario_name:   str
    run_id:          str
    fixture_name:    str
    detail:          str
    detected_at_iso: str
    oracle_version:  str

    def __post_init__(self) -> None:
        if self.failure_type_id not in FAILURE_TYPES:
            raise ValueError(f"Unknown failure_type_id: {self.failure_type_id!r}")
