# matrix_oracle/data_models/scenario_verdict.py
# ScenarioVerdict data class -- aggregate outcome of one scenario execution.

from dataclasses import dataclass
from typing import Optional

from matrix_oracle.data_models.failure_record import FailureRecord


@dataclass(frozen=True)
class ScenarioVerdict:
    """
    Aggregate result of one scenario execution.

    Fields:
      scenario_name   -- Scenario that ran.
      run_id          -- Execution identifier.
      passed          -- Logical AND of every fixture verdict; False whenever
                         failure is set.
      results         -- ComparisonResult per compared fixture, declaration
                         order. May be partial when the run failed early.
      failure         -- FailureRecord for the first hard failure or the
                         NUMERIC_MISMATCH summary. None on pass.
      resolved_specs  -- (fixture name, FixtureSpec) pairs with the concrete
                         seeds actually used.
      oracle_version  -- ORACLE_VERSION at time of execution.
    """
    scenario_name:  str
    run_id:         str
    passed:         bool
    results:        tuple    # tuple of ComparisonResult
    failure:        Optional[FailureRecord]
    resolved_specs: tuple    # tuple of (str, FixtureSpec)
    oracle_version: str

    @property
    def failing_results(self) -> tuple:
        """Every ComparisonResult that did not pass, in declaration order."""
        return tuple(r for r in self.results if not r.passed)

    def result_for(self, fixture_name: str):
        for r in self.results:
            if r.fixture_name == fixture_name:
                return r
        raise KeyError(fixture_name)
