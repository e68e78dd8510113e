# matrix_oracle/data_models/__init__.py
# Immutable value types shared by every oracle component.

from .comparison_result import ComparisonResult, EntryMismatch
from .failure_record import FAILURE_TYPES, FailureRecord
from .fixture_spec import FixtureSpec
from .matrix import Matrix
from .scenario import Scenario
from .scenario_verdict import ScenarioVerdict

__all__ = [
    "ComparisonResult",
    "EntryMismatch",
    "FAILURE_TYPES",
    "FailureRecord",
    "FixtureSpec",
    "Matrix",
    "Scenario",
    "ScenarioVerdict",
]
