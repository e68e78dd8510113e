# matrix_oracle/__init__.py
# Test oracle for elementwise and aggregate transforms over dense matrices.
# Oracle Version: 1.0.0
#
# Pipeline per scenario execution:
#   MatrixFixtureGenerator -> ReferenceComputer -> FixtureStore
#     -> TestRunner (engine under test) -> ResultComparator -> ScenarioVerdict
#
# The reference transforms never call into the engine under test.
#
# Typical use:
#   config = OracleConfig(fixtures_root=tmp_dir)
#   orch   = TestScenarioOrchestrator(config, CallableEngineRunner(engine))
#   orch.declare_all(abs_scenarios())
#   verdicts = orch.run_all()

from .oracle_version import ORACLE_VERSION, STORAGE_FORMAT_VERSION
from .config import OracleConfig
from .data_models import (
    ComparisonResult,
    EntryMismatch,
    FailureRecord,
    FixtureSpec,
    Matrix,
    Scenario,
    ScenarioVerdict,
)
from .event_log import Event, EventFilter, EventLogger, LoggingError
from .exceptions import (
    ConfigurationError,
    FixtureIOError,
    FixtureNotFoundError,
    InvalidSpecError,
    OracleError,
    RunnerError,
    RunnerTimeoutError,
    SequenceError,
    ShapeMismatchError,
    UnknownTransformError,
)
from .fixture_generator import MatrixFixtureGenerator
from .orchestrator import ExecutionState, ScenarioExecution, TestScenarioOrchestrator
from .reference_computer import (
    AGGREGATE_SUM,
    ELEMENTWISE_ABS,
    ELEMENTWISE_NEGATE,
    ReferenceComputer,
)
from .report_writer import ReportWriter
from .result_comparator import ResultComparator
from .runner import CallableEngineRunner, RunRequest, SubprocessRunner, TestRunner
from .scenarios import abs_scenarios, make_range_scenario
from .storage import FixtureStore

__all__ = [
    # Version constants
    "ORACLE_VERSION",
    "STORAGE_FORMAT_VERSION",
    # Configuration
    "OracleConfig",
    # Data models
    "ComparisonResult",
    "EntryMismatch",
    "FailureRecord",
    "FixtureSpec",
    "Matrix",
    "Scenario",
    "ScenarioVerdict",
    # Logging
    "Event",
    "EventFilter",
    "EventLogger",
    "LoggingError",
    # Exceptions
    "ConfigurationError",
    "FixtureIOError",
    "FixtureNotFoundError",
    "InvalidSpecError",
    "OracleError",
    "RunnerError",
    "RunnerTimeoutError",
    "SequenceError",
    "ShapeMismatchError",
    "UnknownTransformError",
    # Pipeline components
    "CallableEngineRunner",
    "ExecutionState",
    "FixtureStore",
    "MatrixFixtureGenerator",
    "ReferenceComputer",
    "ReportWriter",
    "ResultComparator",
    "RunRequest",
    "ScenarioExecution",
    "SubprocessRunner",
    "TestRunner",
    "TestScenarioOrchestrator",
    # Transforms
    "AGGREGATE_SUM",
    "ELEMENTWISE_ABS",
    "ELEMENTWISE_NEGATE",
    # Scenarios
    "abs_scenarios",
    "make_range_scenario",
]
