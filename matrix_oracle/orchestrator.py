# matrix_oracle/orchestrator.py
# TestScenarioOrchestrator -- composes generation, reference computation,
# persistence, external execution and comparison into scenario runs.
#
# Each run is a ScenarioExecution with a strictly forward state machine:
#
#   CONFIGURED -> FIXTURES_GENERATED -> PERSISTED -> EXECUTED -> COMPARED
#         \______________\_________________\___________\______-> FAILED
#
# A stage invoked from any state other than its predecessor raises
# SequenceError. Scenario-fatal conditions (fixture I/O, missing fixtures,
# engine timeout or failure, shape mismatch) move the execution to FAILED
# with a FailureRecord; nothing is retried. Numeric mismatches are collected
# for every fixture before the verdict is formed.
#
# Every execution writes into its own fixture scope
#   <fixtures_root>/<scenario>/<run_id>/
# and owns its EventLogger, so executions share no mutable state.

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional

from matrix_oracle.config import OracleConfig
from matrix_oracle.data_models.failure_record import FailureRecord
from matrix_oracle.data_models.matrix import Matrix
from matrix_oracle.data_models.scenario import Scenario
from matrix_oracle.data_models.scenario_verdict import ScenarioVerdict
from matrix_oracle.event_log import (
    FIXTURE_COMPARED,
    FIXTURE_PERSISTED,
    REPORT_WRITE_FAILED,
    RUNNER_INVOKED,
    SCENARIO_FAILED,
    EventLogger,
)
from matrix_oracle.exceptions import (
    FixtureIOError,
    FixtureNotFoundError,
    InvalidSpecError,
    RunnerError,
    RunnerTimeoutError,
    SequenceError,
    ShapeMismatchError,
)
from matrix_oracle.fixture_generator import MatrixFixtureGenerator, derive_seed
from matrix_oracle.oracle_version import ORACLE_VERSION
from matrix_oracle.reference_computer import ReferenceComputer
from matrix_oracle.report_writer import ReportWriter
from matrix_oracle.result_comparator import ResultComparator
from matrix_oracle.runner import RunRequest, TestRunner
from matrix_oracle.storage.fixture_store import (
    FixtureStore,
    expected_name,
    input_name,
    output_name,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_run_id() -> str:
    return "RUN-" + _now().strftime("%Y%m%d") + "-" + str(uuid.uuid4())[:8].upper()


class ExecutionState(Enum):
    CONFIGURED         = "CONFIGURED"
    FIXTURES_GENERATED = "FIXTURES_GENERATED"
    PERSISTED          = "PERSISTED"
    EXECUTED           = "EXECUTED"
    COMPARED           = "COMPARED"
    FAILED             = "FAILED"


class ScenarioExecution:
    """
    One execution of one Scenario. Created by TestScenarioOrchestrator.start().

    Stages, each callable exactly once and in order:
      generate_fixtures()  -- inputs via the generator, expected via the
                              reference computer
      persist()            -- in/<f> and expected/<f> into the scoped store
      execute()            -- the TestRunner produces out/<f>
      compare()            -- ResultComparator per fixture, verdict formed

    After COMPARED or FAILED, .verdict holds the ScenarioVerdict. A report
    that cannot be written leaves report_path None and logs
    REPORT_WRITE_FAILED; the verdict is still returned.
    """

    def __init__(
        self,
        scenario:    Scenario,
        run_id:      str,
        store:       FixtureStore,
        config:      OracleConfig,
        runner:      TestRunner,
        generator:   MatrixFixtureGenerator,
        computer:    ReferenceComputer,
        reports_dir,
        seed:        Optional[int] = None,
    ) -> None:
        self._scenario    = scenario
        self._run_id      = run_id
        self._store       = store
        self._config      = config
        self._runner      = runner
        self._generator   = generator
        self._computer    = computer
        self._comparator  = ResultComparator(
            tolerance=config.tolerance,
            max_reported_mismatches=config.max_reported_mismatches,
        )
        self._reports_dir = reports_dir
        self._seed        = seed
        self._logger      = EventLogger()

        self._state: ExecutionState = ExecutionState.CONFIGURED
        self._resolved_specs: tuple = ()
        self._inputs:   Dict[str, Matrix] = {}
        self._expected: Dict[str, Matrix] = {}
        self._results:  List = []
        self._verdict:  Optional[ScenarioVerdict] = None
        self._report_path = None

        self._logger.log_state_change(
            self._state, _now(), scenario=scenario.name, run_id=run_id
        )

    # -----------------------------------------------------------------------
    # Accessors
    # -----------------------------------------------------------------------

    @property
    def scenario(self) -> Scenario:
        return self._scenario

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def store(self) -> FixtureStore:
        return self._store

    @property
    def logger(self) -> EventLogger:
        return self._logger

    @property
    def resolved_specs(self) -> tuple:
        return self._resolved_specs

    @property
    def report_path(self):
        return self._report_path

    @property
    def inputs(self) -> Dict[str, Matrix]:
        return dict(self._inputs)

    @property
    def expected(self) -> Dict[str, Matrix]:
        return dict(self._expected)

    @property
    def verdict(self) -> ScenarioVerdict:
        if self._verdict is None:
            raise SequenceError(
                "verdict", self._state.name,
                f"{ExecutionState.COMPARED.name} or {ExecutionState.FAILED.name}",
            )
        return self._verdict

    # -----------------------------------------------------------------------
    # State machine helpers
    # -----------------------------------------------------------------------

    def _require(self, operation: str, required: ExecutionState) -> None:
        if self._state is not required:
            raise SequenceError(operation, self._state.name, required.name)

    def _advance(self, new_state: ExecutionState) -> None:
        self._state = new_state
        self._logger.log_state_change(new_state, _now(), run_id=self._run_id)

    def _finish(self, passed: bool, failure: Optional[FailureRecord]) -> None:
        self._verdict = ScenarioVerdict(
            scenario_name=self._scenario.name,
            run_id=self._run_id,
            passed=passed,
            results=tuple(self._results),
            failure=failure,
            resolved_specs=self._resolved_specs,
            oracle_version=ORACLE_VERSION,
        )
        if self._config.write_reports:
            # The verdict stands even when its report cannot be written.
            try:
                self._report_path = ReportWriter(self._reports_dir).write(self._verdict)
            except FixtureIOError as exc:
                self._logger.log_event(
                    REPORT_WRITE_FAILED,
                    {"reports_dir": str(self._reports_dir), "detail": exc.message},
                    _now(),
                )

    def _fail(self, failure_type_id: str, detail: str, fixture_name: str = "") -> None:
        failure = FailureRecord(
            failure_type_id=failure_type_id,
            scenario_name=self._scenario.name,
            run_id=self._run_id,
            fixture_name=fixture_name,
            detail=detail,
            detected_at_iso=_now().isoformat(),
            oracle_version=ORACLE_VERSION,
        )
        self._logger.log_event(
            SCENARIO_FAILED,
            {"failure_type_id": failure_type_id, "fixture": fixture_name, "detail": detail},
            _now(),
        )
        self._advance(ExecutionState.FAILED)
        self._finish(passed=False, failure=failure)

    # -----------------------------------------------------------------------
    # Stages
    # -----------------------------------------------------------------------

    def generate_fixtures(self) -> None:
        """
        Resolve seeds, generate every input fixture and its expected output.

        With a scenario-level seed, fixture i uses derive_seed(seed, i);
        otherwise each FixtureSpec's own seed, or a fresh one when it has none.
        """
        self._require("generate_fixtures", ExecutionState.CONFIGURED)

        resolved = []
        for index, (fixture_name, spec) in enumerate(self._scenario.fixture_specs):
            override = derive_seed(self._seed, index) if self._seed is not None else None
            concrete = self._generator.resolve_seed(spec, override)
            matrix   = self._generator.generate(concrete)
            self._inputs[fixture_name]   = matrix
            self._expected[fixture_name] = self._computer.compute_expected(
                matrix, self._scenario.transform_id
            )
            resolved.append((fixture_name, concrete))
        self._resolved_specs = tuple(resolved)

        self._advance(ExecutionState.FIXTURES_GENERATED)

    def persist(self) -> None:
        """Save in/<f> and expected/<f> for every fixture."""
        self._require("persist", ExecutionState.FIXTURES_GENERATED)

        for fixture_name in self._scenario.fixture_names:
            try:
                self._store.save(input_name(fixture_name), self._inputs[fixture_name])
                self._store.save(expected_name(fixture_name), self._expected[fixture_name])
            except FixtureIOError as exc:
                self._fail("FIXTURE_IO_FAILURE", exc.message, fixture_name)
                return
            self._logger.log_event(
                FIXTURE_PERSISTED,
                {"fixture": fixture_name, "shape": repr(self._inputs[fixture_name].shape)},
                _now(),
            )

        self._advance(ExecutionState.PERSISTED)

    def execute(self) -> None:
        """Invoke the TestRunner once for the whole fixture set."""
        self._require("execute", ExecutionState.PERSISTED)

        request = RunRequest(
            scenario_name=self._scenario.name,
            transform_id=self._scenario.transform_id,
            script=self._scenario.script,
            fixture_names=self._scenario.fixture_names,
            variables=self._scenario.variables,
            store=self._store,
            timeout_s=self._config.runner_timeout_s,
        )
        self._logger.log_event(
            RUNNER_INVOKED,
            {"runner": type(self._runner).__name__, "timeout_s": self._config.runner_timeout_s},
            _now(),
        )
        try:
            self._runner.run(request)
        except RunnerTimeoutError as exc:
            self._fail("RUNNER_TIMEOUT", exc.message)
            return
        except RunnerError as exc:
            self._fail("RUNNER_FAILURE", exc.message)
            return
        except FixtureNotFoundError as exc:
            self._fail("FIXTURE_NOT_FOUND", exc.message, str(exc.value))
            return
        except FixtureIOError as exc:
            self._fail("FIXTURE_IO_FAILURE", exc.message, str(exc.value))
            return

        self._advance(ExecutionState.EXECUTED)

    def compare(self) -> ScenarioVerdict:
        """
        Compare out/<f> against expected/<f> for every fixture and form the
        verdict. The verdict passes iff every fixture passes; every failing
        ComparisonResult is kept.
        """
        self._require("compare", ExecutionState.EXECUTED)

        for fixture_name in self._scenario.fixture_names:
            try:
                actual   = self._store.load(output_name(fixture_name))
                expected = self._store.load(expected_name(fixture_name))
                result   = self._comparator.compare(actual, expected, fixture_name=fixture_name)
            except ShapeMismatchError as exc:
                self._fail("SHAPE_MISMATCH", exc.message, fixture_name)
                return self._verdict
            except FixtureNotFoundError as exc:
                self._fail("FIXTURE_NOT_FOUND", exc.message, fixture_name)
                return self._verdict
            except FixtureIOError as exc:
                self._fail("FIXTURE_IO_FAILURE", exc.message, fixture_name)
                return self._verdict

            self._results.append(result)
            self._logger.log_event(
                FIXTURE_COMPARED,
                {
                    "fixture":        fixture_name,
                    "passed":         result.passed,
                    "mismatch_count": result.mismatch_count,
                    "max_abs_diff":   result.max_absolute_difference,
                },
                _now(),
            )

        failing = [r for r in self._results if not r.passed]
        failure = None
        if failing:
            failure = FailureRecord(
                failure_type_id="NUMERIC_MISMATCH",
                scenario_name=self._scenario.name,
                run_id=self._run_id,
                fixture_name=failing[0].fixture_name,
                detail="; ".join(r.summary() for r in failing),
                detected_at_iso=_now().isoformat(),
                oracle_version=ORACLE_VERSION,
            )

        self._advance(ExecutionState.COMPARED)
        self._finish(passed=not failing, failure=failure)
        return self._verdict

    def run(self) -> ScenarioVerdict:
        """Run every remaining stage in order; stop at the first FAILED."""
        self.generate_fixtures()
        for stage in (self.persist, self.execute, self.compare):
            if self._state is ExecutionState.FAILED:
                break
            stage()
        return self.verdict


class TestScenarioOrchestrator:
    """
    Holds declared scenarios and runs them as independent executions.

    Constructed with an explicit OracleConfig and the TestRunner for the
    engine under test. Generator and reference computer default to fresh
    instances; pass your own to share a customised transform registry.

    Methods:
      declare(scenario) / declare_all(scenarios)
      scenario_names() -> tuple
      get(name) -> Scenario
      start(name, seed=None) -> ScenarioExecution
      run(name, seed=None) -> ScenarioVerdict
      run_all(seed=None) -> Dict[str, ScenarioVerdict]
    """

    # Keep pytest from collecting this class as a test case.
    __test__ = False

    def __init__(
        self,
        config:    OracleConfig,
        runner:    TestRunner,
        computer:  Optional[ReferenceComputer] = None,
        generator: Optional[MatrixFixtureGenerator] = None,
    ) -> None:
        if not isinstance(config, OracleConfig):
            raise InvalidSpecError("config", config, "must be an OracleConfig")
        if not isinstance(runner, TestRunner):
            raise InvalidSpecError("runner", runner, "must be a TestRunner")
        self._config    = config
        self._runner    = runner
        self._computer  = computer if computer is not None else ReferenceComputer()
        self._generator = generator if generator is not None else MatrixFixtureGenerator()
        self._scenarios: Dict[str, Scenario] = {}
        self._root_store = FixtureStore(config.fixtures_root)

    @property
    def config(self) -> OracleConfig:
        return self._config

    def declare(self, scenario: Scenario) -> None:
        if not isinstance(scenario, Scenario):
            raise InvalidSpecError("scenario", scenario, "must be a Scenario")
        if scenario.name in self._scenarios:
            raise InvalidSpecError("name", scenario.name, "scenario already declared")
        if not self._computer.has_transform(scenario.transform_id):
            raise InvalidSpecError(
                "transform_id",
                scenario.transform_id,
                "not registered with the reference computer",
            )
        self._scenarios[scenario.name] = scenario

    def declare_all(self, scenarios: Iterable[Scenario]) -> None:
        for scenario in scenarios:
            self.declare(scenario)

    def scenario_names(self) -> tuple:
        return tuple(self._scenarios)

    def get(self, name: str) -> Scenario:
        try:
            return self._scenarios[name]
        except KeyError:
            raise InvalidSpecError("name", name, "no scenario declared under this name")

    def start(self, name: str, seed: Optional[int] = None) -> ScenarioExecution:
        """Create a fresh execution of scenario name in its own store scope."""
        scenario = self.get(name)
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
            raise InvalidSpecError("seed", seed, "must be None or a non-negative integer")
        run_id = _new_run_id()
        return ScenarioExecution(
            scenario=scenario,
            run_id=run_id,
            store=self._root_store.scoped(f"{scenario.name}/{run_id}"),
            config=self._config,
            runner=self._runner,
            generator=self._generator,
            computer=self._computer,
            reports_dir=self._root_store.scoped(scenario.name).path,
            seed=seed,
        )

    def run(self, name: str, seed: Optional[int] = None) -> ScenarioVerdict:
        return self.start(name, seed).run()

    def run_all(self, seed: Optional[int] = None) -> Dict[str, ScenarioVerdict]:
        return {name: self.run(name, seed) for name in self._scenarios}
