# tests/unit/orchestration/test_scenario_execution.py
# Target: matrix_oracle/orchestrator.py
# Full pipeline runs against in-process engines, correct and defective.

import json

import numpy as np
import pytest

from matrix_oracle import (
    ELEMENTWISE_ABS,
    EventFilter,
    ExecutionState,
    FixtureSpec,
    InvalidSpecError,
    OracleConfig,
    Scenario,
    SequenceError,
    TestScenarioOrchestrator,
    abs_scenarios,
    make_range_scenario,
)
from matrix_oracle.constants import MIXED_RANGE, NEGATIVE_RANGE, POSITIVE_RANGE
from matrix_oracle.event_log import (
    FIXTURE_COMPARED,
    REPORT_WRITE_FAILED,
    SCENARIO_FAILED,
    STATE_CHANGE,
)

from conftest import (
    abs_engine,
    identity_engine,
    integer_engine,
    near_zero_sign_bug_engine,
    raising_engine,
    slow_engine,
    transposing_engine,
    vector_only_engine,
)


def _declared(orchestrator, name="PositiveTest", value_range=POSITIVE_RANGE, **kwargs):
    orchestrator.declare(make_range_scenario(name, value_range, **kwargs))
    return orchestrator


class TestStateMachine:

    def test_stages_advance_in_order(self, make_orchestrator):
        execution = _declared(make_orchestrator(abs_engine)).start("PositiveTest")
        assert execution.state is ExecutionState.CONFIGURED
        execution.generate_fixtures()
        assert execution.state is ExecutionState.FIXTURES_GENERATED
        execution.persist()
        assert execution.state is ExecutionState.PERSISTED
        execution.execute()
        assert execution.state is ExecutionState.EXECUTED
        verdict = execution.compare()
        assert execution.state is ExecutionState.COMPARED
        assert verdict.passed

    def test_compare_before_execute_raises(self, make_orchestrator):
        execution = _declared(make_orchestrator(abs_engine)).start("PositiveTest")
        execution.generate_fixtures()
        with pytest.raises(SequenceError) as info:
            execution.compare()
        assert info.value.current_state == "FIXTURES_GENERATED"
        assert info.value.required_state == "EXECUTED"

    def test_stage_cannot_repeat(self, make_orchestrator):
        execution = _declared(make_orchestrator(abs_engine)).start("PositiveTest")
        execution.generate_fixtures()
        with pytest.raises(SequenceError):
            execution.generate_fixtures()

    def test_verdict_unavailable_before_completion(self, make_orchestrator):
        execution = _declared(make_orchestrator(abs_engine)).start("PositiveTest")
        with pytest.raises(SequenceError):
            execution.verdict

    def test_every_transition_is_logged(self, make_orchestrator):
        execution = _declared(make_orchestrator(abs_engine)).start("PositiveTest")
        execution.run()
        states = [e.data["state"] for e in execution.logger.query_events(EventFilter(event_type=STATE_CHANGE))]
        assert states == ["CONFIGURED", "FIXTURES_GENERATED", "PERSISTED", "EXECUTED", "COMPARED"]
        assert len(execution.logger.query_events(EventFilter(event_type=FIXTURE_COMPARED))) == 2


class TestPersistence:

    def test_persist_writes_inputs_and_expected(self, make_orchestrator):
        execution = _declared(make_orchestrator(abs_engine)).start("PositiveTest")
        execution.generate_fixtures()
        execution.persist()
        assert execution.store.names() == [
            "expected/matrix", "expected/vector", "in/matrix", "in/vector",
        ]

    def test_run_writes_outputs_and_report(self, make_orchestrator, oracle_config):
        execution = _declared(make_orchestrator(abs_engine)).start("PositiveTest")
        verdict = execution.run()
        assert execution.store.exists("out/vector")
        assert execution.store.exists("out/matrix")
        assert execution.report_path.parent == oracle_config.fixtures_root / "PositiveTest"
        assert execution.report_path.name == f"{verdict.run_id}_PASS.json"
        payload = json.loads(execution.report_path.read_text())
        assert payload["result"] == "PASS"
        assert payload["resolved_specs"]["vector"]["seed"] == 7

    def test_reports_can_be_disabled(self, make_orchestrator, tmp_path):
        config = OracleConfig(fixtures_root=tmp_path / "f", write_reports=False)
        execution = _declared(make_orchestrator(abs_engine, config)).start("PositiveTest")
        execution.run()
        assert execution.report_path is None

    def test_executions_use_separate_scopes(self, make_orchestrator):
        orchestrator = _declared(make_orchestrator(abs_engine))
        a = orchestrator.start("PositiveTest")
        b = orchestrator.start("PositiveTest")
        assert a.run_id != b.run_id
        assert a.store.path != b.store.path


class TestVerdicts:

    def test_negative_regime_against_identity_engine(self, make_orchestrator):
        orchestrator = _declared(make_orchestrator(identity_engine), "NegativeTest", NEGATIVE_RANGE)
        verdict = orchestrator.run("NegativeTest")
        assert not verdict.passed
        assert verdict.failure.failure_type_id == "NUMERIC_MISMATCH"
        vector = verdict.result_for("vector")
        assert vector.mismatch_count == 10
        assert vector.first_mismatch_location == (0, 0)
        # Every fixture is compared before the verdict is formed.
        assert [r.fixture_name for r in verdict.failing_results] == ["vector", "matrix"]

    def test_positive_regime_hides_identity_defect(self, make_orchestrator):
        verdict = _declared(make_orchestrator(identity_engine)).run("PositiveTest")
        assert verdict.passed
        assert verdict.failure is None

    def test_near_zero_sign_bug_caught_by_tiny_values(self, make_orchestrator):
        scenario = Scenario(
            name="NearZero",
            transform_id=ELEMENTWISE_ABS,
            fixture_specs={"vector": FixtureSpec(
                rows=20, cols=1, min_value=-1e-3, max_value=-1e-6, seed=3,
            )},
        )
        orchestrator = make_orchestrator(near_zero_sign_bug_engine)
        orchestrator.declare(scenario)
        verdict = orchestrator.run("NearZero")
        assert not verdict.passed
        assert verdict.result_for("vector").mismatch_count == 20

    def test_integer_valued_engine_output_is_compared(self, make_orchestrator):
        execution = _declared(make_orchestrator(integer_engine)).start("PositiveTest")
        verdict = execution.run()
        assert execution.state is ExecutionState.COMPARED
        assert verdict.failure.failure_type_id == "NUMERIC_MISMATCH"
        assert execution.store.load("out/vector").values == (1.0,) * 10

    @staticmethod
    def _hidden_sign_bugs(matrix):
        # Negative entries the defective engine leaves alone, outside tolerance.
        arr = matrix.to_array()
        return int(np.count_nonzero((arr < 0.0) & (np.abs(arr) < 1e-3) & (2.0 * np.abs(arr) > 1e-10)))

    @pytest.mark.parametrize("value_range", [MIXED_RANGE, (-2e-3, 2e-3)])
    def test_mixed_regime_counts_every_near_zero_sign_bug(self, make_orchestrator, value_range):
        orchestrator = _declared(
            make_orchestrator(near_zero_sign_bug_engine), "RandomTest", value_range,
            rows=10, cols=10, seed=None,
        )
        execution = orchestrator.start("RandomTest", seed=31)
        verdict = execution.run()
        for fixture_name, matrix in execution.inputs.items():
            expected_count = self._hidden_sign_bugs(matrix)
            assert verdict.result_for(fixture_name).mismatch_count == expected_count

    def test_narrow_mixed_regime_flags_near_zero_sign_bug(self, make_orchestrator):
        orchestrator = _declared(
            make_orchestrator(near_zero_sign_bug_engine), "RandomTest", (-2e-3, 2e-3),
            rows=10, cols=10,
        )
        execution = orchestrator.start("RandomTest")
        verdict = execution.run()
        assert not verdict.passed
        assert verdict.failure.failure_type_id == "NUMERIC_MISMATCH"
        total = sum(self._hidden_sign_bugs(m) for m in execution.inputs.values())
        assert sum(r.mismatch_count for r in verdict.results) == total > 0

    def test_near_zero_sign_bug_around_tolerance(self, make_orchestrator):
        # Constant fixtures: the engine leaves each negative entry unchanged,
        # so every entry differs from abs() by exactly twice its magnitude.
        def constant(value):
            return FixtureSpec(rows=10, cols=10, min_value=value, max_value=value, seed=1)

        scenario = Scenario(
            name="NearZeroBoundary",
            transform_id=ELEMENTWISE_ABS,
            fixture_specs=(
                ("within", constant(-4e-11)),      # |diff| 8e-11 <= 1e-10
                ("beyond", constant(-6e-11)),      # |diff| 1.2e-10 > 1e-10
                ("small",  constant(-5e-4)),
                ("mixed",  FixtureSpec(
                    rows=10, cols=10, min_value=-4e-11, max_value=4e-11, seed=5,
                )),
            ),
        )
        orchestrator = make_orchestrator(near_zero_sign_bug_engine)
        orchestrator.declare(scenario)
        verdict = orchestrator.run("NearZeroBoundary")
        counts = {r.fixture_name: r.mismatch_count for r in verdict.results}
        assert counts == {"within": 0, "beyond": 100, "small": 100, "mixed": 0}
        assert [r.fixture_name for r in verdict.failing_results] == ["beyond", "small"]

    def test_mixed_regime_against_correct_engine(self, make_orchestrator):
        verdict = _declared(make_orchestrator(abs_engine), "RandomTest", MIXED_RANGE).run("RandomTest")
        assert verdict.passed
        assert all(r.max_absolute_difference == 0.0 for r in verdict.results)

    def test_same_seed_reproduces_results(self, make_orchestrator):
        orchestrator = _declared(
            make_orchestrator(identity_engine), "RandomTest", MIXED_RANGE, seed=None
        )
        first  = orchestrator.run("RandomTest", seed=2024)
        second = orchestrator.run("RandomTest", seed=2024)
        assert first.results == second.results
        assert first.resolved_specs == second.resolved_specs

    def test_unseeded_specs_record_resolved_seed(self, make_orchestrator):
        orchestrator = _declared(make_orchestrator(abs_engine), seed=None)
        verdict = orchestrator.run("PositiveTest")
        assert all(spec.seed is not None for _, spec in verdict.resolved_specs)


class TestScenarioFatalFailures:

    def test_engine_timeout(self, make_orchestrator, tmp_path):
        config = OracleConfig(fixtures_root=tmp_path / "f", runner_timeout_s=0.1)
        execution = _declared(make_orchestrator(slow_engine, config)).start("PositiveTest")
        verdict = execution.run()
        assert execution.state is ExecutionState.FAILED
        assert verdict.failure.failure_type_id == "RUNNER_TIMEOUT"
        assert verdict.results == ()

    def test_engine_exception(self, make_orchestrator):
        verdict = _declared(make_orchestrator(raising_engine)).run("PositiveTest")
        assert verdict.failure.failure_type_id == "RUNNER_FAILURE"
        assert "ArithmeticError" in verdict.failure.detail

    def test_transposed_output_is_shape_mismatch(self, make_orchestrator):
        execution = _declared(make_orchestrator(transposing_engine)).start("PositiveTest")
        verdict = execution.run()
        assert verdict.failure.failure_type_id == "SHAPE_MISMATCH"
        assert verdict.failure.fixture_name == "vector"
        assert len(execution.logger.query_events(EventFilter(event_type=SCENARIO_FAILED))) == 1

    def test_missing_output_is_fixture_not_found(self, make_orchestrator):
        verdict = _declared(make_orchestrator(vector_only_engine)).run("PositiveTest")
        assert verdict.failure.failure_type_id == "FIXTURE_NOT_FOUND"
        assert verdict.failure.fixture_name == "matrix"
        assert [r.fixture_name for r in verdict.results] == ["vector"]

    def test_failed_execution_writes_fail_report(self, make_orchestrator):
        execution = _declared(make_orchestrator(raising_engine)).start("PositiveTest")
        execution.run()
        assert execution.report_path.name.endswith("_FAIL.json")

    def test_unwritable_fixtures_root_still_returns_verdict(self, make_orchestrator, tmp_path):
        blocker = tmp_path / "not_a_directory"
        blocker.write_text("")
        config = OracleConfig(fixtures_root=blocker)
        execution = _declared(make_orchestrator(abs_engine, config)).start("PositiveTest")
        verdict = execution.run()
        assert execution.state is ExecutionState.FAILED
        assert verdict.failure.failure_type_id == "FIXTURE_IO_FAILURE"
        assert execution.report_path is None
        assert len(execution.logger.query_events(EventFilter(event_type=REPORT_WRITE_FAILED))) == 1

    def test_unwritable_fixtures_root_does_not_stop_run_all(self, make_orchestrator, tmp_path):
        blocker = tmp_path / "not_a_directory"
        blocker.write_text("")
        orchestrator = make_orchestrator(abs_engine, OracleConfig(fixtures_root=blocker))
        orchestrator.declare_all(abs_scenarios())
        verdicts = orchestrator.run_all()
        assert list(verdicts) == ["PositiveTest", "NegativeTest", "RandomTest"]
        assert all(v.failure.failure_type_id == "FIXTURE_IO_FAILURE" for v in verdicts.values())

    def test_no_stage_runs_after_failure(self, make_orchestrator):
        execution = _declared(make_orchestrator(raising_engine)).start("PositiveTest")
        execution.run()
        with pytest.raises(SequenceError):
            execution.compare()


class TestOrchestratorDeclarations:

    def test_duplicate_scenario_raises(self, make_orchestrator):
        orchestrator = _declared(make_orchestrator(abs_engine))
        with pytest.raises(InvalidSpecError, match="already declared"):
            _declared(orchestrator)

    def test_unregistered_transform_raises(self, make_orchestrator):
        with pytest.raises(InvalidSpecError, match="transform_id"):
            _declared(make_orchestrator(abs_engine), transform_id="elementwise-cube")

    def test_unknown_scenario_raises(self, make_orchestrator):
        with pytest.raises(InvalidSpecError):
            make_orchestrator(abs_engine).start("Missing")

    @pytest.mark.parametrize("seed", [-1, 1.5, True])
    def test_bad_run_seed_raises(self, make_orchestrator, seed):
        with pytest.raises(InvalidSpecError):
            _declared(make_orchestrator(abs_engine)).start("PositiveTest", seed=seed)

    def test_non_runner_raises(self, oracle_config):
        with pytest.raises(InvalidSpecError):
            TestScenarioOrchestrator(oracle_config, abs_engine)
