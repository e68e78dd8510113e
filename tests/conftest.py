# tests/conftest.py
# Shared fixtures and engines under test.
#
# The engines here stand in for the external numeric engine. They are
# written with numpy, independently of ReferenceComputer, and some carry
# deliberate defects.

import time

import numpy as np
import pytest

from matrix_oracle import (
    CallableEngineRunner,
    FixtureStore,
    Matrix,
    OracleConfig,
    TestScenarioOrchestrator,
)


# ---------------------------------------------------------------------------
# ENGINES
# ---------------------------------------------------------------------------

def abs_engine(inputs, transform_id, variables):
    """Correct engine."""
    return {name: Matrix.from_array(np.abs(m.to_array())) for name, m in inputs.items()}


def identity_engine(inputs, transform_id, variables):
    """Defect: returns every input unmodified."""
    return dict(inputs)


def near_zero_sign_bug_engine(inputs, transform_id, variables):
    """Defect: skips the sign flip for entries with |x| < 1e-3."""
    out = {}
    for name, m in inputs.items():
        arr = m.to_array()
        out[name] = Matrix.from_array(np.where(np.abs(arr) < 1e-3, arr, np.abs(arr)))
    return out


def transposing_engine(inputs, transform_id, variables):
    """Defect: returns transposed results."""
    return {name: Matrix.from_array(np.abs(m.to_array()).T) for name, m in inputs.items()}


def vector_only_engine(inputs, transform_id, variables):
    """Defect: forgets every fixture except 'vector'."""
    return {"vector": Matrix.from_array(np.abs(inputs["vector"].to_array()))}


def integer_engine(inputs, transform_id, variables):
    """Defect: answers every entry with the int 1."""
    return {
        name: Matrix(rows=m.rows, cols=m.cols, values=tuple(1 for _ in m.values))
        for name, m in inputs.items()
    }


def raising_engine(inputs, transform_id, variables):
    raise ArithmeticError("engine blew up")


def slow_engine(inputs, transform_id, variables):
    time.sleep(2.0)
    return abs_engine(inputs, transform_id, variables)


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def oracle_config(tmp_path) -> OracleConfig:
    """Default config rooted in a per-test temporary directory."""
    return OracleConfig(fixtures_root=tmp_path / "fixtures")


@pytest.fixture
def store(tmp_path) -> FixtureStore:
    return FixtureStore(tmp_path / "store")


@pytest.fixture
def make_orchestrator(oracle_config):
    """Factory: orchestrator around the given engine callable."""
    def _make(engine, config=None):
        return TestScenarioOrchestrator(
            config if config is not None else oracle_config,
            CallableEngineRunner(engine),
        )
    return _make
