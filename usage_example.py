# usage_example.py
# Minimal usage example for matrix_oracle: the three absolute-value scenarios
# against an in-process engine.
# This file is not part of the matrix_oracle package. For reference only.

import tempfile

import numpy as np

from matrix_oracle import (
    CallableEngineRunner,
    Matrix,
    OracleConfig,
    TestScenarioOrchestrator,
    abs_scenarios,
)


# Engine under test: takes {fixture name: Matrix}, returns the same keys.
def numpy_abs_engine(inputs, transform_id, variables):
    return {name: Matrix.from_array(np.abs(m.to_array())) for name, m in inputs.items()}


with tempfile.TemporaryDirectory() as fixtures_root:
    config = OracleConfig(fixtures_root=fixtures_root, tolerance=1e-10)
    orchestrator = TestScenarioOrchestrator(config, CallableEngineRunner(numpy_abs_engine))
    orchestrator.declare_all(abs_scenarios(rows=10, cols=10))

    for name, verdict in orchestrator.run_all().items():
        print(f"{name}: {'PASS' if verdict.passed else 'FAIL'}")
        for result in verdict.results:
            print(f"  {result.summary()}")

# Expected output (max |diff| is exactly zero for a correct engine):
# PositiveTest: PASS
#   vector: PASS (10 entries, max |diff|=0.000e+00)
#   matrix: PASS (100 entries, max |diff|=0.000e+00)
# NegativeTest: PASS
#   ...
# RandomTest: PASS
#   ...

# An external engine is driven the same way through SubprocessRunner:
# SubprocessRunner(["my-engine", "{script}", "--dir={fixtures_dir}", "--rows={rows}"])
