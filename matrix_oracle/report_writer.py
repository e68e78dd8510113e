# matrix_oracle/report_writer.py
# ReportWriter -- persists a ScenarioVerdict as a JSON record.
#
# One file per execution: <reports_dir>/<run_id>_<PASS|FAIL>.json
# Floats in mismatch details are written with float.hex() next to their
# decimal form so the report reproduces exact bit patterns.
# Write failures raise FixtureIOError; a verdict is never silently lost.

import json
import math
from pathlib import Path
from typing import Any, Dict, Optional, Union

from matrix_oracle.data_models.comparison_result import ComparisonResult
from matrix_oracle.data_models.failure_record import FailureRecord
from matrix_oracle.data_models.scenario_verdict import ScenarioVerdict
from matrix_oracle.exceptions import FixtureIOError


def _json_float(value: float) -> Union[float, str]:
    # JSON has no NaN/Inf literals.
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


def _result_dict(r: ComparisonResult) -> Dict[str, Any]:
    return {
        "fixture_name":            r.fixture_name,
        "passed":                  r.passed,
        "max_absolute_difference": _json_float(r.max_absolute_difference),
        "first_mismatch_location": list(r.first_mismatch_location) if r.first_mismatch_location else None,
        "mismatch_count":          r.mismatch_count,
        "total_entries":           r.total_entries,
        "tolerance":               r.tolerance,
        "mismatches": [
            {
                "row":            m.row,
                "col":            m.col,
                "actual":         _json_float(m.actual),
                "expected":       _json_float(m.expected),
                "abs_difference": _json_float(m.abs_difference),
                "actual_hex":     m.actual_hex,
                "expected_hex":   m.expected_hex,
            }
            for m in r.mismatches
        ],
    }


def _failure_dict(f: Optional[FailureRecord]) -> Optional[Dict[str, Any]]:
    if f is None:
        return None
    return {
        "failure_type_id": f.failure_type_id,
        "scenario_name":   f.scenario_name,
        "run_id":          f.run_id,
        "fixture_name":    f.fixture_name,
        "detail":          f.detail,
        "detected_at_iso": f.detected_at_iso,
        "oracle_version":  f.oracle_version,
    }


def verdict_to_dict(verdict: ScenarioVerdict) -> Dict[str, Any]:
    """Plain-JSON form of a verdict."""
    return {
        "result":          "PASS" if verdict.passed else "FAIL",
        "scenario_name":   verdict.scenario_name,
        "run_id":          verdict.run_id,
        "oracle_version":  verdict.oracle_version,
        "failure":         _failure_dict(verdict.failure),
        "resolved_specs": {
            name: {
                "rows":      spec.rows,
                "cols":      spec.cols,
                "min_value": spec.min_value,
                "max_value": spec.max_value,
                "sparsity":  spec.sparsity,
                "seed":      spec.seed,
            }
            for name, spec in verdict.resolved_specs
        },
        "results": [_result_dict(r) for r in verdict.results],
    }


class ReportWriter:
    """
    Writes verdict records below reports_dir (created on demand).
    """

    def __init__(self, reports_dir: Union[str, Path]) -> None:
        self._reports_dir = Path(reports_dir)

    def write(self, verdict: ScenarioVerdict) -> Path:
        """Write verdict as JSON. Returns the path written."""
        label    = "PASS" if verdict.passed else "FAIL"
        filepath = self._reports_dir / f"{verdict.run_id}_{label}.json"
        try:
            self._reports_dir.mkdir(parents=True, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(verdict_to_dict(verdict), f, indent=4)
        except OSError as exc:
            raise FixtureIOError(verdict.run_id, str(filepath), f"report write failed: {exc}") from exc
        return filepath
