# tests/unit/data_models/test_oracle_config.py

import math
from pathlib import Path

import pytest

from matrix_oracle import ConfigurationError, OracleConfig
from matrix_oracle.constants import DEFAULT_RUNNER_TIMEOUT_S, DEFAULT_TOLERANCE


class TestOracleConfig:

    def test_defaults(self, tmp_path):
        cfg = OracleConfig(fixtures_root=str(tmp_path))
        assert cfg.fixtures_root == Path(tmp_path)
        assert cfg.tolerance == DEFAULT_TOLERANCE
        assert cfg.runner_timeout_s == DEFAULT_RUNNER_TIMEOUT_S
        assert cfg.write_reports is True

    def test_zero_tolerance_allowed(self, tmp_path):
        assert OracleConfig(fixtures_root=tmp_path, tolerance=0.0).tolerance == 0.0

    @pytest.mark.parametrize("tolerance", [-1e-12, math.inf, math.nan, True, "1e-10"])
    def test_bad_tolerance_raises(self, tmp_path, tolerance):
        with pytest.raises(ConfigurationError) as info:
            OracleConfig(fixtures_root=tmp_path, tolerance=tolerance)
        assert info.value.field_name == "tolerance"

    @pytest.mark.parametrize("timeout", [0.0, -5.0, math.inf])
    def test_bad_timeout_raises(self, tmp_path, timeout):
        with pytest.raises(ConfigurationError):
            OracleConfig(fixtures_root=tmp_path, runner_timeout_s=timeout)

    def test_bad_max_reported_raises(self, tmp_path):
        with pytest.raises(ConfigurationError):
            OracleConfig(fixtures_root=tmp_path, max_reported_mismatches=-1)

    def test_empty_root_raises(self):
        with pytest.raises(ConfigurationError):
            OracleConfig(fixtures_root="")
