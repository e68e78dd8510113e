# matrix_oracle/config.py
# OracleConfig -- explicit configuration handed to the orchestrator.
#
# There is no process-wide configuration registry. Every orchestrator gets
# its own OracleConfig value at construction.

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from matrix_oracle.constants import (
    DEFAULT_MAX_REPORTED_MISMATCHES,
    DEFAULT_RUNNER_TIMEOUT_S,
    DEFAULT_TOLERANCE,
)
from matrix_oracle.exceptions import ConfigurationError


@dataclass(frozen=True)
class OracleConfig:
    """
    Oracle configuration.

    Fields:
      fixtures_root           -- Directory under which every execution gets its
                                 own <scenario>/<run_id> fixture scope.
      tolerance               -- Absolute comparison tolerance (>= 0, finite).
      runner_timeout_s        -- Bound on one engine invocation (> 0).
      max_reported_mismatches -- Detailed mismatch records kept per fixture (>= 0).
      write_reports           -- Persist each verdict as JSON next to its scope.
    """
    fixtures_root:           Union[str, Path]
    tolerance:               float = DEFAULT_TOLERANCE
    runner_timeout_s:        float = DEFAULT_RUNNER_TIMEOUT_S
    max_reported_mismatches: int   = DEFAULT_MAX_REPORTED_MISMATCHES
    write_reports:           bool  = True

    def __post_init__(self) -> None:
        if not isinstance(self.fixtures_root, (str, Path)) or str(self.fixtures_root) == "":
            raise ConfigurationError("fixtures_root", self.fixtures_root, "must be a non-empty path")
        object.__setattr__(self, "fixtures_root", Path(self.fixtures_root))

        if not isinstance(self.tolerance, (int, float)) or isinstance(self.tolerance, bool):
            raise ConfigurationError("tolerance", self.tolerance, "must be a number")
        if not math.isfinite(self.tolerance) or self.tolerance < 0.0:
            raise ConfigurationError("tolerance", self.tolerance, "must be finite and >= 0")

        if not isinstance(self.runner_timeout_s, (int, float)) or isinstance(self.runner_timeout_s, bool):
            raise ConfigurationError("runner_timeout_s", self.runner_timeout_s, "must be a number")
        if not math.isfinite(self.runner_timeout_s) or self.runner_timeout_s <= 0.0:
            raise ConfigurationError("runner_timeout_s", self.runner_timeout_s, "must be finite and > 0")

        if (
            not isinstance(self.max_reported_mismatches, int)
            or isinstance(self.max_reported_mismatches, bool)
            or self.max_reported_mismatches < 0
        ):
            raise ConfigurationError(
                "max_reported_mismatches", self.max_reported_mismatches, "must be an integer >= 0"
            )
