# matrix_oracle/scenarios/__init__.py
# Shipped scenario catalogues.

from .abs_scenarios import ABS_REGIMES, ABS_SCRIPT, abs_scenarios, make_range_scenario

__all__ = [
    "ABS_REGIMES",
    "ABS_SCRIPT",
    "abs_scenarios",
    "make_range_scenario",
]
