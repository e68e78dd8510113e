# matrix_oracle/data_models/scenario.py
# Scenario data class -- a named binding of fixture specs to a transform.

import re
from dataclasses import dataclass
from typing import Dict, Tuple

from matrix_oracle.data_models.fixture_spec import FixtureSpec
from matrix_oracle.exceptions import InvalidSpecError

# Logical fixture names become file names inside the fixture store.
_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _freeze_pairs(value, field_name: str) -> tuple:
    """Normalise a mapping or an iterable of pairs to a tuple of pairs."""
    items = value.items() if isinstance(value, dict) else value
    try:
        return tuple((k, v) for k, v in items)
    except (TypeError, ValueError):
        raise InvalidSpecError(field_name, value, "must be a mapping or a sequence of pairs")


@dataclass(frozen=True)
class Scenario:
    """
    Named, immutable declaration of one oracle case.

    Fields:
      name          -- Unique scenario name (e.g. "PositiveTest").
      transform_id  -- Registry id of the transform under test
                       (e.g. "elementwise-abs").
      fixture_specs -- Ordered (logical name, FixtureSpec) pairs, e.g.
                       ("vector", ...), ("matrix", ...). A dict is accepted
                       and frozen in declaration order.
      variables     -- Ordered (name, value) pairs handed to the engine
                       (e.g. rows, cols). A dict is accepted.
      script        -- Engine-side program identifier (e.g. "AbsTest").
                       Empty when the engine needs none.
    """
    name:          str
    transform_id:  str
    fixture_specs: tuple    # tuple of (str, FixtureSpec)
    variables:     tuple = ()    # tuple of (str, scalar)
    script:        str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not _NAME_RE.match(self.name):
            raise InvalidSpecError("name", self.name, "must match [A-Za-z0-9_.-]+")
        if not isinstance(self.transform_id, str) or not self.transform_id:
            raise InvalidSpecError("transform_id", self.transform_id, "must be a non-empty string")

        specs = _freeze_pairs(self.fixture_specs, "fixture_specs")
        if not specs:
            raise InvalidSpecError("fixture_specs", specs, "at least one fixture is required")
        seen = set()
        for fixture_name, spec in specs:
            if not isinstance(fixture_name, str) or not _NAME_RE.match(fixture_name):
                raise InvalidSpecError(
                    "fixture_specs", fixture_name, "fixture names must match [A-Za-z0-9_.-]+"
                )
            if fixture_name in seen:
                raise InvalidSpecError("fixture_specs", fixture_name, "duplicate fixture name")
            if not isinstance(spec, FixtureSpec):
                raise InvalidSpecError(
                    "fixture_specs", fixture_name, "value must be a FixtureSpec"
                )
            seen.add(fixture_name)
        object.__setattr__(self, "fixture_specs", specs)

        variables = _freeze_pairs(self.variables, "variables")
        for var_name, value in variables:
            if not isinstance(var_name, str) or not var_name:
                raise InvalidSpecError("variables", var_name, "names must be non-empty strings")
            if not isinstance(value, (int, float, str, bool)):
                raise InvalidSpecError("variables", var_name, "values must be scalars")
        object.__setattr__(self, "variables", variables)

    @property
    def fixture_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.fixture_specs)

    def spec_for(self, fixture_name: str) -> FixtureSpec:
        for name, spec in self.fixture_specs:
            if name == fixture_name:
                return spec
        raise KeyError(fixture_name)

    def variables_dict(self) -> Dict[str, object]:
        return dict(self.variables)
