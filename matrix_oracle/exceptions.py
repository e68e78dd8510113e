# =============================================================================
# matrix_oracle/exceptions.py
# Exception hierarchy for the matrix test oracle.
# =============================================================================
#
# All exceptions are value objects: no side effects, no logging, no I/O.
#
# EXCEPTION HIERARCHY
# -------------------
#   OracleError(Exception)                       -- base; never raised directly
#     InvalidSpecError(OracleError)              -- bad generation / scenario input
#       UnknownTransformError(InvalidSpecError)  -- transform id not registered
#     ConfigurationError(OracleError)            -- invalid OracleConfig value
#     FixtureIOError(OracleError, OSError)       -- fixture read / write failure
#     FixtureNotFoundError(OracleError)          -- load of a name never saved
#     ShapeMismatchError(OracleError)            -- actual / expected shapes differ
#     RunnerError(OracleError)                   -- engine under test failed
#     RunnerTimeoutError(OracleError, TimeoutError)
#                                                -- engine exceeded its time bound
#     SequenceError(OracleError)                 -- orchestrator stage out of order
#
# Numeric mismatches are NOT exceptions. They are collected into
# ComparisonResult records by the ResultComparator.
#
# MESSAGE CONTRACT
# ----------------
# Every message is deterministic for identical inputs, names the offending
# field where one exists, and is never empty.
# =============================================================================

from __future__ import annotations

from typing import Any, Optional, Tuple


# =============================================================================
# BASE EXCEPTION
# =============================================================================

class OracleError(Exception):
    """
    Base class for all oracle exceptions.

    Attributes:
        message:     Human-readable description. Always non-empty.
        field_name:  Offending field, or empty string if not applicable.
        value:       Offending value, or None.
    """

    def __init__(
        self,
        message:    str,
        field_name: str = "",
        value:      Any = None,
    ) -> None:
        if not isinstance(message, str) or not message:
            raise ValueError("OracleError: message must be a non-empty string")
        if not isinstance(field_name, str):
            raise ValueError("OracleError: field_name must be a string")
        super().__init__(message)
        self.message:    str = message
        self.field_name: str = field_name
        self.value:      Any = value

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            self.__class__.__name__
            + "(field_name=" + repr(self.field_name)
            + ", value=" + repr(self.value)
            + ", message=" + repr(self.message)
            + ")"
        )


# =============================================================================
# FIXTURE SPECS / CONFIGURATION
# =============================================================================

class InvalidSpecError(OracleError):
    """
    Raised when generation parameters, a scenario declaration or a
    comparison parameter violate their constraints.

    Reported before any generation takes place.
    """

    def __init__(self, field_name: str, value: Any, constraint: str) -> None:
        if not field_name:
            raise ValueError("InvalidSpecError: field_name must be non-empty")
        super().__init__(
            message=(
                f"InvalidSpecError: field '{field_name}' has invalid value "
                f"{value!r}: {constraint}"
            ),
            field_name=field_name,
            value=value,
        )
        self.constraint: str = constraint


class UnknownTransformError(InvalidSpecError):
    """Raised when a transform id has no entry in the transform registry."""

    def __init__(self, transform_id: str, known: Tuple[str, ...] = ()) -> None:
        super().__init__(
            field_name="transform_id",
            value=transform_id,
            constraint="not registered; known transforms: "
                       + (", ".join(sorted(known)) if known else "(none)"),
        )
        self.transform_id: str = transform_id


class ConfigurationError(OracleError):
    """Raised by OracleConfig when a configuration value is out of range."""

    def __init__(self, field_name: str, value: Any, constraint: str) -> None:
        super().__init__(
            message=(
                f"ConfigurationError: '{field_name}'={value!r} {constraint}"
            ),
            field_name=field_name,
            value=value,
        )


# =============================================================================
# PERSISTENCE
# =============================================================================

class FixtureIOError(OracleError, OSError):
    """
    Raised when a fixture cannot be written or read back, including corrupt
    or incompatible stored content. Fatal to the scenario; never retried.
    """

    def __init__(self, name: str, path: str, reason: str) -> None:
        super().__init__(
            message=f"FixtureIOError: fixture '{name}' at {path}: {reason}",
            field_name="name",
            value=name,
        )
        self.path: str = path


class FixtureNotFoundError(OracleError):
    """Raised when loading a logical name that was never saved in the scope."""

    def __init__(self, name: str, path: str) -> None:
        super().__init__(
            message=f"FixtureNotFoundError: no fixture saved under '{name}' ({path})",
            field_name="name",
            value=name,
        )
        self.path: str = path


# =============================================================================
# COMPARISON
# =============================================================================

class ShapeMismatchError(OracleError):
    """
    Raised immediately when actual and expected matrices differ in shape.
    Distinct from a numeric mismatch: no entry comparison is attempted.
    """

    def __init__(
        self,
        actual_shape:   Tuple[int, int],
        expected_shape: Tuple[int, int],
        fixture_name:   str = "",
    ) -> None:
        where = f" for fixture '{fixture_name}'" if fixture_name else ""
        super().__init__(
            message=(
                f"ShapeMismatchError{where}: actual shape "
                f"{actual_shape[0]}x{actual_shape[1]} != expected shape "
                f"{expected_shape[0]}x{expected_shape[1]}"
            ),
            field_name="shape",
            value=(actual_shape, expected_shape),
        )
        self.actual_shape:   Tuple[int, int] = actual_shape
        self.expected_shape: Tuple[int, int] = expected_shape
        self.fixture_name:   str = fixture_name


# =============================================================================
# EXTERNAL EXECUTION
# =============================================================================

class RunnerError(OracleError):
    """Raised when the engine under test fails for a reason other than time."""

    def __init__(self, detail: str, exit_code: Optional[int] = None) -> None:
        super().__init__(
            message=f"RunnerError: {detail}",
            field_name="exit_code" if exit_code is not None else "",
            value=exit_code,
        )
        self.exit_code: Optional[int] = exit_code


class RunnerTimeoutError(OracleError, TimeoutError):
    """Raised when the engine under test exceeds its time bound. Not retried."""

    def __init__(self, timeout_s: float, target: str = "") -> None:
        where = f" '{target}'" if target else ""
        super().__init__(
            message=(
                f"RunnerTimeoutError: engine{where} exceeded "
                f"{timeout_s:g}s time bound"
            ),
            field_name="timeout_s",
            value=timeout_s,
        )
        self.timeout_s: float = timeout_s


# =============================================================================
# ORCHESTRATION
# =============================================================================

class SequenceError(OracleError):
    """
    Raised when a scenario stage is invoked out of order. Programmer error.
    """

    def __init__(self, operation: str, current_state: str, required_state: str) -> None:
        super().__init__(
            message=(
                f"SequenceError: '{operation}' requires state {required_state}; "
                f"execution is in state {current_state}"
            ),
            field_name="state",
            value=current_state,
        )
        self.operation:      str = operation
        self.current_state:  str = current_state
        self.required_state: str = required_state
