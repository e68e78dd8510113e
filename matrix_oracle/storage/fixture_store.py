# matrix_oracle/storage/fixture_store.py
# FixtureStore -- persists and restores Matrix fixtures under logical names.
#
# One JSON file per logical name: <root>/<name>.json
# All float values are serialized with float.hex() (lossless IEEE 754), so
# +0.0, -0.0, +inf, -inf and NaN (sign and payload included) each round-trip
# to the same bit pattern.
# Writes go to a sibling temp file and are moved into place with os.replace,
# so a reader never observes a half-written fixture.
#
# Layout used by the orchestrator inside one execution scope:
#   in/<fixture>        -- generated input
#   expected/<fixture>  -- reference output
#   out/<fixture>       -- engine output (written by the TestRunner)

import json
import math
import os
import re
import struct
from pathlib import Path
from typing import List, Union

from matrix_oracle.data_models.matrix import Matrix
from matrix_oracle.exceptions import FixtureIOError, FixtureNotFoundError, InvalidSpecError
from matrix_oracle.oracle_version import ORACLE_VERSION, STORAGE_FORMAT_VERSION

INPUT_PREFIX:    str = "in"
EXPECTED_PREFIX: str = "expected"
OUTPUT_PREFIX:   str = "out"

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_SUFFIX     = ".json"
_NAN_PREFIX = "nan:"


def input_name(fixture: str) -> str:
    return f"{INPUT_PREFIX}/{fixture}"


def expected_name(fixture: str) -> str:
    return f"{EXPECTED_PREFIX}/{fixture}"


def output_name(fixture: str) -> str:
    return f"{OUTPUT_PREFIX}/{fixture}"


def _serialize_float(value: float) -> str:
    """
    Lossless text form. Finite values use float.hex(); infinities are
    "inf"/"-inf"; NaN keeps its sign and payload as "nan:<IEEE 754 hex>".
    """
    if math.isnan(value):
        return _NAN_PREFIX + struct.pack(">d", value).hex()
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value.hex()


def _deserialize_float(value: str) -> float:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    if value.startswith(_NAN_PREFIX):
        return struct.unpack(">d", bytes.fromhex(value[len(_NAN_PREFIX):]))[0]
    if value == "nan":
        return float("nan")
    if value == "inf":
        return float("inf")
    if value == "-inf":
        return float("-inf")
    return float.fromhex(value)


def _validate_name(name: str) -> List[str]:
    if not isinstance(name, str) or not name:
        raise InvalidSpecError("name", name, "must be a non-empty string")
    segments = name.split("/")
    for seg in segments:
        if not _SEGMENT_RE.match(seg) or seg in (".", ".."):
            raise InvalidSpecError(
                "name", name, "segments must match [A-Za-z0-9_.-]+ and not be '.' or '..'"
            )
    return segments


class FixtureStore:
    """
    Saves and loads Matrix fixtures under logical names below a root
    directory. Names are scoped: two stores with different roots never see
    each other's fixtures.

    Methods:
      save(name, matrix)   -- persist; overwrites an existing fixture
      load(name) -> Matrix -- restore bit-for-bit
      exists(name) -> bool
      names() -> list      -- every saved logical name, sorted
      scoped(sub) -> FixtureStore rooted at <root>/<sub>
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)

    @property
    def path(self) -> Path:
        return self._root

    def scoped(self, sub: str) -> "FixtureStore":
        """Return a store whose root is a sub-directory of this one."""
        segments = _validate_name(sub)
        return FixtureStore(self._root.joinpath(*segments))

    def _file_for(self, name: str) -> Path:
        segments = _validate_name(name)
        return self._root.joinpath(*segments[:-1], segments[-1] + _SUFFIX)

    def exists(self, name: str) -> bool:
        return self._file_for(name).is_file()

    def names(self) -> List[str]:
        if not self._root.is_dir():
            return []
        found = []
        for p in self._root.rglob("*" + _SUFFIX):
            rel = p.relative_to(self._root).with_suffix("")
            found.append("/".join(rel.parts))
        return sorted(found)

    def save(self, name: str, matrix: Matrix) -> None:
        """
        Persist matrix under name.

        Raises FixtureIOError if the file cannot be written.
        """
        if not isinstance(matrix, Matrix):
            raise InvalidSpecError("matrix", matrix, "must be a Matrix instance")
        filepath = self._file_for(name)

        payload = {
            "format_version": STORAGE_FORMAT_VERSION,
            "oracle_version": ORACLE_VERSION,
            "name":           name,
            "rows":           matrix.rows,
            "cols":           matrix.cols,
            "values":         [_serialize_float(v) for v in matrix.values],
        }

        tmp_path = filepath.with_name(filepath.name + ".tmp")
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=1)
            os.replace(tmp_path, filepath)
        except OSError as exc:
            raise FixtureIOError(name, str(filepath), f"write failed: {exc}") from exc

    def load(self, name: str) -> Matrix:
        """
        Restore the Matrix saved under name.

        Raises FixtureNotFoundError if nothing was saved under name, and
        FixtureIOError on unreadable, corrupt or incompatible content.
        """
        filepath = self._file_for(name)
        if not filepath.is_file():
            raise FixtureNotFoundError(name, str(filepath))

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as exc:
            raise FixtureIOError(name, str(filepath), f"read failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise FixtureIOError(name, str(filepath), "payload is not a JSON object")
        if payload.get("format_version") != STORAGE_FORMAT_VERSION:
            raise FixtureIOError(
                name,
                str(filepath),
                f"format_version mismatch. File: {payload.get('format_version')}, "
                f"Expected: {STORAGE_FORMAT_VERSION}.",
            )

        try:
            values = tuple(_deserialize_float(v) for v in payload["values"])
            return Matrix(rows=payload["rows"], cols=payload["cols"], values=values)
        except (KeyError, TypeError, ValueError, struct.error, InvalidSpecError) as exc:
            raise FixtureIOError(name, str(filepath), f"corrupt fixture: {exc}") from exc
