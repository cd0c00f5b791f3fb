"""Puzzle parser: convert raw puzzle records into Tenner Grid CSPs.

A record looks like::

    {"id": "p1", "grid": [[0, null, 2, ...], ...], "targets": [9, null, ...]}

`grid` and `targets` may also arrive as JSON strings (CSV input) or array-like
objects (parquet input). Blank cells are `null` or `""`.
"""

from __future__ import annotations

import json
import math
import numbers
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.csp.model import CSP, Assignment
from .config import COLUMNS, DEFAULT_ROWS, GridConfig
from .grid import cell_variable, create_csp, target_variable

Cell = Optional[int]

_LEADING_INT = re.compile(r"\s*(-?\d+)")


class PuzzleFormatError(ValueError):
    """Raised when a puzzle record cannot be turned into a grid."""


@dataclass
class TennerPuzzle:
    id: str
    config: GridConfig
    grid: List[List[Cell]]
    targets: List[Cell] = field(default_factory=list)

    def givens(self) -> Assignment:
        values: Assignment = {}
        for row, cells in enumerate(self.grid):
            for col, value in enumerate(cells):
                if value is not None:
                    values[cell_variable(row, col)] = value
        for col, value in enumerate(self.targets):
            if value is not None:
                values[target_variable(col)] = value
        return values

    def to_csp(self) -> CSP:
        return create_csp(self.config, self.givens())

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "grid": self.grid, "targets": self.targets}

    @classmethod
    def from_assignment(cls, puzzle_id: str, config: GridConfig, assignment: Assignment) -> "TennerPuzzle":
        grid = [
            [assignment.get(cell_variable(row, col)) for col in range(config.columns)]
            for row in range(config.rows)
        ]
        targets = [assignment.get(target_variable(col)) for col in range(config.columns)]
        return cls(id=puzzle_id, config=config, grid=grid, targets=targets)


def sanitize_cell(value: Any) -> Cell:
    """
    Read a grid cell the way a user types it: a number above 9 keeps its last
    digit, anything that is not a non-negative number leaves the cell blank.
    """
    digit = _leading_int(value)
    if digit is None or digit < 0:
        return None
    if digit > 9:
        digit = digit % 10
    return digit


def sanitize_target(value: Any) -> Cell:
    number = _leading_int(value)
    if number is None or number < 0:
        return None
    return number


def parse_puzzle(record: Dict[str, Any]) -> TennerPuzzle:
    puzzle_id = str(record.get("id") or "unknown")
    raw_grid = _coerce_jsonable(_decode(record.get("grid"), puzzle_id, "grid"))
    raw_targets = _coerce_jsonable(_decode(record.get("targets"), puzzle_id, "targets"))

    if raw_grid:
        if not isinstance(raw_grid, list) or not all(isinstance(r, list) for r in raw_grid):
            raise PuzzleFormatError(f"{puzzle_id}: grid must be a list of rows")
        rows = len(raw_grid)
        columns = len(raw_grid[0])
    else:
        rows = _int_field(record, "rows", DEFAULT_ROWS, puzzle_id)
        columns = _int_field(record, "columns", COLUMNS, puzzle_id)
        raw_grid = [[None] * columns for _ in range(rows)]

    if any(len(r) != columns for r in raw_grid):
        raise PuzzleFormatError(f"{puzzle_id}: every grid row needs {columns} cells")

    config = GridConfig(rows=rows, columns=columns)
    grid = [[sanitize_cell(v) for v in r] for r in raw_grid]

    if not raw_targets:
        targets: List[Cell] = [None] * columns
    elif not isinstance(raw_targets, list) or len(raw_targets) != columns:
        raise PuzzleFormatError(f"{puzzle_id}: expected {columns} targets")
    else:
        targets = [sanitize_target(v) for v in raw_targets]

    return TennerPuzzle(id=puzzle_id, config=config, grid=grid, targets=targets)


def _leading_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        if math.isnan(value):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def _decode(value: Any, puzzle_id: str, name: str) -> Any:
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise PuzzleFormatError(f"{puzzle_id}: {name} is not valid JSON") from e
    return value


def _coerce_jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _coerce_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_coerce_jsonable(v) for v in value]
    if hasattr(value, "tolist"):
        return _coerce_jsonable(value.tolist())
    return value


def _int_field(record: Dict[str, Any], key: str, default: int, puzzle_id: str) -> int:
    value = record.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise PuzzleFormatError(f"{puzzle_id}: {key} must be an integer") from e
