"""
Settings for the Tenner Grid layout.

The grid shape travels as an explicit `GridConfig`; the module constants are
only its defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from src.csp.model import ConfigurationError

# ==== Layout ================================================================

DEFAULT_ROWS: int = 3
COLUMNS: int = 10

# Every grid cell holds a single digit.
CELL_DOMAIN: Tuple[int, ...] = tuple(range(10))

# Sum-target variables are named "t<col>", grid cells "<row>,<col>".
TARGET_PREFIX: str = "t"

# ==== Search ================================================================

DEFAULT_STRATEGY: str = "forwardchecking-mrv"


@dataclass(frozen=True)
class GridConfig:
    rows: int = DEFAULT_ROWS
    columns: int = COLUMNS

    def __post_init__(self) -> None:
        if self.rows < 1:
            raise ConfigurationError(f"A grid needs at least one row, got {self.rows}")
        if not 1 <= self.columns <= len(CELL_DOMAIN):
            raise ConfigurationError(
                f"Columns must be between 1 and {len(CELL_DOMAIN)}, got {self.columns}"
            )

    @property
    def target_min(self) -> int:
        # Touching cells differ, so a column alternates at best 0, 1, 0, 1, ...
        return (self.rows // 2) * 1

    @property
    def target_max(self) -> int:
        # ... and at worst 9, 8, 9, 8, ...
        return -(-self.rows // 2) * 9 + (self.rows // 2) * 8

    @property
    def cell_count(self) -> int:
        return self.rows * self.columns
