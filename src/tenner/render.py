"""Plain-text rendering of a (partial) Tenner Grid assignment."""

from typing import Mapping, Optional

from .config import GridConfig
from .grid import cell_variable, target_variable

BLANK = "."


def render_grid(assignment: Optional[Mapping[str, int]], config: GridConfig) -> str:
    """Rows of cells, a rule, then the column targets; unknown values print as '.'."""
    assignment = assignment or {}
    width = len(str(config.target_max))

    def _fmt(value) -> str:
        return f"{BLANK if value is None else value:>{width}}"

    lines = []
    for row in range(config.rows):
        lines.append(" ".join(_fmt(assignment.get(cell_variable(row, col))) for col in range(config.columns)))
    lines.append("-" * (config.columns * (width + 1) - 1))
    lines.append(" ".join(_fmt(assignment.get(target_variable(col))) for col in range(config.columns)))
    return "\n".join(lines)
