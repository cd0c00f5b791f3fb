"""Tenner Grid layout, constraint generators and puzzle I/O."""

from .config import GridConfig
from .grid import create_csp, gen_all_diff_constraints, gen_col_sum_constraints
from .parser import PuzzleFormatError, TennerPuzzle, parse_puzzle
from .render import render_grid

__all__ = [
    "GridConfig",
    "create_csp",
    "gen_all_diff_constraints",
    "gen_col_sum_constraints",
    "PuzzleFormatError",
    "TennerPuzzle",
    "parse_puzzle",
    "render_grid",
]
