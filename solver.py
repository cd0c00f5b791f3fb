"""Top-level CSP solve interface.

Expose `solve_puzzle(puzzle, strategy)` that accepts a pre-built CSP object, a
parsed `TennerPuzzle`, or a raw puzzle dictionary compatible with
`src.tenner.parser.parse_puzzle`.
"""

from typing import Any, Optional

from src.csp import solver_core
from src.csp.model import CSP
from src.csp.solver_core import SolveResult
from src.tenner.config import DEFAULT_STRATEGY
from src.tenner.parser import TennerPuzzle, parse_puzzle
from src.utils.trace import Tracer


def solve_puzzle(
    puzzle: Any, strategy: str = DEFAULT_STRATEGY, tracer: Optional[Tracer] = None
) -> SolveResult:
    """
    Solve a puzzle with one of the search strategies and return the result
    with its consistency-check count and elapsed time.
    Accepts:
      - CSP instances (used directly)
      - TennerPuzzle instances
      - Raw puzzle dictionaries (parsed via `parse_puzzle`)
    """
    if isinstance(puzzle, CSP):
        csp = puzzle
    elif isinstance(puzzle, TennerPuzzle):
        csp = puzzle.to_csp()
    elif isinstance(puzzle, dict):
        csp = parse_puzzle(puzzle).to_csp()
    else:
        raise TypeError("solve_puzzle expects a CSP, a TennerPuzzle or a puzzle dictionary")

    return solver_core.solve(csp, strategy, tracer=tracer)


__all__ = ["solve_puzzle"]
