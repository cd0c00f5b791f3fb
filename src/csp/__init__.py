"""CSP model, search strategies and randomized seeding."""

from .model import AllDifferent, ColumnSum, ConfigurationError, Constraint, CSP
from .solver_core import STRATEGIES, SolveResult, solve
from .seeder import SeedResult, random_initial_state

__all__ = [
    "AllDifferent",
    "ColumnSum",
    "ConfigurationError",
    "Constraint",
    "CSP",
    "STRATEGIES",
    "SolveResult",
    "solve",
    "SeedResult",
    "random_initial_state",
]
