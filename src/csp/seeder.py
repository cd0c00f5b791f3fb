"""Randomized partial assignments that are guaranteed to extend to a full solution."""

import random
from dataclasses import dataclass
from typing import Iterable, Optional

from .model import CSP, Assignment, ConfigurationError
from .solver_core import forward_checking_search_mrv
from src.utils.logging_utils import get_logger
from src.utils.trace import Tracer, get_tracer

logger = get_logger()

FILL_PROBABILITY = 0.5


@dataclass
class SeedResult:
    puzzle: Assignment  # seeded variables plus every non-seedable variable
    solution: Assignment  # the complete assignment the puzzle was checked against
    attempts: int


def random_initial_state(
    csp: CSP,
    seedable: Iterable,
    rng: Optional[random.Random] = None,
    max_attempts: Optional[int] = None,
    tracer: Optional[Tracer] = None,
) -> Optional[SeedResult]:
    """
    Pre-fill roughly half of `seedable` with random values, then prove the
    pre-fill extends to a complete solution with forward checking + MRV.

    Variables outside `seedable` (e.g. the sum targets) are copied from that
    solution into the puzzle. A failed completion restores the domains and
    starts over; with `max_attempts=None` this repeats until it succeeds,
    otherwise None is returned once the attempts are used up.
    """
    rng = rng or random.Random()
    tracer = tracer or get_tracer()
    seedable = list(seedable)
    unknown = [var for var in seedable if var not in csp.domains]
    if unknown:
        raise ConfigurationError(f"Cannot seed variables outside the CSP: {unknown}")
    seedable_set = set(seedable)

    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        prefill = _random_prefill(csp, seedable, rng)

        snapshot = csp.snapshot_domains()
        try:
            for var, value in prefill.items():
                csp.domains[var] = [value]
            solution = forward_checking_search_mrv(csp, prefill, tracer)
        finally:
            csp.restore_domains(snapshot)

        tracer.log_seed_attempt(attempt=attempts, seeded=len(prefill), is_valid=solution is not None)
        if solution is None:
            logger.debug("Seed attempt %d with %d pre-filled cells has no solution, retrying", attempts, len(prefill))
            continue

        puzzle = dict(prefill)
        for var in csp.variables:
            if var not in seedable_set:
                puzzle[var] = solution[var]
        return SeedResult(puzzle=puzzle, solution=solution, attempts=attempts)

    logger.warning("Giving up on seeding after %d attempts", attempts)
    return None


def _random_prefill(csp: CSP, seedable, rng: random.Random) -> Assignment:
    """Give each seedable variable, with even odds, the first shuffled value that stays consistent."""
    assignment: Assignment = {}
    for var in seedable:
        if rng.random() >= FILL_PROBABILITY:
            continue
        domain = csp.domains[var]
        for value in rng.sample(domain, len(domain)):
            trial = dict(assignment)
            trial[var] = value
            if csp.is_consistent(var, trial):
                assignment[var] = value
                break
    return assignment
