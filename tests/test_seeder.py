"""Tests for the randomized seeder."""

import random

import pytest

from src.csp.model import CSP, AllDifferent, ConfigurationError
from src.csp.seeder import random_initial_state
from src.tenner.config import GridConfig
from src.tenner.grid import cell_variables, create_csp, is_target_variable
from src.utils.trace import Tracer

SMALL_GRID = GridConfig(rows=2, columns=5)


def test_seeder_always_returns_a_valid_puzzle():
    for seed in range(100):
        csp = create_csp(SMALL_GRID)
        seeded = random_initial_state(
            csp, cell_variables(SMALL_GRID), rng=random.Random(seed), tracer=Tracer(enabled=False)
        )

        assert seeded is not None
        assert seeded.attempts >= 1
        # The proof solution is complete and satisfies every constraint.
        assert len(seeded.solution) == len(csp.variables)
        assert all(c.satisfied(seeded.solution) for c in csp.constraints)
        # The puzzle is a consistent subset of that solution with every target filled.
        assert all(seeded.solution[var] == value for var, value in seeded.puzzle.items())
        assert all(var in seeded.puzzle for var in csp.variables if is_target_variable(var))
        assert not csp.violated(seeded.puzzle)


def test_seeder_restores_domains():
    csp = create_csp(SMALL_GRID)
    before = csp.snapshot_domains()
    random_initial_state(csp, cell_variables(SMALL_GRID), rng=random.Random(7), tracer=Tracer(enabled=False))
    assert csp.domains == before


def test_seeder_is_reproducible_with_a_seeded_rng():
    first = random_initial_state(create_csp(SMALL_GRID), cell_variables(SMALL_GRID), rng=random.Random(3))
    second = random_initial_state(create_csp(SMALL_GRID), cell_variables(SMALL_GRID), rng=random.Random(3))
    assert first.puzzle == second.puzzle


def test_seeder_gives_up_after_max_attempts():
    csp = CSP(variables=["A", "B"], domains={"A": [1], "B": [1]})
    csp.add_constraint(AllDifferent(["A", "B"]))
    tracer = Tracer(enabled=True)

    assert random_initial_state(csp, [], max_attempts=3, tracer=tracer) is None
    attempts = [s for s in tracer.steps if s.action_type == "seed_attempt"]
    assert len(attempts) == 3
    assert not any(s.is_valid for s in attempts)


def test_seeder_rejects_unknown_variables():
    with pytest.raises(ConfigurationError):
        random_initial_state(create_csp(SMALL_GRID), ["9,9"])
