"""Backtracking CSP search: static order or MRV, with or without forward checking."""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .model import CSP, AllDifferent, Assignment, ColumnSum, ConfigurationError, Domains, Variable
from src.utils.logging_utils import get_logger
from src.utils.trace import Tracer, get_tracer

logger = get_logger()

Selector = Callable[[CSP, Assignment, Domains], Variable]


@dataclass
class SolveResult:
    """A finished run: the assignment (None when unsatisfiable) and its cost."""

    strategy: str
    assignment: Optional[Assignment]
    consistency_checks: int
    elapsed_seconds: float

    @property
    def solved(self) -> bool:
        return self.assignment is not None


def backtracking_search(
    csp: CSP, assignment: Optional[Assignment] = None, tracer: Optional[Tracer] = None
) -> Optional[Assignment]:
    """Chronological backtracking over the model's variable order."""
    start = _starting_assignment(csp, assignment)
    if start is None:
        return None
    return _search(csp, start, csp.domains, _first_unassigned, False, tracer or get_tracer())


def backtracking_search_mrv(
    csp: CSP, assignment: Optional[Assignment] = None, tracer: Optional[Tracer] = None
) -> Optional[Assignment]:
    """Backtracking that always branches on the variable with the smallest domain."""
    start = _starting_assignment(csp, assignment)
    if start is None:
        return None
    return _search(csp, start, csp.domains, _minimum_remaining_values, False, tracer or get_tracer())


def forward_checking_search(
    csp: CSP, assignment: Optional[Assignment] = None, tracer: Optional[Tracer] = None
) -> Optional[Assignment]:
    """Static-order backtracking that prunes neighbour domains after each binding."""
    start = _starting_assignment(csp, assignment)
    if start is None:
        return None
    domains = csp.copy_domains()
    return _search(csp, start, domains, _first_unassigned, True, tracer or get_tracer())


def forward_checking_search_mrv(
    csp: CSP, assignment: Optional[Assignment] = None, tracer: Optional[Tracer] = None
) -> Optional[Assignment]:
    """Forward checking with MRV over the locally pruned domains."""
    start = _starting_assignment(csp, assignment)
    if start is None:
        return None
    domains = csp.copy_domains()
    return _search(csp, start, domains, _minimum_remaining_values, True, tracer or get_tracer())


STRATEGIES: Dict[str, Callable[..., Optional[Assignment]]] = {
    "backtracking": backtracking_search,
    "backtracking-mrv": backtracking_search_mrv,
    "forwardchecking": forward_checking_search,
    "forwardchecking-mrv": forward_checking_search_mrv,
}


def solve(
    csp: CSP,
    strategy: str = "forwardchecking-mrv",
    assignment: Optional[Assignment] = None,
    tracer: Optional[Tracer] = None,
) -> SolveResult:
    """
    Run one search strategy and measure it.
    `consistency_checks` counts only the checks made during this run.
    """
    try:
        search = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(
            f"Unknown strategy {strategy!r}; expected one of {sorted(STRATEGIES)}"
        ) from None

    checks_before = csp.consistency_checks
    start = time.perf_counter()
    result = search(csp, assignment, tracer)
    elapsed = time.perf_counter() - start
    checks = csp.consistency_checks - checks_before

    logger.debug(
        "%s: %s after %d consistency checks in %.2f ms",
        strategy,
        "solved" if result is not None else "no solution",
        checks,
        elapsed * 1000,
    )
    return SolveResult(
        strategy=strategy,
        assignment=result,
        consistency_checks=checks,
        elapsed_seconds=elapsed,
    )


def _search(
    csp: CSP,
    assignment: Assignment,
    domains: Domains,
    select_variable: Selector,
    forward_checking: bool,
    tracer: Tracer,
) -> Optional[Assignment]:
    if len(assignment) == len(csp.variables):
        tracer.log_solution_found(assignment_size=len(assignment))
        return assignment

    var = select_variable(csp, assignment, domains)

    for value in domains[var]:
        local_assignment = dict(assignment)
        local_assignment[var] = value
        if not csp.is_consistent(var, local_assignment):
            continue
        tracer.log_assign(
            variable=var,
            value=value,
            domain_size=len(domains[var]),
            assignment_size=len(local_assignment),
        )

        local_domains = domains
        if forward_checking:
            local_domains = csp.copy_domains(domains)
            local_domains[var] = [value]
            if not _forward_check(csp, var, local_assignment, local_domains, tracer):
                continue

        result = _search(csp, local_assignment, local_domains, select_variable, forward_checking, tracer)
        if result is not None:
            return result

    tracer.log_backtrack(var)
    return None


def _starting_assignment(csp: CSP, assignment: Optional[Assignment]) -> Optional[Assignment]:
    """Copy the caller's bindings; None when they already break a constraint."""
    start = dict(assignment or {})
    unknown = [var for var in start if var not in csp.domains]
    if unknown:
        raise ConfigurationError(f"Starting assignment names variables outside the CSP: {unknown}")
    violated = csp.violated(start)
    if violated:
        logger.debug("Starting assignment violates %d constraint(s)", len(violated))
        return None
    return start


def _first_unassigned(csp: CSP, assignment: Assignment, domains: Domains) -> Variable:
    for var in csp.variables:
        if var not in assignment:
            return var
    raise ValueError("No unassigned variable left")


def _minimum_remaining_values(csp: CSP, assignment: Assignment, domains: Domains) -> Variable:
    # min() keeps the first of equally small domains, i.e. model order breaks ties.
    return min(csp.unassigned(assignment), key=lambda v: len(domains[v]))


def _forward_check(
    csp: CSP,
    variable: Variable,
    assignment: Assignment,
    domains: Domains,
    tracer: Tracer,
) -> bool:
    """Prune neighbour domains after assigning `variable`; False once one runs dry."""
    pruned = 0
    for constraint in csp.constraints_for(variable):
        match constraint:
            case AllDifferent(owner=owner) if owner != variable:
                continue
            case AllDifferent() | ColumnSum():
                outcome = constraint.propagate(csp, variable, assignment, domains)
            case _:
                continue
        pruned += outcome.pruned
        if not outcome.ok:
            tracer.log_forward_check(variable=variable, domains_pruned=pruned, is_valid=False)
            return False
    if pruned:
        tracer.log_forward_check(variable=variable, domains_pruned=pruned)
    return True
