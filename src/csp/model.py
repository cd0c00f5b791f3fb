"""CSP core data structures and helper logic."""

from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

Variable = Hashable
Assignment = Dict[Variable, int]
Domains = Dict[Variable, List[int]]


class ConfigurationError(ValueError):
    """Raised when variables, domains or constraints do not fit together."""


@dataclass(frozen=True)
class Propagation:
    """Outcome of pruning neighbour domains after a binding."""

    ok: bool
    pruned: int = 0


@dataclass(frozen=True)
class Constraint:
    """
    A constraint ranges over an ordered tuple of variables and decides whether a
    (possibly partial) assignment still satisfies it.
    """

    variables: Tuple[Variable, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", tuple(self.variables))
        if not self.variables:
            raise ConfigurationError(f"{type(self).__name__} needs at least one variable")

    def satisfied(self, assignment: Assignment) -> bool:
        raise NotImplementedError

    def propagate(
        self, csp: "CSP", variable: Variable, assignment: Assignment, domains: Domains
    ) -> Propagation:
        """
        Narrow the local domains of every unassigned variable in scope after
        `variable` was bound. Values that make the neighbour inconsistent are
        dropped; an emptied domain reports failure.
        """
        pruned = 0
        for neighbor in self.variables:
            if neighbor in assignment:
                continue
            kept = []
            for value in domains[neighbor]:
                trial = dict(assignment)
                trial[neighbor] = value
                if csp.is_consistent(neighbor, trial):
                    kept.append(value)
            pruned += len(domains[neighbor]) - len(kept)
            domains[neighbor] = kept
            if not kept:
                return Propagation(ok=False, pruned=pruned)
        return Propagation(ok=True, pruned=pruned)

    def _keep(self, domains: Domains, variable: Variable, predicate) -> Propagation:
        kept = [value for value in domains[variable] if predicate(value)]
        pruned = len(domains[variable]) - len(kept)
        domains[variable] = kept
        return Propagation(ok=bool(kept), pruned=pruned)


@dataclass(frozen=True)
class AllDifferent(Constraint):
    """
    The first variable (the owner) must differ from every other assigned
    variable in scope. Unassigned variables never conflict.
    """

    @property
    def owner(self) -> Variable:
        return self.variables[0]

    def satisfied(self, assignment: Assignment) -> bool:
        if self.owner not in assignment:
            return True
        owner_value = assignment[self.owner]
        for var in self.variables[1:]:
            if var in assignment and assignment[var] == owner_value:
                return False
        return True

    def propagate(
        self, csp: "CSP", variable: Variable, assignment: Assignment, domains: Domains
    ) -> Propagation:
        """Drop the owner's value from its unassigned neighbours, then re-check them."""
        pruned = 0
        if self.owner in assignment:
            taken = assignment[self.owner]
            for neighbor in self.variables[1:]:
                if neighbor in assignment:
                    continue
                outcome = self._keep(domains, neighbor, lambda value: value != taken)
                pruned += outcome.pruned
                if not outcome.ok:
                    return Propagation(ok=False, pruned=pruned)
        outcome = super().propagate(csp, variable, assignment, domains)
        return Propagation(ok=outcome.ok, pruned=pruned + outcome.pruned)

    def __str__(self) -> str:
        return f"AllDiff: {', '.join(map(str, self.variables))}"


@dataclass(frozen=True)
class ColumnSum(Constraint):
    """The addends (every variable but the last) must sum to the target (the last)."""

    def __post_init__(self) -> None:
        super().__post_init__()
        if len(self.variables) < 2:
            raise ConfigurationError("ColumnSum needs at least one addend and a target")

    @property
    def target(self) -> Variable:
        return self.variables[-1]

    @property
    def addends(self) -> Tuple[Variable, ...]:
        return self.variables[:-1]

    def satisfied(self, assignment: Assignment) -> bool:
        if self.target not in assignment:
            return True
        target_sum = assignment[self.target]
        total = 0
        count = 0
        for var in self.addends:
            if var in assignment:
                total += assignment[var]
                count += 1
        if count == len(self.addends) and total != target_sum:
            return False
        # A partial sum past the target can never come back down.
        if total > target_sum:
            return False
        return True

    def propagate(
        self, csp: "CSP", variable: Variable, assignment: Assignment, domains: Domains
    ) -> Propagation:
        """
        Bound the open variables by the partial sum before the shared re-check.
        With the target known, an addend may not push the sum past it, and the
        last open addend must close the gap exactly. With the target open, it
        may not fall below the partial sum.
        """
        total = sum(assignment[var] for var in self.addends if var in assignment)
        open_addends = [var for var in self.addends if var not in assignment]
        bounds = []
        if self.target in assignment:
            room = assignment[self.target] - total
            for var in open_addends:
                if len(open_addends) == 1:
                    bounds.append((var, lambda value, room=room: value == room))
                else:
                    bounds.append((var, lambda value, room=room: value <= room))
        elif open_addends:
            bounds.append((self.target, lambda value: value >= total))
        else:
            bounds.append((self.target, lambda value: value == total))

        pruned = 0
        for var, predicate in bounds:
            outcome = self._keep(domains, var, predicate)
            pruned += outcome.pruned
            if not outcome.ok:
                return Propagation(ok=False, pruned=pruned)
        outcome = super().propagate(csp, variable, assignment, domains)
        return Propagation(ok=outcome.ok, pruned=pruned + outcome.pruned)

    def __str__(self) -> str:
        return f"Sum({' + '.join(map(str, self.addends))}) == {self.target}"


class CSP:
    """Variables, their domains and the constraints indexed per variable."""

    def __init__(self, variables: Sequence[Variable], domains: Dict[Variable, Iterable[int]]) -> None:
        self.variables: List[Variable] = list(variables)
        if len(set(self.variables)) != len(self.variables):
            raise ConfigurationError("Variable names must be unique")

        missing = [var for var in self.variables if var not in domains]
        if missing:
            raise ConfigurationError(f"Every variable needs a domain; missing: {missing}")

        # Domains may be narrowed between searches; keep our own copy.
        self.domains: Domains = {var: list(domains[var]) for var in self.variables}

        self.constraints: List[Constraint] = []
        self.constraints_by_var: Dict[Variable, List[Constraint]] = {
            var: [] for var in self.variables
        }
        self.consistency_checks = 0

    def add_constraint(self, constraint: Constraint) -> None:
        unknown = [var for var in constraint.variables if var not in self.constraints_by_var]
        if unknown:
            raise ConfigurationError(f"Variable(s) {unknown} in constraint but not in CSP")
        self.constraints.append(constraint)
        for var in constraint.variables:
            self.constraints_by_var[var].append(constraint)

    def add_constraints(self, constraints: Iterable[Constraint]) -> None:
        for constraint in constraints:
            self.add_constraint(constraint)

    def constraints_for(self, variable: Variable) -> List[Constraint]:
        return self.constraints_by_var.get(variable, [])

    def is_consistent(self, variable: Variable, assignment: Assignment) -> bool:
        """Check the constraints that mention `variable` under the current partial assignment."""
        self.consistency_checks += 1
        for constraint in self.constraints_by_var[variable]:
            if not constraint.satisfied(assignment):
                return False
        return True

    def unassigned(self, assignment: Assignment) -> List[Variable]:
        return [var for var in self.variables if var not in assignment]

    def violated(self, assignment: Assignment) -> List[Constraint]:
        return [c for c in self.constraints if not c.satisfied(assignment)]

    def is_solution(self, assignment: Optional[Dict[Variable, Any]]) -> bool:
        if not assignment or self.unassigned(assignment):
            return False
        return not self.violated(assignment)

    def copy_domains(self, domains: Optional[Domains] = None) -> Domains:
        source = domains if domains is not None else self.domains
        return {var: list(values) for var, values in source.items()}

    def snapshot_domains(self) -> Domains:
        return self.copy_domains()

    def restore_domains(self, snapshot: Domains) -> None:
        self.domains = self.copy_domains(snapshot)
