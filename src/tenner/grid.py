"""Tenner Grid variables, domains and constraint generators."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple

from src.csp.model import CSP, AllDifferent, ColumnSum, ConfigurationError, Constraint, Domains
from .config import CELL_DOMAIN, TARGET_PREFIX, GridConfig


def cell_variable(row: int, col: int) -> str:
    return f"{row},{col}"


def target_variable(col: int) -> str:
    return f"{TARGET_PREFIX}{col}"


def is_target_variable(variable: str) -> bool:
    return variable.startswith(TARGET_PREFIX)


def parse_cell_variable(variable: str) -> Tuple[int, int]:
    row, _, col = variable.partition(",")
    return int(row), int(col)


def cell_variables(config: GridConfig) -> List[str]:
    return [
        cell_variable(row, col)
        for row in range(config.rows)
        for col in range(config.columns)
    ]


def create_variables(config: GridConfig) -> List[str]:
    """Grid cells row by row, then one target per column."""
    variables = cell_variables(config)
    variables.extend(target_variable(col) for col in range(config.columns))
    return variables


def create_domains(config: GridConfig) -> Tuple[List[int], List[int]]:
    """Return the (grid cell, target cell) domains for `config`."""
    grid_cells_domain = list(CELL_DOMAIN)
    target_cells_domain = list(range(config.target_min, config.target_max + 1))
    return grid_cells_domain, target_cells_domain


def initialize_variables_and_domains(
    config: GridConfig, givens: Optional[Mapping[str, int]] = None
) -> Tuple[List[str], Domains]:
    """
    Build variables and domains. Variables with a given value get that value
    as their only candidate.
    """
    variables = create_variables(config)
    grid_cells_domain, target_cells_domain = create_domains(config)
    givens = givens or {}

    unknown = [var for var in givens if var not in variables]
    if unknown:
        raise ConfigurationError(f"Given values for cells outside the grid: {unknown}")

    domains: Domains = {}
    for var in variables:
        if var in givens:
            domains[var] = [givens[var]]
        elif is_target_variable(var):
            domains[var] = list(target_cells_domain)
        else:
            domains[var] = list(grid_cells_domain)
    return variables, domains


def gen_col_sum_constraints(config: GridConfig) -> List[Constraint]:
    """One ColumnSum per column: the column's cells top to bottom, then its target."""
    constraints: List[Constraint] = []
    for col in range(config.columns):
        col_variables = [cell_variable(row, col) for row in range(config.rows)]
        col_variables.append(target_variable(col))
        constraints.append(ColumnSum(col_variables))
    return constraints


def gen_all_diff_constraints(config: GridConfig) -> List[Constraint]:
    """
    One AllDifferent per cell, owned by that cell: its vertical and diagonal
    neighbours followed by every other cell of its row.
    """
    rows, columns = config.rows, config.columns
    constraints: List[Constraint] = []
    for i in range(rows):
        for j in range(columns):
            scope = [cell_variable(i, j)]
            if i > 0:
                scope.append(cell_variable(i - 1, j))
            if i < rows - 1:
                scope.append(cell_variable(i + 1, j))
            if i > 0 and j > 0:
                scope.append(cell_variable(i - 1, j - 1))
            if i > 0 and j < columns - 1:
                scope.append(cell_variable(i - 1, j + 1))
            if i < rows - 1 and j > 0:
                scope.append(cell_variable(i + 1, j - 1))
            if i < rows - 1 and j < columns - 1:
                scope.append(cell_variable(i + 1, j + 1))
            scope.extend(cell_variable(i, k) for k in range(columns) if k != j)
            constraints.append(AllDifferent(scope))
    return constraints


def create_csp(config: GridConfig, givens: Optional[Mapping[str, int]] = None) -> CSP:
    variables, domains = initialize_variables_and_domains(config, givens)
    csp = CSP(variables, domains)
    csp.add_constraints(gen_col_sum_constraints(config))
    csp.add_constraints(gen_all_diff_constraints(config))
    return csp


def check_solution(csp: CSP, assignment: Mapping[str, int]) -> Dict[str, List[str]]:
    """Report blank cells and broken constraints of a filled-in grid; empty lists mean solved."""
    return {
        "missing": [str(var) for var in csp.unassigned(dict(assignment))],
        "violated": [str(c) for c in csp.violated(dict(assignment))],
    }
