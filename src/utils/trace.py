"""Tracing module: logs CSP solver steps and writes to CSV."""

import csv
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class TraceStep:
    """A single step in the solving process."""

    timestamp: float
    step_number: int
    action_type: str  # 'assign', 'backtrack', 'forward_check', 'seed_attempt', 'solution_found'
    variable: Optional[str] = None
    value: Optional[Any] = None
    domain_size: Optional[int] = None
    assignment_size: Optional[int] = None  # Number of variables assigned
    is_valid: Optional[bool] = None
    reason: Optional[str] = None  # Why backtracking occurred, etc.


class Tracer:
    """Records solver steps for logging and analysis."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.steps: List[TraceStep] = []
        self.start_time = datetime.now().timestamp()
        self.step_counter = 0

    def _get_timestamp(self) -> float:
        """Get elapsed time in seconds since tracer creation."""
        return datetime.now().timestamp() - self.start_time

    def _record(self, action_type: str, **fields: Any) -> None:
        self.step_counter += 1
        self.steps.append(TraceStep(
            timestamp=self._get_timestamp(),
            step_number=self.step_counter,
            action_type=action_type,
            **fields,
        ))

    def log_assign(self, variable: Any, value: Any, domain_size: int, assignment_size: int):
        """Log a variable assignment."""
        if not self.enabled:
            return
        self._record(
            'assign',
            variable=str(variable),
            value=str(value),
            domain_size=domain_size,
            assignment_size=assignment_size,
        )

    def log_backtrack(self, variable: Any, reason: str = "No valid values"):
        """Log a backtrack event."""
        if not self.enabled:
            return
        self._record('backtrack', variable=str(variable), reason=reason)

    def log_forward_check(self, variable: Any, domains_pruned: int, is_valid: bool = True):
        """Log forward checking."""
        if not self.enabled:
            return
        self._record(
            'forward_check',
            variable=str(variable),
            is_valid=is_valid,
            reason=f"Pruned {domains_pruned} values from other domains",
        )

    def log_seed_attempt(self, attempt: int, seeded: int, is_valid: bool):
        """Log one round of the randomized seeder."""
        if not self.enabled:
            return
        self._record(
            'seed_attempt',
            value=attempt,
            assignment_size=seeded,
            is_valid=is_valid,
            reason=None if is_valid else "Pre-fill could not be completed",
        )

    def log_solution_found(self, assignment_size: int):
        """Log when a solution is found."""
        if not self.enabled:
            return
        self._record('solution_found', assignment_size=assignment_size)

    def to_csv(self, filepath: Path) -> None:
        """Write trace to CSV file."""
        if not self.steps:
            print("No trace steps to write")
            return

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fieldnames = [
            'timestamp', 'step_number', 'action_type', 'variable', 'value',
            'domain_size', 'assignment_size', 'is_valid', 'reason'
        ]

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for step in self.steps:
                writer.writerow(asdict(step))

        print(f"Trace written to {filepath} ({len(self.steps)} steps)")

    def summary(self) -> Dict[str, Any]:
        """Get a summary of the trace."""
        action_counts = {}
        for step in self.steps:
            action_counts[step.action_type] = action_counts.get(step.action_type, 0) + 1

        return {
            'total_steps': len(self.steps),
            'elapsed_time_seconds': self._get_timestamp(),
            'action_counts': action_counts,
            'num_assignments': action_counts.get('assign', 0),
            'num_backtracks': action_counts.get('backtrack', 0),
        }


# Global tracer instance
_global_tracer: Optional[Tracer] = None


def get_tracer() -> Tracer:
    """Get or create the global tracer. Tracing stays off until enabled."""
    global _global_tracer
    if _global_tracer is None:
        _global_tracer = Tracer(enabled=False)
    return _global_tracer


def reset_tracer() -> None:
    """Reset the global tracer."""
    global _global_tracer
    _global_tracer = None


def enable_tracing(enabled: bool = True) -> None:
    """Enable or disable tracing."""
    get_tracer().enabled = enabled
