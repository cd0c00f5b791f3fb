"""Test to verify trace.py works and captures solver steps."""

import csv

from src.utils.trace import Tracer, enable_tracing, get_tracer, reset_tracer


def test_tracer_captures_steps(tmp_path):
    tracer = Tracer(enabled=True)

    tracer.log_assign("0,0", 3, domain_size=10, assignment_size=1)
    tracer.log_forward_check("0,0", domains_pruned=2)
    tracer.log_backtrack("0,1", reason="No valid values left after forward checking")
    tracer.log_seed_attempt(attempt=1, seeded=4, is_valid=True)
    tracer.log_solution_found(assignment_size=40)

    summary = tracer.summary()
    assert summary["total_steps"] == 5
    assert summary["num_assignments"] == 1
    assert summary["num_backtracks"] == 1
    assert summary["action_counts"]["seed_attempt"] == 1
    assert [s.step_number for s in tracer.steps] == [1, 2, 3, 4, 5]

    output_path = tmp_path / "traces" / "trace.csv"
    tracer.to_csv(output_path)
    with open(output_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["action_type"] for r in rows] == [
        "assign", "forward_check", "backtrack", "seed_attempt", "solution_found",
    ]
    assert rows[0]["variable"] == "0,0"
    assert rows[0]["value"] == "3"


def test_disabled_tracer_records_nothing():
    tracer = Tracer(enabled=False)
    tracer.log_assign("0,0", 3, domain_size=10, assignment_size=1)
    tracer.log_solution_found(assignment_size=1)
    assert tracer.steps == []


def test_global_tracer_is_off_until_enabled():
    reset_tracer()
    assert get_tracer().enabled is False
    enable_tracing(True)
    assert get_tracer() is get_tracer()
    assert get_tracer().enabled is True
    reset_tracer()
