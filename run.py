"""CLI entrypoint: load or generate Tenner Grid puzzles, run a solver, and report metrics."""

import argparse
import csv
import json
import random
import time
from pathlib import Path
from typing import Any, Dict, List

from tqdm import tqdm

from solver import solve_puzzle
from src.csp.seeder import random_initial_state
from src.csp.solver_core import STRATEGIES
from src.tenner.config import DEFAULT_ROWS, DEFAULT_STRATEGY, GridConfig
from src.tenner.grid import cell_variables, create_csp
from src.tenner.loader import load_puzzles
from src.tenner.parser import TennerPuzzle, parse_puzzle
from src.tenner.render import render_grid
from src.utils.logging_utils import set_verbosity
from src.utils.trace import enable_tracing, get_tracer, reset_tracer

PUZZLE_SUFFIXES = [".json", ".jsonl", ".parquet", ".csv"]
RESULT_FIELDS = ["id", "strategy", "solved", "consistency_checks", "time_ms", "grid", "targets"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve or generate Tenner Grid puzzles")
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        default=None,
        help="Path to a puzzle file or a directory of puzzles (not used with --strategy randomize)",
    )
    parser.add_argument(
        "--strategy",
        choices=[*STRATEGIES, "randomize"],
        default=DEFAULT_STRATEGY,
        help="Search strategy, or 'randomize' to generate new puzzles",
    )
    parser.add_argument("--rows", type=int, default=DEFAULT_ROWS, help="Grid rows for generated puzzles")
    parser.add_argument("--count", type=int, default=1, help="How many puzzles to generate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for generated puzzles")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Give up generating a puzzle after this many failed attempts (default: retry forever)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write results as CSV")
    parser.add_argument("--trace", type=Path, default=None, help="Optional path to write a solver trace CSV")
    parser.add_argument("--verbose", action="store_true", help="Log solver diagnostics")
    return parser


def parse_args(argv=None):
    return build_parser().parse_args(argv)


def collect_puzzles(input_path: Path) -> List[Dict[str, Any]]:
    if input_path.is_file():
        return load_puzzles(str(input_path))
    if input_path.is_dir():
        puzzles = []
        for file_path in sorted(input_path.iterdir()):
            if file_path.suffix in PUZZLE_SUFFIXES:
                puzzles.extend(load_puzzles(str(file_path)))
        return puzzles
    raise ValueError(f"Input path {input_path} is neither file nor directory")


def report(puzzle: TennerPuzzle, consistency_checks: int, time_ms: float) -> None:
    print(f"== {puzzle.id} ==")
    print(render_grid(puzzle.givens(), puzzle.config))
    if consistency_checks >= 0:
        print(f"Consistency checks: {consistency_checks}")
        print(f"Time taken: {time_ms:.2f}ms")


def solve_all(records: List[Dict[str, Any]], strategy: str) -> List[Dict[str, Any]]:
    results = []
    for record in tqdm(records, desc="Solving", disable=len(records) < 2):
        puzzle_id = str(record.get("id", "unknown"))
        try:
            puzzle = parse_puzzle(record)
            result = solve_puzzle(puzzle, strategy)
        except ValueError as e:
            print(f"ERROR: Failed to solve puzzle {puzzle_id}: {e}")
            results.append({
                "id": puzzle_id,
                "strategy": strategy,
                "solved": False,
                "consistency_checks": -1,
                "time_ms": 0.0,
                "grid": [],
                "targets": [],
            })
            continue

        time_ms = result.elapsed_seconds * 1000
        if result.solved:
            solved = TennerPuzzle.from_assignment(puzzle.id, puzzle.config, result.assignment)
            report(solved, result.consistency_checks, time_ms)
        else:
            solved = puzzle
            print(f"== {puzzle.id} ==")
            print("No solution found!")

        results.append({
            "id": puzzle.id,
            "strategy": strategy,
            "solved": result.solved,
            "consistency_checks": result.consistency_checks,
            "time_ms": round(time_ms, 3),
            "grid": solved.grid,
            "targets": solved.targets,
        })
    return results


def generate_all(config: GridConfig, count: int, seed=None, max_attempts=None) -> List[Dict[str, Any]]:
    rng = random.Random(seed)
    tracer = get_tracer()
    results = []
    for index in tqdm(range(count), desc="Generating", disable=count < 2):
        puzzle_id = f"random-{index}"
        csp = create_csp(config)
        start = time.perf_counter()
        seeded = random_initial_state(
            csp, cell_variables(config), rng=rng, max_attempts=max_attempts, tracer=tracer
        )
        time_ms = (time.perf_counter() - start) * 1000

        if seeded is None:
            print(f"== {puzzle_id} ==")
            print(f"No puzzle found after {max_attempts} attempts!")
            puzzle = TennerPuzzle.from_assignment(puzzle_id, config, {})
        else:
            puzzle = TennerPuzzle.from_assignment(puzzle_id, config, seeded.puzzle)
            report(puzzle, csp.consistency_checks, time_ms)

        results.append({
            "id": puzzle_id,
            "strategy": "randomize",
            "solved": seeded is not None,
            "consistency_checks": csp.consistency_checks,
            "time_ms": round(time_ms, 3),
            "grid": puzzle.grid,
            "targets": puzzle.targets,
        })
    return results


def write_results_csv(results, output_path: Path):
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=RESULT_FIELDS)
        writer.writeheader()

        for r in results:
            row = dict(r)
            row["grid"] = json.dumps(r["grid"], separators=(",", ":"))
            row["targets"] = json.dumps(r["targets"], separators=(",", ":"))
            writer.writerow(row)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbosity(args.verbose)
    reset_tracer()
    if args.trace:
        enable_tracing(True)
    tracer = get_tracer()

    if args.strategy == "randomize":
        results = generate_all(
            GridConfig(rows=args.rows), args.count, seed=args.seed, max_attempts=args.max_attempts
        )
    else:
        if args.input is None:
            parser.error("an input file or directory is required unless --strategy randomize")
        results = solve_all(collect_puzzles(args.input), args.strategy)

    if args.output:
        write_results_csv(results, args.output)
    if args.trace:
        tracer.to_csv(args.trace)
    print(f"{sum(1 for r in results if r['solved'])}/{len(results)} puzzles solved")


if __name__ == "__main__":
    main()
