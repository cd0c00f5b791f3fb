import csv
import json

import pytest

from run import main, parse_args, write_results_csv
from src.tenner.loader import load_puzzles
from src.tenner.parser import parse_puzzle

SOLVED_GRID = [
    [0, 1, 2, 3, 4, 5, 6, 7, 8, 9],
    [3, 4, 5, 6, 7, 8, 9, 0, 1, 2],
    [6, 7, 8, 9, 0, 1, 2, 3, 4, 5],
]
SOLVED_TARGETS = [9, 12, 15, 18, 11, 14, 17, 10, 13, 16]


def _puzzle_record(puzzle_id, blanks=((1, 4),)):
    grid = [
        [None if (r, c) in blanks else value for c, value in enumerate(row)]
        for r, row in enumerate(SOLVED_GRID)
    ]
    return {"id": puzzle_id, "grid": grid, "targets": SOLVED_TARGETS}


def _read_rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_parse_args_defaults():
    args = parse_args(["puzzles.json"])
    assert args.strategy == "forwardchecking-mrv"
    assert args.rows == 3
    assert args.output is None


def test_parse_args_rejects_unknown_strategy():
    with pytest.raises(SystemExit):
        parse_args(["puzzles.json", "--strategy", "hill-climbing"])


def test_main_single_file(tmp_path, capsys):
    path = tmp_path / "puzzle.json"
    path.write_text(json.dumps(_puzzle_record("puzzle1")))
    output = tmp_path / "out.csv"

    main([str(path), "--strategy", "backtracking", "--output", str(output)])

    printed = capsys.readouterr().out
    assert "== puzzle1 ==" in printed
    assert "Consistency checks:" in printed
    rows = _read_rows(output)
    assert rows[0]["id"] == "puzzle1"
    assert rows[0]["solved"] == "True"
    assert json.loads(rows[0]["grid"]) == SOLVED_GRID


def test_main_directory_input(tmp_path):
    for i in range(3):
        (tmp_path / f"puzzle{i}.json").write_text(json.dumps(_puzzle_record(f"puzzle{i}")))
    (tmp_path / "notes.txt").write_text("not a puzzle")
    output = tmp_path / "results.csv"

    main([str(tmp_path), "--output", str(output)])

    assert [r["id"] for r in _read_rows(output)] == ["puzzle0", "puzzle1", "puzzle2"]


def test_main_reports_unsolvable_and_malformed_puzzles(tmp_path, capsys):
    unsolvable = _puzzle_record("clash")
    unsolvable["grid"][0][1] = 0
    path = tmp_path / "puzzles.json"
    path.write_text(json.dumps([unsolvable, {"id": "broken", "grid": [[1, 2], [3]]}]))
    output = tmp_path / "out.csv"

    main([str(path), "--output", str(output)])

    printed = capsys.readouterr().out
    assert "No solution found!" in printed
    assert "ERROR: Failed to solve puzzle broken" in printed
    rows = _read_rows(output)
    assert [r["solved"] for r in rows] == ["False", "False"]
    assert rows[1]["consistency_checks"] == "-1"


def test_main_requires_input_unless_randomizing(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2
    assert "input file or directory is required" in capsys.readouterr().err


def test_main_rejects_missing_path(tmp_path):
    with pytest.raises(ValueError):
        main([str(tmp_path / "missing")])


def test_randomize_writes_reloadable_puzzles(tmp_path):
    output = tmp_path / "generated.csv"
    trace = tmp_path / "trace.csv"
    main([
        "--strategy", "randomize", "--rows", "2", "--count", "2", "--seed", "11",
        "--output", str(output), "--trace", str(trace),
    ])

    records = load_puzzles(str(output))
    assert [r["id"] for r in records] == ["random-0", "random-1"]
    for record in records:
        puzzle = parse_puzzle(record)
        assert puzzle.config.rows == 2
        assert all(target is not None for target in puzzle.targets)
    assert any(r["action_type"] == "seed_attempt" for r in _read_rows(trace))


def test_csv_output(tmp_path):
    output = tmp_path / "out.csv"
    write_results_csv(
        [{
            "id": "p",
            "strategy": "backtracking",
            "solved": True,
            "consistency_checks": 3,
            "time_ms": 0.5,
            "grid": [[1, None]],
            "targets": [1, None],
        }],
        output,
    )
    content = output.read_text()
    assert "id,strategy,solved,consistency_checks,time_ms,grid,targets" in content
    assert '"[[1,null]]"' in content
