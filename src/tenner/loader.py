import json
import os
from typing import Any, Dict, List

import pandas as pd

from src.utils.logging_utils import get_logger
from .parser import PuzzleFormatError

logger = get_logger()


def load_puzzles(file_path: str) -> List[Dict[str, Any]]:
    """
    Reads puzzles from a file. Handles .json, .jsonl, .csv and .parquet formats.
    Returns a list of raw puzzle dictionaries (see `parse_puzzle`).
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    def _normalize_record(record: Dict[str, Any], index: int) -> Dict[str, Any]:
        if not record.get("id"):
            stem = os.path.splitext(os.path.basename(file_path))[0]
            record["id"] = f"{stem}-{index}"
        return record

    def _read_jsonl(f) -> List[Dict[str, Any]]:
        data = []
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("%s:%d is not valid JSON, skipping", file_path, line_number)
                continue
            if isinstance(obj, dict):
                data.append(_normalize_record(obj, len(data)))
        return data

    # Case 1: tabular files, one puzzle per row; grid/targets hold JSON text or arrays
    if file_path.endswith((".parquet", ".csv")):
        try:
            if file_path.endswith(".parquet"):
                df = pd.read_parquet(file_path)
            else:
                df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
        except (OSError, ValueError, ImportError) as e:
            raise PuzzleFormatError(f"Could not read {file_path}: {e}") from e
        records = df.to_dict(orient="records")
        return [_normalize_record(r, i) for i, r in enumerate(records)]

    # Case 2: JSON file (array or object)
    if file_path.endswith(".json"):
        with open(file_path, "r", encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except json.JSONDecodeError:
                # Some sources use ".json" but actually store JSONL; fall back to line-delimited parsing.
                f.seek(0)
                return _read_jsonl(f)
        if isinstance(payload, list):
            return [_normalize_record(p, i) for i, p in enumerate(payload) if isinstance(p, dict)]
        if isinstance(payload, dict):
            return [_normalize_record(payload, 0)]
        return []

    # Case 3: JSONL file
    with open(file_path, "r", encoding="utf-8") as f:
        return _read_jsonl(f)
