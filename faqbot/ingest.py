"""
FAQ dataset loading.

This module provides functions to:
- Load FAQ records from a JSON or CSV file
- Validate every row into an FAQRecord
- Summarize a dataset for sanity checks
"""

import csv
import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from .models import FAQRecord


def _rows_from_json(file_path: Path) -> List[Any]:
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    # Either a bare list or {"faqs": [...]}
    if isinstance(data, dict):
        data = data.get("faqs")
    if not isinstance(data, list):
        raise ValueError(
            f"Invalid dataset structure in {file_path}. "
            'Expected a list of records or {"faqs": [...]}.'
        )
    return data


def _rows_from_csv(file_path: Path) -> List[Dict[str, Any]]:
    with open(file_path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        missing = {"category", "question", "answer"} - set(reader.fieldnames or [])
        if missing:
            raise ValueError(
                f"CSV dataset {file_path} is missing columns: {', '.join(sorted(missing))}"
            )
        # Blank id cells mean "let storage assign one"
        return [{k: v for k, v in row.items() if not (k == "id" and not v)} for row in reader]


def load_dataset(path: str) -> List[FAQRecord]:
    """
    Load FAQ records from disk.

    Args:
        path: Path to a .json or .csv file

    Returns:
        The validated records, in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is malformed or a row is invalid
    """
    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(
            f"Dataset file not found: {path}. "
            f"Please ensure the file exists at the specified path."
        )

    suffix = file_path.suffix.lower()
    try:
        if suffix == ".csv":
            rows = _rows_from_csv(file_path)
        else:
            rows = _rows_from_json(file_path)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in dataset file: {path}") from e
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise ValueError(f"Error reading dataset file {path}: {e}") from e

    records: List[FAQRecord] = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"Row {i} in {path} is not an object")
        try:
            records.append(FAQRecord.model_validate(row))
        except ValidationError as e:
            raise ValueError(f"Invalid FAQ record at row {i} in {path}: {e}") from e

    return records


def summarize_dataset(records: Iterable[FAQRecord]) -> dict:
    """
    Returns counts useful for sanity checks.

    Returns:
        Dictionary with:
        - total_records
        - total_categories
        - records_per_category: category -> count (sorted by category)
    """
    counts = Counter(r.category for r in records)
    return {
        "total_records": sum(counts.values()),
        "total_categories": len(counts),
        "records_per_category": {k: counts[k] for k in sorted(counts)},
    }
