"""Load entries, profiles and cycles from CSV, JSON or YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pandas as pd
import yaml

from bodytrend.tracking.entries import normalize_entries
from bodytrend.tracking.models import Cycle, Entry, Profile

# Export-style CSV header -> stored record key
CSV_COLUMN_MAP = {
    "dateIso": "dateIso",
    "weightKg": "weight",
    "proteinG": "protein",
    "carbsG": "carbs",
    "fatsG": "fats",
    "benchLoadKg": "benchLoad",
    "benchReps": "benchReps",
    "bench1rmKg": "bench",
    "squatLoadKg": "squatLoad",
    "squatReps": "squatReps",
    "squat1rmKg": "squat",
    "deadliftLoadKg": "deadliftLoad",
    "deadliftReps": "deadliftReps",
    "deadlift1rmKg": "deadlift",
    "neck": "neck",
    "waist": "waist",
    "hip": "hip",
}
for _site in ("neck", "waist", "hip"):
    for _i in (1, 2, 3):
        CSV_COLUMN_MAP[f"{_site}{_i}"] = f"{_site}{_i}"

# Stored record keys are accepted as CSV headers too
STORED_KEYS = set(CSV_COLUMN_MAP.values())

REQUIRED_COLUMNS = ["dateIso"]

STRUCTURED_SUFFIXES = (".json", ".yaml", ".yml")


def _clean(value: Any) -> Any:
    """Convert pandas missing values to None."""
    if pd.isna(value):
        return None
    return value


def read_document(path: Path) -> Any:
    """Read a JSON or YAML document."""
    with open(path) as f:
        return yaml.safe_load(f)


def _records_from(document: Any, key: str) -> list[dict[str, Any]]:
    if document is None:
        return []
    if isinstance(document, dict):
        document = document.get(key, [])
    if not isinstance(document, list):
        raise ValueError(f"Expected a list of {key}, got {type(document).__name__}")
    for item in document:
        if not isinstance(item, dict):
            raise ValueError(f"Each item in {key} must be a mapping")
    return document


def load_entries_csv(csv_path: Path) -> list[Entry]:
    """Load entries from a CSV file.

    CSV format (export header; unknown columns are ignored):
        dateIso,weightKg,proteinG,carbsG,fatsG,benchLoadKg,benchReps,bench1rmKg,...
        2024-01-01,90.2,180,250,70,80,5,,...

    Args:
        csv_path: Path to the CSV file

    Returns:
        Entries sorted by date

    Raises:
        ValueError: If required columns are missing or a date repeats
    """
    df = pd.read_csv(csv_path)

    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(
            f"Missing required columns: {missing}. "
            f"Required columns are: {REQUIRED_COLUMNS}"
        )

    entries: list[Entry] = []
    for _, row in df.iterrows():
        date_iso = _clean(row["dateIso"])
        if date_iso is None:
            continue

        record: dict[str, Any] = {}
        for column in df.columns:
            key = CSV_COLUMN_MAP.get(column)
            if key is None and column in STORED_KEYS:
                key = column
            if key is None:
                continue
            record[key] = _clean(row[column])
        record["dateIso"] = str(date_iso).strip()
        entries.append(Entry.from_dict(record))

    return normalize_entries(entries)


def load_entries(path: Path) -> list[Entry]:
    """
    Load entries from CSV, JSON or YAML.

    JSON/YAML documents hold a list of stored records, either at the top
    level or under an ``entries`` key.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On an unsupported format or invalid records
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Entries file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        return load_entries_csv(path)
    if suffix in STRUCTURED_SUFFIXES:
        records = _records_from(read_document(path), "entries")
        return normalize_entries([Entry.from_dict(r) for r in records])
    raise ValueError(f"Unsupported entries format: {path.suffix or '(none)'}")


def load_profile(path: Optional[Path]) -> Profile:
    """Load a profile document; None gives an empty profile."""
    if path is None:
        return Profile()
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Profile file not found: {path}")
    document = read_document(path)
    if document is not None and not isinstance(document, dict):
        raise ValueError("Profile document must be a mapping")
    return Profile.from_dict(document)


def load_cycles(path: Optional[Path]) -> list[Cycle]:
    """Load cycles from a list document (or one under a ``cycles`` key)."""
    if path is None:
        return []
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Cycles file not found: {path}")
    records = _records_from(read_document(path), "cycles")
    return [Cycle.from_dict(r) for r in records]
