"""Helpers for keeping a user's entry list consistent."""

from __future__ import annotations

from typing import Any, Sequence

from bodytrend.profiles.body_calc import one_rep_max_kg
from bodytrend.tracking.models import LIFTS, Entry, to_number


def normalize_entries(entries: Sequence[Entry]) -> list[Entry]:
    """Return entries sorted by date.

    Raises:
        ValueError: If two entries share a date
    """
    ordered = sorted(entries, key=lambda e: e.date_iso)
    for prev, cur in zip(ordered, ordered[1:]):
        if prev.date_iso == cur.date_iso:
            raise ValueError(f"Duplicate entry for {cur.date_iso}")
    return ordered


def upsert_entry(entries: Sequence[Entry], entry: Entry) -> list[Entry]:
    """Insert entry, replacing any existing entry for the same date."""
    kept = [e for e in entries if e.date_iso != entry.date_iso]
    kept.append(entry)
    return sorted(kept, key=lambda e: e.date_iso)


def remove_entry(entries: Sequence[Entry], date_iso: str) -> list[Entry]:
    """Drop the entry for date_iso (no-op if absent)."""
    return [e for e in entries if e.date_iso != date_iso]


def apply_entry_patch(entry: Entry, patch: dict[str, Any]) -> Entry:
    """
    Apply a user edit to an entry.

    Patch keys use the storage record names (``weight``, ``benchLoad``,
    ``benchReps``, ``neck2``...). When a lift's load or reps is part of the
    patch, that lift's stored 1RM is recomputed from the resulting load/reps.

    Args:
        entry: Entry being edited (left unchanged)
        patch: Field -> new value

    Returns:
        The edited Entry
    """
    if "dateIso" in patch and patch["dateIso"] != entry.date_iso:
        raise ValueError("An entry's date cannot be changed by a patch")

    record = entry.to_dict()
    record.update(patch)

    for name in LIFTS:
        load_key, reps_key = f"{name}Load", f"{name}Reps"
        if load_key in patch or reps_key in patch:
            record[name] = one_rep_max_kg(
                to_number(record.get(load_key)), to_number(record.get(reps_key))
            )

    return Entry.from_dict(record)
