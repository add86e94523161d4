"""Cutting / bulking / maintaining cycles.

A user has at most one active cycle (``end_date_iso is None``). Starting a new
cycle closes the active one on the day before the new start, but never before
the active cycle's own start date.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional, Sequence

from bodytrend.tracking.models import Cycle, normalize_cycle_type

# Cycle types whose target weight gives the goal direction
TARGETED_CYCLE_TYPES = ("cutting", "bulking")


def add_days_iso(date_iso: str, days: int) -> str:
    """Shift an ISO date (YYYY-MM-DD) by a number of days."""
    return (date.fromisoformat(date_iso) + timedelta(days=days)).isoformat()


def days_between(later_iso: str, earlier_iso: str) -> int:
    """Whole calendar days from earlier_iso to later_iso (positive if later)."""
    return (date.fromisoformat(later_iso) - date.fromisoformat(earlier_iso)).days


def active_cycle(cycles: Sequence[Cycle]) -> Optional[Cycle]:
    """Return the active cycle, the latest-starting one if several are open."""
    active = [c for c in cycles if c.is_active]
    if not active:
        return None
    return max(active, key=lambda c: c.start_date_iso)


def start_cycle(
    cycles: Sequence[Cycle],
    cycle_type: str,
    start_date_iso: str,
    target_weight_kg: Optional[float] = None,
) -> list[Cycle]:
    """
    Start a new cycle, closing the currently active one.

    Args:
        cycles: Existing cycles for the user
        cycle_type: 'cutting', 'bulking' or 'maintaining' (or cut/bulk/maintain)
        start_date_iso: First day of the new cycle
        target_weight_kg: Goal weight, required for cutting and bulking

    Returns:
        New list of cycles with the previous active cycle closed and the new
        active cycle appended

    Raises:
        ValueError: On an unknown type, missing start date or missing target
    """
    cycle_type = normalize_cycle_type(cycle_type)
    if not start_date_iso:
        raise ValueError("start_date_iso is required")
    date.fromisoformat(start_date_iso)
    if cycle_type in TARGETED_CYCLE_TYPES and target_weight_kg is None:
        raise ValueError(f"target_weight_kg is required for a {cycle_type} cycle")

    current = active_cycle(cycles)
    updated: list[Cycle] = []
    for cycle in cycles:
        if current is not None and cycle is current:
            end_iso = add_days_iso(start_date_iso, -1)
            if end_iso < cycle.start_date_iso:
                end_iso = cycle.start_date_iso
            updated.append(replace(cycle, end_date_iso=end_iso))
        else:
            updated.append(cycle)

    updated.append(
        Cycle(
            cycle_type=cycle_type,
            start_date_iso=start_date_iso,
            end_date_iso=None,
            target_weight_kg=target_weight_kg,
            cycle_id=uuid.uuid4().hex,
        )
    )
    return updated


def end_cycle(cycles: Sequence[Cycle], cycle_id: str, end_date_iso: str) -> list[Cycle]:
    """
    Close a cycle on end_date_iso.

    Raises:
        ValueError: If no cycle has that id or the end date is missing
    """
    if not cycle_id:
        raise ValueError("cycle_id is required")
    if not end_date_iso:
        raise ValueError("end_date_iso is required")

    found = False
    updated: list[Cycle] = []
    for cycle in cycles:
        if cycle.cycle_id == cycle_id:
            found = True
            updated.append(replace(cycle, end_date_iso=end_date_iso))
        else:
            updated.append(cycle)

    if not found:
        raise ValueError(f"No cycle with id '{cycle_id}'")
    return updated
