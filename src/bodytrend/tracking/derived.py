"""Per-day derived series: calories, strength, body composition and EWMA trends.

Nothing here is stored. The whole series is rebuilt from the raw entries on
every call, so edits to any past entry are reflected everywhere downstream.
"""

from __future__ import annotations

from typing import Optional, Sequence

from bodytrend.profiles.body_calc import body_fat_navy_pct, lean_body_mass_kg, site_average
from bodytrend.tracking.ema import ALPHA_7DAY, ewma
from bodytrend.tracking.models import (
    LIFTS,
    DerivedDay,
    Entry,
    Profile,
    SmoothedValues,
)

# Atwater factors, kcal per gram
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


def calories_from_macros(
    protein: Optional[float],
    carbs: Optional[float],
    fats: Optional[float],
) -> float:
    """Calories from macronutrients. A missing macro counts as 0 g."""
    return (
        (protein or 0) * KCAL_PER_G_PROTEIN
        + (carbs or 0) * KCAL_PER_G_CARBS
        + (fats or 0) * KCAL_PER_G_FAT
    )


def avg_strength(
    bench: Optional[float],
    squat: Optional[float],
    deadlift: Optional[float],
) -> float:
    """Mean of the three 1RMs.

    A lift that was not trained counts as 0, so the average drops on days
    where a lift is missing. Kept for compatibility with stored histories.
    """
    return ((bench or 0) + (squat or 0) + (deadlift or 0)) / 3


def build_derived_series(
    entries: Sequence[Entry],
    profile: Optional[Profile] = None,
    alpha: float = ALPHA_7DAY,
) -> list[DerivedDay]:
    """
    Enrich one user's entries with computed and smoothed metrics.

    Args:
        entries: The user's entries (sorted by date_iso before processing)
        profile: Profile with sex/height/measurement mode; None means unknown,
                 which leaves body fat and LBM as None
        alpha: EWMA smoothing factor (default 0.25, a 7-day window)

    Returns:
        One DerivedDay per entry, in ascending date order
    """
    profile = profile or Profile()
    ordered = sorted(entries, key=lambda e: e.date_iso)

    days: list[DerivedDay] = []
    for entry in ordered:
        neck = site_average(entry.neck, entry.neck_readings, profile.triple_measurements)
        waist = site_average(entry.waist, entry.waist_readings, profile.triple_measurements)
        hip = site_average(entry.hip, entry.hip_readings, profile.triple_measurements)

        bench = entry.one_rep_max("bench")
        squat = entry.one_rep_max("squat")
        deadlift = entry.one_rep_max("deadlift")

        bf_pct = body_fat_navy_pct(profile.sex, profile.height_cm, neck, waist, hip)

        days.append(
            DerivedDay(
                date_iso=entry.date_iso,
                weight=entry.weight,
                protein=entry.protein,
                carbs=entry.carbs,
                fats=entry.fats,
                bench=bench,
                squat=squat,
                deadlift=deadlift,
                neck=neck,
                waist=waist,
                hip=hip,
                calories=calories_from_macros(entry.protein, entry.carbs, entry.fats),
                avg_strength=avg_strength(bench, squat, deadlift),
                bf_pct=bf_pct,
                lbm=lean_body_mass_kg(entry.weight, bf_pct),
            )
        )

    # Each column is smoothed independently over the full history
    columns = ("weight",) + LIFTS + ("calories", "avg_strength")
    smoothed = {
        column: ewma([getattr(day, column) for day in days], alpha)
        for column in columns
    }

    for i, day in enumerate(days):
        day.smoothed = SmoothedValues(**{column: smoothed[column][i] for column in columns})

    return days
