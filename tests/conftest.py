"""Pytest fixtures for bodytrend tests."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Sequence

import pytest

from bodytrend.rules.config import merge_rule_config
from bodytrend.tracking.models import DerivedDay, Entry, Profile, SmoothedValues


def iso_day(start: str, offset: int) -> str:
    """ISO date `offset` days after `start`."""
    return (date.fromisoformat(start) + timedelta(days=offset)).isoformat()


def make_day(
    date_iso: str,
    weight: Optional[float] = 80.0,
    calories: float = 2500.0,
    protein: Optional[float] = 160.0,
    strength: Optional[float] = 100.0,
    bf_pct: Optional[float] = None,
    lbm: Optional[float] = None,
) -> DerivedDay:
    """A derived day whose smoothed values equal the raw values."""
    return DerivedDay(
        date_iso=date_iso,
        weight=weight,
        protein=protein,
        carbs=250.0,
        fats=70.0,
        bench=strength,
        squat=strength,
        deadlift=strength,
        neck=None,
        waist=None,
        hip=None,
        calories=calories,
        avg_strength=strength if strength is not None else 0.0,
        bf_pct=bf_pct,
        lbm=lbm,
        smoothed=SmoothedValues(
            weight=weight,
            bench=strength,
            squat=strength,
            deadlift=strength,
            calories=calories,
            avg_strength=strength,
        ),
    )


def make_days(
    weights: Sequence[Optional[float]],
    start: str = "2024-01-01",
    **kwargs,
) -> list[DerivedDay]:
    """One derived day per weight, on consecutive dates."""
    return [make_day(iso_day(start, i), weight=w, **kwargs) for i, w in enumerate(weights)]


@pytest.fixture
def flat_days() -> list[DerivedDay]:
    """28 days at a steady 80 kg, 2500 kcal, 160 g protein, strength 100."""
    return make_days([80.0] * 28)


@pytest.fixture
def rule_config() -> dict:
    """A fresh copy of the default rule config."""
    return merge_rule_config(None)


@pytest.fixture
def male_profile() -> Profile:
    """Male, 180 cm, single measurements."""
    return Profile(sex="male", height_cm=180.0)


@pytest.fixture
def constant_entries() -> list[Entry]:
    """14 days at 90 kg eating 2500 kcal (180 g protein, 220 g carbs, 100 g fat)."""
    return [
        Entry(
            date_iso=iso_day("2024-01-01", i),
            weight=90.0,
            protein=180.0,
            carbs=220.0,
            fats=100.0,
        )
        for i in range(14)
    ]
