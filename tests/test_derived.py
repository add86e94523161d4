"""Tests for the derived series builder."""

from __future__ import annotations

import pytest

from bodytrend.tracking.derived import avg_strength, build_derived_series, calories_from_macros
from bodytrend.tracking.models import Entry, LiftSet, Profile


class TestCalories:
    def test_atwater(self) -> None:
        """4/4/9 kcal per gram."""
        assert calories_from_macros(180, 220, 100) == pytest.approx(2500.0)

    def test_missing_macro_counts_as_zero(self) -> None:
        assert calories_from_macros(100, None, None) == pytest.approx(400.0)


class TestAvgStrength:
    def test_all_lifts(self) -> None:
        assert avg_strength(100, 150, 180) == pytest.approx(143.333, abs=1e-3)

    def test_missing_lift_counts_as_zero(self) -> None:
        """Known discrepancy: an untrained lift drags the average down."""
        assert avg_strength(90, None, None) == pytest.approx(30.0)


class TestBuildDerivedSeries:
    """Tests for build_derived_series."""

    def test_sorted_by_date(self) -> None:
        entries = [
            Entry(date_iso="2024-01-03", weight=81.0),
            Entry(date_iso="2024-01-01", weight=80.0),
        ]
        derived = build_derived_series(entries)
        assert [d.date_iso for d in derived] == ["2024-01-01", "2024-01-03"]

    def test_smoothed_weight(self) -> None:
        entries = [
            Entry(date_iso="2024-01-01", weight=80.0),
            Entry(date_iso="2024-01-02", weight=84.0),
        ]
        derived = build_derived_series(entries)
        assert derived[0].smoothed.weight == pytest.approx(80.0)
        assert derived[1].smoothed.weight == pytest.approx(81.0)

    def test_missing_weight_is_gap(self) -> None:
        entries = [
            Entry(date_iso="2024-01-01", weight=80.0),
            Entry(date_iso="2024-01-02", protein=150.0),
            Entry(date_iso="2024-01-03", weight=82.0),
        ]
        derived = build_derived_series(entries)
        assert derived[1].smoothed.weight is None
        assert derived[1].trend_weight is None
        assert derived[2].smoothed.weight == pytest.approx(82.0)

    def test_calories_always_smoothed(self) -> None:
        """Calories default to 0 so the column has no gaps."""
        derived = build_derived_series([Entry(date_iso="2024-01-01", weight=80.0)])
        assert derived[0].calories == 0
        assert derived[0].smoothed.calories == 0

    def test_body_fat_requires_profile(self) -> None:
        entry = Entry(date_iso="2024-01-01", weight=80.0, neck=38.0, waist=85.0)
        assert build_derived_series([entry])[0].bf_pct is None

    def test_body_fat_and_lbm(self, male_profile: Profile) -> None:
        entry = Entry(date_iso="2024-01-01", weight=80.0, neck=38.0, waist=85.0)
        day = build_derived_series([entry], male_profile)[0]
        assert day.bf_pct is not None
        assert day.lbm == pytest.approx(80.0 * (1 - day.bf_pct / 100))

    def test_triple_measurements(self) -> None:
        profile = Profile(sex="male", height_cm=180.0, triple_measurements=True)
        entry = Entry(
            date_iso="2024-01-01",
            weight=80.0,
            neck_readings=[37.0, 38.0, 39.0],
            waist_readings=[84.0, 85.0, 86.0],
        )
        day = build_derived_series([entry], profile)[0]
        assert day.neck == pytest.approx(38.0)
        assert day.waist == pytest.approx(85.0)
        assert day.bf_pct is not None

    def test_strength_columns(self) -> None:
        entry = Entry(
            date_iso="2024-01-01",
            bench=LiftSet(load=100.0, reps=1.0, one_rep_max=100.0),
            squat=LiftSet(load=140.0, reps=1.0, one_rep_max=140.0),
            deadlift=LiftSet(load=180.0, reps=1.0, one_rep_max=180.0),
        )
        day = build_derived_series([entry])[0]
        assert day.avg_strength == pytest.approx(140.0)
        assert day.smoothed.bench == pytest.approx(100.0)
        assert day.smoothed.avg_strength == pytest.approx(140.0)

    def test_untrained_lift_not_smoothed(self) -> None:
        day = build_derived_series([Entry(date_iso="2024-01-01", weight=80.0)])[0]
        assert day.bench is None
        assert day.smoothed.bench is None
        assert day.avg_strength == 0

    def test_empty(self) -> None:
        assert build_derived_series([]) == []

    def test_custom_alpha(self) -> None:
        entries = [
            Entry(date_iso="2024-01-01", weight=80.0),
            Entry(date_iso="2024-01-02", weight=90.0),
        ]
        derived = build_derived_series(entries, alpha=0.5)
        assert derived[1].smoothed.weight == pytest.approx(85.0)
