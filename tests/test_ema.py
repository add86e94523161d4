"""Tests for EWMA smoothing with missing day handling."""

from __future__ import annotations

import math

import pytest

from bodytrend.tracking.ema import (
    ALPHA_7DAY,
    alpha_for_window,
    estimate_daily_calorie_balance,
    ewma,
    is_present,
    update_trend,
)


class TestAlphaForWindow:
    """Tests for alpha_for_window function."""

    def test_seven_day_window(self) -> None:
        """A 7-day window gives alpha = 0.25."""
        assert alpha_for_window(7) == pytest.approx(0.25)
        assert ALPHA_7DAY == pytest.approx(0.25)

    def test_one_day_window_is_raw(self) -> None:
        """A 1-day window tracks the raw series."""
        assert alpha_for_window(1) == pytest.approx(1.0)

    def test_non_positive_treated_as_one(self) -> None:
        """Zero or negative windows are treated as 1 day."""
        assert alpha_for_window(0) == pytest.approx(1.0)
        assert alpha_for_window(-3) == pytest.approx(1.0)


class TestUpdateTrend:
    """Tests for update_trend function."""

    def test_recurrence(self) -> None:
        """S_n = α·X_n + (1-α)·S_{n-1}."""
        assert update_trend(90.0, 88.0) == pytest.approx(89.5)

    def test_custom_alpha(self) -> None:
        """Alpha controls how far the trend moves toward the sample."""
        assert update_trend(100.0, 0.0, alpha=0.1) == pytest.approx(90.0)


class TestIsPresent:
    """Tests for the missing-sample check."""

    def test_numbers_present(self) -> None:
        assert is_present(0)
        assert is_present(82.5)

    def test_missing_values(self) -> None:
        """None, NaN, infinities and bools are not samples."""
        assert not is_present(None)
        assert not is_present(math.nan)
        assert not is_present(math.inf)
        assert not is_present(True)


class TestEwma:
    """Tests for the column smoother."""

    def test_first_sample_seeds(self) -> None:
        """The first present value is returned unchanged."""
        assert ewma([80.0]) == [80.0]

    def test_recurrence_over_series(self) -> None:
        """Each step applies alpha = 0.25."""
        result = ewma([80.0, 84.0, 84.0])
        assert result[0] == pytest.approx(80.0)
        assert result[1] == pytest.approx(81.0)
        assert result[2] == pytest.approx(81.75)

    def test_output_length_matches_input(self) -> None:
        values = [1.0, None, 2.0, None, None, 3.0]
        assert len(ewma(values)) == len(values)

    def test_missing_sample_yields_none(self) -> None:
        """A missing day has no smoothed value."""
        assert ewma([80.0, None, 82.0])[1] is None

    def test_gap_reseeds_average(self) -> None:
        """After a gap the next sample starts a fresh average."""
        result = ewma([80.0, 84.0, None, 82.0])
        assert result == [80.0, pytest.approx(81.0), None, 82.0]

    def test_nan_treated_as_missing(self) -> None:
        result = ewma([80.0, math.nan, 90.0])
        assert result[1] is None
        assert result[2] == pytest.approx(90.0)

    def test_leading_gap(self) -> None:
        """Leading missing values stay None until the first sample."""
        assert ewma([None, None, 70.0, 74.0]) == [None, None, 70.0, pytest.approx(71.0)]

    def test_empty(self) -> None:
        assert ewma([]) == []

    def test_constant_series_stays_constant(self) -> None:
        assert all(v == pytest.approx(2500.0) for v in ewma([2500.0] * 10))


class TestEstimateDailyCalorieBalance:
    """Tests for estimate_daily_calorie_balance."""

    def test_half_kg_loss(self) -> None:
        """-0.5 kg/week ≈ -550 kcal/day."""
        assert estimate_daily_calorie_balance(-0.5) == pytest.approx(-550.0)

    def test_gain_is_surplus(self) -> None:
        assert estimate_daily_calorie_balance(0.25) > 0
