"""Tests for weekly TDEE and adaptation analysis."""

from __future__ import annotations

import pytest

from bodytrend.tracking.derived import build_derived_series
from bodytrend.tracking.ema import estimate_daily_calorie_balance
from bodytrend.tracking.weekly import (
    classify_loss_rate,
    compute_weekly_analysis,
    summarize_week,
    tdee_from_balance,
)

from conftest import make_days


class TestTdeeFromBalance:
    """Tests for the energy-balance inversion."""

    def test_loss_raises_tdee_above_intake(self) -> None:
        """2000 kcal/day while losing 0.5 kg/week ≈ 2550 kcal TDEE."""
        assert tdee_from_balance(2000, -0.5) == pytest.approx(2550.0)

    def test_gain_lowers_tdee_below_intake(self) -> None:
        assert tdee_from_balance(3000, 0.7) == pytest.approx(2230.0)

    def test_intake_minus_daily_balance(self) -> None:
        balance = estimate_daily_calorie_balance(-0.35)
        assert balance == pytest.approx(-385.0)
        assert tdee_from_balance(2100, -0.35) == pytest.approx(2100 - balance)


class TestClassifyLossRate:
    def test_bands(self) -> None:
        assert classify_loss_rate(0.3) == "Conservative"
        assert classify_loss_rate(0.5) == "Optimal"
        assert classify_loss_rate(1.0) == "Optimal"
        assert classify_loss_rate(1.2) == "Aggressive"


class TestSummarizeWeek:
    """Tests for a single 7-day block."""

    def test_tdee_from_smoothed_weight_change(self) -> None:
        weights = [80.0, 79.9, 79.8, 79.7, 79.6, 79.55, 79.5]
        days = make_days(weights, calories=2000.0)
        week = summarize_week(days, 1)
        assert week.weight_change_kg == pytest.approx(-0.5)
        assert week.tdee == pytest.approx(2550.0)

    def test_missing_end_weight(self) -> None:
        days = make_days([80.0] * 6 + [None])
        week = summarize_week(days, 1)
        assert week.weight_change_kg is None
        assert week.tdee is None

    def test_loss_rate_uses_last_known_lbm(self) -> None:
        days = make_days([80.0, 80.0, 80.0, 80.0, 80.0, 80.0, 79.5])
        days[2].lbm = 64.0
        week = summarize_week(days, 1)
        assert week.lbm == pytest.approx(64.0)
        assert week.loss_rate_pct == pytest.approx(0.78125)
        assert week.loss_rate_status == "Optimal"

    def test_no_lbm_no_loss_rate(self) -> None:
        week = summarize_week(make_days([80.0] * 7), 1)
        assert week.lbm is None
        assert week.loss_rate_pct is None
        assert week.loss_rate_status is None


class TestComputeWeeklyAnalysis:
    """Tests for compute_weekly_analysis."""

    def test_fewer_than_14_days_empty(self) -> None:
        analysis = compute_weekly_analysis(make_days([80.0] * 13))
        assert analysis.weeks == []
        assert analysis.baseline_tdee is None
        assert analysis.baseline_strength is None
        assert analysis.baseline_weekly_loss is None
        assert not analysis.has_baseline

    def test_constant_intake_and_weight(self, constant_entries) -> None:
        """14 days at 90 kg / 2500 kcal: TDEE 2500, no adaptation."""
        analysis = compute_weekly_analysis(build_derived_series(constant_entries))
        assert len(analysis.weeks) == 2
        assert analysis.weeks[0].tdee == pytest.approx(2500.0)
        assert analysis.baseline_tdee == pytest.approx(2500.0)
        assert analysis.weeks[1].adaptation_pct == pytest.approx(0.0)
        assert analysis.weeks[1].tdee_change_from_baseline == pytest.approx(0.0)

    def test_trailing_partial_week_dropped(self) -> None:
        analysis = compute_weekly_analysis(make_days([80.0] * 20))
        assert [w.week_index for w in analysis.weeks] == [1, 2]

    def test_adaptation_pct(self) -> None:
        """Baseline 2500, later week 2250: adaptation -10%."""
        days = make_days([80.0] * 14, calories=2500.0) + make_days(
            [80.0] * 7, start="2024-01-15", calories=2250.0
        )
        analysis = compute_weekly_analysis(days)
        assert analysis.baseline_tdee == pytest.approx(2500.0)
        assert analysis.weeks[2].tdee == pytest.approx(2250.0)
        assert analysis.weeks[2].adaptation_pct == pytest.approx(-10.0)
        assert analysis.weeks[2].tdee_change_from_baseline == pytest.approx(-250.0)

    def test_baseline_weekly_loss(self) -> None:
        weights = [80.0 - 0.1 * i for i in range(7)] + [79.4 - 0.05 * i for i in range(7)]
        analysis = compute_weekly_analysis(make_days(weights))
        # Week 1 loses 0.6 kg, week 2 loses 0.3 kg
        assert analysis.baseline_weekly_loss == pytest.approx(0.45)

    def test_baseline_strength(self) -> None:
        days = make_days([80.0] * 7, strength=100.0) + make_days(
            [80.0] * 7, start="2024-01-08", strength=110.0
        )
        analysis = compute_weekly_analysis(days)
        assert analysis.baseline_strength == pytest.approx(105.0)

    def test_to_dict(self) -> None:
        data = compute_weekly_analysis(make_days([80.0] * 14)).to_dict()
        assert len(data["weeks"]) == 2
        assert data["baseline_tdee"] == pytest.approx(2500.0)
