"""Weekly energy-balance analysis.

The derived series is cut into consecutive 7-day blocks. For each block the
TDEE is inferred by inverting the energy balance:

    TDEE = average intake - (smoothed weight change × 7700) / 7

Losing weight means intake was below expenditure, so the inferred TDEE sits
above the average intake. The first two weeks form the baseline; every later
week's deviation from it is reported as metabolic adaptation.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from bodytrend.tracking.ema import estimate_daily_calorie_balance
from bodytrend.tracking.models import DerivedDay, WeeklyAnalysis, WeekRecord

# Energy content of one kg of body weight
KCAL_PER_KG = 7700

DAYS_PER_WEEK = 7
MIN_DAYS_FOR_ANALYSIS = 14
BASELINE_WEEKS = 2

# Weekly loss as % of lean body mass
CONSERVATIVE_BELOW_PCT = 0.5
OPTIMAL_MAX_PCT = 1.0


def _is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def mean_finite(values: Sequence[Optional[float]]) -> Optional[float]:
    """Arithmetic mean of the finite values, or None if there are none."""
    nums = [v for v in values if _is_finite(v)]
    if not nums:
        return None
    return sum(nums) / len(nums)  # type: ignore[arg-type]


def tdee_from_balance(avg_calories: float, weight_change_kg: float) -> float:
    """Infer TDEE from a week's average intake and smoothed weight change."""
    return avg_calories - estimate_daily_calorie_balance(weight_change_kg, KCAL_PER_KG)


def classify_loss_rate(loss_rate_pct: float) -> str:
    """Classify weekly loss as % of LBM."""
    if loss_rate_pct < CONSERVATIVE_BELOW_PCT:
        return "Conservative"
    if loss_rate_pct <= OPTIMAL_MAX_PCT:
        return "Optimal"
    return "Aggressive"


def last_known_lbm(derived: Sequence[DerivedDay], index: int) -> Optional[float]:
    """Most recent finite LBM at or before index."""
    for i in range(index, -1, -1):
        if _is_finite(derived[i].lbm):
            return derived[i].lbm
    return None


def summarize_week(derived: Sequence[DerivedDay], week_index: int) -> WeekRecord:
    """Build the WeekRecord for the 1-based week_index."""
    start = (week_index - 1) * DAYS_PER_WEEK
    end = start + DAYS_PER_WEEK - 1
    block = derived[start:end + 1]

    avg_calories = mean_finite([d.calories for d in block])
    avg_strength_smoothed = mean_finite([d.smoothed.avg_strength for d in block])

    start_weight = block[0].smoothed.weight
    end_weight = block[-1].smoothed.weight
    weight_change: Optional[float] = None
    if _is_finite(start_weight) and _is_finite(end_weight):
        weight_change = end_weight - start_weight  # type: ignore[operator]

    tdee: Optional[float] = None
    if avg_calories is not None and weight_change is not None:
        tdee = tdee_from_balance(avg_calories, weight_change)

    lbm = last_known_lbm(derived, end)
    loss_rate_pct: Optional[float] = None
    loss_rate_status: Optional[str] = None
    if lbm is not None and lbm > 0 and weight_change is not None:
        weekly_loss = max(0.0, -weight_change)
        loss_rate_pct = (weekly_loss / lbm) * 100
        loss_rate_status = classify_loss_rate(loss_rate_pct)

    return WeekRecord(
        week_index=week_index,
        avg_calories=avg_calories,
        weight_change_kg=weight_change,
        tdee=tdee,
        avg_strength_smoothed=avg_strength_smoothed,
        lbm=lbm,
        loss_rate_pct=loss_rate_pct,
        loss_rate_status=loss_rate_status,
    )


def compute_weekly_analysis(derived: Sequence[DerivedDay]) -> WeeklyAnalysis:
    """
    Partition the derived series into full weeks and infer TDEE/adaptation.

    Args:
        derived: Derived series in ascending date order

    Returns:
        WeeklyAnalysis. With fewer than 14 days the weeks list is empty and
        every baseline is None (an "insufficient data" state, not an error).
        A trailing partial week is dropped.
    """
    if not derived or len(derived) < MIN_DAYS_FOR_ANALYSIS:
        return WeeklyAnalysis()

    full_weeks = len(derived) // DAYS_PER_WEEK
    weeks = [summarize_week(derived, w) for w in range(1, full_weeks + 1)]

    baseline_block = weeks[:BASELINE_WEEKS]
    baseline_tdee = mean_finite([w.tdee for w in baseline_block])
    baseline_strength = mean_finite([w.avg_strength_smoothed for w in baseline_block])
    baseline_weekly_loss = mean_finite(
        [
            max(0.0, -w.weight_change_kg) if w.weight_change_kg is not None else None
            for w in baseline_block
        ]
    )

    if baseline_tdee is not None and baseline_tdee != 0:
        for week in weeks:
            if not _is_finite(week.tdee):
                continue
            week.tdee_change_from_baseline = week.tdee - baseline_tdee  # type: ignore[operator]
            week.adaptation_pct = (week.tdee_change_from_baseline / baseline_tdee) * 100

    return WeeklyAnalysis(
        weeks=weeks,
        baseline_tdee=baseline_tdee,
        baseline_strength=baseline_strength,
        baseline_weekly_loss=baseline_weekly_loss,
    )
