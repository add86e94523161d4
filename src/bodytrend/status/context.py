"""Status context: trend classification and the values rules read.

The context is a plain dict keyed the way rule documents refer to it
(``weightTrend.key``, ``proteinPerKg``, ``t.adaptation.crashPct``), so admin
edited rules and templates can address any value by dotted path.

Trends compare two calendar windows ending at the last logged day: ``cur``
covers the most recent ``range_days`` days and ``prev`` the ``range_days``
before that.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Optional, Sequence

from bodytrend.tracking.cycles import TARGETED_CYCLE_TYPES, days_between
from bodytrend.tracking.models import Cycle, DerivedDay, WeeklyAnalysis
from bodytrend.tracking.weekly import KCAL_PER_KG, mean_finite

DEFAULT_RANGE_DAYS = 7
DEFAULT_MIN_DAYS_FOR_ASSESSMENT = 14
COMPLETENESS_WINDOW_DAYS = 7
AT_GOAL_KG = 1.0
TARGET_PROTEIN_G_PER_KG = 2.0


@dataclass(frozen=True)
class Trend:
    """A classified change between the two windows."""

    key: str
    sym: str
    label: str
    value: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


UNKNOWN_TREND = Trend("unknown", "—", "Unknown")


def _finite(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _threshold(thresholds: Optional[dict[str, Any]], section: str, key: str, default: float) -> float:
    group = (thresholds or {}).get(section)
    if not isinstance(group, dict):
        return default
    value = group.get(key)
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def classify_weight(delta_kg_per_week: Optional[float], thresholds: Optional[dict[str, Any]] = None) -> Trend:
    """Classify a weekly weight change (kg/week)."""
    if not _finite(delta_kg_per_week):
        return UNKNOWN_TREND
    stable = _threshold(thresholds, "weight", "stableKgPerWeek", 0.2)
    rapid = _threshold(thresholds, "weight", "rapidKgPerWeek", 1.0)
    d = delta_kg_per_week
    if abs(d) <= stable:
        return Trend("stable", "→", "Stable", d)
    if d < -rapid:
        return Trend("rapid_loss", "↓↓", "Rapid loss", d)
    if d < -stable:
        return Trend("losing", "↓", "Losing", d)
    if d > rapid:
        return Trend("rapid_gain", "↑↑", "Rapid gain", d)
    return Trend("gaining", "↑", "Gaining", d)


def classify_bf(delta_pct_points: Optional[float], thresholds: Optional[dict[str, Any]] = None) -> Trend:
    """Classify a body-fat change in percentage points."""
    if not _finite(delta_pct_points):
        return UNKNOWN_TREND
    stable = _threshold(thresholds, "bf", "stablePctPoints", 0.5)
    d = delta_pct_points
    if abs(d) <= stable:
        return Trend("stable", "→", "Stable", d)
    if d < -stable:
        return Trend("decreasing", "↓", "Decreasing", d)
    return Trend("increasing", "↑", "Increasing", d)


def classify_strength(pct_change: Optional[float], thresholds: Optional[dict[str, Any]] = None) -> Trend:
    """Classify a % change of smoothed average strength."""
    if not _finite(pct_change):
        return UNKNOWN_TREND
    stable = _threshold(thresholds, "strength", "stablePct", 2)
    up = _threshold(thresholds, "strength", "increasePct", 2)
    down = _threshold(thresholds, "strength", "declinePct", -2)
    rapid_down = _threshold(thresholds, "strength", "rapidDeclinePct", -5)
    p = pct_change
    if abs(p) <= stable:
        return Trend("stable", "→", "Stable", p)
    if p >= up:
        return Trend("increasing", "↑", "Increasing", p)
    if p <= rapid_down:
        return Trend("rapid_decline", "↓↓", "Rapid decline", p)
    if p <= down:
        return Trend("declining", "↓", "Declining", p)
    return Trend("stable", "→", "Stable", p)


def window(derived: Sequence[DerivedDay], first: int, last: int) -> list[DerivedDay]:
    """Days whose distance from the last logged day lies in [first, last]."""
    if not derived:
        return []
    end_iso = derived[-1].date_iso
    return [d for d in derived if first <= days_between(end_iso, d.date_iso) <= last]


def is_complete_day(day: DerivedDay) -> bool:
    """Weight and all three macros logged."""
    return all(_finite(v) for v in (day.weight, day.protein, day.carbs, day.fats))


def compute_goal_progress(
    derived: Sequence[DerivedDay],
    cycle: Optional[Cycle],
    current_weight: Optional[float],
) -> Optional[dict[str, float]]:
    """
    Progress from the cycle's starting weight toward its target.

    The start weight is the trend weight of the first day on or after the
    cycle start. Progress is clamped to [0, total needed] and pct to [0, 100].

    Returns:
        {startWeight, totalNeeded, progress, pct}, or None without a targeted
        cycle or usable weights
    """
    if cycle is None or cycle.cycle_type not in TARGETED_CYCLE_TYPES:
        return None
    target = cycle.target_weight_kg
    if not _finite(target) or not _finite(current_weight):
        return None

    start_day = next((d for d in derived if d.date_iso >= cycle.start_date_iso), None)
    start_weight = start_day.trend_weight if start_day is not None else None
    if not _finite(start_weight):
        return None

    total_needed = abs(start_weight - target)
    if cycle.cycle_type == "cutting":
        moved = start_weight - current_weight
    else:
        moved = current_weight - start_weight
    progress = max(0.0, min(total_needed or 1.0, moved))
    pct = (progress / total_needed) * 100 if total_needed > 0 else 0.0
    return {
        "startWeight": start_weight,
        "totalNeeded": total_needed,
        "progress": progress,
        "pct": max(0.0, min(100.0, pct)),
    }


def round_half_up(value: Optional[float]) -> int:
    """Round to the nearest integer with halves going up (None counts as 0)."""
    return int(math.floor((value or 0) + 0.5))


def template_helpers(ctx: dict[str, Any]) -> dict[str, Any]:
    """Rounded calorie figures that message templates refer to."""
    cal = round_half_up(ctx.get("currentAvgCal"))
    prot = round_half_up(ctx.get("currentProtein"))
    tdee = round_half_up(ctx.get("calculatedTdee"))
    base = round_half_up(ctx.get("baselineTdee"))
    helpers: dict[str, Any] = {"cal": cal, "prot": prot, "tdee": tdee, "base": base}
    for step in (200, 250, 300, 400):
        helpers[f"calMinus{step}"] = max(0, cal - step)
        helpers[f"calPlus{step}"] = cal + step
    helpers["tdeeMinus500"] = max(0, tdee - 500)
    helpers["tdeePlus300"] = tdee + 300
    helpers["tdeePlus400"] = tdee + 400
    return helpers


def build_status_context(
    derived: Sequence[DerivedDay],
    weekly: Optional[WeeklyAnalysis],
    cycle: Optional[Cycle],
    thresholds: Optional[dict[str, Any]] = None,
    range_days: int = DEFAULT_RANGE_DAYS,
) -> dict[str, Any]:
    """
    Compute every value the status rules may read.

    Args:
        derived: Derived series in ascending date order (non-empty)
        weekly: Weekly analysis of the same series
        cycle: The active cycle, if any
        thresholds: ``thresholds`` section of the rule config (exposed as ``t``)
        range_days: Length of each comparison window

    Returns:
        Context dict for the rule engine

    Raises:
        ValueError: If derived is empty or range_days < 1
    """
    if not derived:
        raise ValueError("derived series is empty")
    if range_days < 1:
        raise ValueError(f"range_days must be at least 1, got {range_days}")
    thresholds = thresholds or {}

    cur = window(derived, 0, range_days - 1)
    prev = window(derived, range_days, range_days * 2 - 1)

    # Trends
    w_cur = mean_finite([d.trend_weight for d in cur])
    w_prev = mean_finite([d.trend_weight for d in prev])
    w_delta = None
    if w_cur is not None and w_prev is not None:
        w_delta = (w_cur - w_prev) * (7 / range_days)
    weight_trend = classify_weight(w_delta, thresholds)

    bf_cur = mean_finite([d.bf_pct for d in cur])
    bf_prev = mean_finite([d.bf_pct for d in prev])
    bf_delta = bf_cur - bf_prev if bf_cur is not None and bf_prev is not None else None
    bf_trend = classify_bf(bf_delta, thresholds)

    s_cur = mean_finite([d.smoothed.avg_strength for d in cur])
    s_prev = mean_finite([d.smoothed.avg_strength for d in prev])
    s_pct = None
    if s_cur is not None and s_prev is not None and s_prev != 0:
        s_pct = (s_cur - s_prev) / s_prev * 100
    strength_trend = classify_strength(s_pct, thresholds)

    # Intake and weight
    current_avg_cal = mean_finite([d.calories for d in cur])
    current_protein = mean_finite([d.protein for d in cur])
    current_weight = derived[-1].trend_weight

    weekly_weight_change = None
    if len(cur) >= 2:
        start_w = cur[0].trend_weight
        end_w = cur[-1].trend_weight
        if _finite(start_w) and _finite(end_w):
            days = max(1, len(cur) - 1)
            weekly_weight_change = (end_w - start_w) * (7 / days)
    weekly_weight_loss = (
        max(0.0, -weekly_weight_change) if weekly_weight_change is not None else None
    )

    calculated_tdee = None
    if current_avg_cal is not None and weekly_weight_change is not None:
        calculated_tdee = current_avg_cal + (-weekly_weight_change * KCAL_PER_KG) / 7

    # Weekly analysis
    baseline_tdee = weekly.baseline_tdee if weekly is not None else None
    adaptation_pct = None
    if calculated_tdee is not None and _finite(baseline_tdee) and baseline_tdee != 0:
        adaptation_pct = (calculated_tdee - baseline_tdee) / baseline_tdee * 100

    weeks = weekly.weeks if weekly is not None else []
    prev_week_tdee = weeks[-2].tdee if len(weeks) >= 2 else None
    water_discrepancy_kcal = None
    expected_weekly_change_kg = None
    if _finite(prev_week_tdee) and current_avg_cal is not None and weekly_weight_change is not None:
        predicted_energy = (prev_week_tdee - current_avg_cal) * 7
        actual_energy = -weekly_weight_change * KCAL_PER_KG
        water_discrepancy_kcal = abs(actual_energy - predicted_energy)
        expected_weekly_change_kg = (current_avg_cal - prev_week_tdee) * 7 / KCAL_PER_KG

    baseline_strength = weekly.baseline_strength if weekly is not None else None
    strength_decline_pct = None
    if _finite(baseline_strength) and baseline_strength != 0 and s_cur is not None:
        strength_decline_pct = (baseline_strength - s_cur) / baseline_strength * 100

    lbm = next((d.lbm for d in reversed(derived) if _finite(d.lbm)), None)
    loss_rate = None
    if lbm is not None and lbm > 0 and weekly_weight_loss is not None:
        loss_rate = weekly_weight_loss / lbm * 100

    protein_per_kg = None
    if current_protein is not None and _finite(current_weight) and current_weight > 0:
        protein_per_kg = current_protein / current_weight
    target_protein_2g = (
        current_weight * TARGET_PROTEIN_G_PER_KG if _finite(current_weight) else None
    )

    # Logging completeness
    min_days = thresholds.get("minDaysForAssessment", DEFAULT_MIN_DAYS_FOR_ASSESSMENT)
    if not _finite(min_days):
        min_days = DEFAULT_MIN_DAYS_FOR_ASSESSMENT
    last_week = window(derived, 0, COMPLETENESS_WINDOW_DAYS - 1)
    days_logged = sum(1 for d in last_week if is_complete_day(d))
    total_complete = sum(1 for d in derived if is_complete_day(d))
    days_remaining = max(0, int(min_days) - total_complete)

    has_navy_any = any(
        _finite(d.neck) or _finite(d.waist) or _finite(d.hip) or _finite(d.bf_pct)
        for d in derived
    )
    has_navy_in_window = any(_finite(d.bf_pct) for d in cur)

    # Cycle and goal
    cycle_type = cycle.cycle_type if cycle is not None else None
    has_cycle_target = (
        cycle is not None
        and cycle_type != "maintaining"
        and _finite(cycle.target_weight_kg)
    )
    target_weight = cycle.target_weight_kg if has_cycle_target else None
    weight_to_goal = None
    if has_cycle_target and _finite(current_weight):
        weight_to_goal = current_weight - target_weight
    direction_to_goal = None
    if weight_to_goal is not None:
        if abs(weight_to_goal) <= AT_GOAL_KG:
            direction_to_goal = "at goal"
        elif weight_to_goal > 0:
            direction_to_goal = "need to lose"
        else:
            direction_to_goal = "need to gain"

    ctx: dict[str, Any] = {
        "rangeDays": range_days,
        "weightTrend": weight_trend.to_dict(),
        "bfTrend": bf_trend.to_dict(),
        "strengthTrend": strength_trend.to_dict(),
        "isBfKnown": bf_trend.key != "unknown",
        "isStrKnown": strength_trend.key != "unknown",
        "currentAvgCal": current_avg_cal,
        "currentProtein": current_protein,
        "currentWeight": current_weight,
        "weeklyWeightChange": weekly_weight_change,
        "weeklyWeightLoss": weekly_weight_loss,
        "calculatedTdee": calculated_tdee,
        "baselineTdee": baseline_tdee,
        "adaptationPct": adaptation_pct,
        "prevWeekTdee": prev_week_tdee,
        "waterDiscrepancyKcal": water_discrepancy_kcal,
        "expectedWeeklyChangeKg": expected_weekly_change_kg,
        "strengthDeclinePct": strength_decline_pct,
        "lossRate": loss_rate,
        "proteinPerKg": protein_per_kg,
        "targetProtein2g": target_protein_2g,
        "daysLogged": days_logged,
        "daysRemaining": days_remaining,
        "derivedLen": len(derived),
        "hasNavyAny": has_navy_any,
        "hasNavyInWindow": has_navy_in_window,
        "cycle": cycle_type,
        "hasCycleTarget": has_cycle_target,
        "targetWeight": target_weight,
        "weightToGoal": weight_to_goal,
        "directionToGoal": direction_to_goal,
        "absToGoal": abs(weight_to_goal) if weight_to_goal is not None else None,
        "weekly": weekly.to_dict() if weekly is not None else None,
        "t": thresholds,
    }
    ctx.update(template_helpers(ctx))
    return ctx
