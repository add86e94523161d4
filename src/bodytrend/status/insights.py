"""Actionable insights derived from the latest week and the last 7 days."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Optional, Sequence

from bodytrend.status.context import round_half_up, window
from bodytrend.tracking.cycles import days_between
from bodytrend.tracking.models import Cycle, DerivedDay, WeeklyAnalysis, WeekRecord
from bodytrend.tracking.weekly import KCAL_PER_KG, mean_finite

# Adaptation: TDEE drop from baseline, %
ADAPTATION_WARN_PCT = 5.0
ADAPTATION_BAD_PCT = 10.0

# Strength vs baseline, %
STRENGTH_WARN_PCT = -5.0
STRENGTH_BAD_PCT = -7.5

# Optimal weekly loss as a fraction of LBM
OPTIMAL_LOSS_MIN = 0.005
OPTIMAL_LOSS_MAX = 0.01
CALORIE_ROUNDING = 50

MIN_DAYS_LOGGED = 6
MEASUREMENT_INTERVAL_DAYS = 7

# Protein range, g per kg bodyweight
PROTEIN_MIN_G_PER_KG = 1.6
PROTEIN_MAX_G_PER_KG = 2.2

# Stall detection, kg/week
STALL_MIN_LOSS_KG = 0.2
STALL_BASELINE_FRACTION = 0.35

MILESTONE_MIN_KG = 1.0


@dataclass
class Insight:
    """A single insight card."""

    key: str
    level: str  # 'good', 'warn', 'bad' or 'info'
    title: str
    message: str
    action: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _finite(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def round_to(value: float, step: int = CALORIE_ROUNDING) -> int:
    return round_half_up(value / step) * step


def adaptation_insight(week: WeekRecord, baseline_tdee: Optional[float]) -> Optional[Insight]:
    if not (_finite(baseline_tdee) and _finite(week.tdee) and _finite(week.adaptation_pct)):
        return None
    drop_pct = max(0.0, -week.adaptation_pct)
    level = "good"
    if drop_pct >= ADAPTATION_BAD_PCT:
        level = "bad"
    elif drop_pct >= ADAPTATION_WARN_PCT:
        level = "warn"
    verb = "dropped" if week.adaptation_pct < 0 else "increased"
    return Insight(
        key="adaptation",
        level=level,
        title="Metabolic adaptation",
        message=(
            f"Your TDEE has {verb} {abs(week.adaptation_pct):.0f}% from baseline "
            f"({baseline_tdee:.0f} → {week.tdee:.0f} kcal)."
        ),
        action="Consider a refeed day or reducing training volume." if level != "good" else None,
    )


def loss_rate_insight(week: WeekRecord) -> Optional[Insight]:
    if not _finite(week.loss_rate_pct):
        return None
    status = week.loss_rate_status or ""
    level = {"Optimal": "good", "Aggressive": "bad"}.get(status, "info")
    extra = {
        "Aggressive": "Risk of muscle loss.",
        "Conservative": "Consider increasing deficit slightly.",
    }.get(status, "Optimal pace.")
    return Insight(
        key="lossrate",
        level=level,
        title="Loss rate vs LBM",
        message=f"This week: {week.loss_rate_pct:.1f}% of LBM lost ({status.upper()}). {extra}",
    )


def strength_insight(week: WeekRecord, baseline_strength: Optional[float]) -> Optional[Insight]:
    if not (_finite(baseline_strength) and baseline_strength != 0 and _finite(week.avg_strength_smoothed)):
        return None
    pct = (week.avg_strength_smoothed - baseline_strength) / baseline_strength * 100
    if pct < STRENGTH_BAD_PCT:
        level, icon, text = "bad", "⚠", "Strength declining significantly."
    elif pct < STRENGTH_WARN_PCT:
        level, icon, text = "warn", "⚠", "Strength declining."
    else:
        level, icon, text = "good", "✓", "Strength maintained/increasing."
    return Insight(
        key="strength",
        level=level,
        title="Strength trend",
        message=f"{text} {icon} ({pct:.1f}% vs baseline)",
        action="Consider eating more or reducing cardio." if level != "good" else None,
    )


def calorie_target_insight(week: WeekRecord) -> Optional[Insight]:
    """Intake range that keeps the weekly loss within 0.5-1% of LBM."""
    if not (_finite(week.tdee) and _finite(week.lbm)):
        return None
    daily_deficit_min = OPTIMAL_LOSS_MIN * week.lbm * KCAL_PER_KG / 7
    daily_deficit_max = OPTIMAL_LOSS_MAX * week.lbm * KCAL_PER_KG / 7
    cal_high = week.tdee - daily_deficit_min
    cal_low = week.tdee - daily_deficit_max
    lo = round_to(min(cal_low, cal_high))
    hi = round_to(max(cal_low, cal_high))
    return Insight(
        key="calrec",
        level="info",
        title="Weekly calorie target",
        message=f"To maintain an optimal loss rate, target about {lo}-{hi} kcal/day this week.",
    )


def navy_insight(derived: Sequence[DerivedDay]) -> Insight:
    last_measured = next((d.date_iso for d in reversed(derived) if _finite(d.bf_pct)), None)
    if last_measured is None:
        return Insight(
            key="navy",
            level="info",
            title="Navy method",
            message="No measurements logged yet. Take your first set this week for BF% + LBM tracking.",
        )
    since = days_between(derived[-1].date_iso, last_measured)
    if since >= MEASUREMENT_INTERVAL_DAYS:
        return Insight(
            key="navy",
            level="warn",
            title="Navy method",
            message="Take measurements this week (last set is 7+ days old).",
        )
    return Insight(
        key="navy",
        level="info",
        title="Navy method",
        message=f"Next measurements due in {MEASUREMENT_INTERVAL_DAYS - since} day(s).",
    )


def protein_insight(avg_protein: Optional[float], current_weight: Optional[float]) -> Optional[Insight]:
    if not (_finite(avg_protein) and _finite(current_weight)):
        return None
    min_p = PROTEIN_MIN_G_PER_KG * current_weight
    max_p = PROTEIN_MAX_G_PER_KG * current_weight
    if avg_protein < min_p:
        below_pct = (min_p - avg_protein) / min_p * 100 if min_p > 0 else 0.0
        return Insight(
            key="protein",
            level="warn",
            title="Protein adequacy",
            message=(
                f"Your protein is {below_pct:.0f}% below the muscle-retention range "
                f"({avg_protein:.0f}g/day vs ≥{min_p:.0f}g/day)."
            ),
            action="Aim for 1.6-2.2g/kg bodyweight/day to support muscle retention.",
        )
    if avg_protein > max_p:
        message = f"Protein is strong ({avg_protein:.0f}g/day)."
    else:
        message = f"Protein is on target ({avg_protein:.0f}g/day)."
    return Insight(key="protein", level="good", title="Protein adequacy", message=message)


def stall_insight(week: WeekRecord, baseline_weekly_loss: Optional[float]) -> Optional[Insight]:
    if not (_finite(baseline_weekly_loss) and _finite(week.weight_change_kg)):
        return None
    current_loss = max(0.0, -week.weight_change_kg)
    stalled = current_loss < STALL_MIN_LOSS_KG or (
        baseline_weekly_loss > STALL_MIN_LOSS_KG
        and current_loss < baseline_weekly_loss * STALL_BASELINE_FRACTION
    )
    if not stalled:
        return None
    return Insight(
        key="stall",
        level="warn",
        title="Trend direction",
        message=(
            f"Weight loss may be stalling ({current_loss:.1f}kg this week vs "
            f"{baseline_weekly_loss:.1f}kg baseline)."
        ),
        action="Time to reduce calories by ~100-150/day (or add a small activity increase).",
    )


def milestone_insight(derived: Sequence[DerivedDay], cycle: Optional[Cycle]) -> Optional[Insight]:
    """Raw-weight progress since the cycle started, once at least 1 kg moved."""
    if cycle is None or cycle.cycle_type not in ("cutting", "bulking"):
        return None
    target = cycle.target_weight_kg
    if not _finite(target) or len(derived) < 2:
        return None

    start_day = next((d for d in derived if d.date_iso >= cycle.start_date_iso), derived[0])
    start_w = start_day.weight
    current_w = derived[-1].weight
    if not (_finite(start_w) and _finite(current_w)):
        return None

    if cycle.cycle_type == "cutting" and start_w > target:
        moved = start_w - current_w
        direction = "down"
        total = start_w - target
    elif cycle.cycle_type == "bulking" and start_w < target:
        moved = current_w - start_w
        direction = "up"
        total = target - start_w
    else:
        return None

    if moved < MILESTONE_MIN_KG:
        return None
    pct_to_goal = max(0.0, min(1.0, moved / total)) * 100
    return Insight(
        key="milestone",
        level="good",
        title="Progress milestone",
        message=f"{moved:.1f}kg {direction} since cycle start ({pct_to_goal:.0f}% to target).",
    )


def build_insights(
    derived: Sequence[DerivedDay],
    weekly: Optional[WeeklyAnalysis],
    cycle: Optional[Cycle] = None,
) -> list[Insight]:
    """
    Build the insight cards for a user's history.

    Weekly insights (adaptation, loss rate, strength, calorie target, stall)
    read the latest complete week; completeness and protein read the last 7
    calendar days. Without any complete week a "log 14 days" nudge leads the
    list and the 7-day calorie average is appended.

    Args:
        derived: Derived series in ascending date order
        weekly: Weekly analysis of the same series
        cycle: Active cycle, if any

    Returns:
        Insights in display order (empty without data)
    """
    if not derived:
        return []

    weeks = weekly.weeks if weekly is not None else []
    week = weeks[-1] if weeks else None
    last_week_days = window(derived, 0, 6)
    avg_protein = mean_finite([d.protein for d in last_week_days])
    avg_calories = mean_finite([d.calories for d in last_week_days])
    current_weight = derived[-1].trend_weight

    candidates: list[Optional[Insight]] = []
    if week is not None:
        candidates.extend([
            adaptation_insight(week, weekly.baseline_tdee),
            loss_rate_insight(week),
            strength_insight(week, weekly.baseline_strength),
            calorie_target_insight(week),
        ])

    if len(last_week_days) < MIN_DAYS_LOGGED:
        candidates.append(Insight(
            key="completeness",
            level="warn",
            title="Data completeness",
            message=f"{len(last_week_days)}/7 days logged this week. Missing data may affect accuracy.",
        ))

    candidates.append(navy_insight(derived))
    candidates.append(protein_insight(avg_protein, current_weight))
    if week is not None:
        candidates.append(stall_insight(week, weekly.baseline_weekly_loss))
    candidates.append(milestone_insight(derived, cycle))

    insights = [c for c in candidates if c is not None]

    if week is None:
        insights.insert(0, Insight(
            key="needs14",
            level="info",
            title="Insights need trend data",
            message="Log at least 14 days to unlock weekly TDEE, adaptation, and loss-rate insights.",
        ))
        if avg_calories is not None:
            insights.append(Insight(
                key="cal7",
                level="info",
                title="Last 7 days",
                message=f"Average calories: {avg_calories:.0f} kcal/day.",
            ))

    return insights
