"""Status report: context + rule engine + built-in effects.

A matched rule can list ``effects`` that append extra warnings after
rendering:

- ``goalNote``: remind the user how far the cycle target is
- ``cycleMisalignmentHint``: flag trends that contradict the active cycle

Both effects, and the missing-signal notes, can be switched off globally
through the ``global`` section of the rule config.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from bodytrend.rules.config import merge_rule_config
from bodytrend.rules.engine import Status, evaluate_rules
from bodytrend.rules.templates import format_template
from bodytrend.status.context import (
    DEFAULT_RANGE_DAYS,
    build_status_context,
    compute_goal_progress,
)
from bodytrend.tracking.models import Cycle, DerivedDay, WeeklyAnalysis

logger = logging.getLogger(__name__)

DEFAULT_GOAL_NOTE_MIN_KG = 2.0

NO_DATA_STATUS = Status(
    id="no_data",
    level="gray",
    title="Insufficient Data",
    emoji="⏳",
    message="No data yet. Add your first entry to see your status.",
)

MISSING_BF_NOTE = (
    "Body fat trend is unavailable in this period. "
    "Add Navy measurements (neck/waist/hip) for more accurate status."
)
MISSING_STRENGTH_NOTE = (
    "Strength trend is unavailable. "
    "Log your big-3 lifts (bench/squat/deadlift) to improve accuracy."
)

# Trend keys that contradict each cycle type
CUTTING_MISALIGNED_WEIGHT = ("stable", "gaining", "rapid_gain")
CUTTING_MISALIGNED_BF = ("stable", "increasing")
BULKING_MISALIGNED_WEIGHT = ("stable", "losing", "rapid_loss")
MAINTAINING_MISALIGNED_WEIGHT = ("rapid_gain", "rapid_loss")


@dataclass
class StatusReport:
    """The status plus the context and goal progress it was computed from."""

    status: Status
    context: dict[str, Any] = field(default_factory=dict)
    goal_progress: Optional[dict[str, float]] = None
    range_days: int = DEFAULT_RANGE_DAYS

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.to_dict(),
            "range_days": self.range_days,
            "goal_progress": self.goal_progress,
            "context": {k: v for k, v in self.context.items() if k not in ("t", "weekly")},
        }


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _finite(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def trend_key(ctx: dict[str, Any], name: str) -> str:
    trend = ctx.get(name)
    if isinstance(trend, dict):
        return str(trend.get("key") or "unknown")
    return "unknown"


def missing_signal_notes(ctx: dict[str, Any], strings: dict[str, Any]) -> list[str]:
    """Notes for body-fat and strength signals that are unavailable."""
    overrides = strings.get("missingSignals")
    overrides = overrides if isinstance(overrides, dict) else {}
    notes: list[str] = []
    bf_known = trend_key(ctx, "bfTrend") != "unknown"
    if not ctx.get("hasNavyAny") or not ctx.get("hasNavyInWindow") or not bf_known:
        notes.append(format_template(overrides.get("bodyFat") or MISSING_BF_NOTE, ctx))
    if trend_key(ctx, "strengthTrend") == "unknown":
        notes.append(format_template(overrides.get("strength") or MISSING_STRENGTH_NOTE, ctx))
    return notes


def goal_note(ctx: dict[str, Any], config: dict[str, Any]) -> Optional[str]:
    """Warning about the distance to the cycle target, if it is far enough."""
    thresholds = _section(config, "thresholds")
    strings = _section(config, "strings")
    min_kg = thresholds.get("goalNoteMinKgAway", DEFAULT_GOAL_NOTE_MIN_KG)
    if not _finite(min_kg):
        min_kg = DEFAULT_GOAL_NOTE_MIN_KG

    if not ctx.get("hasCycleTarget"):
        return None
    abs_to_goal = ctx.get("absToGoal")
    if not (_finite(ctx.get("targetWeight")) and _finite(ctx.get("currentWeight")) and _finite(abs_to_goal)):
        return None
    if abs_to_goal <= min_kg:
        return None

    templates = strings.get("goalNotes")
    templates = templates if isinstance(templates, dict) else {}
    direction = ctx.get("directionToGoal")
    if direction == "need to lose":
        template = templates.get("lose")
    elif direction == "need to gain":
        template = templates.get("gain")
    else:
        return None
    if not template:
        logger.debug("No goal note template for direction '%s'", direction)
        return None
    return format_template(template, ctx)


def is_cycle_misaligned(ctx: dict[str, Any]) -> bool:
    """True when the trends contradict the active cycle's intent."""
    cycle = ctx.get("cycle")
    weight = trend_key(ctx, "weightTrend")
    bf = trend_key(ctx, "bfTrend")
    strength = trend_key(ctx, "strengthTrend")

    if cycle == "cutting":
        return weight in CUTTING_MISALIGNED_WEIGHT or (
            bf != "unknown" and bf in CUTTING_MISALIGNED_BF
        )
    if cycle == "bulking":
        return weight in BULKING_MISALIGNED_WEIGHT or (
            strength != "unknown" and strength == "stable"
        )
    if cycle == "maintaining":
        return weight in MAINTAINING_MISALIGNED_WEIGHT
    return False


def cycle_misalignment_hint(ctx: dict[str, Any], config: dict[str, Any]) -> Optional[str]:
    """Warning when the trends contradict the active cycle."""
    if not is_cycle_misaligned(ctx):
        return None
    messages = _section(config, "strings").get("cycleMisalignment")
    if not isinstance(messages, dict):
        return None
    template = messages.get(ctx.get("cycle"))
    return format_template(template, ctx) if template else None


def apply_effects(status: Status, ctx: dict[str, Any], config: dict[str, Any]) -> Status:
    """Append global notes and run the effects the matched rule requested."""
    flags = _section(config, "global")
    warnings = list(status.warnings)
    notes = list(status.notes)

    if flags.get("missingSignalNotes"):
        notes.extend(missing_signal_notes(ctx, _section(config, "strings")))

    for effect in status.effects:
        if effect == "goalNote":
            text = goal_note(ctx, config) if flags.get("goalNotes") else None
        elif effect == "cycleMisalignmentHint":
            text = cycle_misalignment_hint(ctx, config) if flags.get("cycleMisalignmentWarnings") else None
        else:
            logger.debug("Ignoring unknown status effect '%s'", effect)
            continue
        if text:
            warnings.append(text)

    status.warnings = warnings
    status.notes = notes
    return status


def compute_status(
    derived: Sequence[DerivedDay],
    weekly: Optional[WeeklyAnalysis],
    cycle: Optional[Cycle] = None,
    config: Optional[dict[str, Any]] = None,
    range_days: int = DEFAULT_RANGE_DAYS,
) -> StatusReport:
    """
    Compute the single prioritized status for a user's history.

    Args:
        derived: Derived series in ascending date order
        weekly: Weekly analysis of the same series
        cycle: Active cycle, if any
        config: Effective rule config (defaults when None)
        range_days: Comparison window length in days

    Returns:
        StatusReport with the rendered status, context and goal progress
    """
    if config is None:
        config = merge_rule_config(None)

    if not derived:
        return StatusReport(
            status=Status(**NO_DATA_STATUS.to_dict()),
            range_days=range_days,
        )

    ctx = build_status_context(
        derived,
        weekly,
        cycle,
        thresholds=_section(config, "thresholds"),
        range_days=range_days,
    )
    status = evaluate_rules(config, ctx)
    status = apply_effects(status, ctx, config)
    logger.debug("Status '%s' (%s) for %d days", status.id, status.level, len(derived))

    return StatusReport(
        status=status,
        context=ctx,
        goal_progress=compute_goal_progress(derived, cycle, ctx.get("currentWeight")),
        range_days=range_days,
    )
