"""Status banner and insights built on the derived series."""

from __future__ import annotations

from bodytrend.status.banner import StatusReport, compute_status
from bodytrend.status.context import (
    Trend,
    build_status_context,
    classify_bf,
    classify_strength,
    classify_weight,
    compute_goal_progress,
)
from bodytrend.status.insights import Insight, build_insights

__all__ = [
    "Insight",
    "StatusReport",
    "Trend",
    "build_insights",
    "build_status_context",
    "classify_bf",
    "classify_strength",
    "classify_weight",
    "compute_goal_progress",
    "compute_status",
]
