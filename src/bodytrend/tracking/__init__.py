"""Daily tracking, derived series and weekly TDEE analysis.

Key components:
- EWMA trend calculation (7-day window, α = 0.25)
- Derived series (calories, average strength, body fat, LBM, smoothed columns)
- Weekly energy-balance TDEE with a 2-week baseline and adaptation %
- Entry and cycle helpers
"""

from __future__ import annotations

from bodytrend.tracking.derived import build_derived_series
from bodytrend.tracking.ema import ALPHA_7DAY, ewma
from bodytrend.tracking.models import (
    Cycle,
    DerivedDay,
    Entry,
    LiftSet,
    Profile,
    SmoothedValues,
    WeeklyAnalysis,
    WeekRecord,
)
from bodytrend.tracking.weekly import KCAL_PER_KG, compute_weekly_analysis

__all__ = [
    "ALPHA_7DAY",
    "KCAL_PER_KG",
    "Cycle",
    "DerivedDay",
    "Entry",
    "LiftSet",
    "Profile",
    "SmoothedValues",
    "WeekRecord",
    "WeeklyAnalysis",
    "build_derived_series",
    "compute_weekly_analysis",
    "ewma",
]
