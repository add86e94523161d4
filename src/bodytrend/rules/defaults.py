"""Built-in status rule configuration.

Admin overrides are deep-merged over this document (see
``bodytrend.rules.config``), so every threshold, string and rule here is the
value used whenever an override leaves it out. Rules are evaluated in
ascending ``priority``; the first match wins.
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Expression helpers (reusable building blocks)
# =============================================================================

def _var(path: str) -> dict[str, Any]:
    return {"var": path}


def _eq(path: str, value: Any) -> dict[str, Any]:
    return {"==": [_var(path), value]}


def _in(path: str, values: list[str]) -> dict[str, Any]:
    return {"in": [_var(path), values]}


def _not(expr: dict[str, Any]) -> dict[str, Any]:
    return {"!": [expr]}


def _low_protein() -> dict[str, Any]:
    return {"<": [_var("proteinPerKg"), _var("t.proteinPerKg.lowWarn")]}


def _below_target_weight() -> dict[str, Any]:
    return {
        "and": [
            _var("hasCycleTarget"),
            {"finite": [_var("targetWeight")]},
            {"finite": [_var("currentWeight")]},
            {"<": [_var("currentWeight"), _var("targetWeight")]},
        ]
    }


def _no_cycle_note() -> dict[str, Any]:
    return {
        "when": _not(_var("cycle")),
        "text": "No active cycle set. Create a Cut / Bulk / Maintenance cycle for clearer expectations.",
    }


def _stale_measurements_note() -> dict[str, Any]:
    return {
        "when": {"and": [_var("hasNavyAny"), _not(_var("hasNavyInWindow"))]},
        "text": "Take body measurements in this period to improve body-fat accuracy.",
    }


def _first_measurements_note() -> dict[str, Any]:
    return {
        "when": _not(_var("hasNavyAny")),
        "text": "Add your first Navy body measurements to start tracking body fat.",
    }


# =============================================================================
# Status rules
# =============================================================================

STATUS_RULES: list[dict[str, Any]] = [
    {
        "id": "insufficient_data_this_week",
        "priority": 0,
        "enabled": True,
        "level": "gray",
        "title": "Insufficient Data",
        "emoji": "⏳",
        "when": {"<": [_var("daysLogged"), _var("t.minCompleteDaysThisWeek")]},
        "message": "Only {daysLogged:0}/7 days logged this week. Add a few more entries to unlock accurate trend status.",
        "notes": [
            _stale_measurements_note(),
            _first_measurements_note(),
            _no_cycle_note(),
            "Aim for at least {t.minCompleteDaysThisWeek:0} logged days per week for reliable insights.",
        ],
    },
    {
        "id": "insufficient_data_window",
        "priority": 1,
        "enabled": True,
        "level": "gray",
        "title": "Insufficient Data",
        "emoji": "⏳",
        "when": {
            "or": [
                {"<": [_var("derivedLen"), _var("t.minDaysForAssessment")]},
                _not({"finite": [_var("baselineTdee")]}),
                _not({"finite": [_var("calculatedTdee")]}),
            ]
        },
        "message": "Need {daysRemaining:0} more days of consistent logging to assess status.",
        "notes": [_no_cycle_note(), _stale_measurements_note(), _first_measurements_note()],
    },
    {
        "id": "metabolic_crash",
        "priority": 10,
        "enabled": True,
        "level": "red",
        "title": "Metabolic Crash Risk",
        "emoji": "🛑",
        "when": {
            "and": [
                {"<": [_var("adaptationPct"), _var("t.adaptation.crashPct")]},
                _eq("strengthTrend.key", "rapid_decline"),
            ]
        },
        "message": "Your metabolism is adapting aggressively ({adaptationPct:1}%) and strength is dropping fast. Consider diet break / refeeds and reduce deficit.",
        "warnings": [
            {"when": _low_protein(), "text": "Protein is low ({proteinPerKg:1} g/kg). Increase to protect lean mass."},
        ],
        "effects": ["cycleMisalignmentHint"],
    },
    {
        "id": "skinny_fat_trajectory",
        "priority": 20,
        "enabled": True,
        "level": "red",
        "title": "Skinny-Fat Trajectory",
        "emoji": "⚠️",
        "when": {
            "and": [
                _var("isBfKnown"),
                {"!=": [_var("weightTrend.key"), "gaining"]},
                _eq("bfTrend.key", "increasing"),
                _in("strengthTrend.key", ["declining", "rapid_decline"]),
            ]
        },
        "message": [
            {"when": _low_protein(), "text": "Body fat is rising while strength is falling: likely low protein and poor training stimulus. Increase protein and focus on progressive overload."},
            {"when": True, "text": "Body fat is rising while strength is falling: likely poor training stimulus. Tighten training, keep protein high, and avoid random dieting."},
        ],
        "warnings": [
            {"when": _below_target_weight(), "text": "Gaining weight won't move you toward your target. Consider switching to a Cut cycle."},
        ],
        "effects": ["cycleMisalignmentHint"],
    },
    {
        "id": "inadequate_protein_or_training",
        "priority": 30,
        "enabled": True,
        "level": "red",
        "title": "Muscle Loss Risk",
        "emoji": "💥",
        "when": {
            "and": [
                _eq("strengthTrend.key", "rapid_decline"),
                _in("weightTrend.key", ["losing", "rapid_loss"]),
            ]
        },
        "message": [
            {"when": _low_protein(), "text": "Strength is falling fast while losing weight: protein and training are likely insufficient. Increase protein and reduce deficit."},
            {"when": {">": [_var("strengthDeclinePct"), 5]}, "text": "Strength is falling fast vs baseline. Reduce deficit and prioritize recovery (sleep + volume management)."},
            {"when": True, "text": "Strength is falling fast while losing weight. Reduce deficit and review training stimulus and recovery."},
        ],
        "effects": ["cycleMisalignmentHint"],
    },
    {
        "id": "overfeeding_without_stimulus",
        "priority": 40,
        "enabled": True,
        "level": "red",
        "title": "Overfeeding Without Stimulus",
        "emoji": "🍟",
        "when": {
            "and": [
                _var("isBfKnown"),
                _in("weightTrend.key", ["gaining", "rapid_gain"]),
                _eq("bfTrend.key", "increasing"),
                _eq("strengthTrend.key", "stable"),
            ]
        },
        "message": "Gaining weight but strength isn't improving, and body fat is rising. Reduce calories slightly and train harder (progressive overload).",
        "effects": ["cycleMisalignmentHint"],
    },
    {
        "id": "detraining",
        "priority": 50,
        "enabled": True,
        "level": "red",
        "title": "Detraining / Under-Recovered",
        "emoji": "😴",
        "when": {
            "and": [
                _var("isBfKnown"),
                _eq("bfTrend.key", "increasing"),
                _in("strengthTrend.key", ["declining", "rapid_decline"]),
            ]
        },
        "message": "Strength is declining and body fat is increasing. You may be under-recovered or inconsistent: fix training consistency and recovery.",
        "warnings": [
            {"when": _below_target_weight(), "text": "Gaining won't move you toward your target. Consider switching to a Cut cycle."},
        ],
        "effects": ["cycleMisalignmentHint", "goalNote"],
    },
    {
        "id": "water_weight_discrepancy",
        "priority": 60,
        "enabled": True,
        "level": "yellow",
        "title": "Possible Water Weight",
        "emoji": "💧",
        "when": {
            "and": [
                {"finite": [_var("waterDiscrepancyKcal")]},
                {">": [_var("waterDiscrepancyKcal"), _var("t.waterDiscrepancyKcalPerWeek")]},
            ]
        },
        "message": "Your scale change doesn't match the calorie deficit (likely water weight / sodium / stress). Stay consistent for 1-2 more weeks.",
        "warnings": [
            "Expected weekly change (from last week TDEE): {expectedWeeklyChangeKg:2} kg",
            "Observed weekly change: {weeklyWeightChange:2} kg",
        ],
        "effects": ["cycleMisalignmentHint", "goalNote"],
    },
    {
        "id": "cutting_too_aggressive",
        "priority": 70,
        "enabled": True,
        "level": "yellow",
        "title": "Cutting Too Aggressively",
        "emoji": "⚠️",
        "when": {
            "and": [
                _eq("weightTrend.key", "rapid_loss"),
                _in("strengthTrend.key", ["declining", "rapid_decline"]),
            ]
        },
        "message": [
            {"when": _low_protein(), "text": "Weight loss is very fast and strength is dropping. Increase protein and reduce deficit."},
            {"when": {">": [_var("lossRate"), _var("t.lossRatePctLbmPerWeek.aggressiveWarn")]}, "text": "Your loss rate is aggressive ({lossRate:2}% LBM/week). Reduce deficit and prioritize strength maintenance."},
            {"when": True, "text": "Weight loss is very fast and strength is dropping. Reduce deficit and improve recovery."},
        ],
        "effects": ["cycleMisalignmentHint"],
    },
    {
        "id": "dirty_bulking",
        "priority": 80,
        "enabled": True,
        "level": "yellow",
        "title": "Dirty Bulking",
        "emoji": "⚠️",
        "when": {
            "and": [
                _var("isBfKnown"),
                _eq("weightTrend.key", "rapid_gain"),
                _eq("bfTrend.key", "increasing"),
                _eq("strengthTrend.key", "increasing"),
            ]
        },
        "message": "Strength is improving, but weight and body fat are rising too fast. Reduce surplus slightly and keep training hard.",
        "effects": ["cycleMisalignmentHint", "goalNote"],
    },
    {
        "id": "spinning_wheels",
        "priority": 90,
        "enabled": True,
        "level": "yellow",
        "title": "Spinning Wheels",
        "emoji": "🔄",
        "when": {
            "and": [
                _eq("weightTrend.key", "stable"),
                {"or": [_not(_var("isBfKnown")), _eq("bfTrend.key", "stable")]},
                {"or": [_not(_var("isStrKnown")), _eq("strengthTrend.key", "stable")]},
            ]
        },
        "message": [
            {"when": _eq("cycle", "cutting"), "text": "No progress in a Cut. Reduce calories by ~200 and increase activity."},
            {"when": _eq("cycle", "bulking"), "text": "No progress in a Bulk. Increase calories by ~200 and push progressive overload."},
            {"when": True, "text": "No clear progress. Adjust calories slightly and ensure training is progressing."},
        ],
        "warnings": [
            {"when": {"<": [_var("adaptationPct"), _var("t.adaptation.warnPct")]}, "text": "Metabolic adaptation is notable ({adaptationPct:1}%). Consider a short diet break."},
        ],
        "effects": ["goalNote"],
    },
    {
        "id": "recomping",
        "priority": 100,
        "enabled": True,
        "level": "green",
        "title": "Recomping",
        "emoji": "✅",
        "when": {
            "and": [
                _eq("weightTrend.key", "stable"),
                _eq("bfTrend.key", "decreasing"),
                _eq("strengthTrend.key", "increasing"),
            ]
        },
        "message": "Body fat is dropping while strength is improving at stable weight. Keep calories steady and maintain training progression.",
        "effects": ["goalNote"],
    },
    {
        "id": "lean_bulking",
        "priority": 110,
        "enabled": True,
        "level": "green",
        "title": "Lean Bulking",
        "emoji": "🟢",
        "when": {
            "and": [
                _eq("weightTrend.key", "gaining"),
                _eq("strengthTrend.key", "increasing"),
                {"or": [_not(_var("isBfKnown")), _in("bfTrend.key", ["stable", "increasing"])]},
            ]
        },
        "message": [
            {"when": _eq("cycle", "cutting"), "text": "You are gaining weight in a Cut cycle. Consider switching to Bulk / Maintenance if this is intentional."},
            {"when": True, "text": "Weight and strength are increasing. Keep surplus modest and keep protein high."},
        ],
    },
    {
        "id": "cutting_optimal",
        "priority": 120,
        "enabled": True,
        "level": "green",
        "title": "Cutting (On Track)",
        "emoji": "🟢",
        "when": {
            "and": [
                _eq("weightTrend.key", "losing"),
                {"or": [_not(_var("isBfKnown")), _eq("bfTrend.key", "decreasing")]},
                _in("strengthTrend.key", ["stable", "increasing"]),
                {">=": [_var("lossRate"), _var("t.lossRatePctLbmPerWeek.optimalMin")]},
                {"<=": [_var("lossRate"), _var("t.lossRatePctLbmPerWeek.optimalMax")]},
            ]
        },
        "message": "You are losing weight at a healthy rate while maintaining strength. Keep doing what you're doing.",
    },
    {
        "id": "cutting_conservative",
        "priority": 130,
        "enabled": True,
        "level": "green",
        "title": "Cutting (Conservative)",
        "emoji": "🟢",
        "when": {
            "and": [
                _eq("weightTrend.key", "losing"),
                _eq("bfTrend.key", "decreasing"),
                _eq("strengthTrend.key", "stable"),
            ]
        },
        "message": [
            {"when": {"<": [_var("weeklyWeightLoss"), _var("t.slowWeeklyWeightLossKg")]}, "text": "Your cut is working but slowly. If you want faster progress, reduce calories by ~100-200."},
            {"when": True, "text": "Your cut is working. Keep going."},
        ],
    },
    {
        "id": "maintaining",
        "priority": 140,
        "enabled": True,
        "level": "green",
        "title": "Maintaining Successfully",
        "emoji": "🟢",
        "when": {
            "and": [
                _eq("weightTrend.key", "stable"),
                {"or": [_not(_var("isBfKnown")), _in("bfTrend.key", ["stable", "decreasing"])]},
                _in("strengthTrend.key", ["stable", "increasing"]),
            ]
        },
        "message": "You're maintaining weight while holding strength. Great base to start a focused cut or bulk.",
        "effects": ["goalNote"],
    },
]


DEFAULT_RULE_CONFIG: dict[str, Any] = {
    "version": 1,
    "thresholds": {
        # Data requirements
        "minDaysForAssessment": 14,
        "minCompleteDaysThisWeek": 5,
        # Trend classifiers
        "weight": {"stableKgPerWeek": 0.2, "rapidKgPerWeek": 1.0},
        "bf": {"stablePctPoints": 0.5},
        "strength": {
            "stablePct": 2,
            "increasePct": 2,
            "declinePct": -2,
            "rapidDeclinePct": -5,
        },
        # Nutrition / physiology
        "proteinPerKg": {"low": 1.6, "lowWarn": 1.8},
        "adaptation": {"crashPct": -15, "warnPct": -10},
        # Recomposition heuristics
        "lossRatePctLbmPerWeek": {
            "optimalMin": 0.5,
            "optimalMax": 1.0,
            "aggressiveWarn": 1.0,
        },
        "slowWeeklyWeightLossKg": 0.3,
        # kcal/week mismatch between scale change and intake
        "waterDiscrepancyKcalPerWeek": 3850,
        "goalNoteMinKgAway": 2,
    },
    "global": {
        "missingSignalNotes": True,
        "cycleMisalignmentWarnings": True,
        "goalNotes": True,
    },
    "strings": {
        "cycleMisalignment": {
            "cutting": "⚠️ Cycle misalignment: In a Cut cycle, weight should trend ↓ and body fat should trend ↓ over time.",
            "bulking": "⚠️ Cycle misalignment: In a Bulk cycle, weight should trend ↑ and strength should trend ↑ over time.",
            "maintaining": "⚠️ Cycle misalignment: In a Maintenance cycle, weight should stay stable and strength should stay stable or improve.",
        },
        "goalNotes": {
            "lose": "Note: You are {absToGoal:1} kg away from your target of {targetWeight:1} kg. Consider switching to a Cut cycle if fat loss is the priority.",
            "gain": "Note: You are {absToGoal:1} kg away from your target of {targetWeight:1} kg. Consider switching to a Bulk cycle if gaining is the priority.",
        },
        "missingSignals": {
            "bodyFat": "Body fat trend is unavailable in this period. Add Navy measurements (neck/waist/hip) for more accurate status.",
            "strength": "Strength trend is unavailable. Log your big-3 lifts (bench/squat/deadlift) to improve accuracy.",
        },
    },
    "statusRules": STATUS_RULES,
    "fallbackStatus": {
        "level": "yellow",
        "title": "Mixed Signals",
        "emoji": "🟡",
        "message": "Trends are mixed. Focus on consistent logging and one clear goal (cut, bulk, or maintain) for the next 2 weeks.",
    },
}
