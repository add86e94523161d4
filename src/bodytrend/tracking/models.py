"""Data models for daily tracking entries and derived metrics."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from bodytrend.profiles.body_calc import one_rep_max_kg


VALID_SEXES = ("male", "female")
VALID_CYCLE_TYPES = ("cutting", "bulking", "maintaining")
CYCLE_TYPE_ALIASES = {
    "cut": "cutting",
    "bulk": "bulking",
    "maintain": "maintaining",
}
LIFTS = ("bench", "squat", "deadlift")
SITES = ("neck", "waist", "hip")
DEFAULT_LIFT_NAMES = ("Bench Press", "Squat", "Deadlift")


def to_number(value: Any) -> Optional[float]:
    """Coerce a stored value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def date_text(value: Any) -> str:
    """Render a stored date value (string, date or datetime) as text."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip() if value else ""


def check_date_iso(date_iso: str, field_name: str = "date_iso") -> None:
    """
    Require a calendar date in YYYY-MM-DD form.

    Raises:
        ValueError: If date_iso is not a zero-padded ISO calendar date
    """
    try:
        parsed = date.fromisoformat(date_iso)
    except (TypeError, ValueError):
        parsed = None
    if parsed is None or parsed.isoformat() != date_iso:
        raise ValueError(f"{field_name} must be a YYYY-MM-DD date, got '{date_iso}'")


def normalize_cycle_type(cycle_type: str) -> str:
    """Map a cycle type (or its short alias) to its canonical name.

    Raises:
        ValueError: If the type is not a known cycle type
    """
    key = str(cycle_type or "").strip().lower()
    key = CYCLE_TYPE_ALIASES.get(key, key)
    if key not in VALID_CYCLE_TYPES:
        raise ValueError(
            f"cycle_type must be one of {VALID_CYCLE_TYPES}, got '{cycle_type}'"
        )
    return key


@dataclass
class LiftSet:
    """One lift logged on a day: load × reps and the stored 1RM estimate."""

    load: Optional[float] = None
    reps: Optional[float] = None
    one_rep_max: Optional[float] = None


@dataclass
class Entry:
    """One calendar day of tracking input."""

    date_iso: str
    weight: Optional[float] = None  # kg
    protein: Optional[float] = None  # g
    carbs: Optional[float] = None  # g
    fats: Optional[float] = None  # g
    bench: Optional[LiftSet] = None
    squat: Optional[LiftSet] = None
    deadlift: Optional[LiftSet] = None
    # Single-reading mode, cm
    neck: Optional[float] = None
    waist: Optional[float] = None
    hip: Optional[float] = None
    # Triple-reading mode, up to 3 readings per site
    neck_readings: list[Optional[float]] = field(default_factory=list)
    waist_readings: list[Optional[float]] = field(default_factory=list)
    hip_readings: list[Optional[float]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.date_iso:
            raise ValueError("date_iso is required")
        check_date_iso(self.date_iso)
        for site in SITES:
            readings = getattr(self, f"{site}_readings")
            if len(readings) > 3:
                raise ValueError(
                    f"{site}_readings holds at most 3 values, got {len(readings)}"
                )

    def lift(self, name: str) -> Optional[LiftSet]:
        """Return the LiftSet for bench/squat/deadlift."""
        if name not in LIFTS:
            raise KeyError(f"Unknown lift: {name}")
        return getattr(self, name)

    def one_rep_max(self, name: str) -> Optional[float]:
        """Stored 1RM for a lift, or None if it was not trained that day."""
        lift = self.lift(name)
        return lift.one_rep_max if lift is not None else None

    def site(self, name: str) -> Optional[float]:
        """Single-mode reading for a measurement site."""
        if name not in SITES:
            raise KeyError(f"Unknown measurement site: {name}")
        return getattr(self, name)

    def site_readings(self, name: str) -> list[Optional[float]]:
        """Triple-mode readings for a measurement site."""
        if name not in SITES:
            raise KeyError(f"Unknown measurement site: {name}")
        return getattr(self, f"{name}_readings")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        """Build an Entry from a storage record.

        Accepts the stored document shape (``dateIso``, ``benchLoad``,
        ``benchReps``, ``bench`` as the stored 1RM, ``neck1``..``neck3``) as
        well as snake_case keys and nested lift dicts. When a lift has load and
        reps but no stored 1RM, the estimate is computed.
        """
        date_iso = date_text(
            data.get("dateIso") or data.get("date_iso") or data.get("id")
        )
        if not date_iso:
            raise ValueError("Entry record is missing 'dateIso'")

        lifts: dict[str, Optional[LiftSet]] = {}
        for name in LIFTS:
            raw = data.get(name)
            if isinstance(raw, dict):
                load = to_number(raw.get("load"))
                reps = to_number(raw.get("reps"))
                orm = to_number(raw.get("one_rep_max", raw.get("oneRepMax")))
            else:
                load = to_number(data.get(f"{name}Load", data.get(f"{name}_load")))
                reps = to_number(data.get(f"{name}Reps", data.get(f"{name}_reps")))
                orm = to_number(raw)
            if orm is None:
                orm = one_rep_max_kg(load, reps)
            if load is None and reps is None and orm is None:
                lifts[name] = None
            else:
                lifts[name] = LiftSet(load=load, reps=reps, one_rep_max=orm)

        readings: dict[str, list[Optional[float]]] = {}
        for site in SITES:
            nested = data.get(f"{site}_readings")
            if isinstance(nested, (list, tuple)):
                readings[site] = [to_number(v) for v in nested]
            else:
                values = [to_number(data.get(f"{site}{i}")) for i in (1, 2, 3)]
                readings[site] = values if any(v is not None for v in values) else []

        return cls(
            date_iso=date_iso,
            weight=to_number(data.get("weight")),
            protein=to_number(data.get("protein")),
            carbs=to_number(data.get("carbs")),
            fats=to_number(data.get("fats")),
            bench=lifts["bench"],
            squat=lifts["squat"],
            deadlift=lifts["deadlift"],
            neck=to_number(data.get("neck")),
            waist=to_number(data.get("waist")),
            hip=to_number(data.get("hip")),
            neck_readings=readings["neck"],
            waist_readings=readings["waist"],
            hip_readings=readings["hip"],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the flat storage record shape."""
        data: dict[str, Any] = {
            "dateIso": self.date_iso,
            "weight": self.weight,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }
        for name in LIFTS:
            lift = self.lift(name)
            data[f"{name}Load"] = lift.load if lift else None
            data[f"{name}Reps"] = lift.reps if lift else None
            data[name] = lift.one_rep_max if lift else None
        for site in SITES:
            data[site] = self.site(site)
            readings = self.site_readings(site)
            for i in range(3):
                data[f"{site}{i + 1}"] = readings[i] if i < len(readings) else None
        return data


@dataclass
class Profile:
    """Per-user configuration read by the calculations."""

    sex: Optional[str] = None  # 'male' or 'female'
    height_cm: Optional[float] = None
    triple_measurements: bool = False
    lift_names: tuple[str, ...] = DEFAULT_LIFT_NAMES

    def __post_init__(self) -> None:
        if self.sex is not None:
            self.sex = str(self.sex).strip().lower() or None
        if self.sex is not None and self.sex not in VALID_SEXES:
            raise ValueError(f"sex must be 'male' or 'female', got '{self.sex}'")
        if len(self.lift_names) != 3:
            raise ValueError(
                f"lift_names must name exactly 3 lifts, got {len(self.lift_names)}"
            )
        self.lift_names = tuple(self.lift_names)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Profile":
        """Build a Profile from a stored profile document (missing fields allowed)."""
        data = data or {}
        triple = data.get(
            "tripleMeasurementsEnabled",
            data.get("triplemeasurements", data.get("triple_measurements", False)),
        )
        lift_names = data.get("liftNames", data.get("lift_names"))
        if not isinstance(lift_names, (list, tuple)) or len(lift_names) != 3:
            lift_names = DEFAULT_LIFT_NAMES
        return cls(
            sex=data.get("sex") or None,
            height_cm=to_number(data.get("height", data.get("height_cm", data.get("heightCm")))),
            triple_measurements=bool(triple),
            lift_names=tuple(str(n) for n in lift_names),
        )


@dataclass
class Cycle:
    """A labelled training/diet phase."""

    cycle_type: str  # 'cutting', 'bulking' or 'maintaining'
    start_date_iso: str
    end_date_iso: Optional[str] = None  # None = active
    target_weight_kg: Optional[float] = None
    cycle_id: Optional[str] = None

    def __post_init__(self) -> None:
        self.cycle_type = normalize_cycle_type(self.cycle_type)
        if not self.start_date_iso:
            raise ValueError("start_date_iso is required")
        check_date_iso(self.start_date_iso, "start_date_iso")
        if self.end_date_iso is not None:
            check_date_iso(self.end_date_iso, "end_date_iso")
        if self.end_date_iso is not None and self.end_date_iso < self.start_date_iso:
            raise ValueError(
                f"end_date_iso {self.end_date_iso} is before start_date_iso {self.start_date_iso}"
            )

    @property
    def is_active(self) -> bool:
        return self.end_date_iso is None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Cycle":
        """Build a Cycle from a stored cycle document."""
        start = data.get("startDateIso", data.get("start_date_iso"))
        end = data.get("endDateIso", data.get("end_date_iso"))
        return cls(
            cycle_type=data.get("type", data.get("cycle_type", "")),
            start_date_iso=date_text(start),
            end_date_iso=date_text(end) or None,
            target_weight_kg=to_number(
                data.get("targetWeightKg", data.get("target_weight_kg"))
            ),
            cycle_id=data.get("id", data.get("cycle_id")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.cycle_id,
            "type": self.cycle_type,
            "startDateIso": self.start_date_iso,
            "endDateIso": self.end_date_iso,
            "targetWeightKg": self.target_weight_kg,
        }


@dataclass
class SmoothedValues:
    """EWMA values for one day (None where the raw sample was missing)."""

    weight: Optional[float] = None
    bench: Optional[float] = None
    squat: Optional[float] = None
    deadlift: Optional[float] = None
    calories: Optional[float] = None
    avg_strength: Optional[float] = None


@dataclass
class DerivedDay:
    """One entry enriched with computed and smoothed metrics."""

    date_iso: str
    weight: Optional[float]
    protein: Optional[float]
    carbs: Optional[float]
    fats: Optional[float]
    bench: Optional[float]  # stored 1RM estimates
    squat: Optional[float]
    deadlift: Optional[float]
    neck: Optional[float]  # site values after averaging
    waist: Optional[float]
    hip: Optional[float]
    calories: float
    avg_strength: float
    bf_pct: Optional[float]
    lbm: Optional[float]
    smoothed: SmoothedValues = field(default_factory=SmoothedValues)

    @property
    def trend_weight(self) -> Optional[float]:
        """Smoothed weight, falling back to the raw weight."""
        if self.smoothed.weight is not None:
            return self.smoothed.weight
        return self.weight

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class WeekRecord:
    """Energy-balance summary for one full 7-day block."""

    week_index: int
    avg_calories: Optional[float]
    weight_change_kg: Optional[float]
    tdee: Optional[float]
    avg_strength_smoothed: Optional[float]
    lbm: Optional[float]
    loss_rate_pct: Optional[float]
    loss_rate_status: Optional[str]  # 'Conservative', 'Optimal', 'Aggressive'
    tdee_change_from_baseline: Optional[float] = None
    adaptation_pct: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class WeeklyAnalysis:
    """Weekly blocks plus the 2-week baselines."""

    weeks: list[WeekRecord] = field(default_factory=list)
    baseline_tdee: Optional[float] = None
    baseline_strength: Optional[float] = None
    baseline_weekly_loss: Optional[float] = None

    @property
    def has_baseline(self) -> bool:
        return self.baseline_tdee is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "weeks": [w.to_dict() for w in self.weeks],
            "baseline_tdee": self.baseline_tdee,
            "baseline_strength": self.baseline_strength,
            "baseline_weekly_loss": self.baseline_weekly_loss,
        }
