"""Body composition calculator.

Estimates body fat percentage with the U.S. Navy circumference method and
derives lean body mass from it. Also estimates one-repetition maximums from
submaximal sets, which feed the strength signal.

All functions treat missing or unusable inputs as "unknown for that day":
they return None instead of raising.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Sequence


class Sex(Enum):
    """Biological sex for body fat formula selection."""
    MALE = "male"
    FEMALE = "female"


# Navy method coefficients: (constant, log10(circumference) factor, log10(height) factor)
NAVY_COEFFICIENTS = {
    Sex.MALE: (1.0324, 0.19077, 0.15456),
    Sex.FEMALE: (1.29579, 0.35004, 0.22100),
}


def _finite(value: Optional[float]) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_sex(sex: Optional[str]) -> Optional[Sex]:
    """Parse a sex string, returning None when missing or unrecognised."""
    if not sex:
        return None
    try:
        return Sex(str(sex).strip().lower())
    except ValueError:
        return None


def site_average(
    single: Optional[float],
    readings: Sequence[Optional[float]],
    triple_enabled: bool,
) -> Optional[float]:
    """Resolve one measurement site to a single value for the day.

    Args:
        single: Reading used in single-measurement mode
        readings: Up to 3 readings used in triple-measurement mode
        triple_enabled: Whether the profile records 3 readings per site

    Returns:
        The single reading, or the mean of the finite readings (first 3 only).
        None when nothing usable was recorded.
    """
    if not triple_enabled:
        return _finite(single)

    values = [v for v in (_finite(r) for r in list(readings)[:3]) if v is not None]
    if not values:
        return None
    return sum(values) / len(values)


def body_fat_navy_pct(
    sex: Optional[str],
    height_cm: Optional[float],
    neck: Optional[float],
    waist: Optional[float],
    hip: Optional[float] = None,
) -> Optional[float]:
    """Estimate body fat % using the U.S. Navy method (metric).

    Male:   495 / (1.0324 - 0.19077·log10(waist - neck) + 0.15456·log10(height)) - 450
    Female: 495 / (1.29579 - 0.35004·log10(waist + hip - neck) + 0.22100·log10(height)) - 450

    Args:
        sex: "male" or "female"
        height_cm: Height in centimetres
        neck: Neck circumference in cm
        waist: Waist circumference in cm
        hip: Hip circumference in cm (female formula only)

    Returns:
        Body fat percentage, or None when an input is missing, a log argument
        is not positive, or the result is not finite.
    """
    height = _finite(height_cm)
    if height is None or height <= 0:
        return None

    sex_enum = parse_sex(sex)
    if sex_enum is None:
        return None

    neck_v = _finite(neck)
    waist_v = _finite(waist)
    if neck_v is None or waist_v is None:
        return None

    if sex_enum == Sex.MALE:
        circumference = waist_v - neck_v
    else:
        hip_v = _finite(hip)
        if hip_v is None:
            return None
        circumference = waist_v + hip_v - neck_v

    if not circumference > 0:
        return None

    constant, circ_factor, height_factor = NAVY_COEFFICIENTS[sex_enum]
    density_term = (
        constant
        - circ_factor * math.log10(circumference)
        + height_factor * math.log10(height)
    )
    if density_term == 0:
        return None

    body_fat = 495 / density_term - 450
    return body_fat if math.isfinite(body_fat) else None


def lean_body_mass_kg(weight_kg: Optional[float], bf_pct: Optional[float]) -> Optional[float]:
    """Lean body mass = weight × (1 - bf% / 100). None if either input is unknown."""
    weight = _finite(weight_kg)
    body_fat = _finite(bf_pct)
    if weight is None or body_fat is None:
        return None
    return weight * (1 - body_fat / 100)


def one_rep_max_kg(load: Optional[float], reps: Optional[float]) -> Optional[float]:
    """Estimate a one-repetition maximum with the Epley formula.

    1RM = load × (1 + reps / 30), with a single rep returning the load itself.
    The result is rounded to 0.1 kg, matching how estimates are stored.

    Args:
        load: Load lifted in kg
        reps: Repetitions completed

    Returns:
        Estimated 1RM in kg, or None when load/reps are missing or not positive
    """
    load_v = _finite(load)
    reps_v = _finite(reps)
    if load_v is None or reps_v is None or load_v <= 0 or reps_v <= 0:
        return None

    if reps_v == 1:
        estimate = load_v
    else:
        estimate = load_v * (1 + reps_v / 30)
    return round(estimate, 1)
