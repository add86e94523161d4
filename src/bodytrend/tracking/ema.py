"""Exponentially weighted moving average for daily tracking series.

The trend for each series is calculated as:
    S_n = α × X_n + (1 - α) × S_{n-1}

With a 7-day window, α = 2 / (7 + 1) = 0.25. The first present sample seeds
the average. Missing samples are not imputed: a missing day yields a missing
smoothed value and the next present sample seeds the average again, so a gap
in logging never gets bridged by interpolation.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

# Default smoothing window in days
DEFAULT_WINDOW_DAYS = 7


def alpha_for_window(window_days: int) -> float:
    """
    Smoothing factor for an N-day EWMA window.

    Args:
        window_days: Window length in days (values below 1 are treated as 1)

    Returns:
        α = 2 / (N + 1)

    Example:
        >>> alpha_for_window(7)
        0.25
    """
    if window_days < 1:
        window_days = 1
    return 2 / (window_days + 1)


ALPHA_7DAY = alpha_for_window(DEFAULT_WINDOW_DAYS)


def is_present(value: Optional[float]) -> bool:
    """Return True when value is a usable (finite, non-bool) number."""
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def update_trend(prev_trend: float, value: float, alpha: float = ALPHA_7DAY) -> float:
    """
    Calculate the next smoothed value.

    Args:
        prev_trend: Previous smoothed value (S_{n-1})
        value: Today's raw sample (X_n)
        alpha: Smoothing factor, default 0.25 (7-day window)

    Returns:
        Today's smoothed value (S_n)

    Example:
        >>> update_trend(90.0, 88.0)
        89.5
    """
    return alpha * value + (1 - alpha) * prev_trend


def ewma(
    values: Sequence[Optional[float]],
    alpha: float = ALPHA_7DAY,
) -> list[Optional[float]]:
    """
    Smooth a column of optionally-missing samples.

    Args:
        values: Samples in chronological order; None (or NaN) marks a missing day
        alpha: Smoothing factor, default 0.25

    Returns:
        List of smoothed values, same length as values. Positions with a
        missing sample are None.

    Example:
        >>> ewma([80.0, 84.0, None, 82.0])
        [80.0, 81.0, None, 82.0]
    """
    out: list[Optional[float]] = []
    prev: Optional[float] = None

    for value in values:
        if not is_present(value):
            out.append(None)
            # A gap breaks continuity; the next sample seeds a fresh average
            prev = None
            continue

        if prev is None:
            prev = float(value)  # type: ignore[arg-type]
        else:
            prev = update_trend(prev, float(value), alpha)  # type: ignore[arg-type]
        out.append(prev)

    return out


def estimate_daily_calorie_balance(weekly_change_kg: float, kcal_per_kg: float = 7700.0) -> float:
    """
    Estimate daily calorie surplus/deficit from a weekly weight change.

    Args:
        weekly_change_kg: Weight change over 7 days in kg (negative = loss)
        kcal_per_kg: Energy content of a kg of body weight

    Returns:
        Daily calorie balance (negative = deficit, positive = surplus)
    """
    return (weekly_change_kg * kcal_per_kg) / 7
