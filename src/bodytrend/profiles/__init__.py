"""Body-composition and strength estimators."""

from bodytrend.profiles.body_calc import (
    Sex,
    body_fat_navy_pct,
    lean_body_mass_kg,
    one_rep_max_kg,
)

__all__ = ["Sex", "body_fat_navy_pct", "lean_body_mass_kg", "one_rep_max_kg"]
