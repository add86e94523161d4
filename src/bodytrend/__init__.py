"""Body-composition trend tracking: derived metrics, weekly TDEE and status rules."""

__version__ = "0.1.0"
