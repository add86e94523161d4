"""Loading entries, profiles and cycles from files."""

from bodytrend.data.loader import load_cycles, load_entries, load_profile

__all__ = ["load_cycles", "load_entries", "load_profile"]
