"""Output formatters."""

from bodytrend.export.formatters import JSONFormatter, TableFormatter

__all__ = ["TableFormatter", "JSONFormatter"]
