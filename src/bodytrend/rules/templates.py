"""Message templates for status rules.

Placeholders look like ``{path.to.value}`` or ``{path.to.value:N}`` where N is
the number of decimals (clamped to 0..6). Missing, None and NaN values render
as an em dash so a template never leaks its raw placeholder.
"""

from __future__ import annotations

import math
import re
from typing import Any

from bodytrend.rules.expressions import (
    evaluate_condition,
    get_path,
    is_nan,
    number_to_string,
    to_display_string,
)

PLACEHOLDER = "—"  # em dash
MAX_DECIMALS = 6

_PLACEHOLDER_RE = re.compile(r"\{([a-zA-Z0-9_$.]+)(?::([0-9]+))?\}")


def format_value(value: Any, decimals: Any = None) -> str:
    """Render one context value."""
    if value is None:
        return PLACEHOLDER
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_nan(value):
        return PLACEHOLDER
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isinf(value):
            return number_to_string(value)
        if decimals is not None:
            places = max(0, min(MAX_DECIMALS, int(decimals)))
            try:
                return f"{value:.{places}f}"
            except OverflowError:
                return PLACEHOLDER
        return number_to_string(value)
    if isinstance(value, (list, tuple)):
        return to_display_string(value)
    return str(value)


def format_template(text: Any, ctx: Any) -> str:
    """
    Interpolate context values into a template string.

    Args:
        text: Template, e.g. "Lost {x:1}kg"
        ctx: Context mapping

    Returns:
        Rendered text ("" when text is not a string)

    Example:
        >>> format_template("Lost {x:1}kg", {"x": 2.34})
        'Lost 2.3kg'
    """
    if not isinstance(text, str):
        return ""

    def replace(match: re.Match) -> str:
        value = get_path(ctx, match.group(1), None)
        return format_value(value, match.group(2))

    return _PLACEHOLDER_RE.sub(replace, text)


def pick_text(source: Any, ctx: Any) -> str:
    """
    Select one message.

    A plain string is formatted directly. A list is scanned in order and the
    first plain string, or the first ``{"when": ..., "text": ...}`` clause
    whose condition is absent or true, is formatted. Anything else gives "".
    """
    if isinstance(source, str):
        return format_template(source, ctx)
    if not isinstance(source, list):
        return ""

    for item in source:
        if isinstance(item, str):
            return format_template(item, ctx)
        if isinstance(item, dict):
            if evaluate_condition(item.get("when"), ctx):
                return format_template(item.get("text") or "", ctx)
    return ""


def resolve_text_list(source: Any, ctx: Any) -> list[str]:
    """
    Collect every applicable message from a warnings/notes list.

    Plain strings are always included; clauses are included when their
    condition is absent or true. Entries rendering to "" are dropped.
    """
    if not isinstance(source, list):
        return []

    out: list[str] = []
    for item in source:
        if isinstance(item, str):
            text = format_template(item, ctx)
        elif isinstance(item, dict):
            if not evaluate_condition(item.get("when"), ctx):
                continue
            text = format_template(item.get("text") or "", ctx)
        else:
            continue
        if text:
            out.append(text)
    return out
