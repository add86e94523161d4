"""Priority-ordered status rules.

Rules are evaluated in ascending priority (ties keep their input order) and
the first rule whose condition holds produces the status. If none matches,
the configured fallback is rendered, or a neutral gray status when there is
no fallback. Every call returns exactly one Status.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from bodytrend.rules.expressions import evaluate_condition
from bodytrend.rules.templates import format_template, pick_text, resolve_text_list

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 9999
DEFAULT_LEVEL = "gray"
DEFAULT_TITLE = "Status"
DEFAULT_EMOJI = "•"
FALLBACK_ID = "fallback"


@dataclass
class Status:
    """A rendered status."""

    id: str
    level: str = DEFAULT_LEVEL
    title: str = DEFAULT_TITLE
    emoji: str = DEFAULT_EMOJI
    message: str = ""
    warnings: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    effects: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def rule_priority(rule: dict[str, Any]) -> float:
    """Numeric priority of a rule; missing or unparseable values sort last."""
    value = rule.get("priority")
    if value is None or isinstance(value, bool):
        return DEFAULT_PRIORITY
    try:
        priority = float(value)
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY
    return priority if not math.isnan(priority) else DEFAULT_PRIORITY


def active_rules(rules: Any) -> list[dict[str, Any]]:
    """Enabled rules with an id, sorted by priority (stable)."""
    if not isinstance(rules, list):
        return []
    usable = [
        r for r in rules
        if isinstance(r, dict) and r.get("id") and r.get("enabled") is not False
    ]
    return sorted(usable, key=rule_priority)


def render_status(definition: dict[str, Any], ctx: Any, status_id: str) -> Status:
    """Render a rule or fallback definition against the context."""
    effects = definition.get("effects")
    return Status(
        id=status_id,
        level=definition.get("level") or DEFAULT_LEVEL,
        title=format_template(definition.get("title") or DEFAULT_TITLE, ctx),
        emoji=format_template(definition.get("emoji") or DEFAULT_EMOJI, ctx),
        message=pick_text(definition.get("message"), ctx),
        warnings=resolve_text_list(definition.get("warnings"), ctx),
        notes=resolve_text_list(definition.get("notes"), ctx),
        effects=[str(e) for e in effects] if isinstance(effects, list) else [],
    )


def evaluate_rules(
    rules_or_config: Any,
    ctx: Any,
    fallback: Optional[dict[str, Any]] = None,
) -> Status:
    """
    Select and render the first matching status.

    Args:
        rules_or_config: Either a list of rule dicts, or a config dict holding
                         ``statusRules`` and ``fallbackStatus``
        ctx: Context the conditions and templates read from
        fallback: Fallback status definition when a plain rule list is given

    Returns:
        The rendered Status (never raises for malformed rules)
    """
    if isinstance(rules_or_config, dict):
        rules = rules_or_config.get("statusRules")
        fallback = rules_or_config.get("fallbackStatus")
    else:
        rules = rules_or_config

    for rule in active_rules(rules):
        if evaluate_condition(rule.get("when"), ctx):
            logger.debug("Status rule '%s' matched", rule["id"])
            return render_status(rule, ctx, str(rule["id"]))

    if isinstance(fallback, dict) and fallback:
        return render_status(fallback, ctx, FALLBACK_ID)

    return Status(id=FALLBACK_ID)
