"""Data-driven status rules: expressions, templates and the rule engine."""

from __future__ import annotations

from bodytrend.rules.config import (
    deep_merge,
    load_rule_config,
    merge_rule_config,
    validate_rule_config,
)
from bodytrend.rules.defaults import DEFAULT_RULE_CONFIG
from bodytrend.rules.engine import Status, evaluate_rules
from bodytrend.rules.expressions import evaluate_condition, get_path, parse_expression
from bodytrend.rules.templates import format_template, pick_text, resolve_text_list

__all__ = [
    "DEFAULT_RULE_CONFIG",
    "Status",
    "deep_merge",
    "evaluate_condition",
    "evaluate_rules",
    "format_template",
    "get_path",
    "load_rule_config",
    "merge_rule_config",
    "parse_expression",
    "pick_text",
    "resolve_text_list",
    "validate_rule_config",
]
