"""Rule configuration: deep merge over the defaults, validation and loading."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from bodytrend.rules.defaults import DEFAULT_RULE_CONFIG

logger = logging.getLogger(__name__)

METADATA_KEYS = ("updatedAt", "updatedBy")


def deep_merge(base: Any, override: Any) -> Any:
    """
    Merge an override document over a base document.

    Rules:
        - None override keeps the base
        - lists are replaced wholesale (never merged element-wise)
        - mappings are merged key by key, recursively
        - any other value replaces the base

    Neither argument is mutated; merged mappings are new dicts.

    Example:
        >>> deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        {'a': {'x': 1, 'y': 3}}
    """
    if override is None:
        return base
    if isinstance(base, list) or isinstance(override, list):
        return override if isinstance(override, list) else base
    if not isinstance(base, dict) or not isinstance(override, dict):
        return override

    merged = dict(base)
    for key, value in override.items():
        merged[key] = deep_merge(base.get(key), value)
    return merged


def unwrap_override(remote: Any) -> Optional[dict[str, Any]]:
    """Extract the config body from a stored override document.

    Stored documents are either ``{"value": {...}, "updatedAt": ..., ...}`` or
    the config itself with metadata keys alongside it.
    """
    if not isinstance(remote, dict):
        return None
    value = remote.get("value")
    if isinstance(value, dict):
        return value
    return {
        k: v for k, v in remote.items()
        if k not in METADATA_KEYS and k != "value"
    }


def merge_rule_config(remote: Any = None) -> dict[str, Any]:
    """
    Build the effective rule config.

    Args:
        remote: Override document (or None for the defaults alone)

    Returns:
        A fresh config dict; the built-in defaults are never shared or mutated
    """
    defaults = copy.deepcopy(DEFAULT_RULE_CONFIG)
    override = unwrap_override(remote)
    if not override:
        return defaults
    return deep_merge(defaults, copy.deepcopy(override))


def validate_rule_config(cfg: Any) -> list[str]:
    """Check a rule config for structural problems.

    Returns:
        Human-readable error messages (empty when the config is usable)
    """
    errors: list[str] = []
    if not isinstance(cfg, dict):
        errors.append("Config must be an object.")
        return errors

    if not isinstance(cfg.get("thresholds"), dict):
        errors.append('Missing "thresholds" object.')

    rules = cfg.get("statusRules")
    if not isinstance(rules, list):
        errors.append('Missing "statusRules" array.')
        return errors

    for rule in rules:
        if not isinstance(rule, dict):
            errors.append("Each rule must be an object.")
            break
        rule_id = rule.get("id") or "(unknown)"
        if not rule.get("id"):
            errors.append('A rule is missing "id".')
        for key in ("level", "title", "emoji"):
            if not rule.get(key):
                errors.append(f'Rule {rule_id} is missing "{key}".')
        if rule.get("message") is None:
            errors.append(f'Rule {rule_id} is missing "message".')

    return errors


def read_rule_document(path: Path) -> Any:
    """Read a YAML or JSON override document (JSON is valid YAML)."""
    with open(path) as f:
        return yaml.safe_load(f)


def load_rule_config(path: Optional[Path] = None) -> dict[str, Any]:
    """
    Load the effective rule config, merging an override file if given.

    Args:
        path: Override document (.yaml/.yml/.json). None uses the defaults.

    Returns:
        Merged config dict

    Raises:
        FileNotFoundError: If path is given but does not exist
    """
    if path is None:
        return merge_rule_config(None)

    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Rule config not found: {path}")

    remote = read_rule_document(path)
    if remote is not None and not isinstance(remote, dict):
        logger.warning("Ignoring rule override %s: expected a mapping", path)
        return merge_rule_config(None)

    config = merge_rule_config(remote)
    for problem in validate_rule_config(config):
        logger.warning("Rule config %s: %s", path, problem)
    return config
