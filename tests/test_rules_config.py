"""Tests for rule config merging, validation and loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from bodytrend.rules.config import (
    deep_merge,
    load_rule_config,
    merge_rule_config,
    unwrap_override,
    validate_rule_config,
)
from bodytrend.rules.defaults import DEFAULT_RULE_CONFIG, STATUS_RULES


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_nested_mapping(self) -> None:
        assert deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}}) == {"a": {"x": 1, "y": 3}}

    def test_lists_replaced(self) -> None:
        assert deep_merge({"a": [1, 2, 3]}, {"a": [9]}) == {"a": [9]}

    def test_none_keeps_base(self) -> None:
        assert deep_merge({"a": 1}, None) == {"a": 1}
        assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}

    def test_scalar_replaces(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": 5}) == {"a": 5}

    def test_new_keys_added(self) -> None:
        assert deep_merge({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_inputs_not_mutated(self) -> None:
        base = {"a": {"x": 1}}
        override = {"a": {"y": 2}}
        deep_merge(base, override)
        assert base == {"a": {"x": 1}}
        assert override == {"a": {"y": 2}}


class TestUnwrapOverride:
    def test_value_wrapper(self) -> None:
        doc = {"value": {"thresholds": {"a": 1}}, "updatedAt": "2024-01-01"}
        assert unwrap_override(doc) == {"thresholds": {"a": 1}}

    def test_metadata_stripped(self) -> None:
        doc = {"thresholds": {"a": 1}, "updatedAt": "x", "updatedBy": "admin"}
        assert unwrap_override(doc) == {"thresholds": {"a": 1}}

    def test_non_mapping(self) -> None:
        assert unwrap_override(None) is None
        assert unwrap_override([1]) is None


class TestMergeRuleConfig:
    """Tests for merge_rule_config."""

    def test_defaults_are_copied(self) -> None:
        config = merge_rule_config(None)
        config["thresholds"]["minDaysForAssessment"] = 99
        assert DEFAULT_RULE_CONFIG["thresholds"]["minDaysForAssessment"] == 14

    def test_threshold_override(self) -> None:
        config = merge_rule_config({"thresholds": {"minCompleteDaysThisWeek": 3}})
        assert config["thresholds"]["minCompleteDaysThisWeek"] == 3
        assert config["thresholds"]["minDaysForAssessment"] == 14
        assert len(config["statusRules"]) == len(STATUS_RULES)

    def test_rule_list_replaced(self) -> None:
        rules = [{"id": "only", "level": "green", "title": "T", "emoji": "x", "message": "m"}]
        config = merge_rule_config({"value": {"statusRules": rules}})
        assert [r["id"] for r in config["statusRules"]] == ["only"]


class TestValidateRuleConfig:
    """Tests for validate_rule_config."""

    def test_defaults_valid(self) -> None:
        assert validate_rule_config(merge_rule_config(None)) == []

    def test_not_a_mapping(self) -> None:
        assert validate_rule_config([]) == ["Config must be an object."]

    def test_missing_sections(self) -> None:
        assert validate_rule_config({}) == [
            'Missing "thresholds" object.',
            'Missing "statusRules" array.',
        ]

    def test_rule_fields(self) -> None:
        errors = validate_rule_config(
            {"thresholds": {}, "statusRules": [{"id": "r1", "level": "red"}]}
        )
        assert errors == [
            'Rule r1 is missing "title".',
            'Rule r1 is missing "emoji".',
            'Rule r1 is missing "message".',
        ]

    def test_rule_without_id(self) -> None:
        errors = validate_rule_config(
            {
                "thresholds": {},
                "statusRules": [{"level": "red", "title": "T", "emoji": "x", "message": "m"}],
            }
        )
        assert errors == ['A rule is missing "id".']

    def test_non_mapping_rule(self) -> None:
        errors = validate_rule_config({"thresholds": {}, "statusRules": ["x", "y"]})
        assert errors == ["Each rule must be an object."]


class TestLoadRuleConfig:
    """Tests for loading override files."""

    def test_no_path(self) -> None:
        assert load_rule_config(None) == merge_rule_config(None)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rule_config(tmp_path / "missing.yaml")

    def test_yaml_override(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(yaml.safe_dump({"thresholds": {"minDaysForAssessment": 21}}))
        config = load_rule_config(path)
        assert config["thresholds"]["minDaysForAssessment"] == 21

    def test_json_override(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"value": {"global": {"goalNotes": False}}}))
        config = load_rule_config(path)
        assert config["global"]["goalNotes"] is False
        assert config["global"]["missingSignalNotes"] is True

    def test_non_mapping_document_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("- just\n- a list\n")
        assert load_rule_config(path) == merge_rule_config(None)
