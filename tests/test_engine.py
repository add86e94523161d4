"""Tests for priority-ordered status rule evaluation."""

from __future__ import annotations

from bodytrend.rules.engine import (
    DEFAULT_PRIORITY,
    FALLBACK_ID,
    Status,
    active_rules,
    evaluate_rules,
    rule_priority,
)


def rule(rule_id: str, priority, when=None, **extra) -> dict:
    data = {
        "id": rule_id,
        "priority": priority,
        "level": "green",
        "title": rule_id.title(),
        "emoji": "✅",
        "message": f"{rule_id} matched",
    }
    if when is not None:
        data["when"] = when
    data.update(extra)
    return data


class TestRulePriority:
    def test_numeric(self) -> None:
        assert rule_priority({"priority": 10}) == 10
        assert rule_priority({"priority": "20"}) == 20

    def test_missing_or_bad(self) -> None:
        assert rule_priority({}) == DEFAULT_PRIORITY
        assert rule_priority({"priority": "soon"}) == DEFAULT_PRIORITY
        assert rule_priority({"priority": True}) == DEFAULT_PRIORITY


class TestActiveRules:
    """Tests for filtering and ordering."""

    def test_sorted_stable(self) -> None:
        rules = [rule("b", 20), rule("a", 10), rule("c", 20)]
        assert [r["id"] for r in active_rules(rules)] == ["a", "b", "c"]

    def test_disabled_and_idless_skipped(self) -> None:
        rules = [rule("a", 10, enabled=False), {"priority": 1}, "junk", rule("b", 20)]
        assert [r["id"] for r in active_rules(rules)] == ["b"]

    def test_non_list(self) -> None:
        assert active_rules(None) == []


class TestEvaluateRules:
    """Tests for evaluate_rules."""

    def test_lowest_priority_match_wins(self) -> None:
        rules = [rule("late", 50), rule("early", 5)]
        assert evaluate_rules(rules, {}).id == "early"

    def test_condition_filters(self) -> None:
        rules = [
            rule("high", 1, when={">": [{"var": "n"}, 10]}),
            rule("low", 2, when={"<=": [{"var": "n"}, 10]}),
        ]
        assert evaluate_rules(rules, {"n": 3}).id == "low"
        assert evaluate_rules(rules, {"n": 30}).id == "high"

    def test_disabled_rule_never_matches(self) -> None:
        rules = [rule("off", 1, enabled=False), rule("on", 2)]
        assert evaluate_rules(rules, {}).id == "on"

    def test_rendering(self) -> None:
        definition = rule(
            "r",
            1,
            message=[{"when": {"var": "flag"}, "text": "flag {n:1}"}, "plain"],
            warnings=["w {n}", {"when": False, "text": "hidden"}],
            notes=[{"text": "note"}],
            effects=["forceRed"],
        )
        status = evaluate_rules([definition], {"flag": True, "n": 2.26})
        assert status == Status(
            id="r",
            level="green",
            title="R",
            emoji="✅",
            message="flag 2.3",
            warnings=["w 2.26"],
            notes=["note"],
            effects=["forceRed"],
        )

    def test_fallback_from_config(self) -> None:
        config = {
            "statusRules": [rule("never", 1, when=False)],
            "fallbackStatus": {"level": "yellow", "title": "Mixed", "emoji": "🤔", "message": "m"},
        }
        status = evaluate_rules(config, {})
        assert status.id == FALLBACK_ID
        assert status.title == "Mixed"
        assert status.level == "yellow"

    def test_neutral_fallback(self) -> None:
        assert evaluate_rules([], {}) == Status(id="fallback")

    def test_defaults_for_missing_fields(self) -> None:
        status = evaluate_rules([{"id": "bare"}], {})
        assert status.level == "gray"
        assert status.title == "Status"
        assert status.emoji == "•"
        assert status.message == ""

    def test_malformed_condition_skipped(self) -> None:
        rules = [rule("broken", 1, when={"nope": []}), rule("ok", 2)]
        assert evaluate_rules(rules, {}).id == "ok"

    def test_deterministic(self) -> None:
        rules = [rule("a", 5), rule("b", 5)]
        results = {evaluate_rules(rules, {}).id for _ in range(5)}
        assert results == {"a"}

    def test_to_dict(self) -> None:
        data = evaluate_rules([rule("a", 1)], {}).to_dict()
        assert data["id"] == "a"
        assert data["warnings"] == []
