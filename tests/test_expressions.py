"""Tests for the rule expression language."""

from __future__ import annotations

import math

from bodytrend.rules.expressions import (
    Invalid,
    Literal,
    Operation,
    Var,
    evaluate_condition,
    evaluate_raw,
    get_path,
    parse_expression,
    strict_equals,
    to_display_string,
    truthy,
)


CTX = {
    "adaptationPct": -12.5,
    "daysLogged": 5,
    "isBfKnown": False,
    "weightTrend": {"key": "losing"},
    "cycle": None,
    "weeks": [{"tdee": 2500}, {"tdee": 2400}],
    "t": {"adaptation": {"crashPct": -10}},
    "nanValue": math.nan,
    "label": "cutting",
}


class TestParse:
    """Tests for parse_expression."""

    def test_literal(self) -> None:
        assert parse_expression(3) == Literal(3)
        assert parse_expression(None) == Literal(None)

    def test_var_with_default(self) -> None:
        assert parse_expression({"var": ["x.y", 4]}) == Var(path="x.y", default=4)

    def test_scalar_args_wrapped(self) -> None:
        expr = parse_expression({"!": {"var": "isBfKnown"}})
        assert isinstance(expr, Operation)
        assert expr.args == (Var(path="isBfKnown"),)

    def test_unknown_operator(self) -> None:
        assert isinstance(parse_expression({"pow": [2, 3]}), Invalid)

    def test_multi_key_mapping(self) -> None:
        assert isinstance(parse_expression({"<": [1, 2], ">": [2, 1]}), Invalid)


class TestGetPath:
    def test_nested(self) -> None:
        assert get_path(CTX, "t.adaptation.crashPct") == -10

    def test_list_index(self) -> None:
        assert get_path(CTX, "weeks.1.tdee") == 2400

    def test_missing_uses_default(self) -> None:
        assert get_path(CTX, "t.nothing.here", "x") == "x"
        assert get_path(CTX, "cycle.type", "none") == "none"

    def test_empty_path(self) -> None:
        assert get_path(CTX, "", 1) == 1


class TestComparisons:
    """Comparisons only hold between finite numbers."""

    def test_var_against_threshold(self) -> None:
        cond = {"<": [{"var": "adaptationPct"}, {"var": "t.adaptation.crashPct"}]}
        assert evaluate_condition(cond, CTX)

    def test_missing_operand_is_false(self) -> None:
        assert not evaluate_condition({"<": [{"var": "missing"}, 5]}, CTX)
        assert not evaluate_condition({">=": [{"var": "missing"}, 5]}, CTX)

    def test_nan_fails_every_comparison(self) -> None:
        for op in ("<", "<=", ">", ">="):
            assert not evaluate_condition({op: [{"var": "nanValue"}, 0]}, CTX)

    def test_string_is_not_a_number(self) -> None:
        assert not evaluate_condition({">": ["5", 1]}, CTX)


class TestEquality:
    def test_strict_equals(self) -> None:
        assert strict_equals(1, 1.0)
        assert not strict_equals(True, 1)
        assert not strict_equals("1", 1)
        assert not strict_equals(math.nan, math.nan)
        assert strict_equals(None, None)

    def test_eq_operator(self) -> None:
        assert evaluate_condition({"==": [{"var": "weightTrend.key"}, "losing"]}, CTX)
        assert evaluate_condition({"!=": [{"var": "label"}, "bulking"]}, CTX)


class TestLogic:
    """and / or / not."""

    def test_and_or(self) -> None:
        assert evaluate_condition({"and": [True, {"<": [1, 2]}]}, CTX)
        assert not evaluate_condition({"and": [True, False]}, CTX)
        assert evaluate_condition({"or": [False, {"var": "daysLogged"}]}, CTX)

    def test_not(self) -> None:
        assert evaluate_condition({"!": {"var": "isBfKnown"}}, CTX)
        assert evaluate_condition({"not": [{"var": "missing"}]}, CTX)

    def test_empty_and_is_true(self) -> None:
        assert evaluate_condition({"and": []}, CTX)


class TestInAndFinite:
    def test_in_list(self) -> None:
        cond = {"in": [{"var": "weightTrend.key"}, ["losing", "losing_fast"]]}
        assert evaluate_condition(cond, CTX)

    def test_in_string(self) -> None:
        assert evaluate_condition({"in": ["cut", {"var": "label"}]}, CTX)

    def test_in_non_collection(self) -> None:
        assert not evaluate_condition({"in": ["a", 5]}, CTX)

    def test_finite(self) -> None:
        assert evaluate_condition({"finite": {"var": "adaptationPct"}}, CTX)
        assert not evaluate_condition({"finite": {"var": "nanValue"}}, CTX)
        assert not evaluate_condition({"finite": {"var": "missing"}}, CTX)


class TestArithmetic:
    """Arithmetic yields NaN for non-finite operands."""

    def test_basic(self) -> None:
        assert evaluate_raw({"+": [1, 2, 3]}, CTX) == 6
        assert evaluate_raw({"-": [{"var": "daysLogged"}, 7]}, CTX) == -2
        assert evaluate_raw({"*": [2, 2.5]}, CTX) == 5
        assert evaluate_raw({"/": [9, 3]}, CTX) == 3

    def test_abs_min_max(self) -> None:
        assert evaluate_raw({"abs": {"var": "adaptationPct"}}, CTX) == 12.5
        assert evaluate_raw({"min": [3, {"var": "missing"}, 1]}, CTX) == 1
        assert evaluate_raw({"max": [3, 7]}, CTX) == 7

    def test_division_by_zero_is_nan(self) -> None:
        assert math.isnan(evaluate_raw({"/": [1, 0]}, CTX))

    def test_missing_operand_is_nan(self) -> None:
        result = evaluate_raw({"+": [1, {"var": "missing"}]}, CTX)
        assert math.isnan(result)
        assert not evaluate_condition({">": [{"+": [1, {"var": "missing"}]}, 0]}, CTX)


class TestTotality:
    """Malformed conditions evaluate to False, never raise."""

    def test_none_condition_is_true(self) -> None:
        assert evaluate_condition(None, CTX)

    def test_unknown_operator_is_false(self) -> None:
        assert not evaluate_condition({"pow": [2, 3]}, CTX)

    def test_multi_key_is_false(self) -> None:
        assert not evaluate_condition({"<": [1, 2], ">": [2, 1]}, CTX)

    def test_deep_nesting(self) -> None:
        node: dict = {"var": "daysLogged"}
        for _ in range(5000):
            node = {"!": [node]}
        assert evaluate_condition(node, CTX) in (True, False)


class TestTruthy:
    def test_values(self) -> None:
        assert not truthy(None)
        assert not truthy(math.nan)
        assert not truthy(0)
        assert not truthy("")
        assert truthy([])
        assert truthy({})
        assert truthy("x")

    def test_display_string(self) -> None:
        assert to_display_string(2.0) == "2"
        assert to_display_string(None) == "null"
        assert to_display_string(True) == "true"
