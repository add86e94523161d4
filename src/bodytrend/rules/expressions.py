"""A small JSON-logic style expression language for status rules.

Rule conditions are stored as data so they can be edited without a deploy.
Each node is a one-key mapping ``{operator: args}`` where args is a single
value or a list::

    {"and": [
        {"<": [{"var": "adaptationPct"}, {"var": "t.adaptation.crashPct"}]},
        {"==": [{"var": "strengthTrend.key"}, "rapid_decline"]},
    ]}

Raw data is parsed into a closed set of node types (``Literal``,
``ListExpr``, ``Var``, ``Operation``, ``Invalid``) and evaluated against a
context mapping. Configuration is admin-edited, so evaluation is total: an
unknown operator, a mapping with more than one key or any other malformed
node evaluates to False, and arithmetic on non-finite operands yields NaN,
which then fails every comparison and finiteness check.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Sequence, Union

logger = logging.getLogger(__name__)

NAN = float("nan")

_MISSING = object()


@dataclass(frozen=True)
class Literal:
    """A string, number, boolean or null constant."""

    value: Any


@dataclass(frozen=True)
class ListExpr:
    """A list whose items are evaluated element-wise."""

    items: tuple["Expr", ...]


@dataclass(frozen=True)
class Var:
    """Dotted-path lookup into the context, with an optional default."""

    path: Any
    default: Any = None


@dataclass(frozen=True)
class Operation:
    """An operator applied to argument expressions."""

    op: str
    args: tuple["Expr", ...]


@dataclass(frozen=True)
class Invalid:
    """A node that could not be parsed. Always evaluates to False."""

    reason: str


Expr = Union[Literal, ListExpr, Var, Operation, Invalid]


def is_finite_number(value: Any) -> bool:
    """True for int/float values (not bools) that are finite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, int):
        return True
    return math.isfinite(value)


def is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def truthy(value: Any) -> bool:
    """Truthiness used by conditions.

    NaN and None are false. Lists and mappings are always true, even when
    empty, so a looked-up collection behaves as "present".
    """
    if value is None or is_nan(value):
        return False
    if isinstance(value, (list, tuple, dict)):
        return True
    return bool(value)


def number_to_string(value: float) -> str:
    """Plain rendering of a number: integral floats drop the '.0'."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
    return str(value)


def to_display_string(value: Any) -> str:
    """String form of a context value as it appears in text."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return number_to_string(value)
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None else to_display_string(v) for v in value)
    return str(value)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without type coercion (True never equals 1, NaN never equals NaN)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    left_num = isinstance(left, (int, float))
    right_num = isinstance(right, (int, float))
    if left_num or right_num:
        return left_num and right_num and left == right
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return left is right


def get_path(obj: Any, path: Any, default: Any = None) -> Any:
    """
    Look up a dotted path (``"t.adaptation.crashPct"``, ``"weeks.0.tdee"``).

    Returns default when the path is empty, a segment is absent, or an
    intermediate value is None. A present None at the end is returned as None.
    """
    if path is None or path == "" or isinstance(path, bool):
        return default
    if not isinstance(path, (str, int)):
        return default

    current = obj
    for part in str(path).split("."):
        if current is None:
            return default
        current = _lookup(current, part)
        if current is _MISSING:
            return default
    return current


def _lookup(container: Any, key: str) -> Any:
    if isinstance(container, dict):
        return container.get(key, _MISSING)
    if isinstance(container, (list, tuple)):
        if key.isdigit() and int(key) < len(container):
            return container[int(key)]
        if key == "length":
            return len(container)
        return _MISSING
    if isinstance(container, str):
        return len(container) if key == "length" else _MISSING
    if key.startswith("_"):
        return _MISSING
    return getattr(container, key, _MISSING)


def parse_expression(raw: Any) -> Expr:
    """Parse JSON-shaped data into an expression tree. Never raises."""
    if raw is None or isinstance(raw, (bool, int, float, str)):
        return Literal(raw)
    if isinstance(raw, (list, tuple)):
        return ListExpr(tuple(parse_expression(item) for item in raw))
    if not isinstance(raw, dict):
        return Invalid(f"unsupported node type {type(raw).__name__}")
    if len(raw) != 1:
        return Invalid(f"expected a single operator, got {len(raw)} keys")

    op, args = next(iter(raw.items()))
    arg_list = list(args) if isinstance(args, (list, tuple)) else [args]

    if op == "var":
        path = arg_list[0] if arg_list else None
        default = arg_list[1] if len(arg_list) > 1 else None
        return Var(path=path, default=default)
    if op not in OPERATORS:
        return Invalid(f"unknown operator '{op}'")
    return Operation(op=op, args=tuple(parse_expression(a) for a in arg_list))


def evaluate(expr: Expr, ctx: Any) -> Any:
    """Evaluate a parsed expression against a context."""
    if isinstance(expr, Literal):
        return expr.value
    if isinstance(expr, Var):
        return get_path(ctx, expr.path, expr.default)
    if isinstance(expr, ListExpr):
        return [evaluate(item, ctx) for item in expr.items]
    if isinstance(expr, Operation):
        return OPERATORS[expr.op](expr.args, ctx)
    return False


def evaluate_raw(raw: Any, ctx: Any) -> Any:
    """Parse and evaluate raw expression data.

    A missing expression (None) is True. Pathological input that exhausts the
    interpreter (e.g. nesting deep enough to hit the recursion limit) yields
    False rather than an exception.
    """
    if raw is None:
        return True
    try:
        return evaluate(parse_expression(raw), ctx)
    except (RecursionError, OverflowError) as exc:
        logger.debug("Expression could not be evaluated: %s", exc)
        return False


def evaluate_condition(raw: Any, ctx: Any) -> bool:
    """Evaluate raw expression data as a boolean condition."""
    return truthy(evaluate_raw(raw, ctx))


# ============================================================================
# Operators
# ============================================================================


def _arg(args: Sequence[Expr], index: int, ctx: Any) -> Any:
    if index >= len(args):
        return None
    return evaluate(args[index], ctx)


def _not(args: Sequence[Expr], ctx: Any) -> bool:
    return not truthy(_arg(args, 0, ctx))


def _and(args: Sequence[Expr], ctx: Any) -> bool:
    return all(truthy(evaluate(a, ctx)) for a in args)


def _or(args: Sequence[Expr], ctx: Any) -> bool:
    return any(truthy(evaluate(a, ctx)) for a in args)


def _eq(args: Sequence[Expr], ctx: Any) -> bool:
    return strict_equals(_arg(args, 0, ctx), _arg(args, 1, ctx))


def _ne(args: Sequence[Expr], ctx: Any) -> bool:
    return not strict_equals(_arg(args, 0, ctx), _arg(args, 1, ctx))


def _comparison(compare: Callable[[float, float], bool]) -> Callable[[Sequence[Expr], Any], bool]:
    def op(args: Sequence[Expr], ctx: Any) -> bool:
        left = _arg(args, 0, ctx)
        right = _arg(args, 1, ctx)
        if not is_finite_number(left) or not is_finite_number(right):
            return False
        return compare(left, right)

    return op


def _in(args: Sequence[Expr], ctx: Any) -> bool:
    needle = _arg(args, 0, ctx)
    haystack = _arg(args, 1, ctx)
    if isinstance(haystack, (list, tuple)):
        return any(strict_equals(needle, item) for item in haystack)
    if isinstance(haystack, str):
        return to_display_string(needle) in haystack
    return False


def _finite(args: Sequence[Expr], ctx: Any) -> bool:
    return is_finite_number(_arg(args, 0, ctx))


def _abs(args: Sequence[Expr], ctx: Any) -> float:
    value = _arg(args, 0, ctx)
    return abs(value) if is_finite_number(value) else NAN


def _finite_values(args: Sequence[Expr], ctx: Any) -> list[float]:
    return [v for v in (evaluate(a, ctx) for a in args) if is_finite_number(v)]


def _min(args: Sequence[Expr], ctx: Any) -> float:
    values = _finite_values(args, ctx)
    return min(values) if values else NAN


def _max(args: Sequence[Expr], ctx: Any) -> float:
    values = _finite_values(args, ctx)
    return max(values) if values else NAN


def _add(args: Sequence[Expr], ctx: Any) -> float:
    values = [evaluate(a, ctx) for a in args]
    if not all(is_finite_number(v) for v in values):
        return NAN
    return sum(values)


def _subtract(args: Sequence[Expr], ctx: Any) -> float:
    left = _arg(args, 0, ctx)
    right = _arg(args, 1, ctx)
    if not is_finite_number(left) or not is_finite_number(right):
        return NAN
    return left - right


def _multiply(args: Sequence[Expr], ctx: Any) -> float:
    values = [evaluate(a, ctx) for a in args]
    if not all(is_finite_number(v) for v in values):
        return NAN
    product: float = 1
    for v in values:
        product *= v
    return product


def _divide(args: Sequence[Expr], ctx: Any) -> float:
    left = _arg(args, 0, ctx)
    right = _arg(args, 1, ctx)
    if not is_finite_number(left) or not is_finite_number(right) or right == 0:
        return NAN
    return left / right


OPERATORS: dict[str, Callable[[Sequence[Expr], Any], Any]] = {
    "!": _not,
    "not": _not,
    "and": _and,
    "or": _or,
    "==": _eq,
    "eq": _eq,
    "!=": _ne,
    "<": _comparison(lambda a, b: a < b),
    "<=": _comparison(lambda a, b: a <= b),
    ">": _comparison(lambda a, b: a > b),
    ">=": _comparison(lambda a, b: a >= b),
    "in": _in,
    "finite": _finite,
    "abs": _abs,
    "min": _min,
    "max": _max,
    "+": _add,
    "-": _subtract,
    "*": _multiply,
    "/": _divide,
}
