"""Infix and prefix operators of the query language."""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

from .ast import Operator, PrefixOperator
from .model import values_equal


class QueryError(Exception):
    """Raised when a query cannot be evaluated."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _numbers(left: Any, right: Any, message: str) -> tuple[float, float]:
    if _is_number(left) and _is_number(right):
        return left, right
    raise QueryError(message)


def _op_plus(left: Any, right: Any) -> float:
    a, b = _numbers(left, right, "Operator +: invalid operands")
    return float(a + b)


def _op_minus(left: Any, right: Any) -> float:
    a, b = _numbers(left, right, "operator -: invalid operands")
    return float(a - b)


def _op_mul(left: Any, right: Any) -> float:
    a, b = _numbers(left, right, "operator *: invalid operands")
    return float(a * b)


def _op_div(left: Any, right: Any) -> float:
    a, b = _numbers(left, right, "operator /: invalid operands")
    if b == 0:
        raise QueryError("operator /: division by zero")
    return float(a) / float(b)


def _op_modulo(left: Any, right: Any) -> float:
    a, b = _numbers(left, right, "operator %: invalid operands")
    if b == 0:
        raise QueryError("operator %: division by zero")
    return math.fmod(a, b)


def op_lt(left: Any, right: Any) -> bool:
    """Numeric ``<``; raises QueryError for non-numbers."""
    a, b = _numbers(left, right, "operator <: invalid operands")
    return a < b


def _op_le(left: Any, right: Any) -> bool:
    a, b = _numbers(left, right, "operator <=: invalid operands")
    return a <= b


def op_gt(left: Any, right: Any) -> bool:
    """Numeric ``>``; raises QueryError for non-numbers."""
    a, b = _numbers(left, right, "operator >: invalid operands")
    return a > b


def _op_ge(left: Any, right: Any) -> bool:
    a, b = _numbers(left, right, "operator >=: invalid operands")
    return a >= b


def _op_eq(left: Any, right: Any) -> bool:
    return values_equal(left, right)


def _op_neq(left: Any, right: Any) -> bool:
    return not values_equal(left, right)


_INFIX: dict[Operator, Callable[[Any, Any], Any]] = {
    Operator.PLUS: _op_plus,
    Operator.MINUS: _op_minus,
    Operator.MUL: _op_mul,
    Operator.DIV: _op_div,
    Operator.MODULO: _op_modulo,
    Operator.LT: op_lt,
    Operator.LE: _op_le,
    Operator.GT: op_gt,
    Operator.GE: _op_ge,
    Operator.EQ: _op_eq,
    Operator.NEQ: _op_neq,
}


def eval_infix(op: Operator | str, left: Any, right: Any) -> Any:
    """Apply a binary operator (or its symbol) to two model values."""
    return _INFIX[Operator(op)](left, right)


def _op_neg(value: Any) -> float:
    if _is_number(value):
        return float(-value)
    raise QueryError("operator -(unary): invalid operand")


_PREFIX: dict[PrefixOperator, Callable[[Any], Any]] = {
    PrefixOperator.NEG: _op_neg,
}


def eval_prefix(op: PrefixOperator | str, value: Any) -> Any:
    """Apply a unary operator (or its symbol) to a model value."""
    return _PREFIX[PrefixOperator(op)](value)