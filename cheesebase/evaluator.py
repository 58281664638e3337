"""Evaluation of query syntax trees against model values."""

from __future__ import annotations

import functools
import math
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from .ast import (
    ArrayExpr, ArrayNav, BagExpr, FromCollection, FromEmpty, FromFull, FromInner,
    FromLeft, FromTuple, Function, GroupByTerm, InfixOp, Limit, Literal, Offset,
    OrderByTerm, PrefixOp, SelectAttribute, SelectElement, SfwQuery, TupleExpr,
    TupleNav, Var, Where,
)
from .config import Config, Env, NavFailure
from .model import Collection, Missing, Null, Tuple, compare_values, value_less, values_equal
from .operators import QueryError, eval_infix, eval_prefix, op_gt, op_lt

_CONF = Config()


class Session(Protocol):
    def get_root(self) -> Tuple: ...


class DictSession:
    """A session whose top-level names come from an in-memory tuple."""

    def __init__(self, root: Mapping[str, Any] | None = None):
        self._root = root if isinstance(root, Tuple) else Tuple(root or {})

    def get_root(self) -> Tuple:
        """Return the tuple that unbound variable names are resolved in."""
        return self._root


@dataclass
class Bindings:
    """Variable bindings produced by a FROM clause."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    has_order: bool = False
    names: set[str] = field(default_factory=set)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> dict[str, Any]:
        return self.rows[index]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_index(value: Any) -> int | None:
    """Return a whole non-negative number as int, else None."""
    if not _is_number(value) or not math.isfinite(value) or value < 0:
        return None
    if value != int(value):
        return None
    return int(value)


def _nav_failure(setting: NavFailure, message: str) -> Any:
    if setting is NavFailure.MISSING:
        return Missing()
    if setting is NavFailure.NULL:
        return Null()
    raise QueryError(message)


# -- expressions ---------------------------------------------------------------


def _eval_var(var: Var, env: Env, session: Session | None) -> Any:
    try:
        return env.lookup(var.name)
    except KeyError:
        pass
    if session is None:
        return Missing()
    root = session.get_root()
    if var.name not in root:
        raise QueryError(f"Unknown name: {var.name}")
    return root[var.name]


def _eval_tuple(node: TupleExpr, env: Env, session: Session | None) -> Tuple:
    return Tuple({key: eval_expr(expr, env, session) for key, expr in node.members.items()})


def _eval_array(node: ArrayExpr, env: Env, session: Session | None) -> Collection:
    return Collection((eval_expr(e, env, session) for e in node.items), has_order=True)


def _eval_bag(node: BagExpr, env: Env, session: Session | None) -> Collection:
    return Collection((eval_expr(e, env, session) for e in node.items), has_order=False)


def _eval_tuple_nav(nav: TupleNav, env: Env, session: Session | None) -> Any:
    base = eval_expr(nav.base, env, session)
    config = _CONF.tuple_nav
    if not isinstance(base, Tuple):
        return _nav_failure(
            config.type_mismatch,
            f"Tuple navigation '.{nav.key}' failed: non-tuple on left side",
        )
    if nav.key not in base:
        return _nav_failure(
            config.absent, f"Tuple navigation '.{nav.key}' failed: name not found"
        )
    return base[nav.key]


def _eval_array_nav(nav: ArrayNav, env: Env, session: Session | None) -> Any:
    base = eval_expr(nav.base, env, session)
    key = eval_expr(nav.index, env, session)
    config = _CONF.array_nav

    index = _as_index(key)
    if index is None:
        return _nav_failure(
            config.type_mismatch, "Array navigation failed: non-integer as subscript"
        )
    if not isinstance(base, Collection) or (not config.allow_bag and not base.has_order):
        return _nav_failure(
            config.type_mismatch,
            f"Array navigation '[{index}]' failed: non-array on left side",
        )
    if index >= len(base):
        return _nav_failure(
            config.absent, f"Array navigation '[{index}]' failed: index out of bounds"
        )
    return base[index]


def _eval_infix(node: InfixOp, env: Env, session: Session | None) -> Any:
    left = eval_expr(node.left, env, session)
    right = eval_expr(node.right, env, session)
    return eval_infix(node.op, left, right)


def _eval_prefix(node: PrefixOp, env: Env, session: Session | None) -> Any:
    return eval_prefix(node.op, eval_expr(node.value, env, session))


_EXPR_HANDLERS: dict[type, Callable[[Any, Env, Any], Any]] = {
    Literal: lambda node, env, session: node.value,
    SfwQuery: lambda node, env, session: eval_sfw(node, env, session),
    Var: _eval_var,
    TupleExpr: _eval_tuple,
    ArrayExpr: _eval_array,
    BagExpr: _eval_bag,
    TupleNav: _eval_tuple_nav,
    ArrayNav: _eval_array_nav,
    InfixOp: _eval_infix,
    PrefixOp: _eval_prefix,
    Function: lambda node, env, session: eval_function(node, env, session),
}


def eval_expr(expr: Any, env: Env, session: Session | None = None) -> Any:
    """Evaluate an expression node in an environment."""
    handler = _EXPR_HANDLERS.get(type(expr))
    if handler is None:
        raise TypeError(f"cannot evaluate {type(expr).__name__}")
    return handler(expr, env, session)


def eval_query(expr: Any, session: Session | None = None) -> Any:
    """Evaluate a parsed query in an empty environment."""
    return eval_expr(expr, Env(), session)


# -- functions -----------------------------------------------------------------


def func_sum(values: Collection) -> float:
    """Sum numbers, skipping missing and null."""
    total = 0.0
    for value in values:
        if _is_number(value):
            total += value
        elif not isinstance(value, (Missing, Null)):
            raise QueryError("sum(): unsupported type")
    return total


def func_avg(values: Collection) -> Any:
    """Average: sum divided by the number of elements; null when empty."""
    if len(values) == 0:
        return Null()
    try:
        return func_sum(values) / len(values)
    except QueryError:
        raise QueryError("avg(): unsupported type") from None


def func_max(values: Collection) -> Any:
    """The greatest value in the model's order; missing when empty."""
    best: Any = Missing()
    for position, value in enumerate(values):
        if position == 0 or value_less(best, value):
            best = value
    return best


def func_floor(args: list[Any]) -> float:
    """Round a single number down."""
    if len(args) != 1:
        raise QueryError("floor(): expects 1 argument")
    number = args[0]
    if not _is_number(number):
        raise QueryError("floor(): expects Number")
    return float(math.floor(number)) if math.isfinite(number) else float(number)


_FUNCTIONS: dict[str, Callable[[list[Any]], Any]] = {"floor": func_floor}
_AGGREGATES: dict[str, Callable[[Collection], Any]] = {
    "sum": func_sum,
    "max": func_max,
    "avg": func_avg,
}


def eval_function(func: Function, env: Env, session: Session | None = None) -> Any:
    """Evaluate a function call; aggregates also work on GROUP BY groups."""
    name = func.name.lower()

    plain = _FUNCTIONS.get(name)
    if plain is not None:
        return plain([eval_expr(arg, env, session) for arg in func.arguments])

    aggregate = _AGGREGATES.get(name)
    if aggregate is None:
        raise QueryError(f"Unknown function: {func.name}")
    if len(func.arguments) != 1:
        raise QueryError(f"Aggregate function:{func.name} expects 1 argument")

    group = env.bindings.get("group") if "group" in env.bindings else None
    if isinstance(group, Collection):
        values = Collection()
        for member in group:
            if not isinstance(member, Tuple):
                raise QueryError("Invalid element in group used by aggregate function")
            values.append(eval_expr(func.arguments[0], env.extend(member), session))
        return aggregate(values)

    value = eval_expr(func.arguments[0], env, session)
    if not isinstance(value, Collection):
        raise QueryError("Aggregate function expects collection or use with GROUP BY")
    return aggregate(value)


# -- FROM ----------------------------------------------------------------------


def _from_empty(node: FromEmpty, env: Env, session: Session | None) -> Bindings:
    return Bindings([{}])


def _from_collection(node: FromCollection, env: Env, session: Session | None) -> Bindings:
    output = Bindings(names={node.as_.name})
    at_name = node.at.name if node.at is not None and node.at.name else None
    if at_name is not None:
        output.names.add(at_name)

    value = eval_expr(node.expr, env, session)
    if not isinstance(value, Collection):
        raise QueryError("FROM collection: non-collection")
    output.has_order = value.has_order

    position = 1
    for element in value:
        if isinstance(element, Missing):
            continue
        row = {node.as_.name: element}
        if at_name is not None:
            row.setdefault(at_name, float(position))
            position += 1
        output.rows.append(row)
    return output


def _from_tuple(node: FromTuple, env: Env, session: Session | None) -> Bindings:
    output = Bindings(names={node.as_name.name, node.as_value.name})
    value = eval_expr(node.expr, env, session)
    if not isinstance(value, Tuple):
        raise QueryError("FROM tuple: non-tuple")
    for key, item in value.items():
        row = {node.as_name.name: key}
        row.setdefault(node.as_value.name, item)
        output.rows.append(row)
    return output


def _correlated(node: FromInner | FromLeft, env: Env, session: Session | None,
                keep_unmatched: bool) -> Bindings:
    output = Bindings()
    left = eval_from(node.left, env, session)
    names_inserted = False
    for l_row in left:
        right = eval_from(node.right, env.extend(l_row), session)
        if not names_inserted:
            output.names |= left.names | right.names
            names_inserted = True
        if len(right) == 0 and keep_unmatched:
            output.rows.append({**l_row, **{n: Missing() for n in right.names}})
            continue
        output.rows.extend({**l_row, **r_row} for r_row in right)
    return output


def _from_full(node: FromFull, env: Env, session: Session | None) -> Bindings:
    left = eval_from(node.left, env, session)
    right = eval_from(node.right, env, session)
    output = Bindings(names=left.names | right.names)
    right_used = [False] * len(right)

    for l_row in left:
        left_used = False
        for position, r_row in enumerate(right):
            cond = eval_expr(node.cond, env.extend(r_row).extend(l_row), session)
            if cond is True:
                output.rows.append({**l_row, **r_row})
                right_used[position] = True
                left_used = True
        if not left_used:
            output.rows.append({**l_row, **{n: Missing() for n in right.names}})

    for used, r_row in zip(right_used, right):
        if not used:
            output.rows.append({**{n: Missing() for n in left.names}, **r_row})
    return output


_FROM_HANDLERS: dict[type, Callable[[Any, Env, Any], Bindings]] = {
    FromEmpty: _from_empty,
    FromCollection: _from_collection,
    FromTuple: _from_tuple,
    FromInner: lambda node, env, session: _correlated(node, env, session, False),
    FromLeft: lambda node, env, session: _correlated(node, env, session, True),
    FromFull: _from_full,
}


def eval_from(from_clause: Any, env: Env, session: Session | None = None) -> Bindings:
    """Evaluate a FROM item into variable bindings."""
    handler = _FROM_HANDLERS.get(type(from_clause))
    if handler is None:
        raise TypeError(f"cannot evaluate {type(from_clause).__name__}")
    return handler(from_clause, env, session)


# -- SELECT-FROM-WHERE -----------------------------------------------------------


def _apply_where(where: Where, bindings: Bindings, env: Env, session: Session | None) -> None:
    kept = []
    for row in bindings:
        value = eval_expr(where.expr, env.extend(row), session)
        if not isinstance(value, bool):
            raise QueryError("WHERE: non-boolean expression")
        if value:
            kept.append(row)
    bindings.rows = kept


def _compare_keys(left: list[Any], right: list[Any]) -> int:
    if len(left) != len(right):
        return -1 if len(left) < len(right) else 1
    for a, b in zip(left, right):
        result = compare_values(a, b)
        if result:
            return result
    return 0


def _apply_group_by(terms: list[GroupByTerm], bindings: Bindings, env: Env,
                    session: Session | None) -> None:
    groups: list[tuple[list[Any], Collection]] = []
    for row in bindings:
        key = [eval_expr(term.expr, env.extend(row), session) for term in terms]
        for existing, members in groups:
            if len(existing) == len(key) and all(map(values_equal, existing, key)):
                members.append(Tuple(row))
                break
        else:
            groups.append((key, Collection([Tuple(row)])))

    groups.sort(key=functools.cmp_to_key(lambda a, b: _compare_keys(a[0], b[0])))

    bindings.rows = []
    bindings.has_order = False
    for key, members in groups:
        row: dict[str, Any] = {"group": members}
        for term, value in zip(terms, key):
            if term.as_ is not None and term.as_.name:
                row.setdefault(term.as_.name, value)
        bindings.rows.append(row)


def _apply_order_by(terms: list[OrderByTerm], bindings: Bindings, env: Env,
                    session: Session | None) -> None:
    def compare(a: dict[str, Any], b: dict[str, Any]) -> int:
        for term in terms:
            val_a = eval_expr(term.expr, env.extend(a), session)
            val_b = eval_expr(term.expr, env.extend(b), session)
            if op_lt(val_a, val_b):
                return 1 if term.desc else -1
            if op_gt(val_a, val_b):
                return -1 if term.desc else 1
        return 0

    bindings.rows.sort(key=functools.cmp_to_key(compare))
    bindings.has_order = True


def _count(clause: Limit | Offset, label: str, env: Env, session: Session | None) -> int:
    number = _as_index(eval_expr(clause.expr, env, session))
    if number is None:
        raise QueryError(f"{label}: require positive integer")
    return number


def _apply_limit_offset(limit: Limit | None, offset: Offset | None, bindings: Bindings,
                        env: Env, session: Session | None) -> None:
    start = _count(offset, "OFFSET", env, session) if offset is not None else 0
    count = _count(limit, "LIMIT", env, session) if limit is not None else len(bindings)
    bindings.rows = bindings.rows[start:start + count]


def _select_element(select: SelectElement, env: Env, session: Session | None,
                    bindings: Bindings) -> Collection:
    return Collection(
        (eval_expr(select.expr, env.extend(row), session) for row in bindings),
        has_order=bindings.has_order,
    )


def _select_attribute(select: SelectAttribute, env: Env, session: Session | None,
                      bindings: Bindings) -> Tuple:
    output = Tuple()
    for row in bindings:
        row_env = env.extend(row)
        name = eval_expr(select.attr, row_env, session)
        if not isinstance(name, str):
            raise QueryError("SELECT ATTRIBUTE: expected string as name")
        value = eval_expr(select.value, row_env, session)
        if not isinstance(value, Missing) and name not in output:
            output[name] = value
    return output


def eval_sfw(sfw: SfwQuery, env: Env, session: Session | None = None) -> Any:
    """Evaluate a select-from-where query."""
    bindings = eval_from(sfw.from_, env, session)
    if sfw.where is not None:
        _apply_where(sfw.where, bindings, env, session)
    if sfw.group_by is not None:
        _apply_group_by(sfw.group_by, bindings, env, session)
    if sfw.order_by is not None:
        _apply_order_by(sfw.order_by, bindings, env, session)
    if sfw.limit is not None or sfw.offset is not None:
        _apply_limit_offset(sfw.limit, sfw.offset, bindings, env, session)

    if isinstance(sfw.select, SelectAttribute):
        return _select_attribute(sfw.select, env, session, bindings)
    return _select_element(sfw.select, env, session, bindings)