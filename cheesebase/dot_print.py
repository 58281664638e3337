"""Render query syntax trees as Graphviz dot graphs."""

from __future__ import annotations

import io
from collections.abc import Callable
from typing import Any, TextIO

from .ast import (
    ArrayExpr, ArrayNav, BagExpr, FromCollection, FromEmpty, FromFull, FromInner,
    FromLeft, FromTuple, Function, GroupByTerm, InfixOp, Limit, Literal, Offset,
    OrderByTerm, PrefixOp, SelectAttribute, SelectElement, SfwQuery, TupleExpr,
    TupleNav, Var, Where,
)
from .model import Collection, Missing, Null, Tuple


class DotPrinter:
    """Writes nodes and edges of a tree to a stream as a dot digraph.

    The graph header is written on construction and the closing brace by
    ``close`` (or on leaving a ``with`` block).
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._next_id = 0
        self._closed = False
        self._handlers: dict[type, Callable[[Any], int]] = {
            Var: self._var,
            Literal: lambda node: self._value(node.value),
            SelectAttribute: self._select_attribute,
            SelectElement: self._select_element,
            FromEmpty: lambda node: self._node("FromEmpty"),
            FromCollection: self._from_collection,
            FromTuple: self._from_tuple,
            FromInner: lambda node: self._join("FromInner", node),
            FromLeft: lambda node: self._join("FromLeft", node),
            FromFull: self._from_full,
            Where: lambda node: self._wrapped("Where", node.expr),
            Limit: lambda node: self._wrapped("Limit", node.expr),
            Offset: lambda node: self._wrapped("Offset", node.expr),
            SfwQuery: self._sfw,
            ArrayExpr: lambda node: self._sequence("Array", node.items),
            BagExpr: lambda node: self._sequence("Bag", node.items),
            TupleExpr: self._tuple_expr,
            TupleNav: self._tuple_nav,
            ArrayNav: self._array_nav,
            InfixOp: self._infix,
            PrefixOp: self._prefix,
            Function: self._function,
        }
        stream.write("digraph g {\n")

    def __enter__(self) -> DotPrinter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Finish the graph; further calls do nothing."""
        if not self._closed:
            self._stream.write("}\n")
            self._closed = True

    def render(self, node: Any) -> int:
        """Write ``node`` and its children; return the id of ``node``."""
        handler = self._handlers.get(type(node))
        if handler is None:
            raise TypeError(f"cannot render {type(node).__name__}")
        return handler(node)

    # -- output -------------------------------------------------------------

    def _node(self, label: str, shape: str = "plaintext") -> int:
        node_id = self._next_id
        self._stream.write(f'  {node_id} [label="{label}" shape={shape}];\n')
        self._next_id += 1
        return node_id

    def _edge(self, source: int, target: int) -> None:
        self._stream.write(f"  {source} -> {target};\n")

    def _children(self, label: str, *children: Any) -> int:
        node_id = self._node(label)
        for child in children:
            self._edge(node_id, self.render(child))
        return node_id

    # -- syntax nodes ---------------------------------------------------------

    def _var(self, var: Var | None) -> int:
        return self._node(var.name if var is not None else "", "box")

    def _key(self, key: str) -> int:
        return self._node('\\"' + key + '\\"', "oval")

    def _wrapped(self, label: str, expr: Any) -> int:
        return self._children(label, expr)

    def _select_attribute(self, node: SelectAttribute) -> int:
        return self._children("SelectAttribute", node.attr, node.value)

    def _select_element(self, node: SelectElement) -> int:
        return self._children("SelectExpr", node.expr)

    def _from_collection(self, node: FromCollection) -> int:
        node_id = self._children("FromCollection", node.expr)
        self._edge(node_id, self._var(node.as_))
        self._edge(node_id, self._var(node.at))
        return node_id

    def _from_tuple(self, node: FromTuple) -> int:
        return self._children("FromTuple", node.expr, node.as_name, node.as_value)

    def _join(self, label: str, node: FromInner | FromLeft) -> int:
        return self._children(label, node.left, node.right)

    def _from_full(self, node: FromFull) -> int:
        return self._children("FromLeft", node.left, node.right, node.cond)

    def _order_by(self, terms: list[OrderByTerm]) -> int:
        node_id = self._node("OrderBy")
        for term in terms:
            term_id = self._node("Desc" if term.desc else "Asc")
            self._edge(node_id, term_id)
            self._edge(term_id, self.render(term.expr))
        return node_id

    def _group_by(self, terms: list[GroupByTerm]) -> int:
        node_id = self._node("GroupBy")
        for term in terms:
            point = self._node("", "point")
            self._edge(node_id, point)
            self._edge(point, self.render(term.expr))
            if term.as_ is not None and term.as_.name:
                self._edge(point, self._var(term.as_))
        return node_id

    def _sfw(self, query: SfwQuery) -> int:
        node_id = self._children("SfwQuery", query.select, query.from_)
        if query.where is not None:
            self._edge(node_id, self.render(query.where))
        if query.group_by is not None:
            self._edge(node_id, self._group_by(query.group_by))
        if query.order_by is not None:
            self._edge(node_id, self._order_by(query.order_by))
        if query.limit is not None:
            self._edge(node_id, self.render(query.limit))
        if query.offset is not None:
            self._edge(node_id, self.render(query.offset))
        return node_id

    def _sequence(self, label: str, items: list[Any]) -> int:
        return self._children(label, *items)

    def _tuple_expr(self, node: TupleExpr) -> int:
        node_id = self._node("Tuple")
        for key, expr in node.members.items():
            point = self._node("", "point")
            self._edge(node_id, point)
            self._edge(point, self._key(key))
            self._edge(point, self.render(expr))
        return node_id

    def _tuple_nav(self, node: TupleNav) -> int:
        node_id = self._children("TupleNav", node.base)
        self._edge(node_id, self._key(node.key))
        return node_id

    def _array_nav(self, node: ArrayNav) -> int:
        return self._children("ArrayNav", node.base, node.index)

    def _infix(self, node: InfixOp) -> int:
        return self._children(node.op.value, node.left, node.right)

    def _prefix(self, node: PrefixOp) -> int:
        return self._children(node.op.value, node.value)

    def _function(self, node: Function) -> int:
        return self._children(node.name, *node.arguments)

    # -- model values ---------------------------------------------------------

    def _value(self, value: Any) -> int:
        if isinstance(value, Missing):
            return self._node("missing", "oval")
        if isinstance(value, Null):
            return self._node("null", "oval")
        if isinstance(value, bool):
            return self._node("true" if value else "false", "oval")
        if isinstance(value, (int, float)):
            return self._node(f"{float(value):.6f}", "oval")
        if isinstance(value, str):
            return self._key(value)
        if isinstance(value, Tuple):
            node_id = self._node("Tuple", "oval")
            for key, item in value.items():
                point = self._node("", "point")
                self._edge(node_id, point)
                self._edge(point, self._key(key))
                self._edge(point, self._value(item))
            return node_id
        if isinstance(value, Collection):
            node_id = self._node("Array" if value.has_order else "Bag", "oval")
            for item in value:
                self._edge(node_id, self._value(item))
            return node_id
        raise TypeError(f"cannot render {type(value).__name__}")


def to_dot(node: Any) -> str:
    """Return the dot graph of a syntax tree as text."""
    buffer = io.StringIO()
    with DotPrinter(buffer) as printer:
        printer.render(node)
    return buffer.getvalue()