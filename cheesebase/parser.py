"""Recursive-descent parser for the query language and for JSON-like values."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any, TypeVar

from .ast import (
    ArrayExpr, ArrayNav, BagExpr, FromCollection, FromFull, FromInner, FromLeft,
    FromTuple, Function, GroupByTerm, InfixOp, Limit, Literal, Offset, Operator,
    OrderByTerm, PrefixOp, PrefixOperator, SelectAttribute, SelectElement,
    SfwQuery, TupleExpr, TupleNav, Var, Where,
)
from .model import Collection, Missing, Null, Tuple


class ParserError(ValueError):
    """Raised when text cannot be parsed."""


class _NoMatch(Exception):
    """A rule did not match; the caller may backtrack."""


T = TypeVar("T")

_NAME_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_SPACE = " \t\n\r\f\v"

_INFIX_MUL = [("*", Operator.MUL), ("/", Operator.DIV), ("%", Operator.MODULO)]
_INFIX_ADD = [("+", Operator.PLUS), ("-", Operator.MINUS)]
_INFIX_CMP = [("<=", Operator.LE), ("<", Operator.LT), (">=", Operator.GE), (">", Operator.GT)]
_INFIX_EQ = [("==", Operator.EQ), ("=", Operator.EQ), ("!=", Operator.NEQ), ("<>", Operator.NEQ)]


def _first_wins(pairs) -> dict:
    result: dict = {}
    for key, value in pairs:
        result.setdefault(key, value)
    return result


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    # -- primitives -------------------------------------------------------

    def skip(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _SPACE:
            self.pos += 1

    def lit(self, word: str) -> bool:
        self.skip()
        if not self.text.startswith(word, self.pos):
            return False
        end = self.pos + len(word)
        if word[-1].isalnum() and end < len(self.text):
            following = self.text[end]
            if following.isalnum() or following == "_":
                return False
        self.pos = end
        return True

    def need(self, word: str) -> None:
        if not self.lit(word):
            raise _NoMatch

    def fail(self, message: str):
        raise ParserError(f"{message} at position {self.pos}")

    def expect_lit(self, word: str) -> None:
        if not self.lit(word):
            self.fail(f"expected {word!r}")

    def attempt(self, rule: Callable[[], T]) -> T | None:
        saved = self.pos
        try:
            return rule()
        except _NoMatch:
            self.pos = saved
            return None

    def expect(self, rule: Callable[[], T]) -> T:
        result = self.attempt(rule)
        if result is None:
            self.fail(f"expected {getattr(rule, '__name__', 'input')}")
        return result

    def alternatives(self, *rules: Callable[[], Any]) -> Any:
        for rule in rules:
            result = self.attempt(rule)
            if result is not None:
                return result
        raise _NoMatch

    def separated(self, rule: Callable[[], T]) -> list[T]:
        first = self.attempt(rule)
        if first is None:
            return []
        items = [first]
        while True:
            saved = self.pos
            if not self.lit(","):
                break
            item = self.attempt(rule)
            if item is None:
                self.pos = saved
                break
            items.append(item)
        return items

    def expect_separated(self, rule: Callable[[], T]) -> list[T]:
        items = self.separated(rule)
        if not items:
            self.fail("expected list")
        return items

    # -- lexical rules ----------------------------------------------------

    def name(self) -> str:
        self.skip()
        text = self.text
        if self.pos < len(text) and text[self.pos] == "`":
            end = text.find("`", self.pos + 1)
            if end <= self.pos + 1:
                raise _NoMatch
            value = text[self.pos + 1:end]
            self.pos = end + 1
            return value
        match = _NAME_RE.match(text, self.pos)
        if not match:
            raise _NoMatch
        self.pos = match.end()
        return match.group()

    def string(self) -> str:
        self.skip()
        if self.pos >= len(self.text) or self.text[self.pos] != '"':
            raise _NoMatch
        end = self.text.find('"', self.pos + 1)
        if end < 0:
            raise _NoMatch
        value = self.text[self.pos + 1:end]
        self.pos = end + 1
        return value

    def number(self) -> float:
        self.skip()
        match = _NUMBER_RE.match(self.text, self.pos)
        if not match:
            raise _NoMatch
        self.pos = match.end()
        return float(match.group())

    def scalar(self) -> Any:
        if self.lit("missing"):
            return Missing()
        if self.lit("null"):
            return Null()
        number = self.attempt(self.number)
        if number is not None:
            return number
        if self.lit("true"):
            return True
        if self.lit("false"):
            return False
        return self.string()

    # -- values -----------------------------------------------------------

    def value(self) -> Any:
        return self.alternatives(self.tuple_value, self.collection_value, self.scalar)

    def tuple_member_value(self) -> tuple[str, Any]:
        key = self.string()
        self.expect_lit(":")
        return key, self.expect(self.value)

    def tuple_value(self) -> Tuple:
        self.need("{")
        members = self.separated(self.tuple_member_value)
        self.expect_lit("}")
        return Tuple(_first_wins(members))

    def collection_value(self) -> Collection:
        self.need("[")
        items = self.separated(self.value)
        self.expect_lit("]")
        return Collection(items)

    # -- expressions ------------------------------------------------------

    def query(self):
        return self.alternatives(self.sfw_query, self.expr)

    def expr(self):
        return self.binary(self.expr6, _INFIX_EQ)

    def expr6(self):
        return self.binary(self.expr5, _INFIX_CMP)

    def expr5(self):
        return self.binary(self.expr4, _INFIX_ADD)

    def expr4(self):
        return self.binary(self.expr3, _INFIX_MUL)

    def binary(self, operand: Callable[[], Any], ops) -> Any:
        node = operand()
        while True:
            saved = self.pos
            op = next((o for symbol, o in ops if self.lit(symbol)), None)
            if op is None:
                break
            right = self.attempt(operand)
            if right is None:
                self.pos = saved
                break
            node = InfixOp(node, op, right)
        return node

    def expr3(self):
        return self.alternatives(self.prefix, self.expr2)

    def prefix(self):
        self.need("-")
        return PrefixOp(PrefixOperator.NEG, self.expr())

    def expr2(self):
        node = self.expr1()
        while True:
            if self.lit("."):
                node = TupleNav(node, self.expect(self.name))
            elif self.lit("["):
                node = ArrayNav(node, self.expect(self.expr))
                self.expect_lit("]")
            else:
                return node

    def expr1(self):
        return self.alternatives(self.expr0, self.paren_expr)

    def paren_expr(self):
        self.need("(")
        inner = self.expr()
        self.need(")")
        return inner

    def expr0(self):
        return self.alternatives(
            self.paren_sfw, self.function, self.bag, self.tuple_expr,
            self.array_expr, lambda: Literal(self.scalar()), lambda: Var(self.name()),
        )

    def paren_sfw(self):
        self.need("(")
        query = self.sfw_query()
        self.need(")")
        return query

    def function(self):
        name = self.name()
        self.need("(")
        args = self.separated(self.query)
        self.need(")")
        return Function(name, args)

    def bag(self):
        self.need("{{")
        items = self.separated(self.expr)
        self.expect_lit("}}")
        return BagExpr(items)

    def tuple_member(self):
        key = self.alternatives(self.name, self.string)
        self.need(":")
        return key, self.expr()

    def tuple_expr(self):
        self.need("{")
        members = self.separated(self.tuple_member)
        self.expect_lit("}")
        return TupleExpr(_first_wins(members))

    def array_expr(self):
        self.need("[")
        items = self.separated(self.expr)
        self.expect_lit("]")
        return ArrayExpr(items)

    # -- select-from-where --------------------------------------------------

    def sfw_query(self) -> SfwQuery:
        self.need("SELECT")
        query = SfwQuery(self.expect(lambda: self.alternatives(
            self.select_attribute, self.select_element)))
        if self.lit("FROM"):
            query.from_ = self.expect(self.from_item)
            if self.lit("WHERE"):
                query.where = Where(self.expect(self.expr))
            if self.lit("GROUP BY"):
                query.group_by = self.expect_separated(self.group_by_term)
            if self.lit("ORDER BY"):
                query.order_by = self.expect_separated(self.order_by_term)
            if self.lit("LIMIT"):
                query.limit = Limit(self.expect(self.expr))
            if self.lit("OFFSET"):
                query.offset = Offset(self.expect(self.expr))
        return query

    def select_attribute(self):
        self.need("ATTRIBUTE")
        attr = self.expect(self.expr)
        self.expect_lit(":")
        return SelectAttribute(attr, self.expect(self.expr))

    def select_element(self):
        if self.lit("ELEMENT"):
            return SelectElement(self.expect(self.expr))
        members = self.separated(self.select_member)
        if not members:
            raise _NoMatch
        return SelectElement(TupleExpr(_first_wins(members)))

    def select_member(self):
        expr = self.expr()
        saved = self.pos
        if self.lit("AS"):
            name = self.attempt(self.name)
            if name is not None:
                return name, expr
            self.pos = saved
        if isinstance(expr, Var):
            return expr.name, expr
        raise ParserError("Could not derive name for SELECT pair")

    def group_by_term(self):
        expr = self.expr()
        alias = Var(self.expect(self.name)) if self.lit("AS") else None
        return GroupByTerm(expr, alias)

    def order_by_term(self):
        expr = self.expr()
        if self.lit("ASC"):
            return OrderByTerm(expr, False)
        return OrderByTerm(expr, self.lit("DESC"))

    def from_item(self):
        return self.from_item6()

    def from_collection(self):
        expr = self.expr()
        self.need("AS")
        alias = Var(self.name())
        at = None
        saved = self.pos
        if self.lit("AT"):
            at_name = self.attempt(self.name)
            if at_name is None:
                self.pos = saved
            else:
                at = Var(at_name)
        return FromCollection(expr, alias, at)

    def from_tuple(self):
        expr = self.expr()
        self.need("AS")
        self.need("{")
        name = Var(self.expect(self.name))
        self.expect_lit(":")
        value = Var(self.expect(self.name))
        self.expect_lit("}")
        return FromTuple(expr, name, value)

    def paren_from(self):
        self.need("(")
        inner = self.expect(self.from_item)
        self.expect_lit(")")
        return inner

    def from_item0(self):
        return self.alternatives(self.from_collection, self.from_tuple, self.paren_from)

    @staticmethod
    def join_right(coll: FromCollection, cond) -> FromCollection:
        query = SfwQuery(SelectElement(Var(coll.as_.name)), coll, Where(cond))
        return FromCollection(query, Var(coll.as_.name))

    def join_clause(self):
        coll = self.expect(self.from_collection)
        self.expect_lit("ON")
        return coll, self.expect(self.expr)

    def from_item1(self):
        node = self.from_item0()
        while self.lit("INNER JOIN"):
            node = FromInner(node, self.join_right(*self.join_clause()))
        return node

    def from_item2(self):
        node = self.from_item1()
        while self.lit("LEFT JOIN"):
            node = FromLeft(node, self.join_right(*self.join_clause()))
        return node

    def from_item3(self):
        node = self.from_item2()
        while self.lit("RIGHT JOIN"):
            other = self.expect(self.from_item)
            self.expect_lit("ON")
            cond = self.expect(self.expr)
            if not isinstance(node, FromCollection):
                self.fail("RIGHT JOIN requires a collection on its left")
            node = FromLeft(other, self.join_right(node, cond))
        return node

    def from_item4(self):
        node = self.from_item3()
        while True:
            saved = self.pos
            if not self.lit("INNER"):
                return node
            self.lit("CORRELATE")
            right = self.attempt(self.from_item3)
            if right is None:
                self.pos = saved
                return node
            node = FromInner(node, right)

    def from_item5(self):
        node = self.from_item4()
        while True:
            saved = self.pos
            if not self.lit("LEFT"):
                return node
            self.lit("OUTER")
            self.lit("CORRELATE")
            right = self.attempt(self.from_item4)
            if right is None:
                self.pos = saved
                return node
            node = FromLeft(node, right)

    def from_item6(self):
        node = self.from_item5()
        while self.lit("FULL"):
            if not self.lit("JOIN"):
                self.lit("OUTER")
                self.lit("CORRELATE")
            right = self.expect(self.from_item5)
            self.expect_lit("ON")
            node = FromFull(node, right, self.expect(self.expr))
        return node


def _parse_all(text: str, rule_name: str):
    parser = _Parser(text)
    result = parser.attempt(getattr(parser, rule_name))
    if result is None:
        raise ParserError("Parse unsuccessful")
    parser.skip()
    if parser.pos != len(text):
        raise ParserError("Did not consume all input")
    return result


def parse_query(text: str):
    """Parse a query into its syntax tree."""
    return _parse_all(text, "query")


def parse_value(text: str) -> Any:
    """Parse a JSON-like value into a model value."""
    return _parse_all(text, "value")


def parse_json(text: str) -> Any:
    """Parse JSON text into a model value."""
    return parse_value(text)