"""Syntax tree of the query language."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .model import values_equal


@dataclass
class Var:
    """A variable reference by name."""

    name: str


@dataclass(eq=False)
class Literal:
    """A constant model value."""

    value: Any

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return values_equal(self.value, other.value)

    __hash__ = None  # type: ignore[assignment]


@dataclass
class TupleExpr:
    """Tuple constructor ``{name: expr, ...}``."""

    members: dict[str, Expr] = field(default_factory=dict)


@dataclass
class BagExpr:
    """Bag constructor ``{{expr, ...}}``."""

    items: list[Expr] = field(default_factory=list)


@dataclass
class ArrayExpr:
    """Array constructor ``[expr, ...]``."""

    items: list[Expr] = field(default_factory=list)


@dataclass
class Function:
    """Function call ``name(arg, ...)``."""

    name: str
    arguments: list[Expr] = field(default_factory=list)


@dataclass
class TupleNav:
    """Member access ``base.key``."""

    base: Expr
    key: str


@dataclass
class ArrayNav:
    """Subscript ``base[index]``."""

    base: Expr
    index: Expr


class Operator(Enum):
    """Binary operators, valued by their symbol."""

    PLUS = "+"
    MINUS = "-"
    MUL = "*"
    DIV = "/"
    MODULO = "%"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "=="
    NEQ = "!="


class PrefixOperator(Enum):
    """Unary operators, valued by their symbol."""

    NEG = "-"


@dataclass
class InfixOp:
    """Binary operation ``left op right``."""

    left: Expr
    op: Operator
    right: Expr


@dataclass
class PrefixOp:
    """Unary operation ``op value``."""

    op: PrefixOperator
    value: Expr


@dataclass
class SelectElement:
    """``SELECT ELEMENT expr`` (also the desugared select list)."""

    expr: Expr


@dataclass
class SelectAttribute:
    """``SELECT ATTRIBUTE name : value``."""

    attr: Expr
    value: Expr


@dataclass
class FromEmpty:
    """A query without a FROM clause: a single empty binding."""


@dataclass
class FromCollection:
    """``expr AS var [AT var]``."""

    expr: Expr
    as_: Var
    at: Var | None = None


@dataclass
class FromTuple:
    """``expr AS {name : value}``."""

    expr: Expr
    as_name: Var
    as_value: Var


@dataclass
class FromInner:
    """Inner correlated join."""

    left: FromItem
    right: FromItem


@dataclass
class FromLeft:
    """Left outer correlated join."""

    left: FromItem
    right: FromItem


@dataclass
class FromFull:
    """Full outer join on a condition."""

    left: FromItem
    right: FromItem
    cond: Expr


@dataclass
class Where:
    expr: Expr


@dataclass
class GroupByTerm:
    expr: Expr
    as_: Var | None = None


@dataclass
class OrderByTerm:
    expr: Expr
    desc: bool = False


@dataclass
class Limit:
    expr: Expr


@dataclass
class Offset:
    expr: Expr


@dataclass
class SfwQuery:
    """A select-from-where query."""

    select: SelectElement | SelectAttribute
    from_: FromItem = field(default_factory=FromEmpty)
    where: Where | None = None
    group_by: list[GroupByTerm] | None = None
    order_by: list[OrderByTerm] | None = None
    limit: Limit | None = None
    offset: Offset | None = None


Expr = Union[
    Var, SfwQuery, TupleExpr, BagExpr, ArrayExpr, TupleNav, ArrayNav,
    InfixOp, PrefixOp, Function, Literal,
]
FromItem = Union[FromEmpty, FromCollection, FromTuple, FromInner, FromLeft, FromFull]