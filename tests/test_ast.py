from cheesebase.ast import (
    FromCollection, FromEmpty, InfixOp, Literal, Operator, PrefixOperator,
    SelectElement, SfwQuery, Var,
)
from cheesebase.model import Null


def test_literal_equality_uses_model_semantics():
    assert Literal(Null()) == Literal(Null())
    assert not (Literal(True) == Literal(1.0))


def test_operators_look_up_by_symbol():
    assert Operator("==") is Operator.EQ
    assert Operator("!=") is Operator.NEQ
    assert PrefixOperator("-") is PrefixOperator.NEG


def test_sfw_defaults():
    q = SfwQuery(SelectElement(Var("x")))
    assert q.from_ == FromEmpty()
    assert q.where is None and q.limit is None


def test_structural_equality():
    a = InfixOp(Literal(1.0), Operator.PLUS, Var("x"))
    b = InfixOp(Literal(1.0), Operator.PLUS, Var("x"))
    assert a == b
    assert FromCollection(Var("xs"), Var("x")).at is None