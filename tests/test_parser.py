import pytest

from cheesebase.ast import (
    ArrayExpr, ArrayNav, BagExpr, FromCollection, FromFull, FromInner, FromTuple,
    Function, InfixOp, Limit, Literal, Operator, OrderByTerm, PrefixOp,
    PrefixOperator, SelectAttribute, SelectElement, SfwQuery, TupleExpr,
    TupleNav, Var, Where,
)
from cheesebase.model import Collection, Missing, Null, Tuple
from cheesebase.parser import ParserError, parse_json, parse_query, parse_value


def test_parse_scalars():
    assert parse_value("null") is Null()
    assert parse_value("missing") is Missing()
    assert parse_value("true") is True
    assert parse_value("-3") == -3.0
    assert parse_value('"abc"') == "abc"


def test_parse_nested_value():
    v = parse_json('{"a": [1, 2], "b": {}}')
    assert v == Tuple({"a": Collection([1.0, 2.0]), "b": Tuple()})


def test_parse_value_errors():
    with pytest.raises(ParserError, match="Parse unsuccessful"):
        parse_value("")
    with pytest.raises(ParserError, match="Did not consume all input"):
        parse_value("1 2")
    with pytest.raises(ParserError):
        parse_value("[1, 2")


def test_precedence_and_associativity():
    assert parse_query("1 + 2 * 3") == InfixOp(
        Literal(1.0), Operator.PLUS, InfixOp(Literal(2.0), Operator.MUL, Literal(3.0)))
    assert parse_query("a - b - c") == InfixOp(
        InfixOp(Var("a"), Operator.MINUS, Var("b")), Operator.MINUS, Var("c"))


def test_prefix_takes_whole_expression():
    assert parse_query("-1 + 2") == PrefixOp(
        PrefixOperator.NEG, InfixOp(Literal(1.0), Operator.PLUS, Literal(2.0)))


def test_equality_operators():
    for text, op in [("a = b", Operator.EQ), ("a <> b", Operator.NEQ), ("a <= b", Operator.LE)]:
        assert parse_query(text) == InfixOp(Var("a"), op, Var("b"))


def test_navigation_and_constructors():
    assert parse_query("x.a[0]") == ArrayNav(TupleNav(Var("x"), "a"), Literal(0.0))
    assert parse_query("{{1}}") == BagExpr([Literal(1.0)])
    assert parse_query("[x]") == ArrayExpr([Var("x")])
    assert parse_query('{a: 1, "b": x}') == TupleExpr({"a": Literal(1.0), "b": Var("x")})
    assert parse_query("sum(xs)") == Function("sum", [Var("xs")])
    assert parse_query("`odd name`") == Var("odd name")


def test_simple_sfw():
    q = parse_query("SELECT ELEMENT x FROM xs AS x AT i WHERE x > 1 ORDER BY x DESC LIMIT 2")
    assert q == SfwQuery(
        SelectElement(Var("x")),
        FromCollection(Var("xs"), Var("x"), Var("i")),
        Where(InfixOp(Var("x"), Operator.GT, Literal(1.0))),
        order_by=[OrderByTerm(Var("x"), True)],
        limit=Limit(Literal(2.0)),
    )


def test_select_list_and_attribute():
    q = parse_query("SELECT x, x.a AS y FROM xs AS x")
    assert q.select == SelectElement(TupleExpr({"x": Var("x"), "y": TupleNav(Var("x"), "a")}))
    q = parse_query("SELECT ATTRIBUTE k : v FROM t AS {k : v}")
    assert q.select == SelectAttribute(Var("k"), Var("v"))
    assert q.from_ == FromTuple(Var("t"), Var("k"), Var("v"))


def test_select_without_name_fails():
    with pytest.raises(ParserError, match="Could not derive name"):
        parse_query("SELECT x.a FROM xs AS x")


def test_inner_join_desugars():
    q = parse_query("SELECT ELEMENT a FROM as AS a INNER JOIN bs AS b ON a = b")
    inner = SfwQuery(SelectElement(Var("b")), FromCollection(Var("bs"), Var("b")),
                     Where(InfixOp(Var("a"), Operator.EQ, Var("b"))))
    assert q.from_ == FromInner(FromCollection(Var("as"), Var("a")),
                                FromCollection(inner, Var("b")))


def test_full_join():
    q = parse_query("SELECT ELEMENT a FROM as AS a FULL JOIN bs AS b ON a = b")
    assert q.from_ == FromFull(FromCollection(Var("as"), Var("a")),
                               FromCollection(Var("bs"), Var("b")),
                               InfixOp(Var("a"), Operator.EQ, Var("b")))


def test_trailing_operator_rejected():
    with pytest.raises(ParserError, match="Did not consume all input"):
        parse_query("1 +")