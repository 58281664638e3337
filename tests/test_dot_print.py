import io
import re

import pytest

from cheesebase.ast import (
    ArrayExpr, BagExpr, FromCollection, Function, GroupByTerm, InfixOp, Literal,
    Operator, SelectElement, SfwQuery, TupleExpr, TupleNav, Var,
)
from cheesebase.dot_print import DotPrinter, to_dot
from cheesebase.model import Collection, Missing, Null, Tuple
from cheesebase.parser import parse_query

NODE_RE = re.compile(r'^  (\d+) \[label="(.*)" shape=(\w+)\];$')
EDGE_RE = re.compile(r"^  (\d+) -> (\d+);$")


def parse_graph(text):
    lines = text.splitlines()
    assert lines[0] == "digraph g {"
    assert lines[-1] == "}"
    nodes = {}
    edges = []
    for line in lines[1:-1]:
        node = NODE_RE.match(line)
        if node:
            nodes[int(node.group(1))] = (node.group(2), node.group(3))
            continue
        edge = EDGE_RE.match(line)
        assert edge, line
        edges.append((int(edge.group(1)), int(edge.group(2))))
    return nodes, edges


def assert_tree(nodes, edges):
    assert sorted(nodes) == list(range(len(nodes)))
    assert len(edges) == len(nodes) - 1
    targets = [target for _, target in edges]
    assert sorted(targets) == list(range(1, len(nodes)))


def test_single_variable():
    assert to_dot(Var("x")) == 'digraph g {\n  0 [label="x" shape=box];\n}\n'


def test_infix_operation_labels_and_edges():
    nodes, edges = parse_graph(to_dot(InfixOp(Var("a"), Operator.PLUS, Literal(1.0))))
    assert nodes[0] == ("+", "plaintext")
    assert nodes[1] == ("a", "box")
    assert nodes[2] == ("1.000000", "oval")
    assert edges == [(0, 1), (0, 2)]


def test_literal_scalars():
    assert parse_graph(to_dot(Literal(Missing())))[0][0] == ("missing", "oval")
    assert parse_graph(to_dot(Literal(Null())))[0][0] == ("null", "oval")
    assert parse_graph(to_dot(Literal(True)))[0][0] == ("true", "oval")
    assert parse_graph(to_dot(Literal("hi")))[0][0] == ('\\"hi\\"', "oval")


def test_collection_labels_follow_order_flag():
    nodes, _ = parse_graph(to_dot(Literal(Collection([1.0], has_order=True))))
    assert nodes[0] == ("Array", "oval")
    nodes, _ = parse_graph(to_dot(Literal(Collection([1.0], has_order=False))))
    assert nodes[0] == ("Bag", "oval")


def test_model_tuple_uses_point_nodes():
    nodes, edges = parse_graph(to_dot(Literal(Tuple(a=1.0, b="x"))))
    assert_tree(nodes, edges)
    shapes = [shape for _, shape in nodes.values()]
    assert shapes.count("point") == 2
    assert nodes[0] == ("Tuple", "oval")


def test_tuple_constructor_and_navigation():
    expr = TupleNav(TupleExpr({"k": ArrayExpr([Var("v")])}), "k")
    nodes, edges = parse_graph(to_dot(expr))
    assert_tree(nodes, edges)
    labels = [label for label, _ in nodes.values()]
    assert labels[0] == "TupleNav"
    assert labels.count('\\"k\\"') == 2
    assert "Array" in labels


def test_function_node_has_argument_edges():
    nodes, edges = parse_graph(to_dot(Function("sum", [Var("x"), BagExpr([])])))
    assert nodes[0] == ("sum", "plaintext")
    assert [source for source, _ in edges] == [0, 0]
    assert nodes[2] == ("Bag", "plaintext")


def test_from_collection_without_at_prints_empty_box():
    nodes, edges = parse_graph(to_dot(FromCollection(Var("c"), Var("x"))))
    assert_tree(nodes, edges)
    assert ("", "box") in nodes.values()


def test_group_by_alias_only_when_named():
    query = SfwQuery(
        SelectElement(Var("g")),
        FromCollection(Var("c"), Var("x")),
        group_by=[GroupByTerm(Var("x")), GroupByTerm(Var("y"), Var("alias"))],
    )
    nodes, edges = parse_graph(to_dot(query))
    assert_tree(nodes, edges)
    labels = [label for label, _ in nodes.values()]
    assert "GroupBy" in labels
    assert labels.count("alias") == 1


def test_parsed_query_is_a_tree():
    query = parse_query(
        "SELECT ELEMENT x FROM coll AS x WHERE x > 1 ORDER BY x DESC LIMIT 2 OFFSET 1"
    )
    nodes, edges = parse_graph(to_dot(query))
    assert_tree(nodes, edges)
    labels = {label for label, _ in nodes.values()}
    assert {"SfwQuery", "SelectExpr", "FromCollection", "Where", ">", "OrderBy",
            "Desc", "Limit", "Offset"} <= labels


def test_render_returns_sequential_ids():
    buffer = io.StringIO()
    with DotPrinter(buffer) as printer:
        first = printer.render(Var("a"))
        second = printer.render(InfixOp(Var("b"), Operator.EQ, Var("c")))
    assert first == 0
    assert second == 1
    nodes, _ = parse_graph(buffer.getvalue())
    assert nodes[1] == ("==", "plaintext")


def test_close_writes_footer_once():
    buffer = io.StringIO()
    printer = DotPrinter(buffer)
    printer.close()
    printer.close()
    assert buffer.getvalue() == "digraph g {\n}\n"


def test_unknown_node_raises():
    with pytest.raises(TypeError):
        to_dot(object())