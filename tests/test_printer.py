import io

import pytest

from cheesebase.model import Collection, Missing, Null, Tuple
from cheesebase.printer import print_json, to_json


def test_scalars():
    assert to_json(Missing()) == "missing"
    assert to_json(Null()) == "null"
    assert to_json(True) == "true"
    assert to_json(False) == "false"
    assert to_json("abc") == '"abc"'


def test_whole_numbers_print_without_fraction():
    assert to_json(3.0) == "3"
    assert to_json(0.5) == "0.5"


def test_empty_containers():
    assert to_json(Tuple()) == "{}"
    assert to_json(Collection()) == "[]"


def test_nested_layout():
    value = Tuple({"b": Collection([True, "x"]), "a": 1.0})
    expected = '{\n  "a": 1,\n  "b": [\n    true,\n    "x"\n  ]\n}'
    assert to_json(value) == expected


def test_tuple_keys_printed_in_order():
    text = to_json(Tuple({"zeta": Null(), "alpha": Null()}))
    assert text.index('"alpha"') < text.index('"zeta"')


def test_closing_bracket_aligned_with_opening_line():
    text = to_json(Collection([Collection([Null()])]))
    lines = text.split("\n")
    assert lines[0] == "["
    assert lines[-1] == "]"
    assert lines[1].strip() == "["
    assert lines[-2] == lines[1].replace("[", "]")


def test_print_json_appends_newline():
    value = Tuple({"k": Collection(["v"], has_order=True)})
    stream = io.StringIO()
    print_json(value, stream)
    assert stream.getvalue() == to_json(value) + "\n"


def test_rejects_foreign_values():
    with pytest.raises(TypeError):
        to_json(object())
    with pytest.raises(TypeError):
        to_json(Collection([{"a": 1}]))