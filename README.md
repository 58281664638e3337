# cheesebase

A small document value model together with a SQL++-style query language.
It parses JSON-like values and queries, evaluates queries against
in-memory data, and prints results as indented JSON or query trees as
Graphviz dot graphs.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Values

`cheesebase.model` defines the value kinds: `Missing`, `Null`, numbers,
booleans, strings, `Tuple` (a mapping of string names to values, iterated
in key order) and `Collection` (a sequence whose `has_order` flag marks an
array rather than a bag). Values of different kinds order by kind, in
that sequence; values of the same kind by their content.
`values_equal`, `value_less`, `compare_values` and `type_rank` implement
that ordering, and the model classes compare with `<`, `>`, `<=`, `>=`
and `==` accordingly.

```python
from cheesebase.parser import parse_value
from cheesebase.printer import to_json

value = parse_value('{ "name": "gouda", "age": 12, "tags": ["hard", "dutch"] }')
print(to_json(value))
```

`parse_value` (and its alias `parse_json`) reads numbers as floats,
`true`/`false`, `null`, `missing`, double-quoted strings without escapes,
`{ ... }` tuples and `[ ... ]` collections. `printer.print_json(value,
stream)` writes the rendered text followed by a newline.

## Queries

```python
from cheesebase.evaluator import DictSession, eval_query
from cheesebase.parser import parse_query, parse_value

root = parse_value('''{
  "cheeses": [
    { "name": "gouda", "age": 12, "country": "nl" },
    { "name": "brie",  "age": 2,  "country": "fr" },
    { "name": "comte", "age": 18, "country": "fr" }
  ]
}''')

session = DictSession(root)
query = parse_query(
    "SELECT ELEMENT c.name FROM cheeses AS c WHERE c.age > 5 ORDER BY c.age DESC"
)
print(eval_query(query, session))
```

Names not bound by the query are looked up in the session's root tuple
(`DictSession.get_root`); without a session they evaluate to `Missing`.

Supported clauses are `SELECT ELEMENT expr`, `SELECT ATTRIBUTE name : value`,
`SELECT expr AS name, ...`, `FROM expr AS x AT i`, `FROM expr AS {k : v}`,
`INNER [CORRELATE]`, `LEFT [OUTER] [CORRELATE]`, `FULL [OUTER] ... ON`,
`INNER JOIN ... ON`, `LEFT JOIN ... ON`, `RIGHT JOIN ... ON`, `WHERE`,
`GROUP BY expr [AS name]`, `ORDER BY expr [ASC|DESC]`, `LIMIT` and `OFFSET`.
Expressions support arithmetic (`+ - * / %`, unary `-`), comparisons
(`< <= > >= = == != <>`), tuple navigation (`a.b`), array navigation
(`a[0]`), tuple (`{...}`), array (`[...]`) and bag (`{{...}}`)
constructors, and the functions `floor`, `sum`, `avg` and `max`
(aggregates also work on the `group` produced by `GROUP BY`).

Evaluation errors raise `cheesebase.operators.QueryError`; parse errors
raise `cheesebase.parser.ParserError`. The lower-level entry points
`eval_expr`, `eval_from`, `eval_sfw` and `eval_function` in
`cheesebase.evaluator` take an explicit `cheesebase.config.Env`.

## Visualising queries

```python
from cheesebase.dot_print import to_dot
from cheesebase.parser import parse_query

print(to_dot(parse_query("SELECT ELEMENT x FROM [1, 2, 3] AS x")))
```

`DotPrinter` writes the same graph to any text stream and closes it on
leaving a `with` block.

## Hashing

`cheesebase.hashing.murmur3_32(data, seed)` is the 32-bit x86 MurmurHash3;
`hash_string(text)` hashes a UTF-8 string with seed 0.

## What this package does not do

There is no on-disk storage: no database file, page cache, block
allocator, key cache or transactions, and no insert, update or remove
operations. Queries run only against values held in memory through a
session such as `DictSession`. There is no command-line program.