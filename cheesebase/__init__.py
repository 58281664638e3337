"""Document values, a SQL++-style query parser and in-memory evaluator, and printers."""

__version__ = "0.1.0"

__all__ = [
    "ast",
    "config",
    "dot_print",
    "evaluator",
    "hashing",
    "model",
    "operators",
    "parser",
    "printer",
]