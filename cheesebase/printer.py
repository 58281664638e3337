"""Indented JSON-like rendering of model values."""

from __future__ import annotations

from typing import Any, TextIO

from .model import Collection, Missing, Null, Tuple, type_rank


def _format_number(number: float) -> str:
    return format(float(number), "g")


def _render(value: Any, indent: int) -> str:
    type_rank(value)
    if isinstance(value, Missing):
        return "missing"
    if isinstance(value, Null):
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    if isinstance(value, str):
        return '"' + value + '"'
    if isinstance(value, Tuple):
        if not value:
            return "{}"
        inner = indent + 1
        pad = "  " * inner
        members = ",\n".join(
            f'{pad}"{key}": {_render(item, inner)}' for key, item in value.items()
        )
        return "{\n" + members + "\n" + "  " * indent + "}"
    if isinstance(value, Collection):
        if not value:
            return "[]"
        inner = indent + 1
        pad = "  " * inner
        elements = ",\n".join(pad + _render(item, inner) for item in value)
        return "[\n" + elements + "\n" + "  " * indent + "]"
    raise TypeError(f"cannot print {type(value).__name__}")


def to_json(value: Any) -> str:
    """Render a value as indented text, without a trailing newline."""
    return _render(value, 0)


def print_json(value: Any, stream: TextIO) -> None:
    """Write the rendered value followed by a newline to ``stream``."""
    stream.write(to_json(value) + "\n")