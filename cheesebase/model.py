"""The value model: scalars, tuples and collections with a total order.

Values are ``Missing``, ``Null``, numbers (``float`` or ``int``), ``bool``,
``str``, ``Tuple`` and ``Collection``.  Values of different kinds are ordered
by kind in that sequence; values of the same kind by their content.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping, MutableSequence
from enum import IntEnum
from typing import Any


class _Kind(IntEnum):
    MISSING = 0
    NULL = 1
    NUMBER = 2
    BOOL = 3
    STRING = 4
    TUPLE = 5
    COLLECTION = 6


class _Ordered:
    """Rich comparisons following the model's total order."""

    __slots__ = ()

    def __lt__(self, other: Any) -> bool:
        if not _is_value(other):
            return NotImplemented
        return value_less(self, other)

    def __gt__(self, other: Any) -> bool:
        if not _is_value(other):
            return NotImplemented
        return value_less(other, self)

    def __le__(self, other: Any) -> bool:
        if not _is_value(other):
            return NotImplemented
        return not value_less(other, self)

    def __ge__(self, other: Any) -> bool:
        if not _is_value(other):
            return NotImplemented
        return not value_less(self, other)


class Missing(_Ordered):
    """The absent value; a singleton."""

    __slots__ = ()
    _instance: Missing | None = None

    def __new__(cls) -> Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Missing()"

    def __reduce__(self):
        return (Missing, ())


class Null(_Ordered):
    """The null value; a singleton."""

    __slots__ = ()
    _instance: Null | None = None

    def __new__(cls) -> Null:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Null()"

    def __reduce__(self):
        return (Null, ())


class Tuple(_Ordered, MutableMapping):
    """A mapping from string names to values, iterated in key order."""

    __slots__ = ("_items",)

    def __init__(self, items: Mapping[str, Any] | Iterable[tuple[str, Any]] = (), /, **kwargs: Any):
        self._items: dict[str, Any] = {}
        self.update(items, **kwargs)

    def __getitem__(self, key: str) -> Any:
        return self._items[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"tuple keys must be strings, not {type(key).__name__}")
        self._items[key] = value

    def __delitem__(self, key: str) -> None:
        self._items.pop(key)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tuple):
            return NotImplemented
        return values_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def copy(self) -> Tuple:
        return Tuple(self)

    def __repr__(self) -> str:
        return f"Tuple({dict(self.items())!r})"


class Collection(_Ordered, MutableSequence):
    """A sequence of values; ``has_order`` marks an array rather than a bag."""

    __slots__ = ("_items", "has_order")

    def __init__(self, items: Iterable[Any] = (), has_order: bool = False):
        self._items: list[Any] = list(items)
        self.has_order = has_order

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Collection(self._items[index], has_order=self.has_order)
        return self._items[index]

    def __setitem__(self, index, value) -> None:
        self._items[index] = value

    def __delitem__(self, index) -> None:
        if isinstance(index, slice):
            doomed = set(range(len(self._items))[index])
            self._items = [v for i, v in enumerate(self._items) if i not in doomed]
        else:
            self._items.pop(index)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def insert(self, index: int, value: Any) -> None:
        self._items.insert(index, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return values_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def copy(self) -> Collection:
        return Collection(self._items, has_order=self.has_order)

    def __repr__(self) -> str:
        return f"Collection({self._items!r}, has_order={self.has_order})"


def type_rank(value: Any) -> int:
    """Return the position of the value's kind in the model's ordering."""
    if isinstance(value, Missing):
        return _Kind.MISSING
    if isinstance(value, Null):
        return _Kind.NULL
    if isinstance(value, bool):
        return _Kind.BOOL
    if isinstance(value, (int, float)):
        return _Kind.NUMBER
    if isinstance(value, str):
        return _Kind.STRING
    if isinstance(value, Tuple):
        return _Kind.TUPLE
    if isinstance(value, Collection):
        return _Kind.COLLECTION
    raise TypeError(f"not a model value: {type(value).__name__}")


def _is_value(value: Any) -> bool:
    try:
        type_rank(value)
    except TypeError:
        return False
    return True


def values_equal(left: Any, right: Any) -> bool:
    """Structural equality; kinds must match, array/bag flags are ignored."""
    rank = type_rank(left)
    if rank != type_rank(right):
        return False
    if rank == _Kind.TUPLE:
        return len(left) == len(right) and all(
            lk == rk and values_equal(lv, rv)
            for (lk, lv), (rk, rv) in zip(left.items(), right.items())
        )
    if rank == _Kind.COLLECTION:
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if rank in (_Kind.MISSING, _Kind.NULL):
        return True
    return left == right


def value_less(left: Any, right: Any) -> bool:
    """Strict ordering: by kind first, then size, then element-wise."""
    left_rank = type_rank(left)
    right_rank = type_rank(right)
    if left_rank != right_rank:
        return left_rank < right_rank
    if left_rank in (_Kind.MISSING, _Kind.NULL):
        return False
    if left_rank == _Kind.TUPLE:
        if len(left) != len(right):
            return len(left) < len(right)
        for (lk, lv), (rk, rv) in zip(left.items(), right.items()):
            if lk == rk and values_equal(lv, rv):
                continue
            return lk < rk or (lk == rk and value_less(lv, rv))
        return False
    if left_rank == _Kind.COLLECTION:
        if len(left) != len(right):
            return len(left) < len(right)
        for a, b in zip(left, right):
            if not values_equal(a, b):
                return value_less(a, b)
        return False
    return left < right


def compare_values(left: Any, right: Any) -> int:
    """Return -1, 0 or 1 as ``left`` sorts before, with or after ``right``."""
    if value_less(left, right):
        return -1
    if value_less(right, left):
        return 1
    return 0