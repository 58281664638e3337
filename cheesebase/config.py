"""Evaluation settings and the variable environment."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NavFailure(Enum):
    """What a failed navigation yields."""

    ERROR = "error"
    MISSING = "missing"
    NULL = "null"


@dataclass(frozen=True)
class TupleNavConfig:
    """Behaviour of ``base.key`` navigation."""

    absent: NavFailure = NavFailure.ERROR
    type_mismatch: NavFailure = NavFailure.ERROR


@dataclass(frozen=True)
class ArrayNavConfig:
    """Behaviour of ``base[index]`` navigation."""

    absent: NavFailure = NavFailure.ERROR
    type_mismatch: NavFailure = NavFailure.ERROR
    allow_bag: bool = True


@dataclass(frozen=True)
class Config:
    """Settings for query evaluation."""

    tuple_nav: TupleNavConfig = field(default_factory=TupleNavConfig)
    array_nav: ArrayNavConfig = field(default_factory=ArrayNavConfig)


@dataclass(frozen=True, eq=False)
class Env:
    """A chain of variable bindings; inner bindings shadow outer ones."""

    bindings: Mapping[str, Any] = field(default_factory=dict)
    parent: Env | None = None

    def _chain(self) -> Iterator[Env]:
        env: Env | None = self
        while env is not None:
            yield env
            env = env.parent

    def lookup(self, name: str) -> Any:
        """Return the innermost value bound to ``name``; raise KeyError if unbound."""
        for env in self._chain():
            if name in env.bindings:
                return env.bindings[name]
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return any(name in env.bindings for env in self._chain())

    def extend(self, bindings: Mapping[str, Any]) -> Env:
        """Return a new environment with ``bindings`` in front of this one."""
        return Env(bindings, self)