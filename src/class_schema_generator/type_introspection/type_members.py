"""Type introspection entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AccessorKind(str, Enum):
    """How an accessor exposes its value."""

    METHOD = "method"
    PROPERTY = "property"
    FIELD = "field"


@dataclass(frozen=True)
class DataMember:
    """Declared data member of a class (an annotated attribute)."""

    name: str
    type: Any
    owner: type
    metadata: tuple[object, ...] = ()


@dataclass(frozen=True)
class AccessorMember:
    """Accessor-like member of a class.

    ``target`` is the underlying function or property object, or ``None`` for
    synthetic accessors contributed by a dynamic member hook and for data members
    exposed as their own accessors.
    """

    name: str
    owner: type
    kind: AccessorKind = AccessorKind.METHOD
    parameter_count: int = 0
    is_static: bool = False
    target: object | None = None


def is_named_tuple(type_: object) -> bool:
    """Return True for classes built by ``typing.NamedTuple`` or ``collections.namedtuple``."""
    return isinstance(type_, type) and issubclass(type_, tuple) and hasattr(type_, "_fields")
