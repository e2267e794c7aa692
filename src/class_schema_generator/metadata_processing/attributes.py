"""Declarative schema attributes for classes and members."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

ATTRIBUTES_MARKER = "__schema_attributes__"

_T = TypeVar("_T")


@dataclass(frozen=True)
class Attributes:  # pylint: disable=too-many-instance-attributes
    """Descriptive and structural schema metadata.

    ``None`` and ``False`` mean "not set" and contribute nothing to a node.
    ``additional_properties=False`` closes an object schema.
    """

    id: str | None = None
    title: str | None = None
    description: str | None = None
    format: str | None = None
    pattern: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    multiple_of: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False
    enum: tuple[object, ...] | None = None
    default: object | None = None
    read_only: bool = False
    required: bool = False
    additional_properties: bool = True
    ignore: bool = False


def schema_attributes(**options: Any) -> Callable[[_T], _T]:
    """Attach :class:`Attributes` to a class, method or property.

    The attributes are stored on the decorated object itself, so subclasses of a
    decorated class do not inherit them.
    """
    attributes = Attributes(**options)

    def decorate(target: _T) -> _T:
        holder = target.fget if isinstance(target, property) else target
        setattr(holder, ATTRIBUTES_MARKER, attributes)
        return target

    return decorate


def attributes_of(target: object) -> Attributes | None:
    """Return the attributes attached directly to ``target``, if any."""
    if isinstance(target, property):
        target = target.fget
    if target is None:
        return None
    if inspect.isclass(target):
        found = vars(target).get(ATTRIBUTES_MARKER)
    else:
        found = getattr(target, ATTRIBUTES_MARKER, None)
    return found if isinstance(found, Attributes) else None


def attributes_in(metadata: tuple[object, ...]) -> Attributes | None:
    """Return the first :class:`Attributes` among ``Annotated`` extras."""
    for extra in metadata:
        if isinstance(extra, Attributes):
            return extra
    return None
