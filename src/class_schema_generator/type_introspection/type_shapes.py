"""Classification of annotations into JSON Schema shapes."""

from __future__ import annotations

import inspect
import types
import uuid
from collections.abc import Collection, Mapping
from collections.abc import Set as AbstractSet
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Annotated, Any, Literal, Protocol, TypeVar, Union, get_args, get_origin

from .type_members import is_named_tuple

_NONE_TYPE = type(None)

# datetime must precede date: it is a subclass of it.
_SIMPLE_TYPES: tuple[tuple[type, str, str | None], ...] = (
    (bool, "boolean", None),
    (int, "integer", None),
    (float, "number", None),
    (Decimal, "number", None),
    (str, "string", None),
    (bytes, "string", None),
    (datetime, "string", "date-time"),
    (date, "string", "date"),
    (time, "string", "time"),
    (uuid.UUID, "string", "uuid"),
    (PurePath, "string", None),
)


class TypeShape(str, Enum):
    """Structural kind of an annotation."""

    LEAF = "leaf"
    ARRAY = "array"
    MAPPING = "mapping"
    COMPOSITE = "composite"
    GENERIC = "generic"


@dataclass(frozen=True)
class TypeClassification:
    """Result of classifying one annotation.

    ``target`` is the annotation with ``Optional``/``Annotated`` wrappers removed.
    ``item_type`` holds the element type of arrays and the value type of mappings.
    """

    shape: TypeShape
    target: Any
    schema_type: str | None = None
    schema_format: str | None = None
    enum_values: tuple[object, ...] = ()
    item_type: Any = None
    unique_items: bool = False
    nullable: bool = False

    @property
    def is_composite(self) -> bool:
        """Return True when the annotation needs recursive property expansion."""
        return self.shape is TypeShape.COMPOSITE


class LeafTypeClassifier(Protocol):
    """Protocol implemented by annotation classifiers."""

    def classify(self, annotation: Any) -> TypeClassification: ...


class TypeClassifier:
    """Default classifier for standard Python annotations."""

    def __init__(self, *, optional_as_nullable: bool = True) -> None:
        self._optional_as_nullable = optional_as_nullable

    def classify(self, annotation: Any) -> TypeClassification:
        """Classify ``annotation``; unknown constructs yield a generic shape."""
        origin = get_origin(annotation)
        if origin is Annotated:
            return self.classify(get_args(annotation)[0])
        if origin is Union or origin is types.UnionType:
            return self._classify_union(annotation)
        if annotation is None or annotation is _NONE_TYPE:
            return TypeClassification(shape=TypeShape.LEAF, target=_NONE_TYPE, schema_type="null")
        if annotation is Any or annotation is object or isinstance(annotation, TypeVar):
            return TypeClassification(shape=TypeShape.GENERIC, target=annotation)
        if origin is Literal:
            return _enumeration(annotation, get_args(annotation))
        if origin is not None:
            return _classify_generic_alias(annotation, origin)
        if not inspect.isclass(annotation):
            return TypeClassification(shape=TypeShape.GENERIC, target=annotation)
        return _classify_class(annotation)

    def _classify_union(self, annotation: Any) -> TypeClassification:
        arguments = get_args(annotation)
        non_null = [argument for argument in arguments if argument is not _NONE_TYPE]
        if len(non_null) != 1:
            return TypeClassification(shape=TypeShape.GENERIC, target=annotation)
        inner = self.classify(non_null[0])
        if self._optional_as_nullable and len(non_null) < len(arguments):
            return replace(inner, nullable=True)
        return inner


def classify_type(annotation: Any, *, optional_as_nullable: bool = True) -> TypeClassification:
    """Classify ``annotation`` with the default classifier."""
    return TypeClassifier(optional_as_nullable=optional_as_nullable).classify(annotation)


def _classify_generic_alias(annotation: Any, origin: Any) -> TypeClassification:
    arguments = get_args(annotation)
    if inspect.isclass(origin) and issubclass(origin, Mapping):
        value_type = arguments[1] if len(arguments) == 2 else None
        return TypeClassification(shape=TypeShape.MAPPING, target=annotation, item_type=value_type)
    if (
        inspect.isclass(origin)
        and issubclass(origin, Collection)
        and not issubclass(origin, str | bytes)
    ):
        return TypeClassification(
            shape=TypeShape.ARRAY,
            target=annotation,
            item_type=_element_type(origin, arguments),
            unique_items=issubclass(origin, AbstractSet),
        )
    return TypeClassification(shape=TypeShape.GENERIC, target=annotation)


def _element_type(origin: Any, arguments: tuple[Any, ...]) -> Any:
    if not arguments:
        return None
    if origin is tuple:
        if len(arguments) == 2 and arguments[1] is Ellipsis:
            return arguments[0]
        distinct = set(arguments)
        return arguments[0] if len(distinct) == 1 else None
    return arguments[0]


def _classify_class(annotation: type) -> TypeClassification:
    if issubclass(annotation, Enum):
        return _enumeration(annotation, tuple(member.value for member in annotation))
    for candidate, schema_type, schema_format in _SIMPLE_TYPES:
        if issubclass(annotation, candidate):
            return TypeClassification(
                shape=TypeShape.LEAF,
                target=annotation,
                schema_type=schema_type,
                schema_format=schema_format,
            )
    if is_named_tuple(annotation):
        return TypeClassification(shape=TypeShape.COMPOSITE, target=annotation)
    if issubclass(annotation, Mapping):
        return TypeClassification(shape=TypeShape.MAPPING, target=annotation)
    if issubclass(annotation, Collection):
        return TypeClassification(
            shape=TypeShape.ARRAY,
            target=annotation,
            unique_items=issubclass(annotation, AbstractSet),
        )
    return TypeClassification(shape=TypeShape.COMPOSITE, target=annotation)


def _enumeration(annotation: Any, values: tuple[object, ...]) -> TypeClassification:
    kinds = {_json_kind(value) for value in values}
    schema_type = kinds.pop() if len(kinds) == 1 else None
    return TypeClassification(
        shape=TypeShape.LEAF,
        target=annotation,
        schema_type=schema_type,
        enum_values=values,
    )


def _json_kind(value: object) -> str | None:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    return None
