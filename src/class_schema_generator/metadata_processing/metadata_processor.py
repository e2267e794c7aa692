"""Application of declarative attributes to schema nodes."""

from __future__ import annotations

import copy
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Protocol

from class_schema_generator.type_introspection.type_members import AccessorMember, DataMember

from .attributes import Attributes, attributes_in, attributes_of

REFERENCE_TAG = "$ref"


class MetadataError(Exception):
    """Raised when metadata cannot be applied to a schema node."""


@dataclass(frozen=True)
class TypeMetadata:
    """Type-level flags contributed by metadata."""

    required: bool = False
    closed: bool = False


@dataclass(frozen=True)
class MemberMetadata:
    """Member-level flags contributed by metadata."""

    required: bool = False
    ignored: bool = False


class MetadataProcessor(Protocol):
    """Protocol implemented by metadata collaborators."""

    def process_type(self, type_: Any, node: MutableMapping[str, Any]) -> TypeMetadata: ...

    def process_member(
        self,
        accessor: AccessorMember,
        member: DataMember | None,
        node: MutableMapping[str, Any],
    ) -> MemberMetadata: ...


class AttributesMetadataProcessor:
    """Metadata collaborator backed by :class:`Attributes` declarations."""

    def process_type(self, type_: Any, node: MutableMapping[str, Any]) -> TypeMetadata:
        """Describe ``node`` from the attributes declared on ``type_``."""
        attributes = attributes_of(type_) if isinstance(type_, type) else None
        if attributes is None:
            return TypeMetadata()
        apply_common_attributes(node, attributes)
        return TypeMetadata(
            required=attributes.required,
            closed=not attributes.additional_properties,
        )

    def process_member(
        self,
        accessor: AccessorMember,
        member: DataMember | None,
        node: MutableMapping[str, Any],
    ) -> MemberMetadata:
        """Describe a property node from its accessor, falling back to its data member."""
        attributes = attributes_of(accessor.target) if accessor.target is not None else None
        if attributes is None and member is not None:
            attributes = attributes_in(member.metadata)
        if attributes is None:
            return MemberMetadata()
        if REFERENCE_TAG not in node:
            apply_common_attributes(node, attributes)
        return MemberMetadata(required=attributes.required, ignored=attributes.ignore)


def apply_common_attributes(node: MutableMapping[str, Any], attributes: Attributes) -> None:
    """Write the draft-04 keywords set in ``attributes`` into ``node``."""
    optional_values = (
        ("id", attributes.id),
        ("title", attributes.title),
        ("description", attributes.description),
        ("format", attributes.format),
        ("pattern", attributes.pattern),
        ("minimum", attributes.minimum),
    )
    for key, value in optional_values:
        if value is not None:
            node[key] = value
    if attributes.exclusive_minimum:
        node["exclusiveMinimum"] = True
    if attributes.maximum is not None:
        node["maximum"] = attributes.maximum
    if attributes.exclusive_maximum:
        node["exclusiveMaximum"] = True

    optional_values = (
        ("multipleOf", attributes.multiple_of),
        ("minLength", attributes.min_length),
        ("maxLength", attributes.max_length),
        ("minItems", attributes.min_items),
        ("maxItems", attributes.max_items),
    )
    for key, value in optional_values:
        if value is not None:
            node[key] = value
    if attributes.unique_items:
        node["uniqueItems"] = True
    if attributes.enum is not None:
        node["enum"] = copy.deepcopy(list(attributes.enum))
    if attributes.default is not None:
        node["default"] = copy.deepcopy(attributes.default)
    if attributes.read_only:
        node["readonly"] = True
