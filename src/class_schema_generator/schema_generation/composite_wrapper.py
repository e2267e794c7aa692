"""Recursive schema construction for composite (object-like) types."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterator
from dataclasses import dataclass
from typing import Any

from class_schema_generator.metadata_processing.metadata_processor import (
    MemberMetadata,
    MetadataError,
    MetadataProcessor,
)
from class_schema_generator.type_introspection.class_introspector import TypeIntrospector
from class_schema_generator.type_introspection.type_members import (
    AccessorKind,
    AccessorMember,
    DataMember,
    is_named_tuple,
)
from class_schema_generator.type_introspection.type_shapes import (
    TypeClassification,
    TypeShape,
)

from .node_builder import SchemaNodeBuilder
from .reference_tracking import ManagedReference, ReferenceTracker
from .schema_nodes import (
    ROOT_IDENTIFIER,
    TAG_ADDITIONAL_PROPERTIES,
    TAG_ITEMS,
    TAG_PROPERTIES,
    TAG_REQUIRED,
    TAG_TYPE,
    PropertyDescriptor,
    SchemaNode,
    make_nullable,
    reference_marker,
    set_kind,
)

_LOGGER = logging.getLogger("class_schema_generator.generation")
_LOGGER.addHandler(logging.NullHandler())

_GETTER_PREFIXES = ("get", "is")


@dataclass(frozen=True)
class GenerationContext:
    """Collaborators shared by every wrapper of one generator."""

    introspector: TypeIntrospector
    builder: SchemaNodeBuilder
    metadata: MetadataProcessor


@dataclass(frozen=True)
class DiscoveredProperty:
    """Accessor matched with the data member it exposes."""

    name: str
    accessor: AccessorMember
    member: DataMember | None


@dataclass(frozen=True)
class _Expansion:
    node: SchemaNode
    required: bool


class CompositeSchemaWrapper:
    """Object schema of one composite type.

    Constructing a wrapper builds its shell: the base node, the relative identifier
    and the type-level metadata. :meth:`wrap` also expands the properties, holding
    the type on the tracker while doing so.
    """

    def __init__(
        self,
        type_: type,
        context: GenerationContext,
        tracker: ReferenceTracker | None = None,
        *,
        parent_identifier: str | None = None,
        path_token: str | None = None,
    ) -> None:
        self._type = type_
        self._context = context
        self._tracker = tracker if tracker is not None else ReferenceTracker()
        self._properties: list[PropertyDescriptor] = []

        base = context.builder.describe(type_)
        self._node = base.node
        set_kind(self._node, "object")
        self._required = base.metadata.required
        if base.metadata.closed:
            self._node[TAG_ADDITIONAL_PROPERTIES] = False

        self._relative_id = parent_identifier or ROOT_IDENTIFIER
        if path_token is not None:
            self.add_token_to_relative_id(path_token)
        declared_id = self._node.get("id")
        if isinstance(declared_id, str) and declared_id.startswith("#"):
            self.add_token_to_relative_id(declared_id)

    @classmethod
    def wrap(
        cls,
        type_: type,
        context: GenerationContext,
        tracker: ReferenceTracker | None = None,
        path_token: str | None = None,
        skip_properties: bool = False,
        *,
        parent_identifier: str | None = None,
    ) -> CompositeSchemaWrapper:
        """Build the wrapper of ``type_`` and, unless skipped, expand its properties."""
        wrapper = cls(
            type_,
            context,
            tracker,
            parent_identifier=parent_identifier,
            path_token=path_token,
        )
        if not skip_properties:
            with wrapper.tracker.hold(ManagedReference(type_, wrapper.relative_id)):
                wrapper.process_properties()
        return wrapper

    @property
    def wrapped_type(self) -> type:
        return self._type

    @property
    def node(self) -> SchemaNode:
        return self._node

    @property
    def tracker(self) -> ReferenceTracker:
        return self._tracker

    @property
    def relative_id(self) -> str:
        return self._relative_id

    @property
    def required(self) -> bool:
        """Whether properties of this type are required by default."""
        return self._required

    def add_token_to_relative_id(self, token: str) -> None:
        """Append ``token`` to the identifier, or replace it with an absolute ``#`` anchor."""
        if token.startswith("#"):
            self._relative_id = token
        else:
            self._relative_id = f"{self._relative_id}/{token}"

    def is_empty(self) -> bool:
        """Return True when the wrapper has no properties and no distinguishing keywords."""
        return not self._properties and set(self._node) <= {TAG_TYPE}

    def add_property(self, prop: PropertyDescriptor) -> None:
        """Attach ``prop``; a repeated name overwrites the earlier schema."""
        self._properties.append(prop)
        properties = self._node.setdefault(TAG_PROPERTIES, {})
        properties[prop.name] = prop.schema
        if prop.required:
            self.add_required(prop.name)

    def add_required(self, name: str) -> None:
        """Append ``name`` to the required list; duplicates are kept."""
        self._node.setdefault(TAG_REQUIRED, []).append(name)

    def process_properties(self) -> None:
        """Expand every discovered property and attach the non-empty ones."""
        for ordinal, discovered in enumerate(self.find_properties()):
            prop = self._expand_property(ordinal, discovered)
            if prop is None:
                _LOGGER.debug(
                    "Elided property %s of %s", discovered.name, self._type.__qualname__
                )
                continue
            self.add_property(prop)

    def find_properties(self) -> list[DiscoveredProperty]:
        """Match getter-like accessors with declared members, in accessor name order."""
        introspector = self._context.introspector
        members = introspector.declared_members(self._type)
        accessors = sorted(introspector.accessors(self._type), key=lambda accessor: accessor.name)

        discovered: list[DiscoveredProperty] = []
        for accessor in accessors:
            if _is_excluded_owner(accessor.owner):
                continue
            name = property_name_from_accessor(accessor)
            if name is None:
                continue
            member = _matching_member(name, members)
            if member is None:
                continue
            discovered.append(DiscoveredProperty(name=name, accessor=accessor, member=member))
        return discovered

    def __iter__(self) -> Iterator[PropertyDescriptor]:
        return iter(self._properties)

    def _expand_property(
        self, ordinal: int, discovered: DiscoveredProperty
    ) -> PropertyDescriptor | None:
        member_type = discovered.member.type if discovered.member is not None else Any
        expansion = self._wrap_type(member_type, f"{TAG_PROPERTIES}/{discovered.name}")
        if expansion is None:
            return None
        member_metadata = self._process_member(discovered, expansion.node)
        if member_metadata.ignored:
            return None
        return PropertyDescriptor(
            name=discovered.name,
            type=member_type,
            required=member_metadata.required or expansion.required,
            ordinal=ordinal,
            schema=expansion.node,
        )

    def _wrap_type(self, type_: Any, token: str) -> _Expansion | None:
        builder = self._context.builder
        classification = builder.classify(type_)
        if classification.is_composite:
            return self._wrap_composite(classification, token)

        base = builder.describe(type_, classification)
        node = base.node
        if classification.item_type is not None:
            if classification.shape is TypeShape.ARRAY:
                items = self._wrap_type(classification.item_type, f"{token}/{TAG_ITEMS}")
                if items is not None:
                    node[TAG_ITEMS] = items.node
            elif classification.shape is TypeShape.MAPPING:
                values = self._wrap_type(
                    classification.item_type, f"{token}/{TAG_ADDITIONAL_PROPERTIES}"
                )
                if values is not None:
                    node[TAG_ADDITIONAL_PROPERTIES] = values.node
        return _Expansion(node=node, required=base.metadata.required)

    def _wrap_composite(self, classification: TypeClassification, token: str) -> _Expansion | None:
        target = classification.target
        child = type(self)(
            target,
            self._context,
            self._tracker,
            parent_identifier=self._relative_id,
            path_token=token,
        )
        reference = ManagedReference(target, child.relative_id)
        if not self._tracker.acquire(reference):
            active = self._tracker.active_reference(target)
            identifier = active.identifier if active is not None else child.relative_id
            _LOGGER.debug(
                "Cycle on %s at %s; referencing %s",
                target.__qualname__,
                child.relative_id,
                identifier,
            )
            return _Expansion(node=reference_marker(identifier), required=child.required)
        try:
            child.process_properties()
        finally:
            self._tracker.release(reference)

        if child.is_empty():
            return None
        if classification.nullable:
            make_nullable(child.node)
        return _Expansion(node=child.node, required=child.required)

    def _process_member(self, discovered: DiscoveredProperty, node: SchemaNode) -> MemberMetadata:
        try:
            return self._context.metadata.process_member(
                discovered.accessor, discovered.member, node
            )
        except MetadataError:
            raise
        except Exception as exc:
            raise MetadataError(
                f"Metadata processing failed for "
                f"{self._type.__qualname__}.{discovered.name}: {exc}"
            ) from exc


def property_name_from_accessor(accessor: AccessorMember) -> str | None:
    """Return the property name exposed by ``accessor``, or None when it is not a getter.

    Methods must be named ``get<Name>``/``is<Name>`` (or ``get_name``/``is_name``),
    take no arguments and not be static. Properties and exposed fields keep their name.
    """
    if accessor.is_static or accessor.parameter_count > 0:
        return None
    if accessor.kind is not AccessorKind.METHOD:
        return accessor.name
    name = accessor.name
    for prefix in _GETTER_PREFIXES:
        if name.startswith(prefix) and len(name) > len(prefix):
            remainder = name[len(prefix) :].lstrip("_")
            if not remainder:
                return None
            return remainder[0].lower() + remainder[1:]
    return None


def _matching_member(name: str, members: tuple[DataMember, ...]) -> DataMember | None:
    lowered = name.lower()
    for member in members:
        if member.name.lower() == lowered:
            return member
    return None


def _is_excluded_owner(owner: type) -> bool:
    if owner is object:
        return True
    return issubclass(owner, Collection) and not is_named_tuple(owner)
