"""Leaf-level schema node construction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from class_schema_generator.metadata_processing.metadata_processor import (
    MetadataError,
    MetadataProcessor,
    TypeMetadata,
)
from class_schema_generator.type_introspection.type_shapes import (
    LeafTypeClassifier,
    TypeClassification,
    TypeShape,
)

from .schema_nodes import SchemaNode, make_nullable

_KIND_BY_SHAPE = {
    TypeShape.ARRAY: "array",
    TypeShape.MAPPING: "object",
    TypeShape.COMPOSITE: "object",
}


@dataclass(frozen=True)
class BaseSchema:
    """Base node of a type with the classification and metadata that produced it."""

    node: SchemaNode
    classification: TypeClassification
    metadata: TypeMetadata


class SchemaNodeBuilder:
    """Build the non-recursive part of a type's schema node."""

    def __init__(self, classifier: LeafTypeClassifier, metadata: MetadataProcessor) -> None:
        self._classifier = classifier
        self._metadata = metadata

    def classify(self, type_: Any) -> TypeClassification:
        """Classify ``type_`` with the configured classifier."""
        return self._classifier.classify(type_)

    def build_base(self, type_: Any) -> SchemaNode:
        """Return a new base node for ``type_``."""
        return self.describe(type_).node

    def describe(
        self, type_: Any, classification: TypeClassification | None = None
    ) -> BaseSchema:
        """Return the base node of ``type_`` along with its type-level metadata.

        Unclassifiable annotations produce an untyped ``{}`` node.
        """
        if classification is None:
            classification = self.classify(type_)
        node: SchemaNode = {}
        kind = _KIND_BY_SHAPE.get(classification.shape, classification.schema_type)
        if kind is not None:
            node["type"] = kind
        if classification.schema_format is not None:
            node["format"] = classification.schema_format
        if classification.enum_values:
            node["enum"] = list(classification.enum_values)
        if classification.unique_items:
            node["uniqueItems"] = True

        metadata = self._process_type(classification.target, node)
        if classification.nullable:
            make_nullable(node)
        return BaseSchema(node=node, classification=classification, metadata=metadata)

    def _process_type(self, type_: Any, node: SchemaNode) -> TypeMetadata:
        try:
            return self._metadata.process_type(type_, node)
        except MetadataError:
            raise
        except Exception as exc:
            raise MetadataError(
                f"Metadata processing failed for {_type_name(type_)}: {exc}"
            ) from exc


def _type_name(type_: Any) -> str:
    return getattr(type_, "__qualname__", repr(type_))
