"""Schema node entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SchemaNode = dict[str, Any]

ROOT_IDENTIFIER = "#"
TAG_TYPE = "type"
TAG_PROPERTIES = "properties"
TAG_REQUIRED = "required"
TAG_ITEMS = "items"
TAG_ADDITIONAL_PROPERTIES = "additionalProperties"
TAG_REFERENCE = "$ref"
TAG_SCHEMA = "$schema"
NULL_TYPE = "null"


@dataclass(frozen=True)
class PropertyDescriptor:
    """One property discovered on a composite type.

    ``ordinal`` is the position of the property in name-sorted discovery order.
    """

    name: str
    type: Any
    required: bool
    ordinal: int
    schema: SchemaNode


def reference_marker(identifier: str) -> SchemaNode:
    """Return a node pointing at ``identifier`` instead of inlining a definition."""
    return {TAG_REFERENCE: identifier}


def set_kind(node: SchemaNode, kind: str, *, nullable: bool = False) -> None:
    """Set the ``type`` keyword of ``node``, optionally admitting ``null``."""
    node[TAG_TYPE] = [kind, NULL_TYPE] if nullable and kind != NULL_TYPE else kind


def make_nullable(node: SchemaNode) -> None:
    """Admit ``null`` on a node carrying a single ``type`` keyword."""
    kind = node.get(TAG_TYPE)
    if isinstance(kind, str):
        set_kind(node, kind, nullable=True)
