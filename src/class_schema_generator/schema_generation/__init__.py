"""Schema generation exports."""

from .composite_wrapper import (
    CompositeSchemaWrapper,
    DiscoveredProperty,
    GenerationContext,
    property_name_from_accessor,
)
from .node_builder import BaseSchema, SchemaNodeBuilder
from .reference_tracking import ManagedReference, ReferenceTracker
from .schema_generator import (
    SchemaGenerationError,
    SchemaGenerator,
    generate_schema,
    render_schema,
    resolve_dynamic_member_hook,
)
from .schema_nodes import PropertyDescriptor, SchemaNode, reference_marker

__all__ = [
    "BaseSchema",
    "CompositeSchemaWrapper",
    "DiscoveredProperty",
    "GenerationContext",
    "ManagedReference",
    "PropertyDescriptor",
    "ReferenceTracker",
    "SchemaGenerationError",
    "SchemaGenerator",
    "SchemaNode",
    "SchemaNodeBuilder",
    "generate_schema",
    "property_name_from_accessor",
    "reference_marker",
    "render_schema",
]
