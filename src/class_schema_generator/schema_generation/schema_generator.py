"""Schema generation entry points."""

from __future__ import annotations

import importlib
import json
import logging
from typing import Any

from class_schema_generator.configuration.loader import ConfigurationError
from class_schema_generator.configuration.runtime_settings import (
    DRAFT_04_SCHEMA_URI,
    Configuration,
    default_configuration,
)
from class_schema_generator.metadata_processing.metadata_processor import (
    AttributesMetadataProcessor,
    MetadataError,
    MetadataProcessor,
)
from class_schema_generator.type_introspection.class_introspector import (
    ClassIntrospector,
    DynamicMemberHook,
    IntrospectionError,
    TypeIntrospector,
)
from class_schema_generator.type_introspection.type_shapes import (
    LeafTypeClassifier,
    TypeClassifier,
)

from .composite_wrapper import CompositeSchemaWrapper, GenerationContext
from .node_builder import SchemaNodeBuilder
from .reference_tracking import ReferenceTracker
from .schema_nodes import TAG_SCHEMA, SchemaNode

_LOGGER = logging.getLogger("class_schema_generator.generation")
_LOGGER.addHandler(logging.NullHandler())


class SchemaGenerationError(Exception):
    """Raised when a schema cannot be generated for a root type."""


class SchemaGenerator:
    """Produce JSON Schema documents for composite Python types."""

    def __init__(
        self,
        *,
        introspector: TypeIntrospector | None = None,
        classifier: LeafTypeClassifier | None = None,
        metadata: MetadataProcessor | None = None,
        schema_uri: str | None = DRAFT_04_SCHEMA_URI,
    ) -> None:
        metadata = metadata if metadata is not None else AttributesMetadataProcessor()
        self._classifier = classifier if classifier is not None else TypeClassifier()
        self._context = GenerationContext(
            introspector=introspector if introspector is not None else ClassIntrospector(),
            builder=SchemaNodeBuilder(self._classifier, metadata),
            metadata=metadata,
        )
        self._schema_uri = schema_uri

    @classmethod
    def from_configuration(cls, configuration: Configuration) -> SchemaGenerator:
        """Build a generator from loaded settings."""
        introspection = configuration.introspection
        generation = configuration.generation
        return cls(
            introspector=ClassIntrospector(
                public_fields_as_properties=introspection.public_fields_as_properties,
                dynamic_member_hook=resolve_dynamic_member_hook(introspection.dynamic_member_hook),
            ),
            classifier=TypeClassifier(optional_as_nullable=generation.optional_as_nullable),
            schema_uri=generation.schema_uri,
        )

    def wrap(self, type_: type, tracker: ReferenceTracker | None = None) -> CompositeSchemaWrapper:
        """Return the fully expanded wrapper of the composite ``type_``.

        Raises:
          SchemaGenerationError: If ``type_`` is not composite or a collaborator fails.
        """
        type_name = _describe(type_)
        try:
            classification = self._classifier.classify(type_)
        except Exception as exc:
            raise SchemaGenerationError(f"Cannot classify {type_name}: {exc}") from exc
        if not classification.is_composite:
            raise SchemaGenerationError(f"{type_name} is not a composite type.")
        _LOGGER.debug("Generating schema for %s", type_name)
        try:
            return CompositeSchemaWrapper.wrap(classification.target, self._context, tracker)
        except (IntrospectionError, MetadataError) as exc:
            raise SchemaGenerationError(f"Cannot generate schema for {type_name}: {exc}") from exc
        except Exception as exc:
            raise SchemaGenerationError(
                f"Cannot generate schema for {type_name}: collaborator failed: {exc!r}"
            ) from exc

    def generate(self, type_: type, tracker: ReferenceTracker | None = None) -> SchemaNode:
        """Return the JSON Schema document of ``type_``.

        Pass ``tracker`` to share cycle suppression across several root types.
        """
        wrapper = self.wrap(type_, tracker)
        document: SchemaNode = {}
        if self._schema_uri:
            document[TAG_SCHEMA] = self._schema_uri
        document.update(wrapper.node)
        return document


def resolve_dynamic_member_hook(reference: str | None) -> DynamicMemberHook | None:
    """Import the hook named ``package.module:callable``."""
    if reference is None:
        return None
    module_name, _, attribute = reference.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(
            f"Cannot import dynamic member hook module '{module_name}': {exc}"
        ) from exc
    hook = getattr(module, attribute, None)
    if not callable(hook):
        raise ConfigurationError(f"Dynamic member hook '{reference}' is not callable.")
    return hook


def generate_schema(type_: type, configuration: Configuration | None = None) -> SchemaNode:
    """Generate the schema of ``type_`` with ``configuration`` or the defaults."""
    generator = SchemaGenerator.from_configuration(configuration or default_configuration())
    return generator.generate(type_)


def render_schema(node: SchemaNode, *, indent: int | None = 2) -> str:
    """Serialize ``node`` to JSON, preserving key order."""
    return json.dumps(node, indent=indent)


def _describe(value: Any) -> str:
    return getattr(value, "__qualname__", repr(value))
