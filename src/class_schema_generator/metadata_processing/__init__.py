"""Metadata processing exports."""

from .attributes import Attributes, attributes_in, attributes_of, schema_attributes
from .metadata_processor import (
    AttributesMetadataProcessor,
    MemberMetadata,
    MetadataError,
    MetadataProcessor,
    TypeMetadata,
    apply_common_attributes,
)

__all__ = [
    "Attributes",
    "AttributesMetadataProcessor",
    "MemberMetadata",
    "MetadataError",
    "MetadataProcessor",
    "TypeMetadata",
    "apply_common_attributes",
    "attributes_in",
    "attributes_of",
    "schema_attributes",
]
