"""Type introspection exports."""

from .class_introspector import (
    ClassIntrospector,
    DynamicMemberHook,
    IntrospectionError,
    TypeIntrospector,
)
from .type_members import AccessorKind, AccessorMember, DataMember, is_named_tuple
from .type_shapes import (
    LeafTypeClassifier,
    TypeClassification,
    TypeClassifier,
    TypeShape,
    classify_type,
)

__all__ = [
    "AccessorKind",
    "AccessorMember",
    "ClassIntrospector",
    "DataMember",
    "DynamicMemberHook",
    "IntrospectionError",
    "LeafTypeClassifier",
    "TypeClassification",
    "TypeClassifier",
    "TypeIntrospector",
    "TypeShape",
    "classify_type",
    "is_named_tuple",
]
