"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DRAFT_04_SCHEMA_URI = "http://json-schema.org/draft-04/schema#"


@dataclass(frozen=True)
class GenerationSettings:
    """Options shaping the produced schema document."""

    schema_uri: str | None = DRAFT_04_SCHEMA_URI
    optional_as_nullable: bool = True


@dataclass(frozen=True)
class IntrospectionSettings:
    """Options controlling how class members are discovered."""

    public_fields_as_properties: bool = False
    dynamic_member_hook: str | None = None


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path | None
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    introspection: IntrospectionSettings = field(default_factory=IntrospectionSettings)


def default_configuration() -> Configuration:
    """Return the configuration used when no file is supplied."""
    return Configuration(path=None)
