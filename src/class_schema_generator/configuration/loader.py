"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DRAFT_04_SCHEMA_URI,
    Configuration,
    GenerationSettings,
    IntrospectionSettings,
)

_HOOK_SEPARATOR = ":"


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    generation = _parse_generation_section(parsed.get("generation"))
    introspection = _parse_introspection_section(parsed.get("introspection"))

    return Configuration(path=path, generation=generation, introspection=introspection)


def _parse_generation_section(value: Any) -> GenerationSettings:
    section = _optional_mapping(value, "generation")
    schema_uri = section.get("schema_uri", DRAFT_04_SCHEMA_URI)
    return GenerationSettings(
        schema_uri=_optional_string(schema_uri, "generation.schema_uri"),
        optional_as_nullable=_require_bool(
            section.get("optional_as_nullable", True), "generation.optional_as_nullable"
        ),
    )


def _parse_introspection_section(value: Any) -> IntrospectionSettings:
    section = _optional_mapping(value, "introspection")
    hook = _optional_string(section.get("dynamic_member_hook"), "introspection.dynamic_member_hook")
    if hook is not None:
        _validate_hook_reference(hook)
    return IntrospectionSettings(
        public_fields_as_properties=_require_bool(
            section.get("public_fields_as_properties", False),
            "introspection.public_fields_as_properties",
        ),
        dynamic_member_hook=hook,
    )


def _validate_hook_reference(reference: str) -> None:
    module_name, separator, attribute = reference.partition(_HOOK_SEPARATOR)
    if not separator or not module_name.strip() or not attribute.strip():
        raise ConfigurationError(
            "introspection.dynamic_member_hook must use the form 'package.module:callable'."
        )


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean.")
    return value
