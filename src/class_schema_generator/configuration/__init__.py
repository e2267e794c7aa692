"""Configuration domain exports."""

from .loader import ConfigurationError, load_configuration
from .runtime_settings import (
    DRAFT_04_SCHEMA_URI,
    Configuration,
    GenerationSettings,
    IntrospectionSettings,
    default_configuration,
)

__all__ = [
    "DRAFT_04_SCHEMA_URI",
    "Configuration",
    "GenerationSettings",
    "IntrospectionSettings",
    "ConfigurationError",
    "default_configuration",
    "load_configuration",
]
