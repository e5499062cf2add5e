"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import (
    DEFAULT_IMAGE_TAG,
    DEFAULT_LIVENESS_MARKER,
    ConfigurationError,
    build_configuration,
    load_configuration,
)
from .runtime_settings import (
    Configuration,
    DeploymentSettings,
    ImageSettings,
    LivenessSettings,
    ReadinessSettings,
    RegistrySettings,
    SeedFile,
)

__all__ = [
    "Configuration",
    "DeploymentSettings",
    "ImageSettings",
    "LivenessSettings",
    "ReadinessSettings",
    "RegistrySettings",
    "SeedFile",
    "ConfigurationError",
    "DEFAULT_IMAGE_TAG",
    "DEFAULT_LIVENESS_MARKER",
    "build_configuration",
    "load_configuration",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
