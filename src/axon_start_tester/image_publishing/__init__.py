"""Image publishing domain exports."""

from .registry_publisher import (
    RegistryCredentials,
    RegistryError,
    RegistryPublisher,
    resolve_registry_credentials,
)

__all__ = [
    "RegistryCredentials",
    "RegistryError",
    "RegistryPublisher",
    "resolve_registry_credentials",
]
