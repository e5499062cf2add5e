"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RegistrySettings:
    """Container registry login configuration."""

    server: str | None
    username_env: str
    token_env: str


@dataclass(frozen=True)
class ImageSettings:
    """Container image build and publication configuration."""

    tag: str
    dockerfile: Path
    context: Path
    platform: str
    push: bool


@dataclass(frozen=True)
class SeedFile:
    """One configuration input copied from the checkout into the deployment workspace."""

    source: str
    target: str


@dataclass(frozen=True)
class DeploymentSettings:  # pylint: disable=too-many-instance-attributes
    """Compose deployment workspace configuration."""

    directory: Path
    descriptor: str
    compose_command: tuple[str, ...]
    services: tuple[str, ...]
    ephemeral: bool
    use_sudo_cleanup: bool
    cleanup_patterns: tuple[str, ...]
    files: tuple[SeedFile, ...]


@dataclass(frozen=True)
class LivenessSettings:
    """Log-tail liveness check configuration."""

    node_logs: tuple[str, ...]
    marker: str
    tail_lines: int
    quorum: int


@dataclass(frozen=True)
class ReadinessSettings:
    """Policy used to wait for the cluster between start and inspection."""

    mode: str
    timeout_seconds: int
    poll_interval_seconds: int


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path | None
    checkout_dir: Path
    registry: RegistrySettings
    image: ImageSettings
    deployment: DeploymentSettings
    liveness: LivenessSettings
    readiness: ReadinessSettings
