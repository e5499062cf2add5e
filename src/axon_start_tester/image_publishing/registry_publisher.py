"""Registry login and image build/push service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from axon_start_tester.command_execution import (
    CommandExecutionError,
    CommandRunner,
    run_checked_command,
)
from axon_start_tester.configuration.runtime_settings import ImageSettings, RegistrySettings

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when registry authentication or image publication fails."""


@dataclass(frozen=True)
class RegistryCredentials:
    """Resolved registry login credentials."""

    username: str
    token: str = field(repr=False)
    server: str | None = None


def resolve_registry_credentials(
    settings: RegistrySettings, environ: Mapping[str, str]
) -> RegistryCredentials:
    """Read the registry username and access token from the configured variables."""
    values = {}
    for variable in (settings.username_env, settings.token_env):
        value = environ.get(variable, "").strip()
        if not value:
            raise RegistryError(f"Registry credential environment variable {variable} is not set.")
        values[variable] = value
    return RegistryCredentials(
        username=values[settings.username_env],
        token=values[settings.token_env],
        server=settings.server,
    )


class RegistryPublisher:
    """Publishes the harness image through the docker CLI."""

    def __init__(
        self,
        *,
        working_dir: Path,
        run_command: CommandRunner | None = None,
        docker_executable: str = "docker",
    ) -> None:
        self._working_dir = working_dir
        self._run_command = run_command or run_checked_command
        self._docker = docker_executable

    def login(self, credentials: RegistryCredentials) -> None:
        """Authenticate against the registry with the token piped on stdin."""
        command: tuple[str, ...] = (
            self._docker,
            "login",
            "--username",
            credentials.username,
            "--password-stdin",
        )
        if credentials.server:
            command += (credentials.server,)
        logger.info(
            "Logging in to %s as %s", credentials.server or "Docker Hub", credentials.username
        )
        try:
            self._run_command(command, self._working_dir, input_text=credentials.token)
        except CommandExecutionError as exc:
            raise RegistryError(f"Registry login failed: {exc}") from exc

    def build_and_push(self, image: ImageSettings) -> None:
        """Build the image for the configured platform and push (or load) it."""
        command = (
            self._docker,
            "buildx",
            "build",
            "--platform",
            image.platform,
            "--file",
            str(image.dockerfile),
            "--tag",
            image.tag,
            "--push" if image.push else "--load",
            str(image.context),
        )
        logger.info("Building image %s for %s", image.tag, image.platform)
        try:
            self._run_command(command, self._working_dir)
        except CommandExecutionError as exc:
            raise RegistryError(f"Image build failed for {image.tag}: {exc}") from exc
        if image.push:
            logger.info("Pushed image %s", image.tag)
