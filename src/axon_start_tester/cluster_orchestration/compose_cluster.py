"""Compose-based cluster lifecycle service."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from axon_start_tester.command_execution import (
    CommandExecutionError,
    CommandRunner,
    run_checked_command,
)

logger = logging.getLogger(__name__)


class ClusterError(Exception):
    """Raised when the compose tool fails to start, list or stop the cluster."""


class ComposeCluster:
    """Drives one compose project through the configured compose command."""

    def __init__(
        self,
        *,
        compose_command: Sequence[str],
        project_dir: Path,
        descriptor: str,
        project_name: str | None = None,
        run_command: CommandRunner | None = None,
    ) -> None:
        if not compose_command:
            raise ValueError("compose_command must not be empty.")
        self._compose_command = tuple(compose_command)
        self._project_dir = project_dir
        self._descriptor = descriptor
        self._project_name = project_name
        self._run_command = run_command or run_checked_command

    def up(self) -> None:
        """Start every declared service in detached mode."""
        logger.info("Starting cluster in %s", self._project_dir)
        self._compose("up", "-d")

    def status(self) -> str:
        """Return the compose status listing for all containers."""
        return self._compose("ps", "-a")

    def down(self) -> None:
        """Stop and remove the cluster's containers and networks."""
        logger.info("Tearing down cluster in %s", self._project_dir)
        self._compose("down")

    def _compose(self, *arguments: str) -> str:
        command: tuple[str, ...] = (*self._compose_command, "-f", self._descriptor)
        if self._project_name:
            command += ("-p", self._project_name)
        command += arguments
        try:
            result = self._run_command(command, self._project_dir)
        except CommandExecutionError as exc:
            raise ClusterError(f"Compose '{' '.join(arguments)}' failed: {exc}") from exc
        return result.stdout
