"""Checked subprocess execution shared by docker and compose invocations."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class CommandExecutionError(Exception):
    """Raised when an external command is missing or exits with a failure status."""

    def __init__(self, message: str, *, returncode: int | None = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one successful command."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):  # pylint: disable=too-few-public-methods
    """Callable used by every component that shells out."""

    def __call__(
        self, command: tuple[str, ...], cwd: Path, *, input_text: str | None = None
    ) -> CommandResult: ...


def run_checked_command(
    command: tuple[str, ...], cwd: Path, *, input_text: str | None = None
) -> CommandResult:
    """Run one command and wrap subprocess errors with domain-friendly messages.

    ``input_text`` is piped to stdin and never included in log or error output.
    """
    command_text = shlex.join(command)
    logger.debug("Running %s (cwd=%s)", command_text, cwd)
    try:
        completed = subprocess.run(
            list(command),
            cwd=cwd,
            input=input_text,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise CommandExecutionError(f"Command not found: {command_text}") from exc
    except subprocess.CalledProcessError as exc:
        output = (exc.stderr or exc.stdout or "").strip()
        message = f"Command failed with exit code {exc.returncode}: {command_text}"
        if output:
            message = f"{message}\n{output}"
        raise CommandExecutionError(message, returncode=exc.returncode, output=output) from exc
    return CommandResult(
        command=command,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
