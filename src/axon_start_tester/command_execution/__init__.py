"""Command execution domain exports."""

from .command_runner import (
    CommandExecutionError,
    CommandResult,
    CommandRunner,
    run_checked_command,
)

__all__ = [
    "CommandExecutionError",
    "CommandResult",
    "CommandRunner",
    "run_checked_command",
]
