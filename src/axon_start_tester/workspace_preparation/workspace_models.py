"""Workspace preparation entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class WorkspaceError(Exception):
    """Raised when the deployment workspace cannot be prepared."""


class DescriptorError(WorkspaceError):
    """Raised when the deployment descriptor cannot be rewritten."""


@dataclass(frozen=True)
class PreparedWorkspace:
    """Summary of one prepared deployment workspace."""

    root: Path
    descriptor_path: Path
    removed_paths: tuple[Path, ...]
    updated_services: tuple[str, ...]
    seeded_files: tuple[Path, ...]
