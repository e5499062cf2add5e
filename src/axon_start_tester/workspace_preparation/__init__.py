"""Workspace preparation domain exports."""

from .descriptor_rewriter import rewrite_descriptor_image
from .workspace_models import DescriptorError, PreparedWorkspace, WorkspaceError
from .workspace_preparer import (
    LOCK_FILENAME,
    WorkspaceLock,
    acquire_workspace,
    clean_workspace,
    isolated_workspace,
    prepare_workspace,
    seed_configuration_files,
)

__all__ = [
    "DescriptorError",
    "PreparedWorkspace",
    "WorkspaceError",
    "LOCK_FILENAME",
    "WorkspaceLock",
    "acquire_workspace",
    "clean_workspace",
    "isolated_workspace",
    "prepare_workspace",
    "rewrite_descriptor_image",
    "seed_configuration_files",
]
