"""Deployment workspace cleanup, seeding and isolation."""

from __future__ import annotations

import fcntl
import fnmatch
import logging
import os
import shutil
import tempfile
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager, suppress
from pathlib import Path

from axon_start_tester.command_execution import (
    CommandExecutionError,
    CommandRunner,
    run_checked_command,
)
from axon_start_tester.configuration.runtime_settings import DeploymentSettings, SeedFile

from .descriptor_rewriter import rewrite_descriptor_image
from .workspace_models import PreparedWorkspace, WorkspaceError

logger = logging.getLogger(__name__)

LOCK_FILENAME = ".axon-start-tester.lock"


def clean_workspace(
    root: Path,
    patterns: Sequence[str],
    *,
    use_sudo: bool = False,
    run_command: CommandRunner | None = None,
) -> tuple[Path, ...]:
    """Remove every path under ``root`` matching one of ``patterns``.

    Missing matches are not an error. Returns the removed paths.
    """
    command_runner = run_command or run_checked_command
    removed: list[Path] = []
    for pattern in patterns:
        for match in sorted(root.glob(pattern)):
            try:
                _remove_path(match)
            except PermissionError as exc:
                if not use_sudo:
                    raise WorkspaceError(f"Permission denied while removing {match}") from exc
                logger.info("Removing %s with sudo", match)
                try:
                    command_runner(("sudo", "rm", "-rf", str(match)), root)
                except CommandExecutionError as sudo_exc:
                    raise WorkspaceError(f"Failed to remove {match}: {sudo_exc}") from sudo_exc
            except OSError as exc:
                raise WorkspaceError(f"Failed to remove {match}: {exc}") from exc
            removed.append(match)
    if removed:
        logger.info("Removed %d stale workspace paths", len(removed))
    return tuple(removed)


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)


def seed_configuration_files(
    source_root: Path, workspace_root: Path, files: Sequence[SeedFile]
) -> tuple[Path, ...]:
    """Copy each seed file from the checkout into the workspace, overwriting targets."""
    missing = [entry.source for entry in files if not (source_root / entry.source).is_file()]
    if missing:
        raise WorkspaceError(
            f"Configuration inputs not found under {source_root}: {', '.join(missing)}"
        )

    seeded = []
    for entry in files:
        target = workspace_root / entry.target
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            shutil.copyfile(source_root / entry.source, target)
        except OSError as exc:
            raise WorkspaceError(f"Failed to copy {entry.source} to {target}: {exc}") from exc
        seeded.append(target)
    logger.info("Seeded %d configuration files into %s", len(seeded), workspace_root)
    return tuple(seeded)


def prepare_workspace(
    *,
    workspace_root: Path,
    checkout_dir: Path,
    deployment: DeploymentSettings,
    image_tag: str,
    run_command: CommandRunner | None = None,
) -> PreparedWorkspace:
    """Clean the workspace, point the descriptor at the image and seed node configuration."""
    if not workspace_root.is_dir():
        raise WorkspaceError(f"Deployment directory not found: {workspace_root}")

    removed = clean_workspace(
        workspace_root,
        deployment.cleanup_patterns,
        use_sudo=deployment.use_sudo_cleanup,
        run_command=run_command,
    )
    descriptor_path = workspace_root / deployment.descriptor
    updated_services = rewrite_descriptor_image(descriptor_path, image_tag, deployment.services)
    logger.info("Descriptor %s now uses %s for %s", descriptor_path, image_tag, updated_services)
    seeded = seed_configuration_files(checkout_dir, workspace_root, deployment.files)
    return PreparedWorkspace(
        root=workspace_root,
        descriptor_path=descriptor_path,
        removed_paths=removed,
        updated_services=updated_services,
        seeded_files=seeded,
    )


class WorkspaceLock:
    """Exclusive ``flock`` on a lock file guarding a shared deployment directory.

    The kernel drops the lock when the holding process exits, so a run killed by
    an outer timeout never blocks later runs. A leftover lock file without a
    holder is reused.
    """

    def __init__(self, workspace_root: Path) -> None:
        self._path = workspace_root / LOCK_FILENAME
        self._descriptor: int | None = None

    @property
    def path(self) -> Path:
        return self._path

    def acquire(self) -> None:
        while True:
            try:
                descriptor = os.open(self._path, os.O_CREAT | os.O_RDWR, 0o644)
            except OSError as exc:
                raise WorkspaceError(f"Cannot create lock file {self._path}: {exc}") from exc
            try:
                fcntl.flock(descriptor, fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError as exc:
                os.close(descriptor)
                raise WorkspaceError(
                    "Deployment directory is in use by another run "
                    f"(pid {self._owner()}): {self._path}"
                ) from exc
            except OSError as exc:
                os.close(descriptor)
                raise WorkspaceError(f"Cannot lock {self._path}: {exc}") from exc
            if self._still_linked(descriptor):
                break
            # previous holder unlinked the file between our open and flock
            os.close(descriptor)

        try:
            os.ftruncate(descriptor, 0)
            os.write(descriptor, str(os.getpid()).encode("ascii"))
        except OSError as exc:
            os.close(descriptor)
            raise WorkspaceError(f"Cannot write lock file {self._path}: {exc}") from exc
        self._descriptor = descriptor

    def release(self) -> None:
        if self._descriptor is None:
            return
        self._path.unlink(missing_ok=True)
        os.close(self._descriptor)
        self._descriptor = None

    def _still_linked(self, descriptor: int) -> bool:
        try:
            return os.path.samestat(os.fstat(descriptor), os.stat(self._path))
        except FileNotFoundError:
            return False

    def _owner(self) -> str:
        owner = ""
        with suppress(OSError):
            owner = self._path.read_text(encoding="utf-8").strip()
        return owner or "unknown"

    def __enter__(self) -> WorkspaceLock:
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


def _ignore_matching(
    source_root: Path, patterns: Sequence[str]
) -> Callable[[str, list[str]], set[str]]:
    def _ignore(directory: str, names: list[str]) -> set[str]:
        relative = Path(directory).relative_to(source_root)
        return {
            name
            for name in names
            if name == LOCK_FILENAME
            or any(fnmatch.fnmatchcase((relative / name).as_posix(), p) for p in patterns)
        }

    return _ignore


def _discard_workspace(
    parent: Path, *, use_sudo: bool, run_command: CommandRunner | None
) -> None:
    try:
        shutil.rmtree(parent)
        return
    except FileNotFoundError:
        return
    except OSError as exc:
        if not use_sudo:
            logger.warning("Ephemeral workspace %s left behind: %s", parent, exc)
            return
    command_runner = run_command or run_checked_command
    try:
        command_runner(("sudo", "rm", "-rf", str(parent)), parent.parent)
    except CommandExecutionError as exc:
        logger.warning("Ephemeral workspace %s left behind: %s", parent, exc)


@contextmanager
def isolated_workspace(
    deployment_dir: Path,
    run_id: str,
    *,
    exclude_patterns: Sequence[str] = (),
    use_sudo: bool = False,
    run_command: CommandRunner | None = None,
) -> Iterator[Path]:
    """Yield a per-run copy of ``deployment_dir`` that is removed afterwards.

    Paths matching ``exclude_patterns`` are not copied. Removal falls back to
    ``sudo rm -rf`` when ``use_sudo`` is set; anything left behind is logged.
    """
    if not deployment_dir.is_dir():
        raise WorkspaceError(f"Deployment directory not found: {deployment_dir}")
    parent = Path(tempfile.mkdtemp(prefix=f"axon-start-test-{run_id}-"))
    workspace = parent / deployment_dir.name
    try:
        shutil.copytree(
            deployment_dir,
            workspace,
            symlinks=True,
            ignore=_ignore_matching(deployment_dir, exclude_patterns),
        )
    except OSError as exc:
        _discard_workspace(parent, use_sudo=use_sudo, run_command=run_command)
        raise WorkspaceError(f"Failed to copy {deployment_dir} to {workspace}: {exc}") from exc
    logger.info("Using ephemeral workspace %s", workspace)
    try:
        yield workspace
    finally:
        _discard_workspace(parent, use_sudo=use_sudo, run_command=run_command)


@contextmanager
def acquire_workspace(
    deployment: DeploymentSettings,
    run_id: str,
    *,
    run_command: CommandRunner | None = None,
) -> Iterator[Path]:
    """Yield the workspace for one run: an ephemeral copy or the locked shared directory."""
    if deployment.ephemeral:
        with isolated_workspace(
            deployment.directory,
            run_id,
            exclude_patterns=deployment.cleanup_patterns,
            use_sudo=deployment.use_sudo_cleanup,
            run_command=run_command,
        ) as workspace:
            yield workspace
        return
    if not deployment.directory.is_dir():
        raise WorkspaceError(f"Deployment directory not found: {deployment.directory}")
    with WorkspaceLock(deployment.directory):
        yield deployment.directory
