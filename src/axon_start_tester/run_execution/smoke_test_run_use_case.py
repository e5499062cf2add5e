"""Smoke-test run use-case service."""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from pathlib import Path

from axon_start_tester.cluster_orchestration import ClusterError, ComposeCluster
from axon_start_tester.command_execution import CommandRunner, run_checked_command
from axon_start_tester.configuration import Configuration, ConfigurationError, load_configuration
from axon_start_tester.image_publishing import (
    RegistryError,
    RegistryPublisher,
    resolve_registry_credentials,
)
from axon_start_tester.liveness_probe import LivenessReport, inspect_cluster, wait_for_liveness
from axon_start_tester.results_writing import RunMetadata, write_run_report
from axon_start_tester.workspace_preparation import (
    WorkspaceError,
    acquire_workspace,
    prepare_workspace,
)

from .run_contracts import RunOutcome, RunRequest

logger = logging.getLogger(__name__)


class RunExecutionError(Exception):
    """Raised when a run use case cannot be completed."""


def execute_smoke_test_run(
    request: RunRequest,
    *,
    run_command: CommandRunner | None = None,
    environ: Mapping[str, str] | None = None,
    sleep: Callable[[float], None] | None = None,
    clock: Callable[[], float] | None = None,
) -> RunOutcome:
    """Build, deploy and health-check one cluster, returning the run outcome.

    Teardown runs exactly once whenever cluster start was attempted, after the
    liveness check and before the verdict is returned.
    """
    command_runner = run_command or run_checked_command
    configuration = _load_run_configuration(request.config_path)
    run_id = request.run_id or uuid.uuid4().hex[:12]
    run_start = datetime.now(UTC)
    logger.info("Starting smoke-test run %s", run_id)

    if request.skip_build:
        logger.info("Skipping image build; using existing %s", configuration.image.tag)
    else:
        _publish_image(
            configuration,
            command_runner,
            environ if environ is not None else os.environ,
        )

    try:
        with acquire_workspace(
            configuration.deployment, run_id, run_command=command_runner
        ) as workspace:
            prepare_workspace(
                workspace_root=workspace,
                checkout_dir=configuration.checkout_dir,
                deployment=configuration.deployment,
                image_tag=configuration.image.tag,
                run_command=command_runner,
            )
            cluster = ComposeCluster(
                compose_command=configuration.deployment.compose_command,
                project_dir=workspace,
                descriptor=configuration.deployment.descriptor,
                project_name=(
                    f"axon-start-test-{run_id}" if configuration.deployment.ephemeral else None
                ),
                run_command=command_runner,
            )
            report, teardown_error = _run_cluster(
                cluster, workspace, configuration, sleep=sleep, clock=clock
            )
    except WorkspaceError as exc:
        raise RunExecutionError(f"Workspace preparation failed: {exc}") from exc
    except ClusterError as exc:
        raise RunExecutionError(f"Cluster start failed: {exc}") from exc

    report_path = None
    if request.report_path:
        metadata = RunMetadata(
            run_id=run_id,
            run_start=run_start,
            image_tag=configuration.image.tag,
            workspace=workspace,
            tail_lines=configuration.liveness.tail_lines,
            readiness_mode=configuration.readiness.mode,
            timeout_seconds=configuration.readiness.timeout_seconds,
            teardown_error=teardown_error,
        )
        try:
            report_path = write_run_report(request.report_path, report, metadata)
        except OSError as exc:
            raise RunExecutionError(f"Failed to write run report: {exc}") from exc

    return RunOutcome(
        run_id=run_id,
        report=report,
        workspace=workspace,
        report_path=report_path,
        teardown_error=teardown_error,
    )


def check_cluster_liveness(
    config_path: str | None = None, *, workspace: str | None = None
) -> LivenessReport:
    """Inspect the node logs of an existing deployment without waiting."""
    configuration = _load_run_configuration(config_path, require_checkout=False)
    root = Path(workspace).resolve() if workspace else configuration.deployment.directory
    if not root.is_dir():
        raise RunExecutionError(f"Deployment directory not found: {root}")
    return inspect_cluster(root, configuration.liveness)


def tear_down_cluster(
    config_path: str | None = None,
    *,
    workspace: str | None = None,
    project_name: str | None = None,
    run_command: CommandRunner | None = None,
) -> None:
    """Stop and remove the cluster of an existing deployment.

    ``project_name`` selects the compose project of an ephemeral run
    (``axon-start-test-<run_id>``).
    """
    configuration = _load_run_configuration(config_path, require_checkout=False)
    root = Path(workspace).resolve() if workspace else configuration.deployment.directory
    cluster = ComposeCluster(
        compose_command=configuration.deployment.compose_command,
        project_dir=root,
        descriptor=configuration.deployment.descriptor,
        project_name=project_name,
        run_command=run_command,
    )
    try:
        cluster.down()
    except ClusterError as exc:
        raise RunExecutionError(str(exc)) from exc


def _load_run_configuration(
    config_path: str | None, *, require_checkout: bool = True
) -> Configuration:
    try:
        configuration = load_configuration(config_path)
    except (ConfigurationError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc
    if require_checkout and not configuration.checkout_dir.is_dir():
        raise RunExecutionError(f"Source checkout not found: {configuration.checkout_dir}")
    return configuration


def _publish_image(
    configuration: Configuration,
    command_runner: CommandRunner,
    environ: Mapping[str, str],
) -> None:
    publisher = RegistryPublisher(
        working_dir=configuration.checkout_dir,
        run_command=command_runner,
    )
    try:
        if configuration.image.push:
            publisher.login(resolve_registry_credentials(configuration.registry, environ))
        publisher.build_and_push(configuration.image)
    except RegistryError as exc:
        raise RunExecutionError(f"Image publication failed: {exc}") from exc


def _run_cluster(
    cluster: ComposeCluster,
    workspace: Path,
    configuration: Configuration,
    *,
    sleep: Callable[[float], None] | None,
    clock: Callable[[], float] | None,
) -> tuple[LivenessReport, str | None]:
    try:
        cluster.up()
        _log_cluster_status(cluster)
        report = wait_for_liveness(
            lambda: inspect_cluster(workspace, configuration.liveness),
            configuration.readiness,
            sleep=sleep,
            clock=clock,
        )
    finally:
        teardown_error = _tear_down(cluster)
    return report, teardown_error


def _log_cluster_status(cluster: ComposeCluster) -> None:
    try:
        listing = cluster.status()
    except ClusterError as exc:
        logger.warning("Could not list cluster status: %s", exc)
        return
    logger.info("Cluster status:\n%s", listing.rstrip())


def _tear_down(cluster: ComposeCluster) -> str | None:
    try:
        cluster.down()
    except ClusterError as exc:
        logger.warning("Cluster teardown failed: %s", exc)
        return str(exc)
    return None
