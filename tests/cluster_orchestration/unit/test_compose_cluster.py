"""Compose cluster lifecycle tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from axon_start_tester.cluster_orchestration import ClusterError, ComposeCluster
from axon_start_tester.command_execution import CommandExecutionError, CommandResult


class _RecordingRunner:
    def __init__(self, *, fail_on: str | None = None, stdout: str = "") -> None:
        self.calls: list[tuple[tuple[str, ...], Path]] = []
        self._fail_on = fail_on
        self._stdout = stdout

    def __call__(self, command, cwd, *, input_text=None):
        self.calls.append((command, cwd))
        if self._fail_on and self._fail_on in command:
            raise CommandExecutionError("Command failed with exit code 1")
        return CommandResult(command=command, returncode=0, stdout=self._stdout, stderr="")


def test_lifecycle_commands_use_descriptor_in_project_dir(tmp_path: Path) -> None:
    runner = _RecordingRunner(stdout="NAME  STATUS\naxon1 Up\n")
    cluster = ComposeCluster(
        compose_command=("docker-compose",),
        project_dir=tmp_path,
        descriptor="docker-compose.yml",
        run_command=runner,
    )

    cluster.up()
    listing = cluster.status()
    cluster.down()

    assert [call[0] for call in runner.calls] == [
        ("docker-compose", "-f", "docker-compose.yml", "up", "-d"),
        ("docker-compose", "-f", "docker-compose.yml", "ps", "-a"),
        ("docker-compose", "-f", "docker-compose.yml", "down"),
    ]
    assert {call[1] for call in runner.calls} == {tmp_path}
    assert "axon1 Up" in listing


def test_compose_plugin_and_project_name_are_forwarded(tmp_path: Path) -> None:
    runner = _RecordingRunner()
    cluster = ComposeCluster(
        compose_command=("docker", "compose"),
        project_dir=tmp_path,
        descriptor="compose.yaml",
        project_name="axon-start-test-abc",
        run_command=runner,
    )

    cluster.up()

    assert runner.calls[0][0] == (
        "docker",
        "compose",
        "-f",
        "compose.yaml",
        "-p",
        "axon-start-test-abc",
        "up",
        "-d",
    )


def test_command_failures_raise_cluster_error(tmp_path: Path) -> None:
    cluster = ComposeCluster(
        compose_command=("docker-compose",),
        project_dir=tmp_path,
        descriptor="docker-compose.yml",
        run_command=_RecordingRunner(fail_on="up"),
    )

    with pytest.raises(ClusterError, match="Compose 'up -d' failed"):
        cluster.up()


def test_empty_compose_command_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        ComposeCluster(compose_command=(), project_dir=tmp_path, descriptor="docker-compose.yml")
