"""Registry publisher tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from axon_start_tester.command_execution import CommandExecutionError, CommandResult
from axon_start_tester.configuration.runtime_settings import ImageSettings, RegistrySettings
from axon_start_tester.image_publishing import (
    RegistryCredentials,
    RegistryError,
    RegistryPublisher,
    resolve_registry_credentials,
)

_REGISTRY = RegistrySettings(
    server=None,
    username_env="DOCKER_HUB_USERNAME",
    token_env="DOCKER_HUB_ACCESS_TOKEN",
)


def _image(tmp_path: Path, *, push: bool = True) -> ImageSettings:
    return ImageSettings(
        tag="axonweb3/axon:start-test",
        dockerfile=tmp_path / "Dockerfile",
        context=tmp_path,
        platform="linux/amd64",
        push=push,
    )


class _RecordingRunner:
    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[tuple[tuple[str, ...], Path, str | None]] = []
        self._fail_on = fail_on

    def __call__(self, command, cwd, *, input_text=None):
        self.calls.append((command, cwd, input_text))
        if self._fail_on and self._fail_on in command:
            raise CommandExecutionError(f"Command failed with exit code 1: {' '.join(command)}")
        return CommandResult(command=command, returncode=0, stdout="", stderr="")


def test_resolve_registry_credentials_reads_configured_variables() -> None:
    credentials = resolve_registry_credentials(
        _REGISTRY,
        {"DOCKER_HUB_USERNAME": "axon-ci", "DOCKER_HUB_ACCESS_TOKEN": "dckr_pat_123"},
    )

    assert credentials.username == "axon-ci"
    assert credentials.token == "dckr_pat_123"
    assert "dckr_pat_123" not in repr(credentials)


@pytest.mark.parametrize(
    ("environ", "missing"),
    [
        ({"DOCKER_HUB_ACCESS_TOKEN": "token"}, "DOCKER_HUB_USERNAME"),
        (
            {"DOCKER_HUB_USERNAME": "axon-ci", "DOCKER_HUB_ACCESS_TOKEN": "  "},
            "DOCKER_HUB_ACCESS_TOKEN",
        ),
    ],
)
def test_resolve_registry_credentials_rejects_missing_values(environ, missing: str) -> None:
    with pytest.raises(RegistryError, match=missing):
        resolve_registry_credentials(_REGISTRY, environ)


def test_login_pipes_token_on_stdin(tmp_path: Path) -> None:
    runner = _RecordingRunner()
    publisher = RegistryPublisher(working_dir=tmp_path, run_command=runner)

    publisher.login(RegistryCredentials(username="axon-ci", token="dckr_pat_123", server=None))

    command, cwd, input_text = runner.calls[0]
    assert command == ("docker", "login", "--username", "axon-ci", "--password-stdin")
    assert "dckr_pat_123" not in command
    assert input_text == "dckr_pat_123"
    assert cwd == tmp_path


def test_login_targets_custom_registry_server(tmp_path: Path) -> None:
    runner = _RecordingRunner()
    publisher = RegistryPublisher(working_dir=tmp_path, run_command=runner)

    publisher.login(RegistryCredentials(username="u", token="t", server="ghcr.io"))

    assert runner.calls[0][0][-1] == "ghcr.io"


def test_build_and_push_invokes_buildx_for_target_platform(tmp_path: Path) -> None:
    runner = _RecordingRunner()
    publisher = RegistryPublisher(working_dir=tmp_path, run_command=runner)

    publisher.build_and_push(_image(tmp_path))

    command = runner.calls[0][0]
    assert command[:3] == ("docker", "buildx", "build")
    assert command[command.index("--platform") + 1] == "linux/amd64"
    assert command[command.index("--file") + 1] == str(tmp_path / "Dockerfile")
    assert command[command.index("--tag") + 1] == "axonweb3/axon:start-test"
    assert "--push" in command
    assert command[-1] == str(tmp_path)


def test_build_without_push_loads_image_locally(tmp_path: Path) -> None:
    runner = _RecordingRunner()
    publisher = RegistryPublisher(working_dir=tmp_path, run_command=runner)

    publisher.build_and_push(_image(tmp_path, push=False))

    assert "--load" in runner.calls[0][0]
    assert "--push" not in runner.calls[0][0]


def test_failures_are_wrapped_as_registry_errors(tmp_path: Path) -> None:
    publisher = RegistryPublisher(working_dir=tmp_path, run_command=_RecordingRunner("login"))

    with pytest.raises(RegistryError, match="Registry login failed"):
        publisher.login(RegistryCredentials(username="u", token="t", server=None))

    publisher = RegistryPublisher(working_dir=tmp_path, run_command=_RecordingRunner("buildx"))
    with pytest.raises(RegistryError, match="Image build failed"):
        publisher.build_and_push(_image(tmp_path))
