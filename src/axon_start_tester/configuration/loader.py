"""Configuration loader service."""

from __future__ import annotations

import shlex
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    Configuration,
    DeploymentSettings,
    ImageSettings,
    LivenessSettings,
    ReadinessSettings,
    RegistrySettings,
    SeedFile,
)

DEFAULT_IMAGE_TAG = "axonweb3/axon:start-test"
DEFAULT_LIVENESS_MARKER = "state goto new height 200"
DEFAULT_NODE_LOGS = (
    "logs1/axon.log",
    "logs2/axon.log",
    "logs3/axon.log",
    "logs4/axon.log",
)
DEFAULT_CLEANUP_PATTERNS = ("logs*", "devtools/chain/data*")
DEFAULT_SEED_FILES = (
    SeedFile(
        source="devtools/chain/geneses/genesis_multi_nodes_short_epoch_len.json",
        target="devtools/chain/genesis_multi_nodes.json",
    ),
    *(
        SeedFile(
            source=f"devtools/chain/k8s/node_{index}.toml",
            target=f"devtools/chain/node_{index}.toml",
        )
        for index in range(1, 5)
    ),
)
READINESS_MODES = ("poll", "fixed")


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str | None = None) -> Configuration:
    """Load and validate the configuration file.

    Without a path, the built-in defaults are used and relative paths resolve
    against the current working directory.
    """
    if config_path is None:
        return build_configuration({}, base_path=Path.cwd(), path=None)

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    return build_configuration(parsed, base_path=path.resolve().parent, path=path)


def build_configuration(
    parsed: Mapping[str, Any], *, base_path: Path, path: Path | None
) -> Configuration:
    """Normalize an already parsed configuration mapping."""
    source = _optional_mapping(parsed.get("source"), "source")
    checkout_dir = _resolve_path(
        base_path, _string_or_default(source.get("checkout_dir"), ".", "source.checkout_dir")
    )

    return Configuration(
        path=path,
        checkout_dir=checkout_dir,
        registry=_parse_registry_section(parsed.get("registry")),
        image=_parse_image_section(parsed.get("image"), checkout_dir),
        deployment=_parse_deployment_section(parsed.get("deployment"), checkout_dir),
        liveness=_parse_liveness_section(parsed.get("liveness")),
        readiness=_parse_readiness_section(parsed.get("readiness")),
    )


def _parse_registry_section(value: Any) -> RegistrySettings:
    section = _optional_mapping(value, "registry")
    return RegistrySettings(
        server=_optional_string(section.get("server"), "registry.server"),
        username_env=_string_or_default(
            section.get("username_env"), "DOCKER_HUB_USERNAME", "registry.username_env"
        ),
        token_env=_string_or_default(
            section.get("token_env"), "DOCKER_HUB_ACCESS_TOKEN", "registry.token_env"
        ),
    )


def _parse_image_section(value: Any, checkout_dir: Path) -> ImageSettings:
    section = _optional_mapping(value, "image")
    dockerfile = _string_or_default(section.get("dockerfile"), "./Dockerfile", "image.dockerfile")
    context = _string_or_default(section.get("context"), ".", "image.context")
    return ImageSettings(
        tag=_string_or_default(section.get("tag"), DEFAULT_IMAGE_TAG, "image.tag"),
        dockerfile=_resolve_path(checkout_dir, dockerfile),
        context=_resolve_path(checkout_dir, context),
        platform=_string_or_default(section.get("platform"), "linux/amd64", "image.platform"),
        push=_bool_or_default(section.get("push"), True, "image.push"),
    )


def _parse_deployment_section(value: Any, checkout_dir: Path) -> DeploymentSettings:
    section = _optional_mapping(value, "deployment")
    directory = _string_or_default(
        section.get("directory"), "../docker-deploy", "deployment.directory"
    )
    compose_command = _string_or_default(
        section.get("compose_command"), "docker-compose", "deployment.compose_command"
    )
    patterns = _string_sequence_or_default(
        section.get("cleanup_patterns"), DEFAULT_CLEANUP_PATTERNS, "deployment.cleanup_patterns"
    )
    for pattern in patterns:
        if Path(pattern).is_absolute() or ".." in Path(pattern).parts:
            raise ConfigurationError(
                f"deployment.cleanup_patterns entry '{pattern}' must stay inside the workspace."
            )
    return DeploymentSettings(
        directory=_resolve_path(checkout_dir, directory),
        descriptor=_string_or_default(
            section.get("descriptor"), "docker-compose.yml", "deployment.descriptor"
        ),
        compose_command=tuple(shlex.split(compose_command)),
        services=_string_sequence_or_default(section.get("services"), (), "deployment.services"),
        ephemeral=_bool_or_default(section.get("ephemeral"), False, "deployment.ephemeral"),
        use_sudo_cleanup=_bool_or_default(
            section.get("use_sudo_cleanup"), True, "deployment.use_sudo_cleanup"
        ),
        cleanup_patterns=patterns,
        files=_parse_seed_files(section.get("files")),
    )


def _parse_seed_files(value: Any) -> tuple[SeedFile, ...]:
    if value is None:
        return DEFAULT_SEED_FILES
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise ConfigurationError("deployment.files must be a list of source/target mappings.")
    files = []
    for index, entry in enumerate(value):
        label = f"deployment.files[{index}]"
        mapping = _require_mapping(entry, label)
        files.append(
            SeedFile(
                source=_require_non_empty_string(mapping.get("source"), f"{label}.source"),
                target=_require_non_empty_string(mapping.get("target"), f"{label}.target"),
            )
        )
    return tuple(files)


def _parse_liveness_section(value: Any) -> LivenessSettings:
    section = _optional_mapping(value, "liveness")
    node_logs = _string_sequence_or_default(
        section.get("node_logs"), DEFAULT_NODE_LOGS, "liveness.node_logs"
    )
    if not node_logs:
        raise ConfigurationError("liveness.node_logs must contain at least one log path.")
    marker_raw = section.get("marker", DEFAULT_LIVENESS_MARKER)
    if not isinstance(marker_raw, str) or not marker_raw:
        raise ConfigurationError("liveness.marker must be a non-empty string.")
    tail_lines = _require_positive_int(section.get("tail_lines", 100), "liveness.tail_lines")
    quorum = _require_positive_int(section.get("quorum", 1), "liveness.quorum")
    if quorum > len(node_logs):
        raise ConfigurationError(
            f"liveness.quorum ({quorum}) cannot exceed the number of node logs ({len(node_logs)})."
        )
    return LivenessSettings(
        node_logs=node_logs,
        marker=marker_raw,
        tail_lines=tail_lines,
        quorum=quorum,
    )


def _parse_readiness_section(value: Any) -> ReadinessSettings:
    section = _optional_mapping(value, "readiness")
    mode = _string_or_default(section.get("mode"), "poll", "readiness.mode").lower()
    if mode not in READINESS_MODES:
        raise ConfigurationError(
            f"readiness.mode must be one of {', '.join(READINESS_MODES)}, got '{mode}'."
        )
    return ReadinessSettings(
        mode=mode,
        timeout_seconds=_require_positive_int(
            section.get("timeout_seconds", 700), "readiness.timeout_seconds"
        ),
        poll_interval_seconds=_require_positive_int(
            section.get("poll_interval_seconds", 10), "readiness.poll_interval_seconds"
        ),
    )


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    return _require_mapping(value, section_name)


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _string_or_default(value: Any, default: str, field_name: str) -> str:
    if value is None:
        return default
    return _require_non_empty_string(value, field_name)


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _bool_or_default(value: Any, default: bool, field_name: str) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean.")
    return value


def _string_sequence_or_default(
    value: Any, default: tuple[str, ...], field_name: str
) -> tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value
