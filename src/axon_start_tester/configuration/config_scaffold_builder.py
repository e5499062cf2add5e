"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "axon-start-test.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Run configuration for axon-start-tester.
# Every key is optional; the values below are the built-in defaults.
# Relative paths under image/deployment resolve against source.checkout_dir.

source:
  # Axon source checkout used as build context and seed file origin.
  checkout_dir: "."

registry:
  # Registry host; leave null for Docker Hub.
  server: null
  # Environment variables holding the registry credentials.
  username_env: "DOCKER_HUB_USERNAME"
  token_env: "DOCKER_HUB_ACCESS_TOKEN"

image:
  tag: "axonweb3/axon:start-test"
  dockerfile: "./Dockerfile"
  context: "."
  platform: "linux/amd64"
  push: true

deployment:
  directory: "../docker-deploy"
  descriptor: "docker-compose.yml"
  # Use "docker compose" for the compose plugin.
  compose_command: "docker-compose"
  # Services whose image is rewritten; empty means every service with an image.
  services: []
  # Copy the deployment directory into a per-run temporary workspace.
  ephemeral: false
  # Retry cleanup with `sudo rm -rf` when container-owned files block removal.
  use_sudo_cleanup: true
  cleanup_patterns:
    - "logs*"
    - "devtools/chain/data*"
  files:
    - source: "devtools/chain/geneses/genesis_multi_nodes_short_epoch_len.json"
      target: "devtools/chain/genesis_multi_nodes.json"
    - source: "devtools/chain/k8s/node_1.toml"
      target: "devtools/chain/node_1.toml"
    - source: "devtools/chain/k8s/node_2.toml"
      target: "devtools/chain/node_2.toml"
    - source: "devtools/chain/k8s/node_3.toml"
      target: "devtools/chain/node_3.toml"
    - source: "devtools/chain/k8s/node_4.toml"
      target: "devtools/chain/node_4.toml"

liveness:
  node_logs:
    - "logs1/axon.log"
    - "logs2/axon.log"
    - "logs3/axon.log"
    - "logs4/axon.log"
  marker: "state goto new height 200"
  tail_lines: 100
  # Minimum number of nodes that must show the marker.
  quorum: 1

readiness:
  # poll: check logs until the quorum is met or the timeout elapses.
  # fixed: sleep for the whole timeout, then check once.
  mode: "poll"
  timeout_seconds: 700
  poll_interval_seconds: 10
"""


def build_placeholder_configuration() -> str:
    """Build a YAML run configuration populated with the default values."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the run configuration scaffold to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Run configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
