"""Liveness probe entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class NodeStatus(str, Enum):
    """Liveness status of one node derived from its log tail."""

    HEALTHY = "healthy"
    MARKER_MISSING = "marker_missing"
    LOG_MISSING = "log_missing"
    LOG_UNREADABLE = "log_unreadable"


@dataclass(frozen=True)
class NodeLivenessResult:
    """Outcome of inspecting one node log."""

    node_name: str
    log_path: Path
    status: NodeStatus
    matched_line: str | None = None
    detail: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status == NodeStatus.HEALTHY


@dataclass(frozen=True)
class LivenessReport:
    """Cluster-wide liveness verdict against the quorum threshold."""

    results: tuple[NodeLivenessResult, ...]
    marker: str
    quorum: int

    @property
    def healthy_count(self) -> int:
        return sum(1 for result in self.results if result.healthy)

    @property
    def passed(self) -> bool:
        return self.healthy_count >= self.quorum
