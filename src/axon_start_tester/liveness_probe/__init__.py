"""Liveness probe domain exports."""

from .liveness_outcomes import LivenessReport, NodeLivenessResult, NodeStatus
from .log_tail_inspector import inspect_cluster, inspect_node_log, read_log_tail
from .readiness_waiter import LivenessProbe, wait_for_liveness

__all__ = [
    "LivenessProbe",
    "LivenessReport",
    "NodeLivenessResult",
    "NodeStatus",
    "inspect_cluster",
    "inspect_node_log",
    "read_log_tail",
    "wait_for_liveness",
]
