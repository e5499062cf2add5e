"""Log-tail marker inspection service."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from axon_start_tester.configuration.runtime_settings import LivenessSettings

from .liveness_outcomes import LivenessReport, NodeLivenessResult, NodeStatus

logger = logging.getLogger(__name__)

TAIL_BLOCK_SIZE = 8192


def read_log_tail(path: Path, line_count: int) -> list[str]:
    """Return the last ``line_count`` lines of ``path`` without trailing newlines.

    The file is read backwards in blocks from its end, so the cost depends on the
    tail size rather than on the length of the whole log.
    """
    if line_count <= 0:
        return []
    with path.open("rb") as handle:
        position = handle.seek(0, os.SEEK_END)
        buffer = b""
        while position > 0 and buffer.count(b"\n") <= line_count:
            step = min(TAIL_BLOCK_SIZE, position)
            position -= step
            handle.seek(position)
            buffer = handle.read(step) + buffer
    lines = buffer.decode("utf-8", errors="replace").split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines[-line_count:]]


def inspect_node_log(
    node_name: str, log_path: Path, marker: str, tail_lines: int
) -> NodeLivenessResult:
    """Check whether the marker appears verbatim in the tail of one node log."""
    if not log_path.is_file():
        return NodeLivenessResult(
            node_name=node_name,
            log_path=log_path,
            status=NodeStatus.LOG_MISSING,
            detail="log file does not exist",
        )
    try:
        tail = read_log_tail(log_path, tail_lines)
    except OSError as exc:
        return NodeLivenessResult(
            node_name=node_name,
            log_path=log_path,
            status=NodeStatus.LOG_UNREADABLE,
            detail=str(exc),
        )

    for line in tail:
        if marker in line:
            return NodeLivenessResult(
                node_name=node_name,
                log_path=log_path,
                status=NodeStatus.HEALTHY,
                matched_line=line,
            )
    return NodeLivenessResult(
        node_name=node_name,
        log_path=log_path,
        status=NodeStatus.MARKER_MISSING,
        detail=f"marker not found in last {tail_lines} lines",
    )


def inspect_cluster(workspace_root: Path, settings: LivenessSettings) -> LivenessReport:
    """Inspect every configured node log and evaluate the quorum."""
    results = tuple(
        inspect_node_log(
            f"node{index}",
            workspace_root / log_path,
            settings.marker,
            settings.tail_lines,
        )
        for index, log_path in enumerate(settings.node_logs, start=1)
    )
    report = LivenessReport(results=results, marker=settings.marker, quorum=settings.quorum)
    for result in results:
        logger.debug("%s: %s", result.node_name, result.status.value)
    logger.info(
        "%d of %d nodes reached '%s' (quorum %d)",
        report.healthy_count,
        len(results),
        settings.marker,
        settings.quorum,
    )
    return report
