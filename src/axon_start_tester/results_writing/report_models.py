"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


class RunVerdict(str, Enum):
    """Rendered run-level verdict."""

    PASSED = "PASSED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class RunMetadata:  # pylint: disable=too-many-instance-attributes
    """Metadata rendered into the RunInfo sheet."""

    run_id: str
    run_start: datetime
    image_tag: str
    workspace: Path
    tail_lines: int
    readiness_mode: str
    timeout_seconds: int
    teardown_error: str | None = None
