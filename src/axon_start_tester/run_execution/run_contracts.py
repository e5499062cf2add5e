"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from axon_start_tester.liveness_probe.liveness_outcomes import LivenessReport

SUCCESS_MESSAGE = "axon chain works well"
FAILURE_MESSAGE = "axon chain has some issues, please have a check"
EXIT_SUCCESS = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class RunRequest:
    """Input contract for executing one smoke-test run."""

    config_path: str | None = None
    skip_build: bool = False
    report_path: str | None = None
    run_id: str | None = None


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one completed run."""

    run_id: str
    report: LivenessReport
    workspace: Path
    report_path: Path | None
    teardown_error: str | None

    @property
    def passed(self) -> bool:
        return self.report.passed

    @property
    def exit_code(self) -> int:
        return verdict_exit_code(self.report)

    @property
    def message(self) -> str:
        return verdict_message(self.report)


def verdict_exit_code(report: LivenessReport) -> int:
    """Map a liveness report to the harness process exit status."""
    return EXIT_SUCCESS if report.passed else EXIT_FAILURE


def verdict_message(report: LivenessReport) -> str:
    """Map a liveness report to the printed verdict line."""
    return SUCCESS_MESSAGE if report.passed else FAILURE_MESSAGE
