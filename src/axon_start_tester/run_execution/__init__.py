"""Run execution domain exports."""

from .run_contracts import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
    RunOutcome,
    RunRequest,
    verdict_exit_code,
    verdict_message,
)
from .smoke_test_run_use_case import (
    RunExecutionError,
    check_cluster_liveness,
    execute_smoke_test_run,
    tear_down_cluster,
)

__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "FAILURE_MESSAGE",
    "SUCCESS_MESSAGE",
    "RunRequest",
    "RunOutcome",
    "RunExecutionError",
    "check_cluster_liveness",
    "execute_smoke_test_run",
    "tear_down_cluster",
    "verdict_exit_code",
    "verdict_message",
]
