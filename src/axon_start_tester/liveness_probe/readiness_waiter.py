"""Readiness waiting between cluster start and liveness inspection."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from axon_start_tester.configuration.runtime_settings import ReadinessSettings

from .liveness_outcomes import LivenessReport

logger = logging.getLogger(__name__)

LivenessProbe = Callable[[], LivenessReport]


def wait_for_liveness(
    probe: LivenessProbe,
    settings: ReadinessSettings,
    *,
    sleep: Callable[[float], None] | None = None,
    clock: Callable[[], float] | None = None,
) -> LivenessReport:
    """Wait according to the readiness policy and return the last liveness report.

    ``fixed`` sleeps for the whole timeout and probes once. ``poll`` probes
    immediately, then every poll interval, returning as soon as the quorum is met
    or the timeout has elapsed.
    """
    sleep_fn = sleep or time.sleep
    clock_fn = clock or time.monotonic

    if settings.mode == "fixed":
        logger.info("Settling for %d seconds", settings.timeout_seconds)
        sleep_fn(settings.timeout_seconds)
        return probe()

    deadline = clock_fn() + settings.timeout_seconds
    while True:
        report = probe()
        if report.passed:
            return report
        remaining = deadline - clock_fn()
        if remaining <= 0:
            logger.info("Readiness timeout of %d seconds elapsed", settings.timeout_seconds)
            return report
        delay = min(settings.poll_interval_seconds, remaining)
        logger.debug("Quorum not met, polling again in %.1f seconds", delay)
        sleep_fn(delay)
