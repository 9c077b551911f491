"""Process probes."""

from __future__ import annotations

import threading

from healthcheck.health.aggregator import Check, CheckError

THREADS_THRESHOLD = "threads_threshold"


def thread_count_check(threshold: int) -> Check:
    """Fail when more than ``threshold`` threads are alive (likely a leak)."""

    def check() -> None:
        count = threading.active_count()
        if count > threshold:
            raise CheckError(f"too many threads ({count} > {threshold})")

    return check
