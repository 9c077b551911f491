"""Message broker probe — healthy if any one of the broker endpoints accepts TCP."""

from __future__ import annotations

import socket

from healthcheck.checks.network import split_address
from healthcheck.health.aggregator import Check, CheckError

BROKER_CHECKER_NAME = "kafka"


def broker_dial_check(endpoints: list[str], timeout_ms: int = 5_000) -> Check:
    """Dial each endpoint in turn; fail only if every endpoint fails."""

    def check() -> None:
        if not endpoints:
            raise CheckError("empty kafka endpoints")

        errors: list[str] = []
        for ep in endpoints:
            try:
                sock = socket.create_connection(split_address(ep), timeout=timeout_ms / 1000)
                sock.close()
            except (OSError, ValueError) as e:
                errors.append(f"dial tcp {ep}: {e}")
                continue
            return

        raise CheckError(f"[{' '.join(errors)}]")

    return check
