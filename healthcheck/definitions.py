"""Probe definitions — loads healthchecks.yaml and registers the checks it declares.

File format::

    liveness:
      - type: threads
        threshold: 500
    readiness:
      - name: billing-api
        type: http
        url: http://billing:8080/ready
        timeout_ms: 2000
      - type: broker
        endpoints: ["kafka-1:9092", "kafka-2:9092"]

Entries without a ``name`` get one derived from their target.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from healthcheck.checks import (
    BROKER_CHECKER_NAME,
    DATABASE_CHECKER_NAME,
    DNS_RESOLVE_SUFFIX,
    HTTP_GET_SUFFIX,
    TCP_DIAL_SUFFIX,
    THREADS_THRESHOLD,
    broker_dial_check,
    database_ping_check,
    dns_resolve_check,
    http_get_check,
    sqlite_connection,
    tcp_dial_check,
    thread_count_check,
)
from healthcheck.health import Check, Handler, Probe

logger = logging.getLogger(__name__)


# ── Data model ───────────────────────────────────────────────────────────────


@dataclass
class ProbeDef:
    """One probe entry from the definitions file."""

    name: str
    type: str  # dns | tcp | http | database | broker | threads
    probe: Probe = Probe.READINESS
    host: str = ""  # dns
    address: str = ""  # tcp, host:port
    url: str = ""  # http
    database: str = ""  # database, SQLite path
    endpoints: list[str] = field(default_factory=list)  # broker
    threshold: int = 0  # threads
    timeout_ms: int = 5_000


# ── Check builders ───────────────────────────────────────────────────────────


CHECK_BUILDERS: dict[str, Callable[[ProbeDef], Check]] = {
    "dns": lambda d: dns_resolve_check(d.host, d.timeout_ms),
    "tcp": lambda d: tcp_dial_check(d.address, d.timeout_ms),
    "http": lambda d: http_get_check(d.url, d.timeout_ms),
    "database": lambda d: database_ping_check(
        sqlite_connection(d.database, d.timeout_ms), d.timeout_ms,
    ),
    "broker": lambda d: broker_dial_check(d.endpoints, d.timeout_ms),
    "threads": lambda d: thread_count_check(d.threshold),
}

_DEFAULT_NAMES: dict[str, Callable[[dict[str, Any]], str]] = {
    "dns": lambda raw: f"{raw.get('host', '')}{DNS_RESOLVE_SUFFIX}",
    "tcp": lambda raw: f"{raw.get('address', '')}{TCP_DIAL_SUFFIX}",
    "http": lambda raw: f"{raw.get('url', '')}{HTTP_GET_SUFFIX}",
    "database": lambda raw: DATABASE_CHECKER_NAME,
    "broker": lambda raw: BROKER_CHECKER_NAME,
    "threads": lambda raw: THREADS_THRESHOLD,
}


def build_check(definition: ProbeDef) -> Check:
    builder = CHECK_BUILDERS.get(definition.type)
    if builder is None:
        raise ValueError(f"Unknown check type: {definition.type}")
    return builder(definition)


# ── Loading ──────────────────────────────────────────────────────────────────


def load_definitions(path: Path) -> list[ProbeDef]:
    """Parse a definitions file. A missing or unreadable file yields no probes."""
    if not path.exists():
        logger.warning("Checks file not found: %s", path)
        return []

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        logger.error("Failed to parse %s: %s", path, e)
        return []

    if not isinstance(raw, dict):
        logger.error("Checks file %s must be a mapping, got %s", path, type(raw).__name__)
        return []

    definitions = []
    for probe in Probe:
        for entry in raw.get(probe.value) or []:
            try:
                definitions.append(_parse_probe(entry, probe))
            except Exception as e:
                logger.warning("Skipping malformed %s check entry: %s", probe.value, e)

    logger.info("Loaded %d probe definitions from %s", len(definitions), path)
    return definitions


def register_definitions(handler: Handler, definitions: list[ProbeDef]) -> int:
    """Build and register each definition; returns how many were registered."""
    registered = 0
    for d in definitions:
        try:
            check = build_check(d)
        except Exception as e:
            logger.warning("Skipping check %s: %s", d.name, e)
            continue
        if d.probe is Probe.LIVENESS:
            handler.add_liveness_check(d.name, check)
        else:
            handler.add_readiness_check(d.name, check)
        registered += 1
    return registered


def _parse_probe(raw: dict[str, Any], probe: Probe) -> ProbeDef:
    check_type = raw["type"]
    if check_type not in CHECK_BUILDERS:
        raise ValueError(f"Unknown check type: {check_type}")

    return ProbeDef(
        name=raw.get("name") or _DEFAULT_NAMES[check_type](raw),
        type=check_type,
        probe=probe,
        host=raw.get("host", ""),
        address=raw.get("address", ""),
        url=raw.get("url", ""),
        database=raw.get("database", ""),
        endpoints=list(raw.get("endpoints") or []),
        threshold=int(raw.get("threshold", 0)),
        timeout_ms=int(raw.get("timeout_ms", 5_000)),
    )
