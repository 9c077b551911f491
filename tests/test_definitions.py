"""Tests for the probe definitions file."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from healthcheck.definitions import (
    ProbeDef,
    build_check,
    load_definitions,
    register_definitions,
)
from healthcheck.health import Handler, Probe


@pytest.fixture
def checks_yaml(tmp_path: Path, tcp_listener: str) -> Path:
    data = {
        "liveness": [
            {"type": "threads", "threshold": 10_000},
        ],
        "readiness": [
            {"name": "local-port", "type": "tcp", "address": tcp_listener, "timeout_ms": 2000},
            {"type": "dns", "host": "localhost"},
            {"type": "broker", "endpoints": [tcp_listener]},
            {"type": "database", "database": str(tmp_path / "app.db")},
            {"type": "http", "url": "http://svc/health"},
            {"type": "carrier-pigeon"},
            {"name": "no-type"},
        ],
    }
    path = tmp_path / "healthchecks.yaml"
    path.write_text(yaml.dump(data))
    return path


class TestLoadDefinitions:
    def test_parses_entries(self, checks_yaml: Path, tcp_listener: str) -> None:
        defs = load_definitions(checks_yaml)
        by_name = {d.name: d for d in defs}

        assert set(by_name) == {
            "threads_threshold",
            "local-port",
            "localhost_dns_resolve",
            "kafka",
            "database",
            "http://svc/health_http_get",
        }
        assert by_name["threads_threshold"].probe is Probe.LIVENESS
        assert by_name["threads_threshold"].threshold == 10_000
        assert by_name["local-port"].probe is Probe.READINESS
        assert by_name["local-port"].address == tcp_listener
        assert by_name["local-port"].timeout_ms == 2000
        assert by_name["kafka"].endpoints == [tcp_listener]

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_definitions(tmp_path / "nope.yaml") == []

    def test_unparseable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("liveness: [unclosed")
        assert load_definitions(path) == []

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_definitions(path) == []

    def test_list_at_top_level(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- type: threads\n  threshold: 10\n")
        assert load_definitions(path) == []

    def test_scalar_at_top_level(self, tmp_path: Path) -> None:
        path = tmp_path / "scalar.yaml"
        path.write_text("just a string\n")
        assert load_definitions(path) == []


class TestRegisterDefinitions:
    def test_registers_by_probe(self, checks_yaml: Path) -> None:
        handler = Handler()
        count = register_definitions(handler, load_definitions(checks_yaml))
        assert count == 6
        assert handler.counts() == {"liveness": 1, "readiness": 5}

        live = handler.evaluate(Probe.LIVENESS)
        assert live.results == {"threads_threshold": "OK"}

    def test_local_checks_pass(self, tmp_path: Path, tcp_listener: str) -> None:
        handler = Handler()
        register_definitions(handler, [
            ProbeDef(name="port", type="tcp", address=tcp_listener),
            ProbeDef(name="db", type="database", database=str(tmp_path / "x.db")),
        ])
        result = handler.evaluate(Probe.READINESS)
        assert result.healthy
        assert result.results == {"port": "OK", "db": "OK"}

    def test_unknown_type_skipped(self) -> None:
        handler = Handler()
        count = register_definitions(handler, [ProbeDef(name="x", type="smoke-signal")])
        assert count == 0
        assert handler.counts() == {"liveness": 0, "readiness": 0}

    def test_build_check_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown check type"):
            build_check(ProbeDef(name="x", type="smoke-signal"))
