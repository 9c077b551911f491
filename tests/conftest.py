"""Shared test fixtures."""

from __future__ import annotations

import socket
from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from healthcheck.health import Handler


@pytest.fixture
def handler() -> Handler:
    return Handler()


@pytest.fixture
def error_handler(handler: Handler) -> MagicMock:
    """A mock error callback already wired into ``handler``."""
    mock = MagicMock()
    handler.add_check_error_handler(mock)
    return mock


@pytest.fixture
def client(handler: Handler) -> TestClient:
    return TestClient(handler)


@pytest.fixture
def tcp_listener() -> Iterator[str]:
    """A listening TCP socket on localhost; yields its ``host:port``."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    host, port = sock.getsockname()
    try:
        yield f"{host}:{port}"
    finally:
        sock.close()


@pytest.fixture
def closed_address() -> str:
    """A localhost ``host:port`` with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    host, port = sock.getsockname()
    sock.close()
    return f"{host}:{port}"
