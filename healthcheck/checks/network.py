"""Network probes — DNS resolve, TCP dial, HTTP GET.

Each factory returns a zero-argument check that raises ``CheckError`` on
failure.
"""

from __future__ import annotations

import socket
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import httpx

from healthcheck.health.aggregator import Check, CheckError

DNS_RESOLVE_SUFFIX = "_dns_resolve"
TCP_DIAL_SUFFIX = "_tcp_dial"
HTTP_GET_SUFFIX = "_http_get"

# getaddrinfo has no timeout of its own; lookups run here and are abandoned
# when the deadline passes.
_resolver = ThreadPoolExecutor(max_workers=4, thread_name_prefix="dns")


def split_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6]:port``) into a socket address tuple."""
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"missing port in address {address!r}")
    return host.strip("[]"), int(port)


def dns_resolve_check(host: str, timeout_ms: int = 5_000) -> Check:
    """Check that ``host`` resolves to at least one address within the timeout."""

    def check() -> None:
        future = _resolver.submit(socket.getaddrinfo, host, None)
        try:
            addrs = future.result(timeout=timeout_ms / 1000)
        except FutureTimeoutError:
            # drop it from the resolver queue if it has not started yet
            future.cancel()
            raise CheckError(f"lookup {host}: timed out after {timeout_ms}ms") from None
        except OSError as e:
            raise CheckError(f"lookup {host}: {e}") from e
        if not addrs:
            raise CheckError("could not resolve host")

    return check


def tcp_dial_check(address: str, timeout_ms: int = 5_000) -> Check:
    """Check that a TCP connection to ``host:port`` can be opened."""

    def check() -> None:
        try:
            sock = socket.create_connection(split_address(address), timeout=timeout_ms / 1000)
            sock.close()
        except (OSError, ValueError) as e:
            raise CheckError(f"dial tcp {address}: {e}") from e

    return check


def http_get_check(
    url: str,
    timeout_ms: int = 10_000,
    transport: httpx.BaseTransport | None = None,
) -> Check:
    """GET ``url``; anything but 200 OK (including a redirect) is a failure."""
    client = httpx.Client(
        timeout=timeout_ms / 1000,
        follow_redirects=False,
        transport=transport,
    )

    def check() -> None:
        try:
            resp = client.get(url)
        except httpx.HTTPError as e:
            raise CheckError(f"GET {url}: {type(e).__name__}: {e}") from e
        resp.close()
        if resp.status_code != 200:
            raise CheckError(f"returned status {resp.status_code}")

    return check
