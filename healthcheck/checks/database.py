"""Database probe — ``SELECT 1`` over any DB-API 2.0 connection."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any

from healthcheck.health.aggregator import Check, CheckError

DATABASE_CHECKER_NAME = "database"


def do_simple_select(connection: Any) -> None:
    """Run ``SELECT 1`` and drain the rows. Driver errors propagate."""
    cursor = connection.cursor()
    try:
        cursor.execute("SELECT 1 as healthcheck;")
        cursor.fetchall()
    finally:
        cursor.close()


def database_ping_check(connection: Any, timeout_ms: int = 5_000) -> Check:
    """Check that ``connection`` answers a trivial query.

    The timeout is enforced through ``connection.interrupt()`` when the driver
    has one (sqlite3 does); other drivers rely on their own query timeouts.
    """

    def check() -> None:
        if connection is None:
            raise CheckError("database is None")

        timer = None
        if hasattr(connection, "interrupt"):
            timer = threading.Timer(timeout_ms / 1000, connection.interrupt)
            timer.daemon = True
            timer.start()
        try:
            do_simple_select(connection)
        except Exception as e:
            raise CheckError(f"database ping failed: {e}") from e
        finally:
            if timer is not None:
                timer.cancel()

    return check


def sqlite_connection(path: str | Path, timeout_ms: int = 5_000) -> sqlite3.Connection:
    """Open a SQLite connection usable from the check worker threads."""
    return sqlite3.connect(str(path), timeout=timeout_ms / 1000, check_same_thread=False)
