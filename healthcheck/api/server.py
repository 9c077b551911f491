"""FastAPI server exposing /live and /ready for the probes in the checks file."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from healthcheck import __version__
from healthcheck.config import settings
from healthcheck.definitions import load_definitions, register_definitions
from healthcheck.health import Handler

logger = logging.getLogger(__name__)


def log_check_error(name: str, error: Exception) -> None:
    """Default error handler: one warning line per failed check."""
    logger.warning("Health check %s failed: %s", name, error)


def build_handler(checks_file: Path | None = None) -> Handler:
    """Create a Handler configured from settings and load the checks file into it."""
    path = checks_file or Path(settings.checks_file)
    if not path.is_absolute():
        path = Path.cwd() / path

    handler = Handler(
        max_workers=settings.max_concurrent_checks,
        timeout=settings.evaluation_timeout or None,
    )
    handler.add_check_error_handler(log_check_error)
    register_definitions(handler, load_definitions(path))
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    counts = app.state.health.counts()
    logger.info(
        "Health endpoints ready: %d liveness, %d readiness checks",
        counts["liveness"], counts["readiness"],
    )
    yield
    logger.info("Health endpoints stopped")


def create_app(handler: Handler | None = None, checks_file: Path | None = None) -> FastAPI:
    """Create the service application around ``handler`` (built from the checks file if omitted)."""
    if handler is None:
        handler = build_handler(checks_file)

    app = FastAPI(
        title="healthcheck",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.health = handler
    app.include_router(handler.router)
    return app


app = create_app()
