"""Liveness / readiness endpoints.

Endpoints:
  GET /live   — liveness checks only
  GET /ready  — readiness checks plus every liveness check

Both answer 200 when every check passes and 503 otherwise. The body is ``{}``
unless ``?full=1`` is given, in which case it is the indented name → outcome
map. Any other method gets 405 without running checks.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send

from healthcheck.health.aggregator import AggregateResult, Check, ErrorHandler, Status, evaluate
from healthcheck.health.registry import CheckRegistry, Probe

logger = logging.getLogger(__name__)

LIVENESS_PATH = "/live"
READINESS_PATH = "/ready"

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

_EMPTY_BODY = "{}\n"

# Routes accept every method so non-GET requests reach the 405 branch.
_ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

_HTTP_STATUS = {
    Status.HEALTHY: 200,
    Status.UNHEALTHY: 503,
}


class Handler:
    """Registry of liveness/readiness checks plus the two HTTP endpoints.

    The handler is itself an ASGI application serving ``/live`` and
    ``/ready``. To mount the endpoints inside a larger app, include
    ``handler.router`` or route to ``live_endpoint`` / ``ready_endpoint``
    directly.
    """

    def __init__(self, max_workers: int = 0, timeout: float | None = None) -> None:
        self.max_workers = max_workers
        self.timeout = timeout
        self._registry = CheckRegistry()
        self._error_handler: ErrorHandler | None = None

        self.router = APIRouter()
        self.router.add_api_route(
            LIVENESS_PATH, self.live_endpoint,
            methods=_ROUTE_METHODS, response_model=None, include_in_schema=False,
        )
        self.router.add_api_route(
            READINESS_PATH, self.ready_endpoint,
            methods=_ROUTE_METHODS, response_model=None, include_in_schema=False,
        )

        self._app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
        self._app.include_router(self.router)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._app(scope, receive, send)

    # ── Registration ─────────────────────────────────────────────────────────

    def add_liveness_check(self, name: str, check: Check) -> None:
        """Add a check whose failure means this instance should be restarted.

        Every liveness check is also evaluated by the readiness endpoint.
        """
        self._registry.add_liveness_check(name, check)

    def add_readiness_check(self, name: str, check: Check) -> None:
        """Add a check whose failure means this instance should not get traffic."""
        self._registry.add_readiness_check(name, check)

    def add_check_error_handler(self, handler: ErrorHandler) -> None:
        """Set the callback invoked with ``(name, error)`` for each failed check."""
        self._error_handler = handler

    def counts(self) -> dict[str, int]:
        return self._registry.counts()

    # ── Evaluation ───────────────────────────────────────────────────────────

    def evaluate(self, probe: Probe) -> AggregateResult:
        """Run one evaluation pass for ``probe`` and return the merged result."""
        with self._registry.checks_for(probe) as check_sets:
            return evaluate(
                *check_sets,
                on_error=self._error_handler,
                max_workers=self.max_workers,
                timeout=self.timeout,
            )

    # ── Endpoints ────────────────────────────────────────────────────────────

    def live_endpoint(self, request: Request) -> Response:
        return self._serve(request, Probe.LIVENESS)

    def ready_endpoint(self, request: Request) -> Response:
        return self._serve(request, Probe.READINESS)

    def _serve(self, request: Request, probe: Probe) -> Response:
        if request.method != "GET":
            return PlainTextResponse(
                "method not allowed\n",
                status_code=405,
                headers={"X-Content-Type-Options": "nosniff"},
            )

        result = self.evaluate(probe)

        # Schedulers only look at the status code, so the detail map is opt-in.
        if request.query_params.get("full") == "1":
            body = json.dumps(result.results, indent=4, sort_keys=True, ensure_ascii=False) + "\n"
        else:
            body = _EMPTY_BODY

        return Response(
            content=body,
            status_code=_HTTP_STATUS[result.status],
            media_type=JSON_CONTENT_TYPE,
            headers=NO_CACHE_HEADERS,
        )
