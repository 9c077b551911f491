"""Check aggregation — runs a set of named checks concurrently and merges outcomes.

A check is a zero-argument callable. Returning normally is success, raising
``CheckError`` is an explicit failure, and any other exception is an abort.
Every outcome is turned into data: nothing raised by a check escapes
``evaluate``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

SUCCESS = "OK"

Check = Callable[[], None]
ErrorHandler = Callable[[str, Exception], None]

# Shared by every pass so concurrent requests never call an error handler at once.
_report_lock = threading.Lock()


# ── Errors ───────────────────────────────────────────────────────────────────


class CheckError(Exception):
    """Raised by a check to report an explicit failure."""


class CheckAborted(CheckError):
    """A check terminated with an unexpected exception."""


class CheckTimeout(CheckError):
    """A check was still running when the evaluation deadline passed."""


# ── Models ───────────────────────────────────────────────────────────────────


class Status(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class Outcome:
    """Result of one check in one evaluation pass."""

    name: str
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return SUCCESS if self.error is None else str(self.error)


@dataclass
class AggregateResult:
    status: Status = Status.HEALTHY
    results: dict[str, str] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return self.status is Status.HEALTHY


# ── Evaluation pass ──────────────────────────────────────────────────────────


class _EvaluationPass:
    """Per-pass state shared by the worker threads.

    Records which units reported and stops late units from reporting once
    the pass has been closed by a deadline.
    """

    def __init__(self, on_error: ErrorHandler | None) -> None:
        self._on_error = on_error
        self._lock = threading.Lock()
        self._closed = False
        self._reported: set[int] = set()

    def run(self, index: int, name: str, check: Check) -> Outcome:
        try:
            check()
        except CheckError as e:
            outcome = Outcome(name, e)
        except BaseException as e:
            # includes CancelledError and SystemExit raised inside a check
            outcome = _aborted(name, e)
        else:
            return Outcome(name)

        with self._lock:
            if not self._closed:
                self._report(index, name, outcome.error)
        return outcome

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def report_late(self, index: int, name: str, error: Exception) -> None:
        with self._lock:
            if index not in self._reported:
                self._report(index, name, error)

    def _report(self, index: int, name: str, error: Exception) -> None:
        # caller holds self._lock
        self._reported.add(index)
        if self._on_error is None:
            return
        with _report_lock:
            try:
                self._on_error(name, error)
            except Exception:
                logger.exception("Check error handler raised for %s", name)


def _aborted(name: str, exc: BaseException) -> Outcome:
    logger.warning("Check %s aborted: %s: %s", name, type(exc).__name__, exc)
    aborted = CheckAborted(f"check aborted: {type(exc).__name__}: {exc}")
    aborted.__cause__ = exc
    return Outcome(name, aborted)


def evaluate(
    *check_sets: Mapping[str, Check],
    on_error: ErrorHandler | None = None,
    max_workers: int = 0,
    timeout: float | None = None,
) -> AggregateResult:
    """Run every check in ``check_sets`` concurrently and merge the outcomes.

    Args:
        check_sets: Name → check mappings merged into one pass. On a name
            collision the entry from the later mapping wins.
        on_error: Called once per failing check with ``(name, error)``.
        max_workers: Upper bound on worker threads; 0 runs one thread per check.
        timeout: Overall deadline in seconds. ``None`` waits for every check.
            Checks still running at the deadline keep their worker thread,
            and interpreter shutdown joins those threads, so a check that
            never returns also blocks process exit.

    Returns:
        AggregateResult with ``"OK"`` or the failure message per check name.
    """
    units = [
        (name, check)
        for checks in check_sets
        for name, check in checks.items()
    ]
    if not units:
        return AggregateResult()

    workers = len(units) if max_workers <= 0 else min(max_workers, len(units))
    current = _EvaluationPass(on_error)
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="healthcheck")
    futures: list[Future[Outcome]] = [
        executor.submit(current.run, i, name, check)
        for i, (name, check) in enumerate(units)
    ]

    try:
        wait(futures, timeout=timeout)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    current.close()

    outcomes: list[Outcome] = []
    for i, ((name, _), future) in enumerate(zip(units, futures)):
        if future.done() and not future.cancelled():
            exc = future.exception()
            outcome = future.result() if exc is None else _aborted(name, exc)
        else:
            logger.warning("Check %s still running after %ss", name, timeout)
            outcome = Outcome(name, CheckTimeout(f"check timed out after {timeout}s"))
        if not outcome.ok:
            # no-op unless the unit finished after the pass was closed
            current.report_late(i, name, outcome.error)
        outcomes.append(outcome)

    result = AggregateResult()
    for outcome in outcomes:
        result.results[outcome.name] = outcome.message
        if not outcome.ok:
            result.status = Status.UNHEALTHY

    logger.debug(
        "Evaluated %d checks: %s", len(units), result.status.value,
    )
    return result
