"""Check registry — named liveness and readiness checks behind a read/write lock."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from healthcheck.health.aggregator import Check

logger = logging.getLogger(__name__)


class Probe(str, Enum):
    LIVENESS = "liveness"
    READINESS = "readiness"


class ReadWriteLock:
    """Many concurrent readers or one writer.

    A waiting writer blocks new readers, so a steady stream of evaluation
    passes cannot starve registration.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class CheckRegistry:
    """Two independent name → check mappings.

    Re-registering a name replaces the previous check. The two mappings are
    not cross-validated: the same name may appear in both.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._liveness: dict[str, Check] = {}
        self._readiness: dict[str, Check] = {}

    def add_liveness_check(self, name: str, check: Check) -> None:
        with self._lock.write():
            if name in self._liveness:
                logger.debug("Replacing liveness check: %s", name)
            self._liveness[name] = check

    def add_readiness_check(self, name: str, check: Check) -> None:
        with self._lock.write():
            if name in self._readiness:
                logger.debug("Replacing readiness check: %s", name)
            self._readiness[name] = check

    @contextmanager
    def checks_for(self, probe: Probe) -> Iterator[list[dict[str, Check]]]:
        """Yield the check sets a probe evaluates, holding the shared lock.

        Readiness folds in the liveness checks after its own, so a liveness
        entry wins if both mappings use the same name.
        """
        with self._lock.read():
            if probe is Probe.READINESS:
                yield [self._readiness, self._liveness]
            else:
                yield [self._liveness]

    def counts(self) -> dict[str, int]:
        with self._lock.read():
            return {
                Probe.LIVENESS.value: len(self._liveness),
                Probe.READINESS.value: len(self._readiness),
            }
