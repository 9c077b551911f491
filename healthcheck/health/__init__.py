"""Health subsystem — check registry, concurrent aggregator, HTTP endpoints."""

from .aggregator import (
    SUCCESS,
    AggregateResult,
    Check,
    CheckAborted,
    CheckError,
    CheckTimeout,
    ErrorHandler,
    Outcome,
    Status,
    evaluate,
)
from .handler import LIVENESS_PATH, READINESS_PATH, Handler
from .registry import CheckRegistry, Probe
