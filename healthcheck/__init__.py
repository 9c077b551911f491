"""Liveness and readiness endpoints backed by concurrent health checks."""

from healthcheck.health import (
    LIVENESS_PATH,
    READINESS_PATH,
    Check,
    CheckError,
    ErrorHandler,
    Handler,
    Probe,
)

__version__ = "0.1.0"
