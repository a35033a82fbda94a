"""Middleware package for the glucose monitor API."""

from glucosemonitor.middleware.correlation import (
    CORRELATION_ID_HEADER,
    CorrelationIdMiddleware,
)

__all__ = ["CorrelationIdMiddleware", "CORRELATION_ID_HEADER"]
