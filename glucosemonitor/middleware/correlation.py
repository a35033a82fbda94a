"""Correlation ID middleware.

Tags every request with a correlation ID (taken from the incoming
``X-Correlation-ID`` header or freshly generated) so dashboard calls can be
traced through the logs, and echoes it back on the response.
"""

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from glucosemonitor.logging_config import correlation_id_ctx, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Client-supplied IDs longer than this are replaced with a generated one
MAX_CORRELATION_ID_LENGTH = 128

# Probe endpoints are polled constantly; don't log them
_QUIET_PATHS = frozenset({"/health", "/health/live", "/health/ready"})


def _resolve_correlation_id(raw: bytes) -> str:
    value = raw.decode("latin-1").strip()
    if not value or len(value) > MAX_CORRELATION_ID_LENGTH or not value.isprintable():
        return str(uuid.uuid4())
    return value


class CorrelationIdMiddleware:
    """Pure ASGI middleware that adds correlation IDs to requests.

    The ID is set in ``correlation_id_ctx`` for the lifetime of the request,
    added to the response headers, and included in the request start and
    completion log lines.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process ASGI request."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        correlation_id = _resolve_correlation_id(headers.get(b"x-correlation-id", b""))
        token = correlation_id_ctx.set(correlation_id)

        start_time = time.perf_counter()
        status_code: int | None = None

        method = scope.get("method", "")
        path = scope.get("path", "")
        quiet = path in _QUIET_PATHS

        if not quiet:
            logger.info("Request started", method=method, path=path)

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code

            if message["type"] == "http.response.start":
                status_code = message.get("status")
                response_headers = list(message.get("headers", []))
                response_headers.append(
                    (CORRELATION_ID_HEADER.lower().encode(), correlation_id.encode())
                )
                message = {**message, "headers": response_headers}

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)

            if not quiet:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.info(
                    "Request completed",
                    method=method,
                    path=path,
                    status_code=status_code,
                    duration_ms=round(duration_ms, 2),
                )
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                "Request failed",
                method=method,
                path=path,
                duration_ms=round(duration_ms, 2),
            )
            raise
        finally:
            correlation_id_ctx.reset(token)
