"""
API Middleware

Request logging with timing and a correlation id bound to every log line
emitted while the request is handled.
"""

import time
import uuid
from typing import Callable, FrozenSet

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

# Probe endpoints are polled constantly; log them at debug level only
QUIET_PATHS: FrozenSet[str] = frozenset({"/api/v1/health/live", "/api/v1/health/ready"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            log(
                "Request started",
                method=request.method,
                path=path,
                query=str(request.query_params) or None,
                client=request.client.host if request.client else None,
            )

            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000

            if response.status_code >= 500:
                log = logger.error
            elif response.status_code >= 400:
                log = logger.warning
            log(
                "Request completed",
                path=path,
                status_code=response.status_code,
                duration_ms=round(elapsed_ms, 2),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
        return response
