"""
logieventos.observability.middleware

HTTP middleware for request-scoped logging context and access logs.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from logieventos.observability.logging import get_logger

log = get_logger("logieventos.access")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    - Binds request id, path and method into structlog contextvars
    - Emits one `request.completed` line per request with status and latency
    - Echoes the request id back in `x-request-id`
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            principal = getattr(request.state, "principal", None)
            log.info(
                "request.completed",
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                principal_id=principal.id if principal else None,
            )
        finally:
            # Async tasks share the worker; never leak context into the next request.
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response
