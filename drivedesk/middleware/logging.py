"""
DriveDesk Relay — Request Logging Middleware
=============================================

What:  One access log line per request: method, path, status, duration,
       request id, client IP, response size.
Why:   Extraction requests spend seconds waiting on Gemini; the duration in the
       access log is the quickest way to see upstream slowness.

What we DON'T log: request bodies. They hold licence images and customer
phone numbers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from drivedesk.middleware.request_id import request_id_var

logger = logging.getLogger("drivedesk.access")

QUIET_PATHS = frozenset({"/health", "/docs", "/openapi.json"})


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for the relay endpoints; probes and docs are not logged."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms %sB [%s] from %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            response.headers.get("content-length", "-"),
            rid,
            client_ip,
        )
        return response
