"""
DriveDesk Relay — Request ID Middleware
========================================

What:  Gives every request a short correlation id and returns it in X-Request-ID.
Why:   Error bodies carry the id, so a failed extraction reported by the
       frontend can be matched to the server-side stack trace.
How:   Reuses a client-sent X-Request-ID when present, otherwise generates one,
       and stores it in a ContextVar read by loggers and exception handlers.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request id, exposes it on request.state and the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
