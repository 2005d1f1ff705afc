"""
DevCamper Backend — Request ID Middleware
===========================================

What:  Gives every request a correlation ID and echoes it in X-Request-ID.
Why:   Lets one failing call be followed from the client's error report to
       the access log line and any error log written while handling it.
How:   Accepts a well-formed client X-Request-ID, otherwise generates a short
       UUID; stores it in a ContextVar and on request.state, returns it in
       the response header.
Who:   Applied to every request via Starlette middleware.
When:  First middleware in the chain (runs before all other processing).

Where the ID shows up:
    - X-Request-ID response header (success and error responses alike)
    - "request_id" of the error envelope: {"success": false, "error": ..., "request_id": ...}
    - the access log line written by RequestLoggingMiddleware
    - "[rid]" prefix of the error logs written by the exception handlers

Client-supplied IDs:
    A client (or a proxy in front of the API) may send its own X-Request-ID.
    It is reused only when it is at most 64 characters of letters, digits,
    ".", "_" and "-". Anything else is replaced, so header values can never
    inject line breaks or megabytes of text into the logs.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Accepted shape of a client-supplied request ID
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# ── Context Variable ──────────────────────────────────────────────────────
# Coroutine-local: concurrent requests on one event loop each see their own
# id, which threading.local could not guarantee
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    """Short random id; 8 hex characters are plenty to correlate log lines."""
    return uuid.uuid4().hex[:8]


def resolve_request_id(supplied: Optional[str]) -> str:
    """Reuse the client's id when it is well-formed, otherwise mint one."""
    if supplied and _VALID_REQUEST_ID.fullmatch(supplied):
        return supplied
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a correlation ID to each request.

    How it works:
        1. Read X-Request-ID from the request headers
        2. Keep it if well-formed, else generate a new short id
        3. Store it in request_id_var for loggers and exception handlers
        4. Store it in request.state for route handlers
        5. Add it to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        # ContextVar for loggers/handlers, request.state for routes
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        # Returned on every response so clients can quote it in bug reports
        response.headers[REQUEST_ID_HEADER] = rid
        return response
