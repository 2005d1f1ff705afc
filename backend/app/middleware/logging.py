"""
DevCamper Backend — Request Logging Middleware
================================================

What:  One access log line per request on the "devcamper.access" logger.
Why:   Gives a per-request record of who called which route, how it ended
       and how long it took, correlated with the error logs by request id.
How:   Times the downstream call, picks the level from the status code and
       attaches the same data as structured `extra` fields.
Who:   Applied to every request via Starlette middleware.
When:  After RequestIDMiddleware (uses request_id_var for correlation).

Log line:
    GET /api/v1/bootcamps 200 12.3ms [a1b2c3d4] from 192.168.1.100

Extra fields (for JSON formatters / log shippers):
    request_id, method, path, query, status, duration_ms, client_ip, user_agent

Level by status:
    5xx → ERROR    (server fault: database, file storage, unexpected)
    4xx → WARNING  (client fault: validation, auth, not found)
    else → INFO

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, query string, status, duration, IP, user-agent
    ❌ Don't log: request bodies (passwords, emails, uploaded photos),
       Authorization headers (bearer tokens)

/health is skipped: orchestrators probe it every few seconds.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("devcamper.access")

# Long filter/select query strings are cut to keep one line per request readable
_MAX_QUERY_LENGTH = 200


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one structured line for each HTTP request.

    How it works:
        1. Skip /health entirely
        2. Start a perf_counter timer and run the rest of the chain
        3. Derive the log level from the response status
        4. Log method, path, status, duration, request id and client

    Duration covers everything downstream of this middleware: auth, query
    parsing, database round trips, geocoder calls and serialization. Create
    and update of a bootcamp are the slow ones because they wait on MapQuest.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        # perf_counter: monotonic, unaffected by wall-clock adjustments
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        # request.client is None under some test transports
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        query = request.url.query[:_MAX_QUERY_LENGTH]

        logger.log(
            _level_for(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "query": query,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_agent": request.headers.get("user-agent", ""),
            },
        )
        return response
