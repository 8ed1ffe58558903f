"""
Order Sheet Backend: Request Logging Middleware
================================================

What:  One access-log line per HTTP request, in the same
       `timestamp level: message` register as the rest of the log.
How:   Times the request and logs a sentence such as
           POST /orders responded 201 in 4.2 ms (request 1a2b3c4d).
       The level follows the status class.
When:  After RequestIDMiddleware, so the line carries the request ID.

Request bodies are never logged; order records carry customer contact data.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ordersheet.middleware.request_id import request_id_var

logger = logging.getLogger("ordersheet.access")

# Probed by supervisors every few seconds
_QUIET_PATHS = frozenset({"/health"})


def access_level(status_code: int, method: str) -> int:
    """5xx → ERROR, 4xx → WARNING, CORS preflight → DEBUG, else INFO."""
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    if method == "OPTIONS":
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request/response pair; /health is not logged."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            access_level(response.status_code, request.method),
            "%s %s responded %d in %.1f ms (request %s).",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get("") or "-",
        )
        return response
