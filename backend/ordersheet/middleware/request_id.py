"""
Order Sheet Backend: Request ID Middleware
===========================================

What:  Tags each request with a short correlation ID and echoes it back.
How:   A client-supplied X-Request-ID is reused when it is a plain token
       (letters, digits, `.`, `_`, `-`, at most 64 characters); anything
       else is replaced by a fresh 8-character hex ID. The ID is kept in a
       ContextVar for loggers and error handlers.
When:  Runs before the logging middleware so access lines carry the ID.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_TOKEN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(supplied: Optional[str]) -> str:
    """Reuse a well-formed client ID, otherwise mint a new one."""
    if supplied and _TOKEN.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns an X-Request-ID to every request and response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        # Left set after the call: the outermost 500 handler still reads it
        request_id_var.set(rid)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
