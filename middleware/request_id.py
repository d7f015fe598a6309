"""
Request ID middleware for tracking requests across the application.

Every log line written while a request is being served carries its id,
so all logs of one request can be correlated.
"""

import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from core.logging_config import request_id_var


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Uses the client's X-Request-ID when given, otherwise a new UUID. The id
    is kept on request.state, in the logging context variable, and echoed
    back in the X-Request-ID response header.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response: Response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            request_id_var.reset(token)


def get_request_id(request: Request) -> str:
    """
    Request ID of the current request, or "no-request-id" outside the middleware.
    """
    return getattr(request.state, "request_id", "no-request-id")
