"""Request ID middleware — correlate log lines and responses.

Learn: An incoming X-Request-ID (from a proxy or another service) is
reused; otherwise a UUID4 is minted. The id, method and path are bound
to structlog contextvars, so `user.updated` and friends carry them
without the services knowing about HTTP. The id is echoed back in the
response header.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
