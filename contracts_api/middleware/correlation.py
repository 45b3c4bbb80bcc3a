"""
Request ID middleware.

Extracts or generates an ``X-Request-ID`` per request and stores it in a
context variable so log records and problem-detail responses can carry it.
"""

import uuid
import logging
from contextvars import ContextVar
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def generate_id() -> str:
    """Generate a short unique ID suitable for logging."""
    return uuid.uuid4().hex[:12]


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to the context and echo it on the response."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_id()
        token = request_id_ctx.set(request_id)
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_ctx.get() or "unknown"


class RequestIdLogFilter(logging.Filter):
    """Inject the current request ID into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True
