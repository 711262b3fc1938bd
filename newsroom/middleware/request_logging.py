"""
Request logging middleware for the Newsroom backend.
Records method, path, client and user agent for each request, and warns on error responses.
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp
from loguru import logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its outcome and duration."""

    def __init__(self, app: ASGIApp, enabled: bool = True):
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        user_agent = request.headers.get("user-agent", "unknown")
        summary = f"{request.method} {request.url.path} | Client: {client_ip} | User-Agent: {user_agent}"

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        if 400 <= response.status_code < 600:
            logger.warning(f"Response: {response.status_code} {summary} | {elapsed_ms:.1f}ms")
        elif self.enabled:
            logger.info(f"Response: {response.status_code} {summary} | {elapsed_ms:.1f}ms")

        return response
