"""
Request tracking for the render endpoints
"""
import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

# Health probes are not logged
QUIET_PATHS = ("/api/health",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with a short id and logs how long the render took"""

    def __init__(self, app: ASGIApp, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        route = f"{request.method} {request.url.path}"
        quiet = not self.log_requests or request.url.path in QUIET_PATHS

        started = time.perf_counter()
        if not quiet:
            logger.info(f"[{request_id}] {route} started")

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.error(f"[{request_id}] {route} failed after {elapsed_ms}ms: {e}")
            raise

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        if not quiet:
            size = response.headers.get("content-length", "?")
            logger.info(
                f"[{request_id}] {route} -> {response.status_code} "
                f"{response.headers.get('content-type', '')} {size} bytes in {elapsed_ms}ms"
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(elapsed_ms)
        return response
