"""
Request logging middleware.
Logs HTTP requests and responses for monitoring and debugging.
"""
import json
import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    Request bodies are never logged: they carry user conversations.
    """

    def __init__(self, app, ignore_paths: tuple = ()):
        super().__init__(app)
        self.ignore_paths = ignore_paths or ("/favicon.ico",)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip logging for ignored paths
        if request.url.path in self.ignore_paths:
            return await call_next(request)

        start_time = time.time()
        client_ip = self._get_client_ip(request)

        request_log = {
            "type": "request",
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip,
            "origin": request.headers.get("origin"),
            "user_agent": request.headers.get("user-agent"),
            "timestamp": start_time,
        }
        logger.info(json.dumps(request_log))

        response = await call_next(request)

        # For streamed responses this is the time to first byte, not the stream length
        process_time = time.time() - start_time

        response_log = {
            "type": "response",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "content_type": response.headers.get("content-type"),
            "process_time_ms": round(process_time * 1000, 2),
            "client_ip": client_ip,
            "timestamp": time.time(),
        }

        # Log level based on status code
        if response.status_code >= 500:
            logger.error(json.dumps(response_log))
        elif response.status_code >= 400:
            logger.warning(json.dumps(response_log))
        else:
            logger.info(json.dumps(response_log))

        response.headers["X-Process-Time"] = str(process_time)

        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address from request."""
        # Check for forwarded headers (when behind proxy)
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"
