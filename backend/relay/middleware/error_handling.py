"""
Error handling middleware.
Last-resort handler for errors the relay does not translate itself.
"""
import logging
import traceback
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from relay.exceptions import MethodNotAllowedError, RelayError

logger = logging.getLogger(__name__)


async def relay_error_handler(request: Request, exc: RelayError) -> Response:
    """Render a RelayError as its plain-text status and message."""
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Render routing errors raised by Starlette (e.g. unrouted methods) as plain text."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return PlainTextResponse(MethodNotAllowedError.message, status_code=exc.status_code)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling and logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            tb_str = traceback.format_exc()

            try:
                is_production = request.app.state.settings.is_production
            except Exception:
                is_production = True  # Default to production mode for safety

            logger.error(
                "Unhandled error",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "traceback": tb_str if not is_production else None,
                },
                exc_info=True,
            )

            # Don't expose internal errors in production
            if is_production:
                message = "Internal Server Error"
            else:
                message = f"Internal Server Error: {type(e).__name__}: {e}"

            return PlainTextResponse(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
