"""
OpenRouter Relay
Streams chat completions from OpenRouter back to the caller as server-sent events.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from relay.api.routers import api_router
from relay.config.logging_setup import configure_logging
from relay.config.settings import Settings, get_settings
from relay.exceptions import RelayError
from relay.middleware.error_handling import (
    ErrorHandlingMiddleware,
    http_error_handler,
    relay_error_handler,
)
from relay.middleware.request_logging import RequestLoggingMiddleware
from relay.services.tasks import BackgroundTaskTracker


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    # Startup
    settings: Settings = app.state.settings
    logging.info(f"Starting {settings.app_name} ({settings.environment})")

    # A missing key is reported per request with a 401, not as a startup failure
    if not settings.openrouter_api_key:
        logging.warning("OPENROUTER_API_KEY is not set; relay requests will be rejected with 401")

    app.state.http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.upstream_timeout))

    yield

    # Shutdown
    logging.info("Shutting down...")
    await app.state.tasks.shutdown(settings.shutdown_grace_period)
    await app.state.http_client.aclose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Streaming relay for OpenRouter chat completions",
        version="1.0.0",
        lifespan=lifespan,
        redirect_slashes=False,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.tasks = BackgroundTaskTracker()

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    # Add custom middleware
    app.add_middleware(ErrorHandlingMiddleware)
    if settings.enable_request_logging:
        app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_local,
    )
