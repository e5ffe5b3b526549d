"""
Pytest configuration and shared fixtures.
"""
import json
import sys
from pathlib import Path
from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from main import create_app  # noqa: E402
from relay.config.settings import Settings  # noqa: E402

UPSTREAM_URL = "https://upstream.test/api/v1/chat/completions"


# =============================================================================
# Upstream simulation
# =============================================================================

async def byte_chunks(chunks: List[bytes]):
    """Async byte stream yielding each chunk separately."""
    for chunk in chunks:
        yield chunk


def sse_response(chunks: List[bytes], status_code: int = 200) -> httpx.Response:
    """Upstream SSE response delivered in the given chunks."""
    return httpx.Response(
        status_code,
        headers={"Content-Type": "text/event-stream"},
        content=byte_chunks(chunks),
    )


class UpstreamRecorder:
    """Mock upstream recording every request it receives."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: sse_response(
            [b'data: {"id":1}\n\n']
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def payloads(self) -> List[dict]:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def upstream():
    """Recorder standing in for OpenRouter."""
    return UpstreamRecorder()


# =============================================================================
# Application fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Test settings, isolated from .env files."""
    return Settings(
        _env_file=None,
        environment="test",
        openrouter_api_key="test-key-12345",
        openrouter_url=UPSTREAM_URL,
        default_model="test/default-model",
    )


@pytest.fixture
def make_app(upstream):
    """Build an app for given settings wired to the mock upstream."""
    def _make_app(app_settings: Settings):
        app = create_app(app_settings)
        app.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
        return app
    return _make_app


@pytest.fixture
def app(make_app, settings):
    return make_app(settings)


@pytest_asyncio.fixture
async def client(app):
    """In-process HTTP client for the relay app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://relay.test") as http:
        yield http
    await app.state.http_client.aclose()


@pytest.fixture
def chat_body():
    """A minimal chat-completion request body."""
    return {"messages": [{"role": "user", "content": "Hello"}]}
