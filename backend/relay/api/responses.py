"""
Streaming response types.
"""
from typing import Mapping, Optional

from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from relay.services.channel import StreamChannel

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class EventStreamResponse(StreamingResponse):
    """
    Server-sent event response whose body is read from a StreamChannel.

    However the response ends (completed, client gone, cancelled), the
    channel's consumer end is detached so the producer stops at its next write.
    """

    def __init__(self, channel: StreamChannel, headers: Optional[Mapping[str, str]] = None):
        super().__init__(channel, headers=headers or SSE_HEADERS)
        self.channel = channel

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.channel.detach()
