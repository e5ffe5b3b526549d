"""
Chat-completion relay endpoint.

Accepts a chat-completion request on any path and streams the OpenRouter
response back as server-sent events.
"""
from fastapi import APIRouter, Depends, Request

from relay.api.dependencies.relay import get_relay_controller
from relay.api.responses import EventStreamResponse
from relay.controllers.relay_controller import RelayController

# Every method is routed here so that non-POST requests get the relay's 405
RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

router = APIRouter()


@router.api_route(
    "/{path:path}",
    methods=RELAY_METHODS,
    responses={
        400: {"description": "Invalid request body"},
        401: {"description": "Upstream API key is not configured"},
        405: {"description": "Method not allowed"},
        500: {"description": "Upstream request failed"},
    },
)
async def relay_chat_completion(
    request: Request,
    controller: RelayController = Depends(get_relay_controller),
) -> EventStreamResponse:
    """
    Relay a chat-completion request to OpenRouter.

    The body is forwarded with ``stream`` forced on and ``model`` defaulted.
    Streams ``data: <json>`` events as text/event-stream.
    """
    return await controller.handle(request)
