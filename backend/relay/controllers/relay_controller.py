"""
Relay controller for chat-completion streaming.

Forwards chat-completion requests to OpenRouter and relays the upstream SSE
stream back to the caller, re-serializing every event.
"""
import json
import logging
from typing import Dict

import httpx
from fastapi import Request
from pydantic import ValidationError

from relay.api.models.chat import ChatCompletionRequest
from relay.api.responses import EventStreamResponse
from relay.config.settings import Settings
from relay.exceptions import (
    InvalidRequestBodyError,
    MethodNotAllowedError,
    MissingCredentialError,
    UpstreamStatusError,
    UpstreamUnavailableError,
)
from relay.services.channel import StreamChannel
from relay.services.sse import (
    DONE_SENTINEL,
    decode_event,
    encode_event,
    iter_data_payloads,
    reject_json_constant,
)
from relay.services.tasks import BackgroundTaskTracker

logger = logging.getLogger(__name__)

# Statuses for which an upstream response carries no body to relay
NULL_BODY_STATUSES = {204, 205, 304}


class RelayController:
    """Controller for the OpenRouter relay."""

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        tasks: BackgroundTaskTracker,
    ):
        """
        Initialize relay controller.

        Args:
            settings: Application settings holding the upstream credential
            client: Shared HTTP client used for upstream calls
            tasks: Tracker that owns the background copy tasks
        """
        self.settings = settings
        self.client = client
        self.tasks = tasks

    async def handle(self, request: Request) -> EventStreamResponse:
        """
        Relay one chat-completion request.

        Validation happens before the upstream call, and the upstream status
        is checked before any SSE output, so every error raised here becomes
        a plain-text response with no partial stream.

        Raises:
            MethodNotAllowedError 405: If the method is not POST
            MissingCredentialError 401: If no upstream API key is configured
            InvalidRequestBodyError 400: If the body is not a usable JSON object
            UpstreamStatusError: If the upstream answers with a non-success status
            UpstreamUnavailableError 500: If the upstream call fails or has no body
        """
        if request.method != "POST":
            raise MethodNotAllowedError()

        api_key = self.settings.openrouter_api_key
        if not api_key:
            logger.error(
                "Missing OpenRouter API key. Set OPENROUTER_API_KEY in the environment "
                "or in a .env file before starting the relay."
            )
            raise MissingCredentialError()

        body = await self._parse_body(request)
        payload = body.to_upstream_payload(self.settings.default_model)

        upstream = await self._send_upstream(payload, self._upstream_headers(request, api_key))

        channel = StreamChannel()
        try:
            self.tasks.spawn(self.relay_stream(upstream, channel), name="relay-stream")
        except RuntimeError:
            await upstream.aclose()
            raise
        return EventStreamResponse(channel)

    async def _parse_body(self, request: Request) -> ChatCompletionRequest:
        try:
            raw = json.loads(await request.body(), parse_constant=reject_json_constant)
            return ChatCompletionRequest.model_validate(raw)
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
            logger.error(f"Error parsing request body: {e}")
            raise InvalidRequestBodyError()

    def _upstream_headers(self, request: Request, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": request.headers.get("origin") or self.settings.default_referer,
            "X-Title": self.settings.client_title,
        }

    async def _send_upstream(self, payload: dict, headers: Dict[str, str]) -> httpx.Response:
        """
        POST the payload upstream and return the response with its body unread.

        The caller owns the returned response and must close it.
        """
        logger.debug(f"Forwarding request for model {payload['model']} to {self.settings.openrouter_url}")
        upstream_request = self.client.build_request(
            "POST",
            self.settings.openrouter_url,
            headers=headers,
            content=json.dumps(payload, allow_nan=False).encode("utf-8"),
        )

        try:
            response = await self.client.send(upstream_request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"Error making request to OpenRouter: {e!r}")
            raise UpstreamUnavailableError()

        if not response.is_success:
            try:
                await response.aread()
                error = response.text
            except httpx.HTTPError as e:
                error = f"{type(e).__name__}: {e}"
            finally:
                await response.aclose()
            logger.error(f"OpenRouter API error ({response.status_code}): {error}")
            raise UpstreamStatusError(response.status_code, error)

        if response.status_code in NULL_BODY_STATUSES:
            await response.aclose()
            logger.error(f"OpenRouter returned no response body (status {response.status_code})")
            raise UpstreamUnavailableError()

        return response

    async def relay_stream(self, upstream: httpx.Response, channel: StreamChannel) -> None:
        """
        Copy upstream SSE events into the channel until the upstream ends.

        The ``[DONE]`` sentinel is skipped without ending the stream, and
        malformed payloads are logged and dropped. Any read or write failure
        aborts the channel.
        """
        forwarded = 0
        try:
            async for data in iter_data_payloads(upstream.aiter_text()):
                if data == DONE_SENTINEL:
                    continue

                try:
                    event = decode_event(data)
                except ValueError as e:
                    logger.error(f"Error parsing SSE data: {e} ({data[:200]!r})")
                    continue

                await channel.send(encode_event(event))
                forwarded += 1

            channel.close()
            logger.debug(f"Relay finished after {forwarded} event(s)")
        except Exception as e:
            logger.error(f"Error processing stream after {forwarded} event(s): {e!r}")
            channel.abort(e)
        except BaseException as e:
            # Cancellation at shutdown still has to end the caller's stream
            channel.abort(e)
            raise
        finally:
            await upstream.aclose()
