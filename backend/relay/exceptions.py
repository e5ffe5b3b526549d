"""
Relay error types.

Every error raised before the SSE response starts carries the HTTP status
and plain-text body the caller should see.
"""
from fastapi import status


class RelayError(Exception):
    """Base error translated into a plain-text HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal Server Error"

    def __init__(self, message: str = None, status_code: int = None):
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class MethodNotAllowedError(RelayError):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    message = "Method not allowed"


class MissingCredentialError(RelayError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Missing API key"


class InvalidRequestBodyError(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request body"


class UpstreamStatusError(RelayError):
    """Upstream answered with a non-success status."""

    def __init__(self, status_code: int, error_text: str):
        self.error_text = error_text
        super().__init__(f"OpenRouter API error: {error_text}", status_code)


class UpstreamUnavailableError(RelayError):
    """The upstream call failed or returned nothing to stream."""

    message = "Error making request to OpenRouter"


class StreamAbortedError(RelayError):
    """Raised from the SSE body once the relay has been aborted mid-stream."""

    message = "Relay stream aborted"
