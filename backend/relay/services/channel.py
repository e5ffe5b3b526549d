"""
Producer/consumer channel backing a streamed response body.
"""
from typing import AsyncIterator, Optional

import anyio

from relay.exceptions import StreamAbortedError


class StreamChannel:
    """
    In-memory byte channel between a background producer and a response body.

    The producer writes with ``send`` and finishes with either ``close`` (the
    consumer sees a normal end of stream) or ``abort`` (the consumer raises
    ``StreamAbortedError`` chained to the cause). When the consumer stops
    iterating, its end is closed and the producer's next ``send`` fails.

    Example:
        channel = StreamChannel()
        tracker.spawn(produce(channel))
        return EventStreamResponse(channel)
    """

    def __init__(self, max_buffer_size: float = 0):
        """
        Args:
            max_buffer_size: Chunks held before ``send`` waits for the consumer
        """
        self._sender, self._receiver = anyio.create_memory_object_stream(max_buffer_size)
        self._error: Optional[BaseException] = None
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def aborted(self) -> bool:
        return self._error is not None

    async def send(self, chunk: bytes) -> None:
        """
        Raises:
            anyio.ClosedResourceError: If the channel was already closed or aborted
            anyio.BrokenResourceError: If the consumer has gone away
        """
        await self._sender.send(chunk)

    def close(self) -> None:
        """End the stream normally."""
        self._finished = True
        self._sender.close()

    def abort(self, error: BaseException) -> None:
        """End the stream with an error; the first error wins."""
        if self._error is None and not self._finished:
            self._error = error
        self._finished = True
        self._sender.close()

    def detach(self) -> None:
        """Close the consumer end; later sends raise BrokenResourceError."""
        self._receiver.close()

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._consume()

    async def _consume(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._receiver:
                yield chunk
        finally:
            self._receiver.close()

        if self._error is not None:
            raise StreamAbortedError() from self._error
