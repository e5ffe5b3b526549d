"""
Tests for the producer/consumer stream channel.
"""
import anyio
import pytest

from relay.exceptions import StreamAbortedError
from relay.services.channel import StreamChannel


pytestmark = pytest.mark.asyncio


async def test_close_ends_stream_normally():
    channel = StreamChannel(max_buffer_size=4)
    await channel.send(b"one")
    await channel.send(b"two")
    channel.close()

    assert [chunk async for chunk in channel] == [b"one", b"two"]
    assert channel.finished and not channel.aborted


async def test_abort_raises_after_buffered_chunks():
    channel = StreamChannel(max_buffer_size=4)
    await channel.send(b"one")
    cause = RuntimeError("upstream went away")
    channel.abort(cause)

    received = []
    with pytest.raises(StreamAbortedError) as excinfo:
        async for chunk in channel:
            received.append(chunk)

    assert received == [b"one"]
    assert excinfo.value.__cause__ is cause


async def test_first_abort_wins():
    channel = StreamChannel(max_buffer_size=1)
    first = RuntimeError("first")
    channel.abort(first)
    channel.abort(RuntimeError("second"))

    with pytest.raises(StreamAbortedError) as excinfo:
        [chunk async for chunk in channel]
    assert excinfo.value.__cause__ is first


async def test_abort_after_close_is_ignored():
    channel = StreamChannel(max_buffer_size=1)
    channel.close()
    channel.abort(RuntimeError("late"))

    assert not channel.aborted
    assert [chunk async for chunk in channel] == []


async def test_send_after_close_fails():
    channel = StreamChannel(max_buffer_size=1)
    channel.close()

    with pytest.raises(anyio.ClosedResourceError):
        await channel.send(b"late")


async def test_send_after_detach_fails():
    channel = StreamChannel(max_buffer_size=1)
    channel.detach()

    with pytest.raises(anyio.BrokenResourceError):
        await channel.send(b"nobody listening")
