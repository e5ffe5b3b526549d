"""
Server-sent event line handling.

Upstream streams arrive as arbitrary text chunks. They are split on newlines,
each complete line is trimmed, and ``data: `` lines yield their payload.
Payloads are re-framed as ``data: <json>\\n\\n`` for the caller.
"""
import json
import logging
from typing import Any, AsyncIterator, List, Optional

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
EVENT_TERMINATOR = "\n\n"


def reject_json_constant(name: str) -> Any:
    """``parse_constant`` hook: NaN and Infinity are not JSON."""
    raise ValueError(f"Invalid JSON constant: {name}")


def extract_data(line: str) -> Optional[str]:
    """Return the payload of a trimmed ``data: `` line, or None for any other line."""
    if line.startswith(DATA_PREFIX):
        return line[len(DATA_PREFIX):]
    return None


def decode_event(data: str) -> Any:
    """
    Parse an event payload as strict JSON.

    NaN and Infinity are rejected so that only standard JSON is forwarded.

    Raises:
        ValueError: If the payload is not valid JSON.
    """
    return json.loads(data, parse_constant=reject_json_constant)


def encode_event(event: Any) -> bytes:
    """Serialize an event compactly, preserving key order, in SSE framing."""
    payload = json.dumps(event, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    try:
        frame = f"{DATA_PREFIX}{payload}{EVENT_TERMINATOR}".encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates (an emoji split by the upstream) only survive as \u escapes
        payload = json.dumps(event, separators=(",", ":"), allow_nan=False)
        frame = f"{DATA_PREFIX}{payload}{EVENT_TERMINATOR}".encode("utf-8")
    return frame


async def iter_lines(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Yield trimmed, newline-terminated lines from a stream of text chunks.

    Only each new chunk is scanned for newlines; the unterminated tail is
    kept as pieces and joined once its newline arrives. A trailing line
    without a newline when the stream ends is discarded.
    """
    pending: List[str] = []
    async for chunk in chunks:
        *lines, tail = chunk.split("\n")
        if not lines:
            pending.append(chunk)
            continue

        pending.append(lines[0])
        lines[0] = "".join(pending)
        for line in lines:
            yield line.strip()
        pending = [tail] if tail else []

    leftover = "".join(pending)
    if leftover.strip():
        logger.debug(f"Discarding unterminated trailing line ({len(leftover)} chars)")


async def iter_data_payloads(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the payload of every ``data: `` line, sentinel included."""
    async for line in iter_lines(chunks):
        data = extract_data(line)
        if data is not None:
            yield data
