"""Line-delimited text-delta stream format and the store producer.

Wire records, one per line::

    0:{"type":"text-delta","text":"Hel"}
    0:{"type":"text-delta","text":"lo"}
    [DONE]

Lines without the ``0:`` prefix are pass-through markers and carry no text,
except raw OpenAI ``data:`` chunks, whose delta content is taken as text.
``[DONE]`` (optionally as ``data: [DONE]``) ends the stream.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from painflow.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator

    from painflow.live.store import LiveDeltaStore

log = get_logger(__name__)

TEXT_PREFIX = "0:"
SSE_PREFIX = "data: "
DONE_MARKER = "[DONE]"
TEXT_DELTA = "text-delta"


@dataclass(frozen=True)
class StreamRecord:
    """One decoded line: a text fragment, the end marker, or neither."""

    text: str | None = None
    done: bool = False


PASS_THROUGH = StreamRecord()
END_OF_STREAM = StreamRecord(done=True)


def encode_text_delta(text: str) -> str:
    """Encode a fragment as one wire line, newline included."""
    payload = json.dumps(
        {"type": TEXT_DELTA, "text": text}, ensure_ascii=False, separators=(",", ":")
    )
    return f"{TEXT_PREFIX}{payload}\n"


def encode_done() -> str:
    return f"{DONE_MARKER}\n"


def decode_stream_line(line: str) -> StreamRecord:
    """Decode one wire line.

    Malformed JSON and records of other types decode as pass-through.
    """
    line = line.strip()
    if line in (DONE_MARKER, f"{SSE_PREFIX}{DONE_MARKER}"):
        return END_OF_STREAM
    if line.startswith(SSE_PREFIX):
        # Raw upstream chunk relayed unchanged
        text = openai_sse_delta(line)
        return StreamRecord(text=text) if text else PASS_THROUGH
    if not line.startswith(TEXT_PREFIX):
        return PASS_THROUGH

    try:
        data = json.loads(line[len(TEXT_PREFIX) :])
    except json.JSONDecodeError:
        log.debug("stream_line_malformed", line=line[:80])
        return PASS_THROUGH

    if isinstance(data, dict) and data.get("type") == TEXT_DELTA:
        text = data.get("text")
        if isinstance(text, str):
            return StreamRecord(text=text)
    return PASS_THROUGH


def openai_sse_delta(line: str) -> str | None:
    """Extract ``choices[0].delta.content`` from an OpenAI SSE ``data:`` line.

    Returns None for non-data lines, the ``[DONE]`` marker, malformed JSON
    and chunks without content.
    """
    if not line.startswith(SSE_PREFIX):
        return None
    data = line[len(SSE_PREFIX) :].strip()
    if data == DONE_MARKER:
        return None
    try:
        parsed: Any = json.loads(data)
    except json.JSONDecodeError:
        return None
    try:
        content = parsed["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return content if isinstance(content, str) and content else None


async def iter_text_deltas(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield the text fragments of a wire stream until the end marker."""
    async for line in lines:
        record = decode_stream_line(line)
        if record.done:
            return
        if record.text:
            yield record.text


async def pump_stream(
    fragments: AsyncIterable[str],
    store: LiveDeltaStore,
    assistant_id: str,
    session_id: str | None = None,
) -> str:
    """Feed ``fragments`` into ``store`` as one session.

    The session is always committed, also when the upstream iterator
    raises, so the store never stays in streaming state. Errors from the
    upstream propagate after the commit.

    Returns:
        The assembled text, for the caller to persist.
    """
    store.start(assistant_id, session_id)
    parts: list[str] = []
    try:
        async for fragment in fragments:
            if not fragment:
                continue
            parts.append(fragment)
            store.append_delta(fragment)
    finally:
        store.commit()
        log.debug("live_stream_committed", assistant=assistant_id, chars=sum(map(len, parts)))
    return "".join(parts)
