"""Live streaming of assistant text to observers."""

from painflow.live.scheduler import (
    FRAME_INTERVAL,
    CoalescingScheduler,
    LoopScheduler,
    ManualScheduler,
)
from painflow.live.store import EMPTY_SNAPSHOT, LiveDeltaStore, LiveSnapshot
from painflow.live.stream import (
    END_OF_STREAM,
    PASS_THROUGH,
    StreamRecord,
    decode_stream_line,
    encode_done,
    encode_text_delta,
    iter_text_deltas,
    openai_sse_delta,
    pump_stream,
)

__all__ = [
    "EMPTY_SNAPSHOT",
    "END_OF_STREAM",
    "FRAME_INTERVAL",
    "PASS_THROUGH",
    "CoalescingScheduler",
    "LiveDeltaStore",
    "LiveSnapshot",
    "LoopScheduler",
    "ManualScheduler",
    "StreamRecord",
    "decode_stream_line",
    "encode_done",
    "encode_text_delta",
    "iter_text_deltas",
    "openai_sse_delta",
    "pump_stream",
]
