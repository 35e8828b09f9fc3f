"""
Latency Estimation
==================

Stateless helpers turning a clock offset and a player snapshot into the
live latency and the forward buffer. Timestamps are in seconds since Unix
epoch; offsets and monotonic readings are in milliseconds.
"""

from datetime import datetime
from typing import Iterable

from .config import BUFFER_MARGIN
from .player import TimeRange


def current_timestamp(monotonic_ms: float, offset_ms: float) -> float:
    """Synchronized absolute "now", seconds."""
    return (monotonic_ms + offset_ms) / 1000


def current_media_timestamp(program_date_time: datetime, stream_time_offset: float = 0.0) -> float:
    """Absolute time of the media currently playing, seconds."""
    return program_date_time.timestamp() + stream_time_offset


def current_latency(timestamp: float, media_timestamp: float) -> float:
    """Distance behind the live edge, seconds. Positive means lagging."""
    return timestamp - media_timestamp


def current_buffer(
    buffered: Iterable[TimeRange],
    current_time: float,
    margin: float = BUFFER_MARGIN,
) -> float:
    """Contiguous buffer ahead of ``current_time``, seconds.

    Ranges must be ordered by start. Ranges closer than ``margin`` count as
    contiguous; any larger gap before the buffer reaches past
    ``current_time`` means there is no usable forward buffer at all.
    """
    buffer_until = current_time

    for time_range in buffered:
        if time_range.end <= current_time:
            continue
        if time_range.start - margin <= buffer_until:
            buffer_until = time_range.end
        else:
            return 0.0

    return buffer_until - current_time
