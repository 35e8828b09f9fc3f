"""
Statistics Tracker
==================

Tracks sampled latency and forward buffer over a sliding window, plus tick
and rate-change counters for diagnostics.
"""

from collections import deque
from typing import Optional


class LatencyStats:
    """Sliding-window latency and buffer statistics.

    Args:
        window: Number of recent samples to keep for averaging.
    """

    def __init__(self, window: int = 100):
        self._latencies: deque[float] = deque(maxlen=window)
        self._buffers: deque[float] = deque(maxlen=window)
        self.sample_count: int = 0
        self.skipped_count: int = 0
        self.rate_changes: int = 0
        self.last_latency: Optional[float] = None

    def record(self, latency: float, buffer: float):
        """Record one evaluated tick.

        Args:
            latency: Measured latency, seconds.
            buffer:  Forward buffer, seconds.
        """
        self._latencies.append(latency)
        self._buffers.append(buffer)
        self.last_latency = latency
        self.sample_count += 1

    def record_skip(self):
        """Count a tick that was skipped (paused or missing player data)."""
        self.skipped_count += 1

    def record_rate_change(self):
        self.rate_changes += 1

    @staticmethod
    def _avg(d: deque) -> float:
        """Average of a deque, or 0.0 if empty."""
        return sum(d) / len(d) if d else 0.0

    @property
    def avg_latency(self) -> float:
        return self._avg(self._latencies)

    @property
    def avg_buffer(self) -> float:
        return self._avg(self._buffers)

    def __str__(self) -> str:
        return (
            f"samples={self.sample_count} skipped={self.skipped_count} "
            f"rate_changes={self.rate_changes} "
            f"lat={self.avg_latency:.3f}s "
            f"buf={self.avg_buffer:.3f}s"
        )
