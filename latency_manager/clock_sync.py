"""
Clock Synchronization
=====================

One-shot clock sync between the local monotonic clock and a trusted remote
time server, over a single HTTP round trip.

Offset convention:
    offset = remote_time - local_monotonic_time      (ms)
    remote_time = local_monotonic_time + offset

The remote timestamp is assumed to have been taken halfway between request
and response (symmetric transit), which is an approximation rather than NTP.
"""

import asyncio
import logging
import math
import time
from datetime import datetime, timezone
from typing import Callable, Optional

import aiohttp

from .config import CLOCK_SYNC_TIMEOUT, TIME_SERVER_URL

logger = logging.getLogger(__name__)


# ===================
# UTILITY FUNCTIONS
# ===================

def current_time_ms() -> float:
    """Local wall clock in milliseconds since Unix epoch."""
    return time.time() * 1000


def monotonic_ms() -> float:
    """Local monotonic clock in milliseconds (arbitrary origin)."""
    return time.monotonic() * 1000


def parse_server_time(body: str) -> float:
    """Parse a time server response body to epoch milliseconds.

    Accepts ISO-8601 (``2024-05-01T12:00:00.123Z``) or a bare epoch-seconds
    number. Naive ISO timestamps are taken as UTC.

    Raises:
        ValueError: if the body is neither.
    """
    text = body.strip()
    if not text:
        raise ValueError("Empty time server response")

    try:
        millis = float(text) * 1000
    except ValueError:
        pass
    else:
        if not math.isfinite(millis):
            raise ValueError(f"Non-finite time server response: {text!r}")
        return millis

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000


class ClockSync:
    """Single-exchange clock synchronization against a time server.

    Until :meth:`sync` succeeds, :attr:`offset` holds the naive local
    estimate (wall clock minus monotonic clock), so callers can convert
    timestamps right away with reduced accuracy.

    Args:
        url:        Time server endpoint returning a timestamp in its body.
        timeout:    Upper bound for the whole request, seconds.
        session:    Optional shared aiohttp session. A private one is opened
                    per call otherwise.
        monotonic:  Monotonic clock source, ms.
        wall_clock: Wall clock source, ms since epoch.
    """

    def __init__(
        self,
        url: str = TIME_SERVER_URL,
        timeout: float = CLOCK_SYNC_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        monotonic: Callable[[], float] = monotonic_ms,
        wall_clock: Callable[[], float] = current_time_ms,
    ):
        self.url = url
        self.timeout = timeout
        self._session = session
        self.monotonic = monotonic
        self.wall_clock = wall_clock

        self.offset: float = self.fallback_offset()
        self.rtt: float = 0.0
        self._synced = False

    @property
    def synced(self) -> bool:
        """True once an exchange with the time server has completed."""
        return self._synced

    def fallback_offset(self) -> float:
        """Naive offset from the local wall clock, ms."""
        return self.wall_clock() - self.monotonic()

    def now(self) -> float:
        """Local monotonic reading, ms."""
        return self.monotonic()

    def process(self, t0: float, t1: float, remote: float) -> tuple[float, float]:
        """Compute the offset from one request/response exchange.

        Args:
            t0:     Request time (local monotonic, ms).
            t1:     Response time (local monotonic, ms).
            remote: Server timestamp from the response body (epoch ms).

        Returns:
            Tuple of (offset_ms, rtt_ms).
        """
        rtt = t1 - t0
        offset = remote - (t0 + t1) / 2

        self.offset = offset
        self.rtt = rtt
        self._synced = True

        return offset, rtt

    async def sync(self) -> Optional[float]:
        """Run one exchange with the time server.

        Returns:
            The new offset in ms, or None if the exchange failed. Failures are
            logged and leave the current offset untouched.
        """
        try:
            if self._session is not None:
                return await self._exchange(self._session)
            async with aiohttp.ClientSession() as session:
                return await self._exchange(session)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Clock sync with {self.url} failed: {e!r}")
            return None

    async def _exchange(self, session: aiohttp.ClientSession) -> float:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        t0 = self.monotonic()
        async with session.get(self.url, timeout=timeout) as resp:
            resp.raise_for_status()
            body = await resp.text()
        t1 = self.monotonic()

        offset, rtt = self.process(t0, t1, parse_server_time(body))
        logger.info(f"Clock sync: offset={offset:.1f}ms rtt={rtt:.1f}ms")
        return offset
