import asyncio
import contextlib
from datetime import datetime, timezone
from typing import Optional

import pytest
from aiohttp import test_utils, web

from latency_manager import ClockSync, TimeRange

# Fake synchronized "now": monotonic 0ms plus a wall-clock fallback offset
NOW = 1_700_000_000.0


class FakePlayer:
    """Minimal player exposing the attributes the manager reads and writes."""

    def __init__(self, latency: Optional[float] = 3.5, paused: bool = False):
        self.paused = paused
        self.current_time = 10.0
        self.buffered = [TimeRange(0.0, 20.0)]
        self.playback_rate = 1.0
        self.current_program_date_time: Optional[datetime] = None
        self.rate_writes: list[float] = []
        if latency is not None:
            self.set_latency(latency)

    def set_latency(self, latency: float):
        self.current_program_date_time = datetime.fromtimestamp(NOW - latency, tz=timezone.utc)

    def __setattr__(self, name, value):
        if name == "playback_rate" and "rate_writes" in self.__dict__:
            self.rate_writes.append(value)
        super().__setattr__(name, value)


class FakeClockSync(ClockSync):
    """ClockSync with a frozen local clock and a sync resolved by the test."""

    def __init__(self, monotonic: float = 0.0, wall_clock: float = NOW * 1000):
        self.mono_ms = monotonic
        self.wall_ms = wall_clock
        super().__init__(monotonic=lambda: self.mono_ms, wall_clock=lambda: self.wall_ms)
        self._result = asyncio.get_running_loop().create_future()
        self.sync_calls = 0

    async def sync(self):
        self.sync_calls += 1
        offset = await self._result
        if offset is not None:
            self.offset = offset
        return offset

    def resolve(self, offset: Optional[float]):
        self._result.set_result(offset)


@contextlib.asynccontextmanager
async def time_server(handler):
    """Serve `handler` on GET / and yield its URL."""
    app = web.Application()
    app.router.add_get("/", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/"))
    finally:
        await server.close()


@pytest.fixture
def player():
    return FakePlayer()
