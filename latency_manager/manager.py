"""
Latency Manager
===============

Keeps a live stream's playback latency near a target by nudging the
player's playback rate. Samples the player every 500ms while enabled and
runs a one-shot clock sync against a time server at construction.
"""

import asyncio
import logging
import math
from typing import Optional

from .clock_sync import ClockSync
from .config import LatencyConfig
from .estimator import (
    current_buffer,
    current_latency,
    current_media_timestamp,
    current_timestamp,
)
from .player import Player, PlayerSnapshot
from .rate_controller import RateController, RateState
from .stats import LatencyStats

logger = logging.getLogger(__name__)


class LatencyManager:
    """Automatically steers a player towards the target latency when enabled.

    Must be created inside a running asyncio event loop: construction
    schedules the clock sync task on it. The naive local clock offset is used
    until that sync resolves.

    Args:
        player:        The playing media player.
        enabled:       Enable right away.
        stream_offset: Offset added to the stream's program date time, seconds.
        config:        Tunables, defaults to ``LatencyConfig()``.
        clock:         Clock sync to use instead of one built from ``config``.
    """

    def __init__(
        self,
        player: Player,
        enabled: bool = False,
        stream_offset: float = 0.0,
        *,
        config: Optional[LatencyConfig] = None,
        clock: Optional[ClockSync] = None,
    ):
        self.config = config or LatencyConfig()
        self._player = player
        self._target_latency = self.config.default_target_latency
        self._stream_time_offset = stream_offset or 0.0

        self._clock = clock or ClockSync(
            url=self.config.time_url,
            timeout=self.config.sync_timeout,
        )
        self._controller = RateController(self.config.window, self.config.catchup_rate)
        self.stats = LatencyStats(self.config.stats_window)

        self._enabled = False
        self._closed = False
        self._timer: Optional[asyncio.Task] = None
        self._sync_task: asyncio.Task = asyncio.get_running_loop().create_task(
            self._sync_clock()
        )

        if enabled:
            self.enable()

    async def __aenter__(self) -> 'LatencyManager':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ---- Properties ----------------------------------------------------------

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def clock(self) -> ClockSync:
        return self._clock

    @property
    def rate_state(self) -> RateState:
        """Last playback rate decision applied to the player."""
        return self._controller.state

    @property
    def stream_time_offset(self) -> float:
        return self._stream_time_offset

    @property
    def target_latency(self) -> float:
        """Latency target, seconds. Never below ``config.min_target_latency``."""
        return self._target_latency

    @target_latency.setter
    def target_latency(self, target: Optional[float]):
        if not target or math.isnan(target):
            target = 0
        self._target_latency = max(target, self.config.min_target_latency)

    @property
    def current_timestamp(self) -> float:
        """Synchronized client time, seconds since epoch."""
        return current_timestamp(self._clock.now(), self._clock.offset)

    @property
    def current_media_timestamp(self) -> Optional[float]:
        """Absolute time of the playing media, seconds since epoch.

        None while the player reports no program date time.
        """
        program_date_time = self._player.current_program_date_time
        if program_date_time is None:
            return None
        return current_media_timestamp(program_date_time, self._stream_time_offset)

    @property
    def current_latency(self) -> Optional[float]:
        """Client time minus media time, seconds. None without media time."""
        media_timestamp = self.current_media_timestamp
        if media_timestamp is None:
            return None
        return current_latency(self.current_timestamp, media_timestamp)

    @property
    def current_buffer(self) -> float:
        """Contiguous buffer ahead of the playhead, seconds."""
        return current_buffer(
            self._player.buffered,
            self._player.current_time,
            self.config.buffer_margin,
        )

    # ---- Lifecycle -----------------------------------------------------------

    def enable(self):
        """Start sampling every ``config.interval`` and correct right away.

        Enabling an enabled manager restarts its timer.
        """
        if self._closed:
            raise RuntimeError("LatencyManager is closed")
        if self._timer is not None:
            self._timer.cancel()

        self._enabled = True
        self._timer = asyncio.get_running_loop().create_task(self._latency_loop())
        logger.info(f"Latency manager enabled (target={self._target_latency:.2f}s)")
        self._tick()

    def disable(self):
        """Stop sampling and put the player back at normal speed."""
        self._enabled = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        self._controller.reset()
        try:
            self._player.playback_rate = 1.0
        except Exception as e:
            logger.error(f"Playback rate reset error: {e}")
        logger.info(f"Latency manager disabled ({self.stats})")

    async def close(self):
        """Disable and cancel the pending clock sync. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._sync_task.cancel()
        try:
            self.disable()
        finally:
            try:
                await self._sync_task
            except asyncio.CancelledError:
                pass
        logger.info("Latency manager closed")

    # ---- Sampling loop -------------------------------------------------------

    async def _latency_loop(self):
        """Tick every interval until cancelled by disable()."""
        try:
            while True:
                await asyncio.sleep(self.config.interval)
                self._tick()
        except asyncio.CancelledError:
            pass

    def _tick(self):
        try:
            self._update_latency()
        except Exception as e:
            logger.error(f"Latency update error: {e}")

    def _update_latency(self):
        """Sample the player once and apply any rate change."""
        snapshot = PlayerSnapshot.capture(self._player)
        if snapshot.paused:
            self.stats.record_skip()
            return

        program_date_time = snapshot.current_program_date_time
        if program_date_time is None:
            logger.debug("No program date time, skipping latency update")
            self.stats.record_skip()
            return

        latency = current_latency(
            current_timestamp(self._clock.now(), self._clock.offset),
            current_media_timestamp(program_date_time, self._stream_time_offset),
        )
        buffer = current_buffer(
            snapshot.buffered, snapshot.current_time, self.config.buffer_margin
        )
        self.stats.record(latency, buffer)

        rate = self._controller.update(latency, self._target_latency)
        if rate is not None:
            self._player.playback_rate = rate
            self.stats.record_rate_change()
            logger.debug(
                f"Playback rate {snapshot.playback_rate:.2f} -> {rate:.2f} "
                f"lat={latency:.3f}s buf={buffer:.3f}s"
            )

    # ---- Clock sync ----------------------------------------------------------

    async def _sync_clock(self):
        """One-shot sync; re-evaluate at once with the corrected offset."""
        try:
            offset = await self._clock.sync()
        except Exception as e:
            logger.error(f"Clock sync error: {e}")
            return
        if offset is not None and self._enabled:
            self._tick()
