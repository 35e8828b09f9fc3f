"""
Latency Manager Package
=======================

Closed-loop playback latency control for live streams: keeps a player near
a target latency by nudging its playback rate.

Modules:
    config          - Tunables and defaults
    player          - Player protocol and per-tick snapshot
    clock_sync      - One-shot clock sync against a time server
    estimator       - Latency and forward buffer calculations
    rate_controller - Hysteresis playback rate policy
    stats           - Latency statistics tracking
    manager         - Sampling loop and lifecycle
"""

from .config import LatencyConfig
from .player import Player, PlayerSnapshot, TimeRange
from .clock_sync import ClockSync, current_time_ms, monotonic_ms, parse_server_time
from .estimator import (
    current_buffer,
    current_latency,
    current_media_timestamp,
    current_timestamp,
)
from .rate_controller import RateController, RateState, decide
from .stats import LatencyStats
from .manager import LatencyManager

__all__ = [
    "LatencyConfig",
    "Player",
    "PlayerSnapshot",
    "TimeRange",
    "ClockSync",
    "current_time_ms",
    "monotonic_ms",
    "parse_server_time",
    "current_buffer",
    "current_latency",
    "current_media_timestamp",
    "current_timestamp",
    "RateController",
    "RateState",
    "decide",
    "LatencyStats",
    "LatencyManager",
]
