"""
Latency Manager Configuration
=============================

Tunables for the sampling loop, the hysteresis policy and the clock sync.
All durations are in seconds unless the name says otherwise.
"""

from dataclasses import dataclass


# =================
# CONSTANTS
# =================

LATENCY_LOOP_INTERVAL = 0.5     # seconds between ticks
LATENCY_WINDOW = 0.1            # hysteresis band around the target
LATENCY_CATCHUP_RATE = 0.08     # 8% speed delta while catching up
BUFFER_MARGIN = 0.04            # gap tolerated between buffered ranges

MIN_TARGET_LATENCY = 2.0
DEFAULT_TARGET_LATENCY = 3.5

TIME_SERVER_URL = "https://time.akamai.com/?iso&ms"
CLOCK_SYNC_TIMEOUT = 10.0

STATS_WINDOW = 100


@dataclass(frozen=True)
class LatencyConfig:
    """Runtime settings for a LatencyManager.

    Use ``dataclasses.replace(LatencyConfig(), interval=0.25)`` to override
    individual values.
    """

    interval: float = LATENCY_LOOP_INTERVAL
    window: float = LATENCY_WINDOW
    catchup_rate: float = LATENCY_CATCHUP_RATE
    buffer_margin: float = BUFFER_MARGIN
    min_target_latency: float = MIN_TARGET_LATENCY
    default_target_latency: float = DEFAULT_TARGET_LATENCY
    time_url: str = TIME_SERVER_URL
    sync_timeout: float = CLOCK_SYNC_TIMEOUT
    stats_window: int = STATS_WINDOW
