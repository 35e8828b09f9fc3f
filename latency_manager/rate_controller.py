"""
Playback Rate Controller
========================

Three-state hysteresis over the applied playback rate:

    SPEED_DOWN (1 - r)  <->  NORMAL (1.0)  <->  SPEED_UP (1 + r)

Leaving the window [target - w, target + w] moves NORMAL to one of the
catch-up states, picked by the sign of (latency - target). Re-entering the
window moves a catch-up state back to NORMAL. A sample that lands outside
the window on the opposite side switches catch-up direction directly.
"""

import logging
from enum import Enum
from typing import Optional

from .config import LATENCY_CATCHUP_RATE, LATENCY_WINDOW

logger = logging.getLogger(__name__)


class RateState(Enum):
    NORMAL = "normal"
    SPEED_UP = "speed_up"
    SPEED_DOWN = "speed_down"


def decide(
    current_latency: float,
    target_latency: float,
    applied: RateState,
    window: float = LATENCY_WINDOW,
) -> Optional[RateState]:
    """Next rate state, or None when ``applied`` should stay.

    Args:
        current_latency: Measured latency, seconds.
        target_latency:  Desired latency, seconds.
        applied:         State currently applied to the player.
        window:          Half-width of the hysteresis band, seconds.
    """
    out_of_window = (
        current_latency > target_latency + window
        or current_latency < target_latency - window
    )

    if out_of_window:
        too_slow = current_latency > target_latency
        desired = RateState.SPEED_UP if too_slow else RateState.SPEED_DOWN
        return None if applied is desired else desired

    if applied is not RateState.NORMAL:
        return RateState.NORMAL
    return None


class RateController:
    """Carries the last applied rate state between ticks.

    Args:
        window:       Half-width of the hysteresis band, seconds.
        catchup_rate: Speed delta applied while catching up (0.08 = 8%).
    """

    def __init__(self, window: float = LATENCY_WINDOW, catchup_rate: float = LATENCY_CATCHUP_RATE):
        self.window = window
        self.catchup_rate = catchup_rate
        self.state = RateState.NORMAL

    def rate_for(self, state: RateState) -> float:
        if state is RateState.SPEED_UP:
            return 1 + self.catchup_rate
        if state is RateState.SPEED_DOWN:
            return 1 - self.catchup_rate
        return 1.0

    @property
    def rate(self) -> float:
        """Playback rate matching the current state."""
        return self.rate_for(self.state)

    def update(self, current_latency: float, target_latency: float) -> Optional[float]:
        """Feed one latency sample.

        Returns:
            The playback rate to apply, or None for no change.
        """
        new_state = decide(current_latency, target_latency, self.state, self.window)
        if new_state is None:
            return None

        logger.debug(
            f"Rate {self.state.value} -> {new_state.value} "
            f"(latency={current_latency:.3f}s target={target_latency:.3f}s)"
        )
        self.state = new_state
        return self.rate_for(new_state)

    def reset(self):
        """Return to NORMAL without emitting a decision."""
        self.state = RateState.NORMAL
