"""
Player Surface
==============

The small read/write surface the latency manager needs from a media player
that is already playing a live stream.

    read:  paused, current_time, current_program_date_time, buffered,
           playback_rate
    write: playback_rate
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence


@dataclass(frozen=True)
class TimeRange:
    """A buffered media range in seconds of player time."""
    start: float
    end: float


class Player(Protocol):
    """Structural type for the external player collaborator."""

    paused: bool
    current_time: float
    current_program_date_time: Optional[datetime]
    buffered: Sequence[TimeRange]
    playback_rate: float


@dataclass(frozen=True)
class PlayerSnapshot:
    """Player state read once per tick. Never kept across ticks."""

    paused: bool
    current_time: float
    current_program_date_time: Optional[datetime]
    buffered: tuple[TimeRange, ...]
    playback_rate: float

    @classmethod
    def capture(cls, player: Player) -> 'PlayerSnapshot':
        return cls(
            paused=bool(player.paused),
            current_time=float(player.current_time),
            current_program_date_time=player.current_program_date_time,
            buffered=tuple(player.buffered),
            playback_rate=float(player.playback_rate),
        )
