"""
Playback state data models.

This module defines the clock lifecycle states and the immutable cursor and
tick values the playback clock hands to the synchronization engine.
"""

from dataclasses import dataclass
from enum import Enum


class ClockState(str, Enum):
    """Playback clock lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class PlaybackCursor:
    """Position on the shared timeline."""

    tick_index: int = 0          # Index of the most recently issued sample
    elapsed_ms: float = 0.0      # Running time accumulated since start

    def __post_init__(self):
        if self.tick_index < 0:
            raise ValueError(f"tick_index must be >= 0, got {self.tick_index}")
        if self.elapsed_ms < 0:
            raise ValueError(f"elapsed_ms must be >= 0, got {self.elapsed_ms}")


@dataclass(frozen=True)
class ClockTick:
    """A tick issued by the clock, to be dispatched in the current frame."""

    tick_index: int
    elapsed_ms: float
    skipped: int = 0             # Indices passed over because the frame was long
    is_last: bool = False
