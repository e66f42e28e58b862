"""Data models for per-tick playback events"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class TrendState(str, Enum):
    """Direction of the price move behind a tick."""
    BULL = "bull"
    BEAR = "bear"
    FLAT = "flat"


@dataclass(frozen=True)
class ToneSpec:
    """Single tone request: one per tick, consumed once by the audio sink"""
    frequency_hz: float
    duration_ms: int
    amplitude: float

    def __post_init__(self):
        if not self.frequency_hz > 0:
            raise ValueError(f"frequency_hz must be positive, got {self.frequency_hz}")
        if not isinstance(self.duration_ms, int) or self.duration_ms <= 0:
            raise ValueError(f"duration_ms must be a positive integer, got {self.duration_ms}")
        if not 0.0 <= self.amplitude <= 1.0:
            raise ValueError(f"amplitude must be within [0, 1], got {self.amplitude}")

    @property
    def is_silent(self) -> bool:
        return self.amplitude == 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "frequency_hz": self.frequency_hz,
            "duration_ms": self.duration_ms,
            "amplitude": self.amplitude,
        }


@dataclass(frozen=True)
class SyncEvent:
    """Event bundle delivered to every sink for one tick"""
    tick: int
    timestamp: datetime          # Sample timestamp (market time)
    price: float
    delta: float                 # 0.0 on tick 0
    draw_up_to: int              # Always equal to tick
    tone: ToneSpec
    trend: TrendState
    skipped: int = 0             # Indices jumped over when a frame spanned several intervals

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick": self.tick,
            "timestamp": self.timestamp.isoformat(),
            "price": self.price,
            "delta": self.delta,
            "draw_up_to": self.draw_up_to,
            "tone": self.tone.to_dict(),
            "trend": self.trend.value,
            "skipped": self.skipped,
        }
