"""Base classes for the sinks fed by the synchronization engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from ..models.events import SyncEvent, ToneSpec, TrendState


class DeliveryStatus(Enum):
    """Outcome of handing one tick to one sink."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class DeliveryResult:
    """Result of a single sink delivery within a dispatch."""
    sink_name: str
    status: DeliveryStatus
    message: Optional[str] = None
    error: Optional[Exception] = None


class BaseSink(ABC):
    """Common bookkeeping for every sink."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"sonifier.sink.{name}")
        self._delivery_count = 0
        self._error_count = 0

    def record_delivery(self, success: bool) -> None:
        """Count one delivery attempt made by the engine."""
        if success:
            self._delivery_count += 1
        else:
            self._error_count += 1

    def health_check(self) -> bool:
        """Check if the sink can accept events."""
        return True

    def clear(self) -> None:
        """Forget presentation state before a replay."""
        pass

    def close(self) -> None:
        """Release resources held by the sink."""
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": (
                self._delivery_count / (self._delivery_count + self._error_count)
                if (self._delivery_count + self._error_count) > 0 else 0.0
            )
        }

    def reset_stats(self):
        """Reset delivery statistics."""
        self._delivery_count = 0
        self._error_count = 0


class ChartSink(BaseSink):
    """Receives "extend the drawn path to index k" commands."""

    @abstractmethod
    def draw_up_to(self, index: int) -> None:
        """
        Draw the price path up to and including ``index``.

        Must be idempotent: repeating an index (or sending a lower one)
        leaves the drawing unchanged.
        """
        pass


class AudioSink(BaseSink):
    """Monophonic tone output."""

    @abstractmethod
    def play(self, tone: ToneSpec) -> None:
        """Start sounding ``tone``. Must not block the caller."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Cut any sounding or pending tone immediately."""
        pass

    @abstractmethod
    def is_playing(self) -> bool:
        """Whether a tone is currently sounding."""
        pass

    def close(self) -> None:
        self.stop()


class AnimationSink(BaseSink):
    """Displays the bull/bear/flat asset for the current trend."""

    @abstractmethod
    def show(self, trend: TrendState) -> None:
        """Display ``trend``; a repeat of the current state is a no-op."""
        pass


class EventObserver(BaseSink):
    """Receives the whole event bundle after the three sinks (logs, exports)."""

    @abstractmethod
    def on_event(self, event: SyncEvent) -> None:
        pass
