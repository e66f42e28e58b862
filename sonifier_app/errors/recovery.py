"""
Recovery strategy classifications for error handling.

Errors here allow playback to continue with reduced functionality for the
current tick only.
"""

from typing import Optional


class GracefulDegradationError(Exception):
    """Mixin for errors that allow continued operation with reduced functionality."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True


class SinkDeliveryError(GracefulDegradationError):
    """A sink could not accept an event (device busy, closed stream, ...)."""

    def __init__(self, message: str, sink_name: Optional[str] = None,
                 tick: Optional[int] = None, **kwargs):
        kwargs.setdefault("degraded_functionality", sink_name)
        kwargs.setdefault("fallback_strategy", "skip_tick")
        super().__init__(message, **kwargs)
        self.sink_name = sink_name
        self.tick = tick
