"""
Error classification system for price playback.

This module provides the structured exception hierarchy for errors
encountered while loading price data, driving the playback clock and
delivering events to the chart, audio and animation sinks.
"""

from .data_quality import (
    DataQualityError,
    DataUnavailableError,
    InsufficientDataError,
    TemporalDataError,
    MalformedDataError,
)
from .system_failures import (
    SystemFailureError,
    IndexOutOfRangeError,
    StateTransitionError,
)
from .recovery import (
    GracefulDegradationError,
    SinkDeliveryError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "DataUnavailableError",
    "InsufficientDataError",
    "TemporalDataError",
    "MalformedDataError",
    # System Failures
    "SystemFailureError",
    "IndexOutOfRangeError",
    "StateTransitionError",
    # Recovery Categories
    "GracefulDegradationError",
    "SinkDeliveryError",
]
