"""
Data quality error classifications for price history loading.

These exceptions cover problems with the historical price data itself:
fetch failures, too few samples, bad timestamps and malformed payloads.
All of them are recoverable by retrying or selecting another asset.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class DataUnavailableError(DataQualityError):
    """Price history could not be obtained for the requested asset."""

    def __init__(self, message: str, asset_id: Optional[str] = None,
                 cause: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.asset_id = asset_id
        self.cause = cause


class InsufficientDataError(DataUnavailableError):
    """Not enough samples to compute a single price delta."""

    def __init__(self, message: str, required_count: Optional[int] = None,
                 available_count: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count


class TemporalDataError(DataQualityError):
    """Timestamp ordering issues in price data."""

    def __init__(self, message: str, timestamp: Optional[Any] = None,
                 previous_timestamp: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timestamp = timestamp
        self.previous_timestamp = previous_timestamp


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format
