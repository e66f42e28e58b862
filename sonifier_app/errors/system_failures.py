"""
System failure error classifications for unrecoverable errors.

These exceptions represent broken engine invariants. They abort the
playback session instead of being retried.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class IndexOutOfRangeError(SystemFailureError):
    """A sample index outside the series was requested (clock/series mismatch)."""

    def __init__(self, message: str, index: Optional[int] = None,
                 length: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.index = index
        self.length = length


class StateTransitionError(SystemFailureError):
    """Invalid playback state transition."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition
