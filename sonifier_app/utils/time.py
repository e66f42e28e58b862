"""
Time utilities for price history handling.

Provider timestamps arrive as epoch milliseconds; everything inside the
package works with timezone-aware UTC datetimes.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def from_epoch_ms(epoch_ms: float) -> datetime:
    """
    Convert epoch milliseconds to a UTC datetime.

    Args:
        epoch_ms: Milliseconds since the Unix epoch

    Returns:
        Timezone-aware UTC datetime
    """
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)


def to_epoch_seconds(ts: datetime) -> int:
    """Whole seconds since the epoch, as expected by range queries."""
    return int(ensure_utc(ts).timestamp())


def ensure_utc(ts: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def utc_date(ts: datetime) -> date:
    """Calendar date of a timestamp in UTC."""
    return ensure_utc(ts).date()


def history_window(window_days: int, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """
    Compute the (start, end) bounds of a trailing history window.

    Args:
        window_days: Length of the window in days
        now: End of the window, defaults to the current UTC time

    Returns:
        Tuple of (start, end) UTC datetimes
    """
    end = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    return end - timedelta(days=window_days), end


def format_day_label(ts: datetime) -> str:
    """Short axis label for a sample, e.g. ``07/03`` for 7 March."""
    return ensure_utc(ts).strftime("%d/%m")
