"""Standard output event observer for headless playback."""

import json
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from ..models.events import SyncEvent
from ..utils.time import format_day_label
from .base import EventObserver

FORMATS = ("json", "pretty")


class StdoutEventObserver(EventObserver):
    """Prints one line per dispatched event."""

    def __init__(
        self,
        format: str = "pretty",
        include_timestamp: bool = False,
        stream: TextIO = sys.stdout,
        name: str = "stdout"
    ):
        if format not in FORMATS:
            raise ValueError(f"format must be one of {', '.join(FORMATS)}, got {format!r}")
        super().__init__(name)
        self.format = format
        self.include_timestamp = include_timestamp
        self.stream = stream

    def on_event(self, event: SyncEvent) -> None:
        print(self._format_event(event), file=self.stream, flush=True)

    def _format_event(self, event: SyncEvent) -> str:
        if self.format == "pretty":
            output = (
                f"[{format_day_label(event.timestamp)}] tick {event.tick:>3} "
                f"price={event.price:,.4f} delta={event.delta:+,.4f} "
                f"{event.trend.value.upper():<4} "
                f"tone={event.tone.frequency_hz:.1f}Hz/{event.tone.duration_ms}ms"
                f"@{event.tone.amplitude:.2f}"
            )
            if event.skipped:
                output += f" (skipped {event.skipped})"
            return output

        payload: dict[str, Any] = event.to_dict()
        if self.include_timestamp:
            payload["stdout_timestamp"] = datetime.now(timezone.utc).isoformat()
        return json.dumps(payload)

    def health_check(self) -> bool:
        """Check if the stream is writable."""
        try:
            return self.stream.writable()
        except (OSError, ValueError):
            return False
