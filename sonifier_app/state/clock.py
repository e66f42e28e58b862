"""
Playback clock driving the shared timeline.

The clock is advanced once per rendered frame with the frame's duration.
An internal accumulator converts running time into ticks at a fixed logical
rate (one sample per ``tick_interval_ms``), so sonification pacing does not
depend on how fast frames are rendered. The clock never blocks and never
starts threads.
"""

from typing import Optional

from ..errors import StateTransitionError
from ..logging.config import get_state_logger, log_state_transition
from .models import ClockState, ClockTick, PlaybackCursor

state_logger = get_state_logger(__name__)


class PlaybackClock:
    """Cooperative IDLE/RUNNING/PAUSED/FINISHED tick source."""

    def __init__(
        self,
        total_ticks: int,
        tick_interval_ms: int = 2000,
        asset_id: Optional[str] = None
    ) -> None:
        if total_ticks < 1:
            raise ValueError(f"total_ticks must be at least 1, got {total_ticks}")
        if tick_interval_ms <= 0:
            raise ValueError(f"tick_interval_ms must be positive, got {tick_interval_ms}")

        self.total_ticks = total_ticks
        self.tick_interval_ms = tick_interval_ms
        self.asset_id = asset_id
        self.logger = state_logger

        self._state = ClockState.IDLE
        self._cursor = PlaybackCursor()
        self._accumulator_ms = 0.0
        self._issued_any = False

    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def cursor(self) -> PlaybackCursor:
        return self._cursor

    @property
    def tick_index(self) -> int:
        return self._cursor.tick_index

    @property
    def is_finished(self) -> bool:
        return self._state == ClockState.FINISHED

    def start(self) -> None:
        """IDLE → RUNNING. Tick 0 becomes due on the next advance."""
        self._require(ClockState.IDLE, "start")
        # Prime the accumulator so the first sample plays without waiting an interval
        self._accumulator_ms = float(self.tick_interval_ms)
        self._transition(ClockState.RUNNING, "start")

    def pause(self) -> None:
        """RUNNING → PAUSED. Running time stops accumulating."""
        self._require(ClockState.RUNNING, "pause")
        self._transition(ClockState.PAUSED, "pause")

    def resume(self) -> None:
        """PAUSED → RUNNING."""
        self._require(ClockState.PAUSED, "resume")
        self._transition(ClockState.RUNNING, "resume")

    def toggle(self) -> ClockState:
        """Flip between RUNNING and PAUSED; returns the new state."""
        if self._state == ClockState.RUNNING:
            self.pause()
        elif self._state == ClockState.PAUSED:
            self.resume()
        else:
            raise StateTransitionError(
                f"Cannot toggle playback while {self._state.value}",
                current_state=self._state.value,
                attempted_transition="toggle",
            )
        return self._state

    def reset(self) -> None:
        """Any state → IDLE with the cursor back at zero (replay or new asset)."""
        previous = self._state
        self._cursor = PlaybackCursor()
        self._accumulator_ms = 0.0
        self._issued_any = False
        self._state = ClockState.IDLE
        log_state_transition(
            self.logger,
            asset_id=self.asset_id,
            from_state=previous.value,
            to_state=ClockState.IDLE.value,
            trigger="reset",
        )

    def set_tick_interval(self, tick_interval_ms: int) -> None:
        """Change the logical playback rate; takes effect on the next advance."""
        if tick_interval_ms <= 0:
            raise ValueError(f"tick_interval_ms must be positive, got {tick_interval_ms}")
        self.tick_interval_ms = tick_interval_ms

    def advance(self, dt_ms: float) -> Optional[ClockTick]:
        """
        Advance running time by one frame.

        Args:
            dt_ms: Duration of the frame in milliseconds

        Returns:
            The tick to dispatch in this frame, or None when no tick is due or
            the clock is not RUNNING (a FINISHED clock is left untouched)
        """
        if dt_ms < 0:
            raise ValueError(f"dt_ms must be non-negative, got {dt_ms}")

        if self._state != ClockState.RUNNING:
            return None

        elapsed = self._cursor.elapsed_ms + dt_ms
        self._accumulator_ms += dt_ms

        if self._accumulator_ms < self.tick_interval_ms:
            self._cursor = PlaybackCursor(self._cursor.tick_index, elapsed)
            return None

        due = int(self._accumulator_ms // self.tick_interval_ms)
        self._accumulator_ms -= due * self.tick_interval_ms

        first = self._cursor.tick_index + 1 if self._issued_any else 0
        target = min(first + due - 1, self.total_ticks - 1)
        skipped = target - first

        self._cursor = PlaybackCursor(target, elapsed)
        self._issued_any = True
        is_last = target == self.total_ticks - 1

        if skipped:
            self.logger.debug(
                "Frame spanned several tick intervals, cursor jumped",
                asset_id=self.asset_id,
                tick_index=target,
                skipped=skipped,
            )

        if is_last:
            self._transition(ClockState.FINISHED, "series_end", {"tick_index": target})

        return ClockTick(
            tick_index=target,
            elapsed_ms=elapsed,
            skipped=skipped,
            is_last=is_last,
        )

    def _require(self, expected: ClockState, action: str) -> None:
        if self._state != expected:
            raise StateTransitionError(
                f"Cannot {action} playback while {self._state.value}",
                current_state=self._state.value,
                attempted_transition=action,
            )

    def _transition(self, new_state: ClockState, trigger: str, context: Optional[dict] = None) -> None:
        previous = self._state
        self._state = new_state
        log_state_transition(
            self.logger,
            asset_id=self.asset_id,
            from_state=previous.value,
            to_state=new_state.value,
            trigger=trigger,
            context=context,
        )
