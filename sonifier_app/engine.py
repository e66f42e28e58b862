"""
Synchronization engine.

Owns the per-frame update of a playback session: advances the shared
clock, derives the tone and trend for the sample under the cursor and
delivers one immutable event bundle to the chart, audio and animation
sinks in a single ordered dispatch.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

import structlog

from .config.defaults import DefaultConfig, get_default_config
from .config.validation import OVERLAP_POLICIES
from .data.models import PriceSeries
from .delivery.base import (
    AnimationSink,
    AudioSink,
    BaseSink,
    ChartSink,
    DeliveryResult,
    DeliveryStatus,
    EventObserver,
)
from .errors import IndexOutOfRangeError
from .logging.config import get_sync_logger
from .metrics.tone import ToneMapper
from .metrics.trend import TrendClassifier
from .models.events import SyncEvent, ToneSpec, TrendState
from .state.clock import PlaybackClock
from .state.models import ClockTick

logger = structlog.get_logger(__name__)
sync_logger = get_sync_logger(__name__)


@dataclass
class DispatchReport:
    """Per-sink outcome of one dispatch."""
    event: SyncEvent
    results: list[DeliveryResult] = field(default_factory=list)

    @property
    def failures(self) -> list[DeliveryResult]:
        return [r for r in self.results if r.status == DeliveryStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failures


class SyncEngine:
    """
    Core coordinator keeping chart, audio and animation on one timeline.

    Per frame: Clock → Sample/Delta → Tone + Trend → Chart, Audio, Animation

    The engine is the only caller of the clock's mutating operations. An
    IndexOutOfRangeError while reading the series means the clock and the
    series disagree; the engine aborts (silencing audio) and re-raises.
    Sink failures are logged and skipped for the current tick only.
    """

    def __init__(
        self,
        series: PriceSeries,
        clock: PlaybackClock,
        chart_sink: ChartSink,
        audio_sink: AudioSink,
        animation_sink: AnimationSink,
        tone_mapper: ToneMapper,
        trend_classifier: TrendClassifier,
        overlap_policy: str = "truncate",
        observers: Sequence[EventObserver] = ()
    ) -> None:
        if overlap_policy not in OVERLAP_POLICIES:
            raise ValueError(
                f"overlap_policy must be one of {', '.join(OVERLAP_POLICIES)}, got {overlap_policy!r}"
            )

        self.logger = logger
        self.sync_logger = sync_logger.bind(asset_id=series.asset_id)

        self.series = series
        self.clock = clock
        self.chart_sink = chart_sink
        self.audio_sink = audio_sink
        self.animation_sink = animation_sink
        self.tone_mapper = tone_mapper
        self.trend_classifier = trend_classifier
        self.overlap_policy = overlap_policy
        self.observers = list(observers)

        self.current_trend: Optional[TrendState] = None
        self.last_event: Optional[SyncEvent] = None
        self.last_report: Optional[DispatchReport] = None
        self.aborted = False

        self._pending_tones: deque[ToneSpec] = deque()
        self._dispatch_count = 0
        self._sink_failure_count = 0
        self._truncated_count = 0

    @classmethod
    def create(
        cls,
        series: PriceSeries,
        chart_sink: ChartSink,
        audio_sink: AudioSink,
        animation_sink: AnimationSink,
        config: Optional[DefaultConfig] = None,
        observers: Sequence[EventObserver] = ()
    ) -> "SyncEngine":
        """Wire an engine and its clock from configuration."""
        config = config or get_default_config()
        clock = PlaybackClock(
            total_ticks=len(series),
            tick_interval_ms=config.playback.tick_interval_ms,
            asset_id=series.asset_id,
        )
        return cls(
            series=series,
            clock=clock,
            chart_sink=chart_sink,
            audio_sink=audio_sink,
            animation_sink=animation_sink,
            tone_mapper=ToneMapper.for_series(series, config.tone),
            trend_classifier=TrendClassifier(config.trend.epsilon, config.trend.window),
            overlap_policy=config.playback.overlap_policy,
            observers=observers,
        )

    def update(self, dt_ms: float) -> Optional[SyncEvent]:
        """
        Run one frame of playback.

        Args:
            dt_ms: Frame duration in milliseconds

        Returns:
            The event dispatched in this frame, or None when no tick was due
        """
        if self.aborted:
            return None

        self._pump_tone_queue()

        tick = self.clock.advance(dt_ms)
        if tick is None:
            return None

        try:
            event = self.build_event(tick)
        except IndexOutOfRangeError as e:
            self._abort(e)
            raise

        self.last_report = self._dispatch(event)
        self.current_trend = event.trend
        self.last_event = event
        return event

    def build_event(self, tick: ClockTick) -> SyncEvent:
        """Derive the full event bundle for ``tick`` before any sink sees it."""
        index = tick.tick_index
        sample = self.series.sample_at(index)

        if index == 0:
            delta = 0.0
            tone = self.tone_mapper.neutral()
            trend = TrendState.FLAT
        else:
            delta = self.series.delta_at(index)
            tone = self.tone_mapper.map_delta(delta)
            if self.trend_classifier.window > 1:
                trend = self.trend_classifier.classify(
                    self.series.net_change(index, self.trend_classifier.window)
                )
            else:
                trend = self.trend_classifier.classify(delta)

        return SyncEvent(
            tick=index,
            timestamp=sample.ts,
            price=sample.price,
            delta=delta,
            draw_up_to=index,
            tone=tone,
            trend=trend,
            skipped=tick.skipped,
        )

    def _dispatch(self, event: SyncEvent) -> DispatchReport:
        report = DispatchReport(event=event)

        # Fixed order: chart, audio, animation, then observers
        report.results.append(self._deliver(
            self.chart_sink, event, lambda: self.chart_sink.draw_up_to(event.draw_up_to)
        ))
        report.results.append(self._deliver(
            self.audio_sink, event, lambda: self._submit_tone(event.tone)
        ))
        report.results.append(self._deliver(
            self.animation_sink, event, lambda: self.animation_sink.show(event.trend)
        ))
        for observer in self.observers:
            report.results.append(self._deliver(
                observer, event, lambda o=observer: o.on_event(event)
            ))

        self._dispatch_count += 1

        self.sync_logger.debug(
            "Dispatched tick",
            tick=event.tick,
            price=event.price,
            delta=event.delta,
            trend=event.trend.value,
            frequency_hz=event.tone.frequency_hz,
            skipped=event.skipped,
            failures=len(report.failures)
        )
        return report

    def _deliver(self, sink: BaseSink, event: SyncEvent, action: Callable[[], None]) -> DeliveryResult:
        try:
            action()
        except Exception as e:
            sink.record_delivery(False)
            self._sink_failure_count += 1
            self.sync_logger.warning(
                "Sink delivery failed, skipping for this tick",
                sink_name=sink.name,
                tick=event.tick,
                error=str(e),
                error_type=type(e).__name__
            )
            return DeliveryResult(
                sink_name=sink.name,
                status=DeliveryStatus.FAILED,
                message=str(e),
                error=e
            )

        sink.record_delivery(True)
        return DeliveryResult(sink_name=sink.name, status=DeliveryStatus.SUCCESS)

    def _submit_tone(self, tone: ToneSpec) -> None:
        if self.overlap_policy == "truncate":
            if self.audio_sink.is_playing():
                self.audio_sink.stop()
                self._truncated_count += 1
            self.audio_sink.play(tone)
            return

        # queue: tones play back to back and drift behind the chart
        if self._pending_tones or self.audio_sink.is_playing():
            self._pending_tones.append(tone)
        else:
            self.audio_sink.play(tone)

    def _pump_tone_queue(self) -> None:
        if not self._pending_tones or self.audio_sink.is_playing():
            return

        tone = self._pending_tones.popleft()
        try:
            self.audio_sink.play(tone)
        except Exception as e:
            self.audio_sink.record_delivery(False)
            self._sink_failure_count += 1
            self.sync_logger.warning(
                "Queued tone could not be played, dropping it",
                sink_name=self.audio_sink.name,
                frequency_hz=tone.frequency_hz,
                error=str(e),
                error_type=type(e).__name__
            )

    @property
    def pending_tone_count(self) -> int:
        return len(self._pending_tones)

    def stop(self) -> None:
        """Silence audio immediately and drop queued tones (cancellation)."""
        self._pending_tones.clear()
        try:
            self.audio_sink.stop()
        except Exception as e:
            self.sync_logger.error(
                "Audio sink failed to stop",
                sink_name=self.audio_sink.name,
                error=str(e),
                error_type=type(e).__name__
            )

    def reset(self) -> None:
        """Rewind for a replay of the same series."""
        self.stop()
        self.clock.reset()
        self.chart_sink.clear()
        self.animation_sink.clear()
        self.current_trend = None
        self.last_event = None
        self.last_report = None

    def _abort(self, error: IndexOutOfRangeError) -> None:
        self.aborted = True
        self.sync_logger.error(
            "Series read failed, aborting playback session",
            tick_index=self.clock.tick_index,
            clock_state=self.clock.state.value,
            error=str(error),
            index=error.index,
            length=error.length
        )
        self.stop()

    def get_runtime_stats(self) -> dict[str, Any]:
        """Get runtime statistics."""
        return {
            "asset_id": self.series.asset_id,
            "clock_state": self.clock.state.value,
            "tick_index": self.clock.tick_index,
            "dispatch_count": self._dispatch_count,
            "sink_failures": self._sink_failure_count,
            "truncated_tones": self._truncated_count,
            "pending_tones": len(self._pending_tones),
            "overlap_policy": self.overlap_policy,
            "aborted": self.aborted,
        }
