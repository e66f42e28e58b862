"""Pytest configuration and shared fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sonifier_app.config.defaults import ToneParams
from sonifier_app.data.models import PriceSample, PriceSeries
from sonifier_app.delivery.base import AnimationSink, AudioSink, ChartSink, EventObserver
from sonifier_app.engine import SyncEngine
from sonifier_app.metrics.tone import ToneMapper
from sonifier_app.metrics.trend import TrendClassifier
from sonifier_app.models.events import SyncEvent, ToneSpec, TrendState
from sonifier_app.state.clock import PlaybackClock

START = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_series(prices: List[float], asset_id: str = "test-coin") -> PriceSeries:
    """Daily series starting 2024-03-01 UTC."""
    return PriceSeries(
        asset_id=asset_id,
        samples=tuple(
            PriceSample(ts=START + timedelta(days=i), price=float(p))
            for i, p in enumerate(prices)
        ),
    )


class FakeClock:
    """Manually advanced monotonic clock in seconds."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingChartSink(ChartSink):
    def __init__(self, log: List[tuple], name: str = "chart"):
        super().__init__(name)
        self.log = log
        self.drawn: List[int] = []
        self.fail = False

    def draw_up_to(self, index: int) -> None:
        if self.fail:
            raise RuntimeError("chart unavailable")
        self.log.append(("chart", index))
        self.drawn.append(index)

    def clear(self) -> None:
        self.drawn.clear()


class RecordingAudioSink(AudioSink):
    """Audio sink whose tones keep playing until told otherwise."""

    def __init__(self, log: List[tuple], name: str = "audio"):
        super().__init__(name)
        self.log = log
        self.played: List[ToneSpec] = []
        self.stop_count = 0
        self.playing = False
        self.sticky = False   # Keep reporting "playing" after play()
        self.fail = False

    def play(self, tone: ToneSpec) -> None:
        if self.fail:
            raise RuntimeError("device busy")
        self.log.append(("audio", tone))
        self.played.append(tone)
        self.playing = self.sticky

    def stop(self) -> None:
        self.log.append(("audio_stop", None))
        self.stop_count += 1
        self.playing = False

    def is_playing(self) -> bool:
        return self.playing


class RecordingAnimationSink(AnimationSink):
    def __init__(self, log: List[tuple], name: str = "animation"):
        super().__init__(name)
        self.log = log
        self.shown: List[TrendState] = []
        self.cleared = 0

    def show(self, trend: TrendState) -> None:
        self.log.append(("animation", trend))
        self.shown.append(trend)

    def clear(self) -> None:
        self.cleared += 1


class RecordingObserver(EventObserver):
    def __init__(self, log: List[tuple], name: str = "observer"):
        super().__init__(name)
        self.log = log
        self.events: List[SyncEvent] = []

    def on_event(self, event: SyncEvent) -> None:
        self.log.append(("observer", event.tick))
        self.events.append(event)


class EngineHarness:
    """Engine wired to recording sinks."""

    def __init__(
        self,
        prices: List[float],
        epsilon: float = 0.5,
        tick_interval_ms: int = 100,
        overlap_policy: str = "truncate",
        tone_params: Optional[ToneParams] = None,
        window: int = 1
    ):
        self.log: List[tuple] = []
        self.series = make_series(prices)
        self.clock = PlaybackClock(len(self.series), tick_interval_ms, asset_id=self.series.asset_id)
        self.chart = RecordingChartSink(self.log)
        self.audio = RecordingAudioSink(self.log)
        self.animation = RecordingAnimationSink(self.log)
        self.observer = RecordingObserver(self.log)
        self.engine = SyncEngine(
            series=self.series,
            clock=self.clock,
            chart_sink=self.chart,
            audio_sink=self.audio,
            animation_sink=self.animation,
            tone_mapper=ToneMapper.for_series(self.series, tone_params),
            trend_classifier=TrendClassifier(epsilon, window),
            overlap_policy=overlap_policy,
            observers=[self.observer],
        )
        self.interval = tick_interval_ms

    def run_to_end(self) -> List[SyncEvent]:
        """Start the clock and step one interval per frame until finished."""
        self.clock.start()
        events = []
        dt = 0
        while not self.clock.is_finished:
            event = self.engine.update(dt)
            dt = self.interval
            if event is not None:
                events.append(event)
        return events


@pytest.fixture
def scenario_prices() -> List[float]:
    """Rise, bigger fall, then unchanged."""
    return [100.0, 105.0, 95.0, 95.0]


@pytest.fixture
def scenario_series(scenario_prices) -> PriceSeries:
    return make_series(scenario_prices)


@pytest.fixture
def month_series() -> PriceSeries:
    """Thirty daily samples with mixed moves."""
    prices = [2000.0 + 25.0 * ((i * 7) % 11) - 3.0 * i for i in range(30)]
    return make_series(prices, asset_id="ethereum")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def harness(scenario_prices) -> EngineHarness:
    return EngineHarness(scenario_prices)


@pytest.fixture
def market_chart_payload() -> Dict[str, Any]:
    """Hourly points over three UTC days, as returned by market_chart/range."""
    base_ms = int(START.timestamp() * 1000)
    hour_ms = 3600 * 1000
    prices = []
    for hour in range(72):
        prices.append([base_ms + hour * hour_ms, 100.0 + hour])
    return {"prices": prices, "market_caps": [], "total_volumes": []}


@pytest.fixture
def series_factory():
    """Build a daily PriceSeries from a list of prices."""
    return make_series


@pytest.fixture
def harness_factory():
    """Build an EngineHarness with custom prices and settings."""
    return EngineHarness
