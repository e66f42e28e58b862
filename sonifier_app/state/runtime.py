"""
Runtime session management.

This module owns the single active playback session: asset selection,
fetching and validating its history, wiring the engine and sinks, and
tearing everything down again when the user returns to asset selection.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

import structlog

from ..config.defaults import AssetInfo, DefaultConfig, FetchParams
from ..config.loader import ConfigLoader
from ..config.validation import ConfigValidator
from ..data.models import PriceSeries
from ..delivery.animation import SpriteAnimationSink
from ..delivery.audio import SimulatedAudioSink
from ..delivery.base import AnimationSink, AudioSink, BaseSink, ChartSink, EventObserver
from ..delivery.chart import ProgressiveChartSink
from ..engine import SyncEngine
from ..errors import DataUnavailableError, StateTransitionError
from ..logging.config import get_state_logger, log_state_transition
from ..models.events import SyncEvent, TrendState
from .clock import PlaybackClock
from .models import ClockState

logger = structlog.get_logger(__name__)
state_logger = get_state_logger(__name__)


class PriceSource(Protocol):
    """Anything that can turn an asset id into a validated PriceSeries."""

    def fetch(self, asset_id: str, params: Optional[FetchParams] = None) -> PriceSeries: ...


@dataclass
class SinkSet:
    """The sinks one playback session delivers to."""
    chart: ChartSink
    audio: AudioSink
    animation: AnimationSink
    observers: list[EventObserver] = field(default_factory=list)

    def all(self) -> list[BaseSink]:
        return [self.chart, self.audio, self.animation, *self.observers]


SinkFactory = Callable[[PriceSeries, DefaultConfig], SinkSet]


def default_sink_factory(series: PriceSeries, config: DefaultConfig) -> SinkSet:
    """Headless sinks: in-memory chart and animation, simulated audio."""
    return SinkSet(
        chart=ProgressiveChartSink(series, config.chart),
        audio=SimulatedAudioSink(),
        animation=SpriteAnimationSink(config.animation),
    )


@dataclass
class PlaybackSession:
    """Everything that belongs to one selected asset."""
    asset_id: str
    series: PriceSeries
    config: DefaultConfig
    sinks: SinkSet
    engine: SyncEngine
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def clock(self) -> PlaybackClock:
        return self.engine.clock

    @property
    def current_trend(self) -> Optional[TrendState]:
        return self.engine.current_trend


class SessionManager:
    """
    Manages the lifecycle of the active playback session.

    At most one session exists at a time. Selecting an asset discards any
    previous session first; a failed fetch leaves no session behind and
    never starts a clock.
    """

    def __init__(
        self,
        price_source: PriceSource,
        config_loader: Optional[ConfigLoader] = None,
        sink_factory: SinkFactory = default_sink_factory
    ):
        self.logger = logger
        self.state_logger = state_logger
        self.price_source = price_source
        self.config_loader = config_loader or ConfigLoader.create()
        self.sink_factory = sink_factory
        self.session: Optional[PlaybackSession] = None

    def list_assets(self) -> list[AssetInfo]:
        """Assets offered on the selection screen."""
        return self.config_loader.list_assets()

    def resolve_config(
        self,
        asset_id: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """Merge, validate and build the configuration for ``asset_id``."""
        merged = self.config_loader.merge_config(asset_id, overrides)
        validation_errors = ConfigValidator.validate_config(merged)
        if validation_errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
            self.logger.error(
                "Session configuration validation failed",
                asset_id=asset_id,
                errors=error_msgs
            )
            raise ValueError(f"Invalid configuration for {asset_id}: {'; '.join(error_msgs)}")

        return self.config_loader.build_config(merged)

    def select_asset(
        self,
        asset_id: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> PlaybackSession:
        """
        Load ``asset_id`` and build a fresh session around it.

        The clock is left IDLE; call ``start`` to begin playback.

        Raises:
            DataUnavailableError: If the history could not be fetched or is
                too short to play
            ValueError: If the merged configuration is invalid
        """
        if self.session is not None:
            self.return_home()

        config = self.resolve_config(asset_id, overrides)

        try:
            series = self.price_source.fetch(asset_id, config.fetch)
        except DataUnavailableError as e:
            self.logger.warning(
                "Asset could not be loaded, staying on selection",
                asset_id=asset_id,
                error=str(e),
                error_type=type(e).__name__
            )
            raise

        sinks = self.sink_factory(series, config)
        engine = SyncEngine.create(
            series=series,
            chart_sink=sinks.chart,
            audio_sink=sinks.audio,
            animation_sink=sinks.animation,
            config=config,
            observers=sinks.observers,
        )
        self.session = PlaybackSession(
            asset_id=asset_id,
            series=series,
            config=config,
            sinks=sinks,
            engine=engine,
        )

        log_state_transition(
            self.state_logger,
            asset_id=asset_id,
            from_state="home",
            to_state="session",
            trigger="select_asset",
            context={"samples": len(series)}
        )
        return self.session

    def _require_session(self, action: str) -> PlaybackSession:
        if self.session is None:
            raise StateTransitionError(
                f"Cannot {action} without an active session",
                current_state="home",
                attempted_transition=action,
            )
        return self.session

    def start(self) -> None:
        """Begin playback of the selected asset."""
        self._require_session("start").clock.start()

    def toggle_pause(self) -> ClockState:
        """Pause or resume; returns the new clock state."""
        return self._require_session("toggle").clock.toggle()

    def replay(self) -> None:
        """Rewind the current asset to the first sample and play again."""
        session = self._require_session("replay")
        if session.engine.aborted:
            raise StateTransitionError(
                "Cannot replay an aborted session, select the asset again",
                current_state="aborted",
                attempted_transition="replay",
            )
        session.engine.reset()
        session.clock.start()
        self.logger.info("Replaying asset", asset_id=session.asset_id)

    def update(self, dt_ms: float) -> Optional[SyncEvent]:
        """Forward one frame to the engine; no-op when no session is active."""
        if self.session is None:
            return None
        return self.session.engine.update(dt_ms)

    def is_sounding(self) -> bool:
        """True while a tone is playing or queued tones are still waiting."""
        if self.session is None:
            return False
        engine = self.session.engine
        return engine.pending_tone_count > 0 or self.session.sinks.audio.is_playing()

    def return_home(self) -> None:
        """Stop playback, silence audio and discard the session."""
        session = self.session
        if session is None:
            return

        session.engine.stop()
        session.clock.reset()
        for sink in session.sinks.all():
            try:
                sink.close()
            except Exception as e:
                self.logger.warning(
                    "Sink failed to close",
                    sink_name=sink.name,
                    error=str(e),
                    error_type=type(e).__name__
                )

        self.session = None
        log_state_transition(
            self.state_logger,
            asset_id=session.asset_id,
            from_state="session",
            to_state="home",
            trigger="return_home",
            context=session.engine.get_runtime_stats()
        )

    def get_session_info(self) -> dict[str, Any]:
        """Summary of the active session for diagnostics."""
        if self.session is None:
            return {"active": False}

        session = self.session
        return {
            "active": True,
            "asset_id": session.asset_id,
            "samples": len(session.series),
            "created_at": session.created_at.isoformat(),
            "current_trend": session.current_trend.value if session.current_trend else None,
            **session.engine.get_runtime_stats(),
            "sinks": [sink.get_stats() for sink in session.sinks.all()],
        }
