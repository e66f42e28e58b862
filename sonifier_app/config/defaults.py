"""Default configuration parameters for price playback."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PlaybackParams:
    """Playback clock and dispatch parameters."""
    tick_interval_ms: int = 2000                     # One sample every N ms of running time
    overlap_policy: str = "truncate"                 # "truncate" or "queue"
    frame_rate_hz: int = 60                          # Frame loop rate for the headless runner


@dataclass(frozen=True)
class ToneParams:
    """Delta to tone mapping parameters."""
    base_frequency_hz: float = 440.0                 # Pitch of an unchanged price
    min_hz: float = 110.0                            # Audible range floor
    max_hz: float = 1760.0                           # Audible range ceiling
    pitch_span: float = 1.0                          # Frequency factor gained at a full-range move
    min_duration_ms: int = 250
    max_duration_ms: int = 2000
    min_amplitude: float = 0.05
    max_amplitude: float = 0.20
    zero_delta_mode: str = "neutral"                 # "neutral" or "silence"
    neutral_duration_ms: int = 250
    neutral_amplitude: float = 0.05


@dataclass(frozen=True)
class TrendParams:
    """Trend classification parameters."""
    epsilon: float = 0.01                            # |delta| below this is FLAT
    window: int = 1                                  # Samples spanned by the classified change


@dataclass(frozen=True)
class FetchParams:
    """Historical price fetch parameters."""
    base_url: str = "https://api.coingecko.com/api/v3"
    vs_currency: str = "usd"
    window_days: int = 30
    timeout_seconds: int = 10
    max_retries: int = 2
    retry_delay_seconds: float = 1.0
    user_agent: str = "Mozilla/5.0"


@dataclass(frozen=True)
class ChartParams:
    """Progressive chart parameters."""
    x_spacing: float = 2.0                           # Horizontal units per sample
    rise_color: str = "#2ebd59"
    fall_color: str = "#ff5858"
    include_zero: bool = True                        # Keep 0 on the price axis


@dataclass(frozen=True)
class AnimationParams:
    """Bull/bear sprite animation parameters."""
    asset_dir: str = "assets"
    bull_frames: int = 7
    bear_frames: int = 4
    start_scale: float = 0.8
    easing_speed: float = 8.0
    float_speed: float = 2.0
    float_amplitude: float = 10.0


@dataclass(frozen=True)
class AudioParams:
    """Tone synthesis parameters."""
    sample_rate: int = 44100
    fade_ms: int = 5                                 # Click-free ramp at tone edges


@dataclass(frozen=True)
class AssetInfo:
    """Selectable asset shown in the asset menu."""
    asset_id: str
    display_name: str
    ticker: str
    tagline: str = ""
    color: str = "#ffffff"


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    playback: PlaybackParams
    tone: ToneParams
    trend: TrendParams
    fetch: FetchParams
    chart: ChartParams
    animation: AnimationParams
    audio: AudioParams


DEFAULT_ASSETS: tuple[AssetInfo, ...] = (
    AssetInfo("ethereum", "Ethereum", "ETH", "Smart contracts pioneer", "#7289da"),
    AssetInfo("bitcoin", "Bitcoin", "BTC", "Digital gold & store of value", "#f7931a"),
    AssetInfo("ripple", "Ripple", "XRP", "Global payments solution", "#0099cc"),
)


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        playback=PlaybackParams(),
        tone=ToneParams(),
        trend=TrendParams(),
        fetch=FetchParams(),
        chart=ChartParams(),
        animation=AnimationParams(),
        audio=AudioParams(),
    )
