"""Price delta to tone mapping"""

from typing import Optional

from ..config.defaults import ToneParams
from ..data.models import PriceSeries
from ..models.events import ToneSpec


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into [lower, upper]"""
    return max(lower, min(upper, value))


def normalized_magnitude(delta: float, price_range: float) -> float:
    """
    Size of a move relative to the observed price range, capped at 1.0

    A constant series (zero range) has no meaningful scale, so every move
    in it normalizes to 0.0 instead of dividing by zero.
    """
    if price_range <= 0:
        return 0.0
    return min(abs(delta) / price_range, 1.0)


def neutral_tone(params: ToneParams) -> ToneSpec:
    """
    Tone played for an unchanged price and for the first tick

    In "silence" mode the tone keeps its pitch and length but has zero
    amplitude, so the audio sink still receives exactly one request per tick.
    """
    amplitude = 0.0 if params.zero_delta_mode == "silence" else params.neutral_amplitude
    return ToneSpec(
        frequency_hz=clamp(params.base_frequency_hz, params.min_hz, params.max_hz),
        duration_ms=params.neutral_duration_ms,
        amplitude=clamp(amplitude, 0.0, 1.0),
    )


def map_delta(delta: float, price_range: float, params: ToneParams) -> ToneSpec:
    """
    Map a price delta to a tone

    Pitch is inverted on purpose: a price rise lowers the pitch below the
    base frequency and a fall raises it. Larger moves (relative to the
    series range) bend the pitch further and play longer and louder.

    Args:
        delta: Price change from the previous sample
        price_range: Observed max - min of the series
        params: Tone mapping parameters

    Returns:
        ToneSpec with frequency in [min_hz, max_hz] and amplitude in [0, 1]
    """
    if delta == 0:
        return neutral_tone(params)

    norm = normalized_magnitude(delta, price_range)
    factor = 1.0 + params.pitch_span * norm

    if delta > 0:
        frequency = params.base_frequency_hz / factor
    else:
        frequency = params.base_frequency_hz * factor

    duration = params.min_duration_ms + (params.max_duration_ms - params.min_duration_ms) * norm
    amplitude = params.min_amplitude + (params.max_amplitude - params.min_amplitude) * norm

    return ToneSpec(
        frequency_hz=clamp(frequency, params.min_hz, params.max_hz),
        duration_ms=max(1, int(round(duration))),
        amplitude=clamp(amplitude, 0.0, 1.0),
    )


class ToneMapper:
    """Delta to tone mapper bound to one series' observed price range"""

    def __init__(self, price_range: float, params: Optional[ToneParams] = None):
        self.price_range = price_range
        self.params = params or ToneParams()

    @classmethod
    def for_series(cls, series: PriceSeries, params: Optional[ToneParams] = None) -> "ToneMapper":
        return cls(series.price_range, params)

    def map_delta(self, delta: float) -> ToneSpec:
        return map_delta(delta, self.price_range, self.params)

    def neutral(self) -> ToneSpec:
        return neutral_tone(self.params)
