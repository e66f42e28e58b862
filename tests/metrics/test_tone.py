"""Tests for delta to tone mapping."""

import pytest

from sonifier_app.config.defaults import ToneParams
from sonifier_app.metrics.tone import (
    ToneMapper,
    clamp,
    map_delta,
    neutral_tone,
    normalized_magnitude,
)


@pytest.fixture
def params() -> ToneParams:
    return ToneParams()


class TestHelpers:
    """Test suite for clamp and normalization."""

    def test_clamp(self):
        assert clamp(5, 0, 10) == 5
        assert clamp(-1, 0, 10) == 0
        assert clamp(11, 0, 10) == 10

    def test_normalized_magnitude(self):
        """Test normalization by the observed range."""
        assert normalized_magnitude(5.0, 10.0) == 0.5
        assert normalized_magnitude(-5.0, 10.0) == 0.5
        assert normalized_magnitude(30.0, 10.0) == 1.0

    def test_zero_range_does_not_divide(self):
        """Test that a constant series normalizes every move to zero."""
        assert normalized_magnitude(3.0, 0.0) == 0.0


class TestMapDelta:
    """Test suite for map_delta."""

    def test_rise_lowers_pitch(self, params):
        """Test that a price increase plays below the base frequency."""
        tone = map_delta(5.0, 10.0, params)
        assert tone.frequency_hz < params.base_frequency_hz
        assert tone.frequency_hz == pytest.approx(440.0 / 1.5)

    def test_fall_raises_pitch(self, params):
        """Test that a price decrease plays above the base frequency."""
        tone = map_delta(-5.0, 10.0, params)
        assert tone.frequency_hz > params.base_frequency_hz
        assert tone.frequency_hz == pytest.approx(440.0 * 1.5)

    def test_bigger_fall_is_higher(self, params):
        """Test pitch monotonicity for falls."""
        small = map_delta(-2.0, 10.0, params)
        big = map_delta(-8.0, 10.0, params)
        assert big.frequency_hz > small.frequency_hz

    def test_bigger_rise_is_lower(self, params):
        """Test pitch monotonicity for rises."""
        small = map_delta(2.0, 10.0, params)
        big = map_delta(8.0, 10.0, params)
        assert big.frequency_hz < small.frequency_hz

    def test_magnitude_scales_duration_and_amplitude(self, params):
        """Test that larger moves play longer and louder."""
        small = map_delta(1.0, 10.0, params)
        big = map_delta(-10.0, 10.0, params)

        assert big.duration_ms > small.duration_ms
        assert big.amplitude > small.amplitude
        assert big.duration_ms == params.max_duration_ms
        assert big.amplitude == pytest.approx(params.max_amplitude)

    def test_frequency_clamped(self):
        """Test that extreme pitch factors stay within the audible range."""
        wide = ToneParams(pitch_span=10.0, min_hz=200.0, max_hz=1000.0)

        assert map_delta(-10.0, 10.0, wide).frequency_hz == 1000.0
        assert map_delta(10.0, 10.0, wide).frequency_hz == 200.0

    def test_amplitude_clamped(self):
        """Test that amplitude never leaves [0, 1]."""
        tone = map_delta(-10.0, 10.0, ToneParams(max_amplitude=1.0))
        assert 0.0 <= tone.amplitude <= 1.0

    def test_zero_delta_is_neutral(self, params):
        """Test that an unchanged price gives the neutral tone."""
        tone = map_delta(0.0, 10.0, params)

        assert tone == neutral_tone(params)
        assert tone.frequency_hz == params.base_frequency_hz
        assert tone.duration_ms == params.neutral_duration_ms
        assert tone.amplitude == params.neutral_amplitude

    def test_zero_delta_silence_mode(self):
        """Test that silence mode keeps one tone per tick but mutes it."""
        tone = map_delta(0.0, 10.0, ToneParams(zero_delta_mode="silence"))

        assert tone.is_silent
        assert tone.duration_ms > 0

    def test_zero_range_gives_minimum_tone(self, params):
        """Test a non-zero delta in a constant-range series."""
        tone = map_delta(1.0, 0.0, params)

        assert tone.frequency_hz == params.base_frequency_hz
        assert tone.duration_ms == params.min_duration_ms
        assert tone.amplitude == pytest.approx(params.min_amplitude)


class TestToneMapper:
    """Test suite for the series-bound mapper."""

    def test_for_series_uses_price_range(self, scenario_series):
        """Test that the mapper normalizes by the series' observed range."""
        mapper = ToneMapper.for_series(scenario_series)

        assert mapper.price_range == 10.0
        assert mapper.map_delta(-10.0).duration_ms == mapper.params.max_duration_ms

    def test_neutral(self):
        mapper = ToneMapper(10.0)
        assert mapper.neutral() == neutral_tone(ToneParams())
