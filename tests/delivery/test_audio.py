"""Tests for tone synthesis and audio sinks."""

import threading
import time
from dataclasses import replace

import numpy as np
import pytest

from sonifier_app.config.defaults import AudioParams, get_default_config
from sonifier_app.delivery.animation import SpriteAnimationSink
from sonifier_app.delivery.audio import (
    SimulatedAudioSink,
    ThreadedAudioSink,
    ToneChannel,
    ToneSynthesizer,
)
from sonifier_app.delivery.chart import ProgressiveChartSink
from sonifier_app.engine import SyncEngine
from sonifier_app.errors import SinkDeliveryError
from sonifier_app.models.events import ToneSpec

TONE = ToneSpec(frequency_hz=440.0, duration_ms=100, amplitude=0.2)
OTHER = ToneSpec(frequency_hz=880.0, duration_ms=100, amplitude=0.2)


class FakeOutput:
    """Records device calls; signals each start."""

    def __init__(self):
        self.started = []
        self.stop_count = 0
        self.active = False
        self.start_event = threading.Event()

    def start(self, samples, sample_rate):
        self.started.append((samples, sample_rate))
        self.active = True
        self.start_event.set()

    def stop(self):
        self.stop_count += 1
        self.active = False

    def is_active(self):
        return self.active


class BlockingSynthesizer(ToneSynthesizer):
    """Synthesizer that parks the worker inside render until released."""

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def render(self, tone):
        self.entered.set()
        self.release.wait(timeout=2.0)
        return super().render(tone)


class TestToneSynthesizer:
    """Test suite for ToneSynthesizer."""

    def test_sample_count(self):
        synth = ToneSynthesizer(AudioParams(sample_rate=8000))
        assert synth.sample_count(TONE) == 800

    def test_render_shape_and_range(self):
        samples = ToneSynthesizer().render(TONE)

        assert samples.dtype == np.float32
        assert samples.shape == (4410,)
        assert np.max(np.abs(samples)) <= TONE.amplitude + 1e-6
        assert np.max(np.abs(samples)) > 0.9 * TONE.amplitude

    def test_render_fades_edges(self):
        """Test that tones start and end at zero to avoid clicks."""
        samples = ToneSynthesizer().render(TONE)

        assert samples[0] == 0.0
        assert abs(samples[-1]) < 0.01

    def test_silent_tone_renders_zeros(self):
        silent = ToneSpec(frequency_hz=440.0, duration_ms=50, amplitude=0.0)
        samples = ToneSynthesizer().render(silent)

        assert not samples.any()


class TestToneChannel:
    """Test suite for the capacity-1 channel."""

    def test_offer_and_take(self):
        channel = ToneChannel()
        channel.offer(TONE)

        assert channel.has_pending()
        assert channel.take(timeout=0) == TONE
        assert not channel.has_pending()

    def test_newer_offer_supersedes(self):
        """Test that an unconsumed request is replaced, not queued."""
        channel = ToneChannel()
        channel.offer(TONE)
        channel.offer(OTHER)

        assert channel.take(timeout=0) == OTHER
        assert channel.take(timeout=0) is None
        assert channel.superseded_count == 1

    def test_take_times_out(self):
        assert ToneChannel().take(timeout=0.01) is None

    def test_clear(self):
        channel = ToneChannel()
        channel.offer(TONE)
        channel.clear()
        assert channel.take(timeout=0) is None

    def test_taken_item_stays_current_until_done(self):
        channel = ToneChannel()
        channel.offer(TONE)
        channel.take(timeout=0)

        assert not channel.has_pending()
        assert channel.current() == TONE
        channel.done()
        assert channel.current() is None

    def test_closed_channel_rejects_offers(self):
        channel = ToneChannel()
        channel.close()

        assert channel.closed
        with pytest.raises(SinkDeliveryError):
            channel.offer(TONE)


class TestThreadedAudioSink:
    """Test suite for ThreadedAudioSink."""

    def test_play_reaches_output(self):
        output = FakeOutput()
        sink = ThreadedAudioSink(output, poll_interval=0.01)
        try:
            sink.play(TONE)

            assert output.start_event.wait(timeout=2.0)
            samples, rate = output.started[0]
            assert rate == 44100
            assert len(samples) == 4410
            assert sink.is_playing()
        finally:
            sink.close()

    def test_stop_silences_output(self):
        output = FakeOutput()
        sink = ThreadedAudioSink(output, poll_interval=0.01)
        try:
            sink.play(TONE)
            assert output.start_event.wait(timeout=2.0)

            sink.stop()

            assert output.stop_count >= 1
            assert not sink.is_playing()
        finally:
            sink.close()

    def test_stopped_tone_never_starts_late(self):
        """Test that a tone being rendered during stop() is discarded."""
        output = FakeOutput()
        synth = BlockingSynthesizer()
        sink = ThreadedAudioSink(output, synthesizer=synth, poll_interval=0.01)
        try:
            sink.play(TONE)
            assert synth.entered.wait(timeout=2.0)

            sink.stop()
            synth.release.set()

            assert not output.start_event.wait(timeout=0.2)
            assert output.started == []
        finally:
            synth.release.set()
            sink.close()

    def test_tone_being_rendered_counts_as_playing(self):
        """Test that a taken tone is reported as playing before output starts."""
        output = FakeOutput()
        synth = BlockingSynthesizer()
        sink = ThreadedAudioSink(output, synthesizer=synth, poll_interval=0.01)
        try:
            sink.play(TONE)
            assert synth.entered.wait(timeout=2.0)

            assert not sink.channel.has_pending()
            assert not output.is_active()
            assert sink.is_playing()

            synth.release.set()
            assert output.start_event.wait(timeout=2.0)
            assert sink.is_playing()
        finally:
            synth.release.set()
            sink.close()

    def test_stop_during_render_reports_silence(self):
        output = FakeOutput()
        synth = BlockingSynthesizer()
        sink = ThreadedAudioSink(output, synthesizer=synth, poll_interval=0.01)
        try:
            sink.play(TONE)
            assert synth.entered.wait(timeout=2.0)

            sink.stop()

            assert not sink.is_playing()
        finally:
            synth.release.set()
            sink.close()

    def test_queue_policy_holds_tone_while_previous_renders(self, month_series):
        """Test that queue mode does not hand a busy worker a second tone."""
        output = FakeOutput()
        synth = BlockingSynthesizer()
        sink = ThreadedAudioSink(output, synthesizer=synth, poll_interval=0.01)
        config = get_default_config()
        config = replace(
            config,
            playback=replace(config.playback, overlap_policy="queue", tick_interval_ms=100),
        )
        engine = SyncEngine.create(
            month_series,
            ProgressiveChartSink(month_series, config.chart),
            sink,
            SpriteAnimationSink(config.animation),
            config,
        )
        try:
            engine.clock.start()
            engine.update(0)
            assert synth.entered.wait(timeout=2.0)

            engine.update(100)

            assert engine.pending_tone_count == 1
            assert sink.channel.superseded_count == 0
        finally:
            synth.release.set()
            sink.close()

    def test_play_after_close_fails(self):
        sink = ThreadedAudioSink(FakeOutput(), poll_interval=0.01)
        sink.close()

        with pytest.raises(SinkDeliveryError):
            sink.play(TONE)

    def test_output_failure_is_logged_not_raised(self):
        """Test that a device error in the worker does not kill it."""
        output = FakeOutput()
        calls = []

        def failing_start(samples, sample_rate):
            calls.append(sample_rate)
            if len(calls) == 1:
                raise OSError("device unavailable")
            FakeOutput.start(output, samples, sample_rate)

        output.start = failing_start
        sink = ThreadedAudioSink(output, poll_interval=0.01)
        try:
            sink.play(TONE)
            # Second request is served by the same worker
            for _ in range(200):
                if calls:
                    break
                time.sleep(0.01)
            sink.play(OTHER)

            assert output.start_event.wait(timeout=2.0)
            assert len(calls) == 2
        finally:
            sink.close()


class TestSimulatedAudioSink:
    """Test suite for SimulatedAudioSink."""

    def test_plays_for_tone_duration(self, fake_clock):
        sink = SimulatedAudioSink(clock=fake_clock)
        sink.play(TONE)

        assert sink.is_playing()
        fake_clock.advance(0.099)
        assert sink.is_playing()
        fake_clock.advance(0.002)
        assert not sink.is_playing()

    def test_stop_is_immediate(self, fake_clock):
        sink = SimulatedAudioSink(clock=fake_clock)
        sink.play(TONE)
        sink.stop()

        assert not sink.is_playing()
        assert sink.current is None
        assert sink.stop_count == 1

    def test_records_requests(self, fake_clock):
        sink = SimulatedAudioSink(clock=fake_clock)
        sink.play(TONE)
        sink.play(OTHER)

        assert sink.requests == [TONE, OTHER]
        assert sink.current == OTHER

    def test_close_stops(self, fake_clock):
        sink = SimulatedAudioSink(clock=fake_clock)
        sink.play(TONE)
        sink.close()
        assert not sink.is_playing()
