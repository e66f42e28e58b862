"""
Tone synthesis and audio sinks.

The engine only ever talks to an AudioSink through ``play``, ``stop`` and
``is_playing``. The threaded sink hands tones to a real-time worker through
a single-slot channel: a newer request supersedes an unconsumed older one,
so the worker only ever sees the currently requested tone.
"""

import threading
import time
from typing import Callable, Optional, Protocol

import numpy as np
import structlog

from ..config.defaults import AudioParams
from ..errors import SinkDeliveryError
from ..models.events import ToneSpec
from .base import AudioSink

logger = structlog.get_logger(__name__)


class ToneSynthesizer:
    """Renders a ToneSpec into mono float32 samples."""

    def __init__(self, params: Optional[AudioParams] = None):
        self.params = params or AudioParams()

    @property
    def sample_rate(self) -> int:
        return self.params.sample_rate

    def sample_count(self, tone: ToneSpec) -> int:
        return max(1, int(self.params.sample_rate * tone.duration_ms / 1000))

    def render(self, tone: ToneSpec) -> np.ndarray:
        """
        Render a sine wave with short linear fades at both ends.

        Args:
            tone: Tone to render

        Returns:
            1-D float32 array in [-amplitude, amplitude]
        """
        n = self.sample_count(tone)
        if tone.is_silent:
            return np.zeros(n, dtype=np.float32)

        t = np.arange(n, dtype=np.float64) / self.params.sample_rate
        wave = tone.amplitude * np.sin(2.0 * np.pi * tone.frequency_hz * t)

        fade = min(int(self.params.sample_rate * self.params.fade_ms / 1000), n // 2)
        if fade > 0:
            ramp = np.linspace(0.0, 1.0, fade, endpoint=False)
            wave[:fade] *= ramp
            wave[n - fade:] *= ramp[::-1]

        return wave.astype(np.float32)


class ToneChannel:
    """
    Single-producer/single-consumer channel with capacity 1.

    ``offer`` replaces any item the consumer has not taken yet; older
    requests are superseded, never queued. A taken item stays in flight
    until the consumer calls ``done``.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._item = None
        self._in_flight = None
        self._closed = False
        self.superseded_count = 0

    def offer(self, item) -> None:
        with self._cond:
            if self._closed:
                raise SinkDeliveryError("Tone channel is closed", sink_name="audio")
            if self._item is not None:
                self.superseded_count += 1
            self._item = item
            self._cond.notify()

    def take(self, timeout: Optional[float] = None):
        """Wait for the pending item; returns None on timeout or when closed."""
        with self._cond:
            if self._item is None and not self._closed:
                self._cond.wait(timeout)
            item, self._item = self._item, None
            if item is not None:
                self._in_flight = item
            return item

    def done(self) -> None:
        """Mark the last taken item as handled."""
        with self._cond:
            self._in_flight = None

    def current(self):
        """The pending item, else the one in flight, else None."""
        with self._cond:
            return self._item if self._item is not None else self._in_flight

    def has_pending(self) -> bool:
        with self._cond:
            return self._item is not None

    def clear(self) -> None:
        with self._cond:
            self._item = None

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._item = None
            self._in_flight = None
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed


class AudioOutput(Protocol):
    """Device seam used by ThreadedAudioSink."""

    def start(self, samples: np.ndarray, sample_rate: int) -> None: ...

    def stop(self) -> None: ...

    def is_active(self) -> bool: ...


class ThreadedAudioSink(AudioSink):
    """
    Audio sink that plays tones on a background worker thread.

    ``play`` never blocks: it drops the tone into the capacity-1 channel and
    returns. ``stop`` bumps a generation counter under the same lock the
    worker holds while starting output, so a tone taken before a stop can
    never start sounding after it.
    """

    def __init__(
        self,
        output: AudioOutput,
        synthesizer: Optional[ToneSynthesizer] = None,
        name: str = "audio",
        poll_interval: float = 0.05
    ):
        super().__init__(name)
        self.output = output
        self.synthesizer = synthesizer or ToneSynthesizer()
        self.channel = ToneChannel()
        self.poll_interval = poll_interval
        self._lock = threading.Lock()
        self._generation = 0
        self._worker: Optional[threading.Thread] = None

    def play(self, tone: ToneSpec) -> None:
        if self.channel.closed:
            raise SinkDeliveryError("Audio sink is closed", sink_name=self.name)
        self._ensure_worker()
        with self._lock:
            generation = self._generation
        self.channel.offer((tone, generation))

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            self.channel.clear()
            self.output.stop()

    def is_playing(self) -> bool:
        # A tone taken by the worker but not yet started still counts
        with self._lock:
            item = self.channel.current()
            if item is not None and item[1] == self._generation:
                return True
            return self.output.is_active()

    def close(self) -> None:
        self.channel.close()
        self.stop()
        if self._worker is not None:
            self._worker.join(timeout=1.0)
            self._worker = None

    def _ensure_worker(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(
                target=self._run, name=f"{self.name}-worker", daemon=True
            )
            self._worker.start()

    def _run(self) -> None:
        while not self.channel.closed:
            item = self.channel.take(timeout=self.poll_interval)
            if item is None:
                continue
            tone, generation = item
            try:
                samples = self.synthesizer.render(tone)
            except Exception as e:
                self.channel.done()
                self.logger.warning(
                    "Tone could not be rendered",
                    sink_name=self.name,
                    frequency_hz=tone.frequency_hz,
                    error=str(e),
                    error_type=type(e).__name__
                )
                continue

            with self._lock:
                try:
                    if generation == self._generation:
                        self._start_output(tone, samples)
                finally:
                    self.channel.done()

    def _start_output(self, tone: ToneSpec, samples: np.ndarray) -> None:
        try:
            self.output.start(samples, self.synthesizer.sample_rate)
        except Exception as e:
            self.logger.warning(
                "Audio output failed to start tone",
                sink_name=self.name,
                frequency_hz=tone.frequency_hz,
                error=str(e),
                error_type=type(e).__name__
            )


class SimulatedAudioSink(AudioSink):
    """
    Deviceless audio sink that tracks tone timing against a clock.

    Used for headless playback and tests: a tone counts as playing until its
    duration has elapsed on ``clock`` (seconds) or it is stopped.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, name: str = "audio"):
        super().__init__(name)
        self._clock = clock
        self._playing_until = 0.0
        self.current: Optional[ToneSpec] = None
        self.requests: list[ToneSpec] = []
        self.stop_count = 0

    def play(self, tone: ToneSpec) -> None:
        self.current = tone
        self.requests.append(tone)
        self._playing_until = self._clock() + tone.duration_ms / 1000.0

    def stop(self) -> None:
        self.stop_count += 1
        self.current = None
        self._playing_until = 0.0

    def is_playing(self) -> bool:
        return self.current is not None and self._clock() < self._playing_until
