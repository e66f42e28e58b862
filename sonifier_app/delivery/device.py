"""Sound card output backed by sounddevice (PortAudio)."""

import time
from typing import Optional, Union

import numpy as np
import sounddevice


class SounddeviceOutput:
    """
    Non-blocking tone output on the default (or a chosen) output device.

    ``sounddevice.play`` returns immediately and replaces whatever the
    module-level stream was playing, which gives truncation for free.
    Activity is tracked with a monotonic deadline instead of completion
    callbacks.
    """

    def __init__(self, device: Optional[Union[int, str]] = None):
        self.device = device
        self._deadline = 0.0

    def start(self, samples: np.ndarray, sample_rate: int) -> None:
        sounddevice.play(samples, samplerate=sample_rate, device=self.device)
        self._deadline = time.monotonic() + len(samples) / sample_rate

    def stop(self) -> None:
        sounddevice.stop()
        self._deadline = 0.0

    def is_active(self) -> bool:
        return time.monotonic() < self._deadline


def list_output_devices() -> list[dict]:
    """Output-capable devices as reported by PortAudio."""
    return [
        dict(device, index=index)
        for index, device in enumerate(sounddevice.query_devices())
        if device.get("max_output_channels", 0) > 0
    ]
