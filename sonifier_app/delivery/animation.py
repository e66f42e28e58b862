"""Bull/bear sprite animation sink."""

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..config.defaults import AnimationParams
from ..models.events import TrendState
from .base import AnimationSink


class SpriteSequencer:
    """Cycles through the bull and bear sprite sets independently."""

    def __init__(self, bull_frames: int, bear_frames: int):
        self.bull_frames = bull_frames
        self.bear_frames = bear_frames
        self._bull_index = 0
        self._bear_index = 0

    def next_index(self, trend: TrendState) -> Optional[int]:
        """Next 0-based sprite index for ``trend``; None for FLAT."""
        if trend == TrendState.BULL:
            index = self._bull_index
            self._bull_index = (self._bull_index + 1) % self.bull_frames
            return index
        if trend == TrendState.BEAR:
            index = self._bear_index
            self._bear_index = (self._bear_index + 1) % self.bear_frames
            return index
        return None

    def reset(self) -> None:
        self._bull_index = 0
        self._bear_index = 0


@dataclass(frozen=True)
class AnimationFrame:
    """Renderable state of the trend sprite."""
    trend: Optional[TrendState]
    sprite: Optional[str]        # Image path, None when nothing is shown
    scale: float
    opacity: float
    float_offset: float


class SpriteAnimationSink(AnimationSink):
    """
    Shows one sprite per trend change and eases it in.

    Each new BULL or BEAR state picks the next sprite of its set
    (``bull1.png`` .. ``bullN.png``) and restarts the ease-in from
    ``start_scale`` and zero opacity. FLAT hides the sprite. ``animate`` is
    called once per frame with the frame duration in seconds.
    """

    def __init__(
        self,
        params: Optional[AnimationParams] = None,
        on_change: Optional[Callable[[AnimationFrame], None]] = None,
        name: str = "animation"
    ):
        super().__init__(name)
        self.params = params or AnimationParams()
        self.on_change = on_change
        self.sequencer = SpriteSequencer(self.params.bull_frames, self.params.bear_frames)
        self.current: Optional[TrendState] = None
        self.sprite: Optional[str] = None
        self.change_count = 0
        self._scale = self.params.start_scale
        self._opacity = 0.0
        self._float_time = 0.0

    def show(self, trend: TrendState) -> None:
        if trend == self.current:
            return

        self.current = trend
        self.change_count += 1
        index = self.sequencer.next_index(trend)
        self.sprite = None if index is None else self.sprite_path(trend, index)
        self._scale = self.params.start_scale
        self._opacity = 0.0

        if self.on_change is not None:
            self.on_change(self.frame())

    def sprite_path(self, trend: TrendState, index: int) -> str:
        return str(Path(self.params.asset_dir) / f"{trend.value}{index + 1}.png")

    def animate(self, dt: float) -> AnimationFrame:
        """Step the easing and the floating motion by ``dt`` seconds."""
        step = min(dt * self.params.easing_speed, 1.0)
        self._scale += (1.0 - self._scale) * step
        self._opacity += (1.0 - self._opacity) * step
        self._float_time += dt * self.params.float_speed
        return self.frame()

    def frame(self) -> AnimationFrame:
        return AnimationFrame(
            trend=self.current,
            sprite=self.sprite,
            scale=self._scale,
            opacity=self._opacity if self.sprite else 0.0,
            float_offset=self.params.float_amplitude * math.sin(self._float_time),
        )

    def clear(self) -> None:
        self.current = None
        self.sprite = None
        self.sequencer.reset()
        self._scale = self.params.start_scale
        self._opacity = 0.0
        self._float_time = 0.0
