"""Progressive price chart sink."""

from dataclasses import dataclass
from typing import Callable, Optional

from ..config.defaults import ChartParams
from ..data.models import PriceSeries
from ..errors import SinkDeliveryError
from ..utils.time import format_day_label
from .base import ChartSink


@dataclass(frozen=True)
class ChartSegment:
    """Line between two consecutive drawn samples."""
    start: tuple[float, float]
    end: tuple[float, float]
    rising: bool                 # Close >= previous close
    color: str


@dataclass(frozen=True)
class ChartFrame:
    """Everything a renderer needs to draw the chart at one drawn index."""
    drawn_index: int
    points: tuple[tuple[float, float], ...]
    segments: tuple[ChartSegment, ...]
    x_range: tuple[float, float]
    y_range: tuple[float, float]
    labels: tuple[tuple[float, str], ...]


class ProgressiveChartSink(ChartSink):
    """
    Chart model that extends the drawn price path one sample at a time.

    Points are laid out ``x_spacing`` units apart; each segment is coloured
    by direction (rise or unchanged vs. fall). The axes cover the whole
    series from the first frame so the view does not rescale while drawing.
    An optional ``on_draw`` callback receives a ChartFrame whenever the
    drawn index actually grows.
    """

    def __init__(
        self,
        series: PriceSeries,
        params: Optional[ChartParams] = None,
        on_draw: Optional[Callable[[ChartFrame], None]] = None,
        name: str = "chart"
    ):
        super().__init__(name)
        self.series = series
        self.params = params or ChartParams()
        self.on_draw = on_draw
        self.drawn_index = -1
        self.redraw_count = 0
        self._points: list[tuple[float, float]] = []
        self._segments: list[ChartSegment] = []

    def draw_up_to(self, index: int) -> None:
        if index < 0 or index >= len(self.series):
            raise SinkDeliveryError(
                f"Cannot draw up to index {index} of a {len(self.series)} sample series",
                sink_name=self.name,
                tick=index,
            )

        if index <= self.drawn_index:
            return

        for i in range(self.drawn_index + 1, index + 1):
            point = (i * self.params.x_spacing, self.series.sample_at(i).price)
            if self._points:
                previous = self._points[-1]
                rising = previous[1] <= point[1]
                self._segments.append(ChartSegment(
                    start=previous,
                    end=point,
                    rising=rising,
                    color=self.params.rise_color if rising else self.params.fall_color,
                ))
            self._points.append(point)

        self.drawn_index = index
        self.redraw_count += 1

        if self.on_draw is not None:
            self.on_draw(self.frame())

    def frame(self) -> ChartFrame:
        """Snapshot of the current drawing."""
        spacing = self.params.x_spacing
        y_low = 0.0 if self.params.include_zero else self.series.min_price
        labels = tuple(
            (i * spacing, format_day_label(self.series.sample_at(i).ts))
            for i in range(self.drawn_index + 1)
        )
        return ChartFrame(
            drawn_index=self.drawn_index,
            points=tuple(self._points),
            segments=tuple(self._segments),
            x_range=(-spacing, len(self.series) * spacing),
            y_range=(y_low, self.series.max_price),
            labels=labels,
        )

    def clear(self) -> None:
        """Forget everything drawn (replay)."""
        self.drawn_index = -1
        self._points.clear()
        self._segments.clear()
