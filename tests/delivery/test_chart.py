"""Tests for the progressive chart sink."""

import pytest

from sonifier_app.config.defaults import ChartParams
from sonifier_app.delivery.chart import ProgressiveChartSink
from sonifier_app.errors import SinkDeliveryError


@pytest.fixture
def chart(scenario_series) -> ProgressiveChartSink:
    return ProgressiveChartSink(scenario_series)


class TestProgressiveChartSink:
    """Test suite for ProgressiveChartSink."""

    def test_initially_empty(self, chart):
        frame = chart.frame()

        assert chart.drawn_index == -1
        assert frame.points == ()
        assert frame.segments == ()

    def test_draw_extends_path(self, chart):
        chart.draw_up_to(0)
        chart.draw_up_to(1)

        frame = chart.frame()
        assert frame.drawn_index == 1
        assert frame.points == ((0.0, 100.0), (2.0, 105.0))
        assert len(frame.segments) == 1

    def test_draw_is_idempotent(self, chart):
        """Test that repeated and lower indices change nothing."""
        chart.draw_up_to(2)
        before = chart.frame()

        chart.draw_up_to(2)
        chart.draw_up_to(1)

        assert chart.frame() == before
        assert chart.redraw_count == 1

    def test_jump_fills_skipped_points(self, chart):
        """Test that drawing past skipped ticks still draws every sample."""
        chart.draw_up_to(3)

        assert len(chart.frame().points) == 4
        assert len(chart.frame().segments) == 3

    def test_segment_colours(self, chart):
        """Test rise/unchanged versus fall colouring."""
        chart.draw_up_to(3)
        params = ChartParams()

        colours = [s.color for s in chart.frame().segments]
        rising = [s.rising for s in chart.frame().segments]

        assert rising == [True, False, True]
        assert colours == [params.rise_color, params.fall_color, params.rise_color]

    def test_axes_cover_whole_series(self, chart):
        """Test that the view does not rescale while drawing."""
        chart.draw_up_to(0)
        frame = chart.frame()

        assert frame.x_range == (-2.0, 8.0)
        assert frame.y_range == (0.0, 105.0)

    def test_y_axis_without_zero(self, scenario_series):
        chart = ProgressiveChartSink(scenario_series, ChartParams(include_zero=False))
        assert chart.frame().y_range == (95.0, 105.0)

    def test_day_labels(self, chart):
        chart.draw_up_to(1)
        assert chart.frame().labels == ((0.0, "01/03"), (2.0, "02/03"))

    def test_out_of_range_index(self, chart):
        for index in (-1, 4):
            with pytest.raises(SinkDeliveryError) as exc_info:
                chart.draw_up_to(index)
            assert exc_info.value.sink_name == "chart"

    def test_on_draw_callback(self, scenario_series):
        frames = []
        chart = ProgressiveChartSink(scenario_series, on_draw=frames.append)

        chart.draw_up_to(1)
        chart.draw_up_to(1)

        assert len(frames) == 1
        assert frames[0].drawn_index == 1

    def test_clear(self, chart):
        chart.draw_up_to(3)
        chart.clear()

        assert chart.drawn_index == -1
        assert chart.frame().points == ()
        chart.draw_up_to(0)
        assert chart.frame().points == ((0.0, 100.0),)
