import numpy as np
import pytest

from waveplot.channel import Channel
from waveplot.channel_set import ChannelSet
from waveplot.errors import InvalidIntervalError
from waveplot.row_window import RenderMode
from waveplot.transform import (
    PALETTE,
    darken,
    palette_color,
    render_overlay,
    render_single_row,
    rgb_to_hex,
)


def make_channel(name, samples, *, bias=0.0, scale=1.0, primary=True, secondary=False):
    return Channel(
        name=name,
        key=name.upper(),
        samples=np.asarray(samples, dtype=float),
        bias=bias,
        scale=scale,
        show_on_primary=primary,
        show_on_secondary=secondary,
    )


def ramp(rows, cols, start=0.0):
    return start + np.arange(rows * cols, dtype=float).reshape(rows, cols)


def test_single_row_applies_bias_and_scale():
    ch = make_channel("volts", [[744.0, 1000.0, 0.0]], bias=-744, scale=0.006105)
    result = render_single_row(ChannelSet([ch]), 0, 0.001)
    series = result.primary.series[0]
    assert series.values[0] == 0.0
    assert series.values[1] == pytest.approx(256 * 0.006105)
    assert series.values[2] == pytest.approx(-744 * 0.006105)


def test_single_row_time_vector():
    ch = make_channel("a", ramp(2, 5))
    result = render_single_row(ChannelSet([ch]), 1, 0.5)
    np.testing.assert_allclose(result.time, [0.0, 0.5, 1.0, 1.5, 2.0])
    np.testing.assert_array_equal(result.primary.series[0].values, [5, 6, 7, 8, 9])
    assert result.primary.title == "Row 1 (Chart 1)"
    assert result.secondary.title == "Row 1 (Chart 2)"
    assert result.primary.x_label == "Time (s)"


def test_views_follow_visibility_flags():
    channels = [
        make_channel("first", ramp(1, 3), primary=True, secondary=False),
        make_channel("second", ramp(1, 3), primary=False, secondary=True),
        make_channel("both", ramp(1, 3), primary=True, secondary=True),
        make_channel("neither", ramp(1, 3), primary=False, secondary=False),
    ]
    result = render_single_row(ChannelSet(channels), 0, 0.001)
    assert [s.name for s in result.primary.series] == ["first", "both"]
    assert [s.name for s in result.secondary.series] == ["second", "both"]
    assert [s.label for s in result.primary.series] == ["first", "both"]


def test_colors_follow_load_position():
    channels = [make_channel(f"c{i}", ramp(1, 2), secondary=True) for i in range(3)]
    result = render_single_row(ChannelSet(channels), 0, 0.001)
    assert [s.color for s in result.primary.series] == [PALETTE[0], PALETTE[1], PALETTE[2]]
    assert [s.color for s in result.secondary.series] == [PALETTE[0], PALETTE[1], PALETTE[2]]
    assert result.primary.series[0].hex_color == "#1f77b4"


def test_palette_is_distinct_and_cycles():
    assert len(set(PALETTE)) >= 16
    assert palette_color(0) == palette_color(len(PALETTE))
    assert rgb_to_hex(palette_color(1)) == "#ff7f0e"


@pytest.mark.parametrize("row", [-1, 2, 100])
def test_single_row_out_of_range_is_empty(row):
    result = render_single_row(ChannelSet([make_channel("a", ramp(2, 3))]), row, 0.001)
    assert result.is_empty
    assert result.time.size == 0


def test_invalid_interval_is_rejected():
    cs = ChannelSet([make_channel("a", ramp(2, 3))])
    with pytest.raises(InvalidIntervalError):
        render_single_row(cs, 0, 0.0)
    with pytest.raises(InvalidIntervalError):
        render_overlay(cs, 0, 3, float("nan"))


def test_darken():
    assert darken((200, 100, 50), 0.5) == (100, 50, 25)
    assert darken((200, 100, 50), 0.0) == (200, 100, 50)
    assert darken((200, 100, 50), 1.0) == (0, 0, 0)
    assert darken((200, 100, 50), 2.0) == (0, 0, 0)
    assert darken((200, 100, 50), -1.0) == (200, 100, 50)


@pytest.mark.parametrize("base_row", [0, 3, 9, 50])
def test_overlay_count_one_has_zero_fraction(base_row):
    cs = ChannelSet([make_channel("a", ramp(10, 4))])
    result = render_overlay(cs, base_row, 1, 0.001)
    assert len(result.primary.series) == 1
    series = result.primary.series[0]
    assert series.frac == 0.0
    assert series.color == PALETTE[0]
    assert series.row == min(base_row, 9)


def test_overlay_fractions_colors_and_labels():
    cs = ChannelSet([make_channel("a", ramp(10, 4))])
    result = render_overlay(cs, 2, 5, 0.001)
    series = result.primary.series
    assert result.mode is RenderMode.OVERLAY
    assert [s.row for s in series] == [2, 3, 4, 5, 6]
    assert [s.frac for s in series] == [0.0, 0.25, 0.5, 0.75, 1.0]
    assert [s.label for s in series] == ["a", None, None, None, None]
    assert series[0].color == PALETTE[0]
    assert series[-1].color == darken(PALETTE[0], 0.5)
    assert series[2].color == darken(PALETTE[0], 0.25)
    np.testing.assert_array_equal(series[1].values, ramp(10, 4)[3])
    assert result.primary.title == "Rows 2 overlay (5 max) (Chart 1)"


def test_overlay_stops_at_last_row_with_requested_denominator():
    cs = ChannelSet([make_channel("a", ramp(3, 2))])
    result = render_overlay(cs, 1, 5, 0.001)
    assert [(s.row, s.frac) for s in result.primary.series] == [(1, 0.0), (2, 0.25)]


def test_overlay_clamps_inputs():
    cs = ChannelSet([make_channel("a", ramp(30, 2))])
    result = render_overlay(cs, -4, 50, 0.001)
    assert len(result.primary.series) == 20
    assert result.primary.series[0].row == 0
    assert result.primary.title == "Rows 0 overlay (20 max) (Chart 1)"

    result = render_overlay(cs, 99, 0, 0.001)
    assert [s.row for s in result.primary.series] == [29]


def test_overlay_orders_series_by_offset_then_channel():
    cs = ChannelSet([make_channel("a", ramp(4, 2)), make_channel("b", ramp(4, 2))])
    result = render_overlay(cs, 0, 2, 0.001)
    assert [(s.name, s.offset) for s in result.primary.series] == [
        ("a", 0), ("b", 0), ("a", 1), ("b", 1)
    ]


def test_overlay_on_empty_set_is_empty():
    assert render_overlay(ChannelSet(), 0, 3, 0.001).is_empty


def test_shorter_channel_is_skipped_for_missing_rows():
    cs = ChannelSet([make_channel("long", ramp(4, 3)), make_channel("short", ramp(2, 3))])
    assert cs.shape_mismatch
    single = render_single_row(cs, 3, 0.001)
    assert [s.name for s in single.primary.series] == ["long"]

    overlay = render_overlay(cs, 1, 3, 0.001)
    assert [(s.name, s.row) for s in overlay.primary.series] == [
        ("long", 1), ("short", 1), ("long", 2), ("long", 3)
    ]


def test_column_mismatch_truncates_series():
    cs = ChannelSet([make_channel("wide", ramp(2, 4)), make_channel("narrow", ramp(2, 2))])
    result = render_single_row(cs, 0, 0.1)
    wide, narrow = result.primary.series
    assert wide.values.size == 4
    assert narrow.values.size == 2
    np.testing.assert_allclose(narrow.time, [0.0, 0.1])

    cs = ChannelSet([make_channel("narrow", ramp(2, 2)), make_channel("wide", ramp(2, 4))])
    result = render_single_row(cs, 0, 0.1)
    assert [s.values.size for s in result.primary.series] == [2, 2]


def test_series_time_is_read_only():
    cs = ChannelSet([make_channel("a", ramp(3, 4)), make_channel("b", ramp(3, 4))])
    for result in (render_single_row(cs, 0, 0.1), render_overlay(cs, 0, 2, 0.1)):
        assert not result.time.flags.writeable
        with pytest.raises(ValueError):
            result.primary.series[0].time[0] = 5.0
        np.testing.assert_allclose(result.primary.series[1].time, [0.0, 0.1, 0.2, 0.3])
