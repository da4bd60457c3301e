"""Turn raw sample matrices into chart-ready series.

Every plotted value is ``(raw + bias) * scale``. Each channel keeps the same
palette color across renders, chosen by its load position. Overlay renders
draw consecutive rows of a channel, darkening the color with distance from
the base row.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from waveplot.channel import Channel
from waveplot.channel_set import ChannelSet
from waveplot.row_window import RenderMode, clamp_overlay_count, clamp_row, overlay_rows
from waveplot.timebase import Timebase

__all__ = [
    "PALETTE",
    "ChartView",
    "RenderResult",
    "Series",
    "darken",
    "palette_color",
    "render_overlay",
    "render_single_row",
    "rgb_to_hex",
]

LOG = logging.getLogger(__name__)

Color = tuple[int, int, int]

X_LABEL = "Time (s)"
MAX_DARKEN = 0.5


def _hex_to_rgb(value: str) -> Color:
    value = value.lstrip("#")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def rgb_to_hex(color: Color) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


# Category10 followed by lighter companions of its first six colors.
PALETTE: tuple[Color, ...] = tuple(
    _hex_to_rgb(c)
    for c in (
        "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
        "#8c564b", "#e377c2", "#7f7f7f", "#bcbd22", "#17becf",
        "#aec7e8", "#ffbb78", "#98df8a", "#ff9896", "#c5b0d5",
        "#c49c94",
    )
)


def palette_color(index: int) -> Color:
    return PALETTE[index % len(PALETTE)]


def darken(color: Color, fraction: float) -> Color:
    """Scale each channel by ``1 - fraction``; 0 keeps the color, 1 gives black."""
    fraction = min(1.0, max(0.0, float(fraction)))
    return tuple(
        min(255, max(0, int(round(c * (1.0 - fraction))))) for c in color
    )  # type: ignore[return-value]


@dataclass(frozen=True)
class Series:
    channel_index: int
    name: str
    row: int
    offset: int
    frac: float
    time: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    color: Color
    label: Optional[str]

    @property
    def hex_color(self) -> str:
        return rgb_to_hex(self.color)


@dataclass
class ChartView:
    title: str = ""
    x_label: str = X_LABEL
    series: list[Series] = field(default_factory=list)


@dataclass
class RenderResult:
    """Series for the primary (chart 1) and secondary (chart 2) views."""

    mode: RenderMode
    time: np.ndarray
    primary: ChartView
    secondary: ChartView

    @property
    def is_empty(self) -> bool:
        return not self.primary.series and not self.secondary.series

    @classmethod
    def empty(cls, mode: RenderMode) -> "RenderResult":
        return cls(mode, np.zeros(0, dtype=float), ChartView(), ChartView())


def _channel_series(
    channel: Channel,
    index: int,
    row: int,
    time: np.ndarray,
    *,
    offset: int,
    frac: float,
    sample_count: int,
) -> Series:
    n = min(channel.sample_count, sample_count)
    return Series(
        channel_index=index,
        name=channel.name,
        row=row,
        offset=offset,
        frac=frac,
        time=time[:n],
        values=channel.calibrated_row(row, n),
        color=darken(palette_color(index), MAX_DARKEN * frac),
        label=channel.name if offset == 0 else None,
    )


def _add_to_views(result: RenderResult, channel: Channel, series: Series) -> None:
    if channel.show_on_primary:
        result.primary.series.append(series)
    if channel.show_on_secondary:
        result.secondary.series.append(series)


def render_single_row(
    channel_set: ChannelSet,
    row_index: int,
    sample_interval_s: float,
) -> RenderResult:
    """Plot one row of every visible channel.

    Returns an empty result when ``row_index`` is outside ``[0, row_count)``.
    Channels with fewer rows than the set are skipped for rows they lack.
    """
    timebase = Timebase(sample_interval_s)
    if not 0 <= row_index < channel_set.row_count:
        LOG.warning("Row %d out of range [0, %d)", row_index, channel_set.row_count)
        return RenderResult.empty(RenderMode.SINGLE)

    time = timebase.time_vector(channel_set.sample_count)
    # Series share slices of this array.
    time.flags.writeable = False
    result = RenderResult(
        RenderMode.SINGLE,
        time,
        ChartView(title=f"Row {row_index} (Chart 1)"),
        ChartView(title=f"Row {row_index} (Chart 2)"),
    )
    for index, channel in enumerate(channel_set):
        if not channel_set.has_row(channel, row_index):
            continue
        series = _channel_series(
            channel,
            index,
            row_index,
            time,
            offset=0,
            frac=0.0,
            sample_count=channel_set.sample_count,
        )
        _add_to_views(result, channel, series)
    return result


def render_overlay(
    channel_set: ChannelSet,
    base_row: int,
    overlay_count: int,
    sample_interval_s: float,
) -> RenderResult:
    """Superimpose up to ``overlay_count`` consecutive rows per channel.

    ``frac`` runs from 0 at the base row towards 1 at the last requested
    offset and always divides by the requested count, so a render that runs
    out of rows stops short of 1.
    """
    timebase = Timebase(sample_interval_s)
    count = clamp_overlay_count(overlay_count)
    if channel_set.row_count <= 0:
        return RenderResult.empty(RenderMode.OVERLAY)
    base = clamp_row(base_row, channel_set.row_count)

    time = timebase.time_vector(channel_set.sample_count)
    # Series share slices of this array.
    time.flags.writeable = False
    result = RenderResult(
        RenderMode.OVERLAY,
        time,
        ChartView(title=f"Rows {base} overlay ({count} max) (Chart 1)"),
        ChartView(title=f"Rows {base} overlay ({count} max) (Chart 2)"),
    )
    for offset, row in overlay_rows(base, count, channel_set.row_count):
        frac = 0.0 if count == 1 else offset / (count - 1)
        for index, channel in enumerate(channel_set):
            if not channel_set.has_row(channel, row):
                continue
            series = _channel_series(
                channel,
                index,
                row,
                time,
                offset=offset,
                frac=frac,
                sample_count=channel_set.sample_count,
            )
            _add_to_views(result, channel, series)
    return result
