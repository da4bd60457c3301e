"""Entry points used by the viewer: load, render, save.

The module-level functions are stateless. :class:`WaveformSession` keeps the
current config store, channel set and last valid sample interval for a GUI
and replaces them wholesale on each load.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from waveplot.channel import (
    DEFAULT_CALIBRATION,
    DEFAULT_SAMPLE_INTERVAL_SEC,
    MAX_CHANNELS,
    Calibration,
)
from waveplot.channel_set import ChannelSet
from waveplot.config_store import (
    CONFIG_FILE_NAME,
    ConfigStore,
    write_config_file,
)
from waveplot.csv_loader import CsvChannelLoader
from waveplot.errors import ConfigLoadError, CsvFormatError, NoChannelsError, ShapeMismatchWarning
from waveplot.row_window import DEFAULT_OVERLAY_COUNT, RenderMode
from waveplot.timebase import parse_interval, validate_interval
from waveplot.transform import RenderResult, render_overlay, render_single_row

__all__ = [
    "ViewRequest",
    "WaveformSession",
    "load_channels",
    "load_config",
    "render",
    "save_config",
]

LOG = logging.getLogger(__name__)

SHAPE_MISMATCH_MESSAGE = (
    "Not all CSVs have the same number of rows/samples. Viewer assumes aligned datasets."
)


@dataclass(frozen=True)
class ViewRequest:
    mode: RenderMode = RenderMode.SINGLE
    base_row: int = 0
    overlay_count: int = DEFAULT_OVERLAY_COUNT
    sample_interval_s: float = DEFAULT_SAMPLE_INTERVAL_SEC


def load_config(data: Optional[bytes]) -> ConfigStore:
    """Parse persisted configuration, falling back to an empty store."""
    if not data:
        return ConfigStore()
    try:
        return ConfigStore.load(data)
    except ConfigLoadError as exc:
        LOG.warning("Failed to load config: %s", exc)
        return ConfigStore()


def load_channels(
    paths: Iterable[str | Path],
    store: ConfigStore | None = None,
    *,
    defaults: Sequence[Calibration] = DEFAULT_CALIBRATION,
    max_channels: int = MAX_CHANNELS,
) -> tuple[ChannelSet, list[str]]:
    """Load one channel per file, isolating failures to the file concerned.

    Returns the new channel set and human-readable warnings for skipped
    files, ignored extra files and shape mismatches.
    """
    store = store if store is not None else ConfigStore()
    loader = CsvChannelLoader(store, defaults=defaults)
    known_keys = store.keys()
    warnings: list[str] = []
    channels = []
    for path in paths:
        if len(channels) >= max_channels:
            message = f"Exceeded MAX_CHANNELS ({max_channels}). Extra files will be ignored."
            LOG.warning(message)
            warnings.append(message)
            break
        try:
            channels.append(loader.load(path, len(channels), known_keys))
        except (CsvFormatError, OSError) as exc:
            LOG.warning("Skipping %s: %s", path, exc)
            warnings.append(f"Skipped {Path(path).name}: {exc}")

    channel_set = ChannelSet.from_channels(channels)
    if channel_set.shape_mismatch:
        LOG.warning("%s (%s)", SHAPE_MISMATCH_MESSAGE, channel_set.shape_summary())
        warnings.append(str(ShapeMismatchWarning(SHAPE_MISMATCH_MESSAGE)))
    return channel_set, warnings


def render(channel_set: ChannelSet, request: ViewRequest) -> RenderResult:
    if channel_set.is_empty:
        raise NoChannelsError("Load CSV files first.")
    dt = validate_interval(request.sample_interval_s)
    if RenderMode(request.mode) is RenderMode.SINGLE:
        return render_single_row(channel_set, request.base_row, dt)
    return render_overlay(channel_set, request.base_row, request.overlay_count, dt)


def save_config(
    channel_set: ChannelSet,
    sample_interval_s: float,
    store: ConfigStore | None = None,
) -> bytes:
    """Serialize the calibration of ``channel_set``, rebuilding ``store`` if given."""
    dt = validate_interval(sample_interval_s)
    store = store if store is not None else ConfigStore()
    return store.save(channel_set, dt)


class WaveformSession:
    """State shared between the grid, the charts and the config file."""

    def __init__(
        self,
        config_path: str | Path | None = None,
        *,
        defaults: Sequence[Calibration] = DEFAULT_CALIBRATION,
        max_channels: int = MAX_CHANNELS,
    ):
        self.config_path = Path(config_path or CONFIG_FILE_NAME)
        self.defaults = tuple(defaults)
        self.max_channels = int(max_channels)
        self.store = ConfigStore()
        self.channel_set = ChannelSet()
        self.sample_interval_s = DEFAULT_SAMPLE_INTERVAL_SEC

    def load_config_file(self) -> ConfigStore:
        data = None
        if self.config_path.exists():
            try:
                data = self.config_path.read_bytes()
            except OSError as exc:
                LOG.warning("Failed to read config %s: %s", self.config_path, exc)
        self.store = load_config(data)
        self.sample_interval_s = self.store.sample_interval_s
        return self.store

    def load_channels(self, paths: Iterable[str | Path]) -> list[str]:
        channel_set, warnings = load_channels(
            paths,
            self.store,
            defaults=self.defaults,
            max_channels=self.max_channels,
        )
        self.channel_set = channel_set
        return warnings

    def set_sample_interval(self, value: str | float) -> float:
        """Accept a new interval; invalid input keeps the previous one."""
        if isinstance(value, str):
            dt = parse_interval(value)
        else:
            dt = validate_interval(value)
        self.sample_interval_s = dt
        return dt

    def request(
        self,
        mode: RenderMode = RenderMode.SINGLE,
        base_row: int = 0,
        overlay_count: int = DEFAULT_OVERLAY_COUNT,
    ) -> ViewRequest:
        return ViewRequest(RenderMode(mode), int(base_row), int(overlay_count), self.sample_interval_s)

    def render(self, request: ViewRequest) -> RenderResult:
        return render(self.channel_set, request)

    def save_config(self, sample_interval: str | float | None = None) -> bytes:
        if sample_interval is not None:
            self.set_sample_interval(sample_interval)
        data = save_config(self.channel_set, self.sample_interval_s, self.store)
        write_config_file(self.config_path, data)
        return data
