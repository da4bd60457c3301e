"""Parse one-channel-per-file CSV recordings into sample matrices.

Expected layout: one header line (content ignored), then one line per row.
Each line holds two leading timestamp fields followed by the samples, split on
``,`` ``;`` or tab. The narrowest row sets the matrix width; missing or
unparsable samples become ``0.0``.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

import numpy as np

from waveplot.channel import (
    DEFAULT_CALIBRATION,
    Calibration,
    Channel,
    default_calibration,
)
from waveplot.config_store import ConfigStore
from waveplot.errors import CsvFormatError
from waveplot.keys import normalize_key
from waveplot.matching import find_best_key

__all__ = ["CsvChannelLoader", "parse_number", "parse_sample", "split_fields", "TIMESTAMP_COLUMNS"]

LOG = logging.getLogger(__name__)

TIMESTAMP_COLUMNS = 2

_DELIMITERS = re.compile(r"[,;\t]")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
# No NaN or Infinity spellings; those read as 0.0 like any other bad token.
_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def split_fields(line: str) -> list[str]:
    return _DELIMITERS.split(line)


def parse_number(token: str) -> Optional[float]:
    """Parse a period-decimal number such as ``-1.5e3``; ``None`` if it is not one."""
    text = str(token).strip()
    if not _NUMBER.fullmatch(text):
        return None
    return float(text)


def parse_sample(token: str) -> float:
    """Parse one sample; anything unparsable reads as ``0.0``."""
    value = parse_number(token)
    return 0.0 if value is None else value


def _data_lines(path: Path) -> list[str]:
    text = path.read_text(encoding="utf-8-sig", errors="replace")
    lines = [line for line in _LINE_BREAK.split(text) if line.strip()]
    if len(lines) <= 1:
        raise CsvFormatError("CSV has no data rows (after header)", path)
    return lines[1:]


def parse_matrix(lines: Sequence[str], path: Path | None = None) -> np.ndarray:
    """Build the ``rows x samples`` matrix for the data lines of one file."""
    rows = [split_fields(line) for line in lines]
    num_samples = min(max(0, len(fields) - TIMESTAMP_COLUMNS) for fields in rows)
    if num_samples <= 0:
        raise CsvFormatError(
            "No data columns found (after skipping timestamp columns)", path
        )
    data = np.zeros((len(rows), num_samples), dtype=np.float64)
    for r, fields in enumerate(rows):
        samples = fields[TIMESTAMP_COLUMNS:TIMESTAMP_COLUMNS + num_samples]
        data[r, : len(samples)] = [parse_sample(token) for token in samples]
    return data


class CsvChannelLoader:
    """Turn a CSV file into a :class:`Channel` with calibration attached.

    Calibration comes from ``store`` when the file's key matches one of its
    keys, otherwise from ``defaults`` by load position.
    """

    def __init__(
        self,
        store: ConfigStore | None = None,
        *,
        defaults: Sequence[Calibration] = DEFAULT_CALIBRATION,
    ):
        self.store = store if store is not None else ConfigStore()
        self.defaults = tuple(defaults)

    def load(
        self,
        path: str | Path,
        channel_index: int,
        known_keys: Optional[Iterable[str]] = None,
    ) -> Channel:
        path = Path(path)
        samples = parse_matrix(_data_lines(path), path)
        name = path.stem
        key = normalize_key(name)
        channel = Channel(name=name, key=key, samples=samples)
        self._apply_calibration(channel, channel_index, known_keys)
        LOG.info(
            "Loaded %s: %d rows x %d samples (key %s)",
            path.name,
            channel.row_count,
            channel.sample_count,
            key,
        )
        return channel

    def _apply_calibration(
        self,
        channel: Channel,
        channel_index: int,
        known_keys: Optional[Iterable[str]],
    ) -> None:
        candidates = self.store.keys() if known_keys is None else list(known_keys)
        best = find_best_key(channel.key, candidates)
        entry = self.store.lookup(best) if best is not None else None
        if entry is not None:
            channel.bias = entry.bias
            channel.scale = entry.scale
            channel.show_on_primary = entry.show_on_primary
            channel.show_on_secondary = entry.show_on_secondary
            return
        calibration = default_calibration(channel_index, self.defaults)
        channel.bias = calibration.bias
        channel.scale = calibration.scale
        channel.show_on_primary = True
        channel.show_on_secondary = False
