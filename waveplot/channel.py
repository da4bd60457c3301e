from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

MAX_CHANNELS = 16

# 1 kHz data
DEFAULT_SAMPLE_INTERVAL_SEC = 1e-3


@dataclass(frozen=True)
class Calibration:
    bias: float = 0.0
    scale: float = 1.0


# Indexed by load position. Bias of -744 with scale 0.006105 converts raw
# ADC counts centred on 744 into volts.
DEFAULT_CALIBRATION: tuple[Calibration, ...] = (
    Calibration(0.0, 0.02),
    Calibration(-744.0, 0.006105),
    Calibration(0.0, 0.02),
    Calibration(-744.0, 0.006105),
    Calibration(1.0, 0.02),
    Calibration(1.0, 0.02),
    Calibration(-744.0, 0.006105),
    Calibration(1.0, 0.0),
    Calibration(1.0, 0.0),
    Calibration(1.0, 0.0),
    Calibration(1.0, 0.0),
    Calibration(1.0, 0.0),
    Calibration(1.0, 0.0),
    Calibration(1.0, 0.0),
    Calibration(1.0, 0.0),
    Calibration(1.0, 0.0),
)

FALLBACK_CALIBRATION = Calibration(0.0, 1.0)


def default_calibration(
    index: int,
    table: Sequence[Calibration] = DEFAULT_CALIBRATION,
) -> Calibration:
    """Return the table entry for a load position, or bias 0 / scale 1 past its end."""
    if 0 <= index < len(table):
        return table[index]
    return FALLBACK_CALIBRATION


@dataclass
class ConfigEntry:
    """Persisted calibration and visibility for one normalized key."""

    bias: float = 0.0
    scale: float = 0.0
    show_on_primary: bool = True
    show_on_secondary: bool = False


@dataclass
class Channel:
    """One loaded recording.

    ``samples`` has shape ``(rows, cols)``. Only the calibration and the two
    visibility flags change after load.
    """

    name: str
    key: str
    samples: np.ndarray = field(repr=False)
    bias: float = 0.0
    scale: float = 1.0
    show_on_primary: bool = True
    show_on_secondary: bool = False

    @property
    def row_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def sample_count(self) -> int:
        return int(self.samples.shape[1]) if self.samples.ndim == 2 else 0

    def calibrated_row(self, row: int, count: int | None = None) -> np.ndarray:
        """Plotted values ``(raw + bias) * scale`` for one row."""
        raw = self.samples[row]
        if count is not None:
            raw = raw[:count]
        return (raw + self.bias) * self.scale

    def config_entry(self) -> ConfigEntry:
        return ConfigEntry(
            bias=float(self.bias),
            scale=float(self.scale),
            show_on_primary=bool(self.show_on_primary),
            show_on_secondary=bool(self.show_on_secondary),
        )
