from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from waveplot.channel import DEFAULT_SAMPLE_INTERVAL_SEC
from waveplot.csv_loader import parse_number
from waveplot.errors import InvalidIntervalError


def validate_interval(value: float) -> float:
    """Return ``value`` as float if it is a positive finite number."""
    try:
        dt = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidIntervalError(f"sample interval must be numeric, got {value!r}") from exc
    if not math.isfinite(dt) or dt <= 0:
        raise InvalidIntervalError(f"sample interval must be positive and finite, got {value!r}")
    return dt


def parse_interval(text: str) -> float:
    """Parse user-entered seconds with a period decimal separator."""
    value = parse_number(text)
    if value is None:
        raise InvalidIntervalError(
            f"Invalid sample interval {text!r}. Use a numeric value in seconds."
        )
    return validate_interval(value)


def format_interval(dt: float) -> str:
    """Six significant digits, e.g. ``0.001`` or ``2.5e-05``."""
    return f"{dt:.6g}"


@dataclass(frozen=True)
class Timebase:
    """
    Time axis for one row of samples.
    - t=0.0 is the first sample of the row.
    - Consecutive samples are ``sample_interval_s`` apart.
    """
    sample_interval_s: float = DEFAULT_SAMPLE_INTERVAL_SEC

    def __post_init__(self):
        validate_interval(self.sample_interval_s)

    def time_vector(self, n: int) -> np.ndarray:
        """
        ``t[i] = i * dt`` for ``i`` in ``[0, n)``.
        """
        if n <= 0:
            return np.zeros(0, dtype=float)
        return np.arange(n, dtype=np.int64) * float(self.sample_interval_s)

