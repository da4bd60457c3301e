"""Exception types raised by the waveform engine."""
from __future__ import annotations

from pathlib import Path


class CsvFormatError(ValueError):
    """A channel CSV has no data rows or no sample columns."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{message}: {self.path}"
        super().__init__(message)


class ConfigLoadError(ValueError):
    """Persisted channel configuration exists but cannot be parsed."""


class InvalidIntervalError(ValueError):
    """Sample interval is not a positive finite number."""


class NoChannelsError(RuntimeError):
    """Rendering was requested before any channel loaded successfully."""


class ShapeMismatchWarning(UserWarning):
    """Loaded channels disagree on row or sample counts."""
