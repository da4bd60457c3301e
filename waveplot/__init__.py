"""Core package exports for the waveform plotter."""

# Re-export commonly used modules for convenience.
from . import channel, channel_set, config_store, csv_loader, errors, keys, matching, row_window, session, timebase, transform

__all__ = [
    "channel",
    "channel_set",
    "config_store",
    "csv_loader",
    "errors",
    "keys",
    "matching",
    "row_window",
    "session",
    "timebase",
    "transform",
]
