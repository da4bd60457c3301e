"""Canonical matching keys derived from file names and labels."""
from __future__ import annotations

import os
import re

__all__ = ["normalize_key"]

_NON_ALNUM = re.compile(r"[^A-Z0-9]")
_UNDERSCORE_RUN = re.compile(r"_{2,}")


def _upper_char(ch: str) -> str:
    # Characters whose upper case is longer (e.g. "ß" -> "SS") stay as they are.
    upper = ch.upper()
    return upper if len(upper) == 1 else ch


def normalize_key(raw: str | None) -> str:
    """Return the configuration key for a file name or channel label.

    The key is upper-case ASCII letters and digits separated by single
    underscores, e.g. ``"ch 1 - Sensor.csv"`` -> ``"CH_1_SENSOR"``. A trailing
    file extension is dropped first. Blank input yields ``""``.
    """
    if raw is None:
        return ""
    text = str(raw).strip()
    if not text:
        return ""
    text, _ext = os.path.splitext(text)
    text = "".join(_upper_char(ch) for ch in text)
    text = _NON_ALNUM.sub("_", text)
    text = _UNDERSCORE_RUN.sub("_", text)
    return text.strip("_")
