"""Helpers for choosing which rows a view shows, with clamping."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RenderMode(str, Enum):
    SINGLE = "single"
    OVERLAY = "overlay"


@dataclass(frozen=True)
class OverlayLimits:
    count_min: int = 1
    count_max: int = 20


DEFAULT_OVERLAY_COUNT = 5


def clamp_overlay_count(count: int, *, limits: OverlayLimits = OverlayLimits()) -> int:
    return max(limits.count_min, min(limits.count_max, int(count)))


def clamp_row(row: int, row_count: int) -> int:
    if row_count <= 0:
        return 0
    return max(0, min(int(row), row_count - 1))


def overlay_rows(base_row: int, overlay_count: int, row_count: int) -> list[tuple[int, int]]:
    """Return ``(offset, row)`` pairs for an overlay, stopping at the last row.

    ``overlay_count`` and ``base_row`` are clamped first.
    """
    if row_count <= 0:
        return []
    count = clamp_overlay_count(overlay_count)
    base = clamp_row(base_row, row_count)
    pairs = []
    for offset in range(count):
        row = base + offset
        if row >= row_count:
            break
        pairs.append((offset, row))
    return pairs


def step_row(
    current: int,
    direction: int,
    *,
    mode: RenderMode,
    overlay_count: int,
    row_count: int,
) -> int:
    """Move one row, or one overlay block, forward or back."""
    if row_count <= 0:
        return current
    step = 1 if RenderMode(mode) is RenderMode.SINGLE else clamp_overlay_count(overlay_count)
    return clamp_row(current + direction * step, row_count)
