"""Ordered collection of loaded channels with edit notifications."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Sequence

from waveplot.channel import Channel

__all__ = ["ChannelChange", "ChannelSet"]

LOG = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("bias", "scale", "show_on_primary", "show_on_secondary")


@dataclass(frozen=True)
class ChannelChange:
    index: int
    fields: tuple[str, ...]


Listener = Callable[[ChannelChange], None]


class ChannelSet:
    """Channels in load order; dimensions come from the first channel.

    ``shape_mismatch`` is set when any other channel has a different row or
    sample count. The set stays usable: renderers skip rows a channel does
    not have and truncate wider rows to ``sample_count``.
    """

    def __init__(self, channels: Sequence[Channel] = ()):
        self._channels: list[Channel] = list(channels)
        self._listeners: list[Listener] = []
        if self._channels:
            first = self._channels[0]
            self.row_count = first.row_count
            self.sample_count = first.sample_count
        else:
            self.row_count = 0
            self.sample_count = 0
        self.shape_mismatch = any(
            ch.row_count != self.row_count or ch.sample_count != self.sample_count
            for ch in self._channels
        )

    @classmethod
    def from_channels(cls, channels: Iterable[Channel]) -> "ChannelSet":
        return cls(list(channels))

    @property
    def channels(self) -> tuple[Channel, ...]:
        return tuple(self._channels)

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._channels)

    def __getitem__(self, index: int) -> Channel:
        return self._channels[index]

    @property
    def is_empty(self) -> bool:
        return not self._channels or self.row_count == 0 or self.sample_count == 0

    def has_row(self, channel: Channel, row: int) -> bool:
        return 0 <= row < channel.row_count

    def shape_summary(self) -> str:
        return ", ".join(
            f"{ch.name}: {ch.row_count}x{ch.sample_count}" for ch in self._channels
        )

    # ----- edits -----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for edits; returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def update_channel(
        self,
        index: int,
        *,
        bias: Optional[float] = None,
        scale: Optional[float] = None,
        show_on_primary: Optional[bool] = None,
        show_on_secondary: Optional[bool] = None,
    ) -> ChannelChange | None:
        """Apply grid edits to one channel and notify listeners.

        Arguments left as ``None`` are untouched. Returns the change, or
        ``None`` when nothing differed.
        """
        channel = self._channels[index]
        requested = {
            "bias": None if bias is None else float(bias),
            "scale": None if scale is None else float(scale),
            "show_on_primary": None if show_on_primary is None else bool(show_on_primary),
            "show_on_secondary": None if show_on_secondary is None else bool(show_on_secondary),
        }
        changed = []
        for name in _EDITABLE_FIELDS:
            value = requested[name]
            if value is None or getattr(channel, name) == value:
                continue
            setattr(channel, name, value)
            changed.append(name)
        if not changed:
            return None
        change = ChannelChange(index, tuple(changed))
        LOG.debug("Channel %s edited: %s", channel.name, ", ".join(changed))
        for listener in list(self._listeners):
            listener(change)
        return change
