"""Persisted per-channel calibration keyed by normalized file name.

On-disk document (JSON)::

    {
      "sampleIntervalSec": 0.001,
      "fileMap": {"CH1_SENSOR": {"bias": 0.0, "scale": 0.02,
                                 "showOnChart1": true, "showOnChart2": false}},
      "channels": []
    }

``channels`` is the legacy list form (each entry also carries ``name``). It is
merged into ``fileMap`` on load and always written back empty. Field names
are matched case-insensitively on load.
"""
from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional

from waveplot.channel import DEFAULT_SAMPLE_INTERVAL_SEC, Channel, ConfigEntry
from waveplot.errors import ConfigLoadError
from waveplot.keys import normalize_key

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigStore",
    "read_config_file",
    "write_config_file",
]

LOG = logging.getLogger(__name__)

CONFIG_FILE_NAME = "ChannelConfig.json"

_INTERVAL_FIELD = "sampleIntervalSec"
_MAP_FIELD = "fileMap"
_LEGACY_FIELD = "channels"
_PRIMARY_FIELD = "showOnChart1"
_SECONDARY_FIELD = "showOnChart2"


def _fold_fields(obj: Mapping[str, Any]) -> dict[str, Any]:
    # Later spellings of the same field win, matching a case-insensitive deserializer.
    return {str(k).casefold(): v for k, v in obj.items()}


def _number_field(fields: Mapping[str, Any], name: str, default: float) -> float:
    value = fields.get(name.casefold())
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigLoadError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except OverflowError as exc:
        raise ConfigLoadError(f"{name} is out of range") from exc


def _bool_field(fields: Mapping[str, Any], name: str, default: bool) -> bool:
    value = fields.get(name.casefold())
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigLoadError(f"{name} must be true or false, got {value!r}")
    return value


def _entry_from_fields(obj: Any) -> ConfigEntry:
    if not isinstance(obj, Mapping):
        raise ConfigLoadError(f"channel entry must be an object, got {type(obj).__name__}")
    fields = _fold_fields(obj)
    defaults = ConfigEntry()
    return ConfigEntry(
        bias=_number_field(fields, "bias", defaults.bias),
        scale=_number_field(fields, "scale", defaults.scale),
        show_on_primary=_bool_field(fields, _PRIMARY_FIELD, defaults.show_on_primary),
        show_on_secondary=_bool_field(fields, _SECONDARY_FIELD, defaults.show_on_secondary),
    )


def _entry_to_fields(entry: ConfigEntry) -> dict[str, Any]:
    return {
        "bias": float(entry.bias),
        "scale": float(entry.scale),
        _PRIMARY_FIELD: bool(entry.show_on_primary),
        _SECONDARY_FIELD: bool(entry.show_on_secondary),
    }


def _interval_or_default(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_SAMPLE_INTERVAL_SEC
    try:
        value = float(value)
    except OverflowError:
        return DEFAULT_SAMPLE_INTERVAL_SEC
    if not math.isfinite(value) or value <= 0:
        return DEFAULT_SAMPLE_INTERVAL_SEC
    return value


class ConfigStore:
    """Calibration entries keyed by normalized name, compared case-insensitively.

    Iteration yields keys in insertion order; :func:`find_best_key` relies on
    that order for tie-breaking.
    """

    def __init__(
        self,
        entries: Mapping[str, ConfigEntry] | None = None,
        sample_interval_s: float = DEFAULT_SAMPLE_INTERVAL_SEC,
    ):
        self.sample_interval_s = float(sample_interval_s)
        self._entries: dict[str, ConfigEntry] = {}
        self._index: dict[str, str] = {}
        for key, entry in (entries or {}).items():
            self.upsert(key, entry)

    # ----- mapping helpers -----

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._index

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> list[tuple[str, ConfigEntry]]:
        return list(self._entries.items())

    def upsert(self, key: str, entry: ConfigEntry) -> None:
        """Insert or overwrite; an existing key keeps its original spelling."""
        folded = key.casefold()
        stored = self._index.get(folded)
        if stored is None:
            self._index[folded] = key
            stored = key
        self._entries[stored] = entry

    def lookup(self, key: str) -> Optional[ConfigEntry]:
        stored = self._index.get(key.casefold())
        if stored is None:
            return None
        return self._entries[stored]

    # ----- persistence -----

    @classmethod
    def load(cls, data: bytes | str) -> "ConfigStore":
        """Parse a persisted document, merging any legacy ``channels`` list.

        Raises :class:`ConfigLoadError` when the document cannot be parsed.
        """
        try:
            text = data.decode("utf-8-sig") if isinstance(data, (bytes, bytearray)) else data
            doc = json.loads(text)
        except (UnicodeDecodeError, ValueError, RecursionError) as exc:
            raise ConfigLoadError(f"invalid channel configuration: {exc}") from exc
        if not isinstance(doc, Mapping):
            raise ConfigLoadError("channel configuration must be a JSON object")

        fields = _fold_fields(doc)
        store = cls(sample_interval_s=_interval_or_default(fields.get(_INTERVAL_FIELD.casefold())))

        file_map = fields.get(_MAP_FIELD.casefold())
        if file_map is not None:
            if not isinstance(file_map, Mapping):
                raise ConfigLoadError(f"{_MAP_FIELD} must be an object")
            for key, obj in file_map.items():
                store.upsert(str(key), _entry_from_fields(obj))

        legacy = fields.get(_LEGACY_FIELD.casefold())
        if legacy is not None:
            if not isinstance(legacy, list):
                raise ConfigLoadError(f"{_LEGACY_FIELD} must be a list")
            for obj in legacy:
                entry = _entry_from_fields(obj)
                name = _fold_fields(obj).get("name")
                if name is not None and not isinstance(name, str):
                    raise ConfigLoadError(f"legacy channel name must be a string, got {name!r}")
                store.upsert(normalize_key(name), entry)
            if legacy:
                LOG.info("Merged %d legacy channel entries into %s", len(legacy), _MAP_FIELD)
        return store

    def rebuild(self, channels: Iterable[Channel], sample_interval_s: float) -> None:
        """Replace every entry with the calibration of ``channels``."""
        self._entries = {}
        self._index = {}
        for channel in channels:
            self.upsert(normalize_key(channel.name), channel.config_entry())
        self.sample_interval_s = float(sample_interval_s)

    def to_dict(self) -> dict[str, Any]:
        return {
            _INTERVAL_FIELD: self.sample_interval_s,
            _MAP_FIELD: {key: _entry_to_fields(entry) for key, entry in self._entries.items()},
            _LEGACY_FIELD: [],
        }

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), indent=2).encode("utf-8")

    def save(self, channels: Iterable[Channel], sample_interval_s: float) -> bytes:
        """Rebuild from ``channels`` and return the serialized document."""
        self.rebuild(channels, sample_interval_s)
        return self.to_bytes()


def read_config_file(path: str | Path) -> ConfigStore:
    """Load ``path``; a missing file yields an empty default store."""
    path = Path(path)
    if not path.exists():
        return ConfigStore()
    return ConfigStore.load(path.read_bytes())


def write_config_file(path: str | Path, data: bytes) -> Path:
    path = Path(path)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_bytes(data)
    tmp.replace(path)
    LOG.info("Saved channel configuration to %s", path)
    return path
