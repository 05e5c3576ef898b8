"""Viewer preferences, persisted through a key-value store.

The whole snapshot lives under one key as a JSON document.  Saving merges
the changed fields into what is already stored, so several writers that
each own a few fields do not clobber one another.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Optional, Protocol

from .machine_profiles import DEFAULT_PROFILE

log = logging.getLogger(__name__)

STATE_KEY = "viewer-state"


class KeyValueStore(Protocol):
    """Persistence port: string values under string keys."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """In-process store, used by tests and headless runs."""

    def __init__(self, data: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Store backed by a JSON object in a file, ~/.toolpathsim/settings.json by default."""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            path = Path.home() / ".toolpathsim" / "settings.json"
        self._path = path

    def _read(self) -> dict:
        if not self._path.exists():
            return {}
        data = json.loads(self._path.read_text())
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2))


def _default_visibility() -> dict[str, bool]:
    return {
        "grid": True,
        "axes": True,
        "rapid_moves": True,
        "cutting_width": True,
        "workpiece": True,
        "tool_pointer": True,
    }


def _default_workpiece() -> dict:
    return {
        "manual_mode": False,
        "material": "aluminum",
        "dimensions": {"x": 100.0, "y": 100.0, "z": 20.0},
        "origin": {"x": 0.0, "y": 0.0, "z": 0.0},
    }


def _default_depth_filter() -> dict[str, float]:
    return {"min": -100.0, "max": 10.0}


# Nested dicts are merged key by key over their defaults on load
_MERGED_FIELDS = ("visibility", "workpiece")


def _coerce(default, value):
    """*value* if it has the type of *default*, else None.

    Integers are accepted for float fields; bools are never numbers here.
    """
    if isinstance(default, bool):
        return value if isinstance(value, bool) else None
    if isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return None
    return value if isinstance(value, type(default)) else None


@dataclass
class ViewerSettings:
    """User-facing state that survives a restart."""

    gcode_text: str = ""
    current_file_name: str = "sample.nc"
    playback_speed: float = 1.0
    camera_preset: str = "isometric"
    tool_diameter: float = 3.0
    machine_profile: str = DEFAULT_PROFILE
    visibility: dict[str, bool] = field(default_factory=_default_visibility)
    workpiece: dict = field(default_factory=_default_workpiece)
    depth_color_enabled: bool = False
    depth_filter: dict[str, float] = field(default_factory=_default_depth_filter)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> ViewerSettings:
        """Build settings from stored *data*, ignoring unknown keys."""
        settings = cls()
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            value = _coerce(getattr(settings, key), value)
            if value is None:
                log.warning("Ignoring persisted %s of type %s",
                            key, type(data[key]).__name__)
                continue
            if key in _MERGED_FIELDS:
                merged = dict(getattr(settings, key))
                merged.update(value)
                value = merged
            setattr(settings, key, value)
        return settings

    @classmethod
    def load(cls, store: KeyValueStore) -> ViewerSettings:
        """Read settings from *store*; missing or corrupt data yields defaults."""
        try:
            raw = store.get(STATE_KEY)
            if not raw:
                return cls()
            data = json.loads(raw)
        except (OSError, TypeError, ValueError) as exc:
            log.warning("Failed to load persisted state: %s", exc)
            return cls()
        if not isinstance(data, dict):
            log.warning("Ignoring persisted state of type %s", type(data).__name__)
            return cls()
        return cls.from_dict(data)

    def save(self, store: KeyValueStore, *names: str) -> None:
        """Write the fields in *names* (all fields if none) to *store*."""
        snapshot = self.to_dict()
        if names:
            snapshot = {name: snapshot[name] for name in names}
        stored = {}
        try:
            current = store.get(STATE_KEY)
            if current:
                stored = json.loads(current)
        except (OSError, TypeError, ValueError) as exc:
            log.warning("Replacing unreadable persisted state: %s", exc)
        if not isinstance(stored, dict):
            stored = {}
        stored.update(snapshot)
        try:
            store.set(STATE_KEY, json.dumps(stored))
        except (OSError, ValueError) as exc:
            log.warning("Failed to persist state: %s", exc)
