"""Durable storage for recorded workouts.

Workouts are kept as one JSON array under a single string key of a small
key/value store, mirroring how the browser app used ``localStorage``. The
``kind`` tag of every record selects the variant to rebuild on load.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Protocol

from loguru import logger

from mapty.workout.model import Coordinates, Cycling, Running, Workout

WORKOUTS_KEY = "workouts"


def _default_storage_path() -> Path:
    return Path.home() / ".mapty" / "local_storage.json"


class PersistenceUnavailableError(RuntimeError):
    """Raised when the underlying store cannot be written."""


class MalformedWorkoutRecord(ValueError):
    """Raised for a stored record that cannot be turned back into a workout."""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage:
    """String key/value pairs kept in one JSON object on disk."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or _default_storage_path()

    def get_item(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Storage file {} is unreadable, starting empty: {}", self.path, exc)
            return {}
        return payload if isinstance(payload, dict) else {}

    def _write_all(self, items: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Swap a complete file into place so a crash never leaves half a write.
        staging = self.path.with_name(self.path.name + ".tmp")
        staging.write_text(json.dumps(items, ensure_ascii=True, indent=2), encoding="utf-8")
        staging.replace(self.path)


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": workout.id,
        "kind": workout.kind,
        "created_at": workout.created_at.isoformat(),
        "coordinates": list(workout.coordinates.as_tuple()),
        "distance_km": workout.distance_km,
        "duration_min": workout.duration_min,
        "description": workout.description,
    }
    if isinstance(workout, Running):
        payload["cadence_spm"] = workout.cadence_spm
    elif isinstance(workout, Cycling):
        payload["elevation_gain_m"] = workout.elevation_gain_m
    else:
        raise TypeError(f"Unsupported workout type {type(workout).__name__}")
    return payload


def workout_from_dict(raw: object) -> Workout:
    """Rebuild a workout from its stored form.

    Accepts both the current record layout and the one written by the
    original browser app (``type``/``coords``/``distance``/``duration``/
    ``cadance``/``elevation``/``date``).
    """
    if not isinstance(raw, dict):
        raise MalformedWorkoutRecord("Workout record must be an object")

    kind = _pick(raw, "kind", "type")
    workout_id = _pick(raw, "id")
    if not isinstance(workout_id, str) or not workout_id:
        raise MalformedWorkoutRecord("Workout record needs a string 'id'")

    common: dict[str, Any] = {
        "id": workout_id,
        "created_at": _parse_timestamp(raw),
        "coordinates": _parse_coordinates(_pick(raw, "coordinates", "coords")),
        "distance_km": _parse_number(_pick(raw, "distance_km", "distance"), "distance_km"),
        "duration_min": _parse_number(_pick(raw, "duration_min", "duration"), "duration_min"),
    }
    if kind == "running":
        cadence = _parse_number(_pick(raw, "cadence_spm", "cadance", "cadence"), "cadence_spm")
        return Running(cadence_spm=cadence, **common)
    if kind == "cycling":
        elevation = _parse_number(_pick(raw, "elevation_gain_m", "elevation"), "elevation_gain_m")
        return Cycling(elevation_gain_m=elevation, **common)
    raise MalformedWorkoutRecord(f"Unknown workout kind {kind!r}")


class PersistenceAdapter:
    def __init__(self, storage: KeyValueStorage, key: str = WORKOUTS_KEY) -> None:
        self._storage = storage
        self._key = key

    def save(self, records: Iterable[Workout]) -> None:
        payload = json.dumps([workout_to_dict(workout) for workout in records], ensure_ascii=True)
        try:
            self._storage.set_item(self._key, payload)
        except OSError as exc:
            raise PersistenceUnavailableError(f"Could not save workouts: {exc}") from exc

    def load(self) -> list[Workout]:
        raw = self._storage.get_item(self._key)
        if raw is None:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            self._discard(f"invalid JSON ({exc})")
            return []
        if not isinstance(items, list):
            self._discard("stored value is not an array")
            return []

        out: list[Workout] = []
        for index, item in enumerate(items):
            try:
                out.append(workout_from_dict(item))
            except MalformedWorkoutRecord as exc:
                logger.warning("Skipping stored workout #{}: {}", index + 1, exc)
        return out

    def clear(self) -> None:
        self._storage.remove_item(self._key)

    def _discard(self, reason: str) -> None:
        logger.warning("Discarding corrupt '{}' storage: {}", self._key, reason)
        try:
            self._storage.remove_item(self._key)
        except OSError as exc:
            logger.warning("Could not remove corrupt '{}' storage: {}", self._key, exc)


def _pick(raw: dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in raw:
            return raw[name]
    return None


def _parse_number(raw: object, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise MalformedWorkoutRecord(f"invalid {field_name}")
    value = float(raw)
    if not math.isfinite(value):
        raise MalformedWorkoutRecord(f"invalid {field_name}")
    return value


def _parse_coordinates(raw: object) -> Coordinates:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise MalformedWorkoutRecord("coordinates must be a [latitude, longitude] pair")
    coordinates = Coordinates(
        latitude=_parse_number(raw[0], "latitude"),
        longitude=_parse_number(raw[1], "longitude"),
    )
    if not coordinates.is_valid:
        raise MalformedWorkoutRecord("coordinates out of range")
    return coordinates


def _parse_timestamp(record: dict[str, Any]) -> datetime:
    legacy = "created_at" not in record
    raw = _pick(record, "created_at", "date")
    if not isinstance(raw, str):
        raise MalformedWorkoutRecord("invalid created_at")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise MalformedWorkoutRecord(f"invalid created_at {raw!r}") from exc
    # The browser app stored UTC but named the day from local time.
    if legacy and parsed.tzinfo is not None:
        return parsed.astimezone()
    return parsed
