from __future__ import annotations

import json
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

import pytest

from mapty.workout.model import Coordinates, Cycling, Running
from mapty.workout.persistence import (
    WORKOUTS_KEY,
    JsonFileStorage,
    MemoryStorage,
    PersistenceAdapter,
    PersistenceUnavailableError,
)
from mapty.workout.store import WorkoutStore

START = datetime(2026, 3, 14, 7, 30, tzinfo=timezone.utc)


class ReadOnlyStorage(MemoryStorage):
    def set_item(self, key: str, value: str) -> None:
        raise OSError("read-only file system")


def _sample() -> list[Running | Cycling]:
    return [
        Running.create(Coordinates(51.5, -0.1), 5, 30, 150, now=START),
        Cycling.create(Coordinates(48.85, 2.35), 20, 60, -5, now=START + timedelta(minutes=1)),
        Running.create(Coordinates(40.4, -3.7), 10.5, 52.5, 172, now=START + timedelta(minutes=2)),
    ]


def test_snapshot_restore_round_trip_keeps_order_and_variants() -> None:
    original = WorkoutStore()
    for workout in _sample():
        original.add(workout)
    adapter = PersistenceAdapter(MemoryStorage())

    adapter.save(original.snapshot())
    restored = WorkoutStore()
    restored.restore(adapter.load())

    assert restored.snapshot() == original.snapshot()
    first, second, _ = restored.snapshot()
    assert isinstance(first, Running)
    assert first.cadence_spm == 150
    assert first.pace_min_per_km == 6.0
    assert isinstance(second, Cycling)
    assert second.elevation_gain_m == -5
    assert second.speed_km_per_h == 20.0


def test_saved_payload_layout() -> None:
    storage = MemoryStorage()
    PersistenceAdapter(storage).save(_sample()[:2])

    payload = json.loads(storage.items[WORKOUTS_KEY])
    assert [item["kind"] for item in payload] == ["running", "cycling"]
    assert payload[0]["coordinates"] == [51.5, -0.1]
    assert payload[0]["cadence_spm"] == 150
    assert "elevation_gain_m" not in payload[0]
    assert payload[1]["elevation_gain_m"] == -5
    assert payload[0]["created_at"] == START.isoformat()


def test_load_without_data_is_empty() -> None:
    assert PersistenceAdapter(MemoryStorage()).load() == []


@pytest.mark.parametrize("corrupt", ["{not json", '{"kind": "running"}', "42"])
def test_corrupt_value_is_discarded(corrupt: str) -> None:
    storage = MemoryStorage({WORKOUTS_KEY: corrupt})
    adapter = PersistenceAdapter(storage)

    assert adapter.load() == []
    assert WORKOUTS_KEY not in storage.items


def test_malformed_records_are_skipped() -> None:
    storage = MemoryStorage()
    adapter = PersistenceAdapter(storage)
    adapter.save(_sample()[:1])
    items = json.loads(storage.items[WORKOUTS_KEY])
    items.append({"id": "1", "kind": "swimming"})
    items.append({"id": "2", "kind": "cycling", "coordinates": [0, 0]})
    storage.set_item(WORKOUTS_KEY, json.dumps(items))

    loaded = adapter.load()

    assert len(loaded) == 1
    assert isinstance(loaded[0], Running)


def test_load_twice_yields_same_result() -> None:
    adapter = PersistenceAdapter(MemoryStorage())
    adapter.save(_sample())

    assert adapter.load() == adapter.load()


def test_legacy_browser_records_are_rehydrated() -> None:
    legacy = [
        {
            "date": "2023-03-14T12:00:00.000Z",
            "id": "8788800000",
            "coords": [51.5, -0.1],
            "distance": 5,
            "duration": 30,
            "type": "running",
            "cadance": 150,
            "pace": 6,
            "description": "Running on March 14",
        },
        {
            "date": "2023-03-15T12:00:00.000Z",
            "id": "8788900000",
            "coords": [51.5, -0.1],
            "distance": 20,
            "duration": 60,
            "type": "cycling",
            "elevation": 150,
            "speed": 20,
            "description": "Cycling on March 15",
        },
    ]
    adapter = PersistenceAdapter(MemoryStorage({WORKOUTS_KEY: json.dumps(legacy)}))

    run, ride = adapter.load()

    assert isinstance(run, Running)
    assert run.id == "8788800000"
    assert run.cadence_spm == 150
    assert run.description == "Running on March 14"
    assert isinstance(ride, Cycling)
    assert ride.speed_km_per_h == 20.0


def test_save_failure_raises_persistence_unavailable() -> None:
    adapter = PersistenceAdapter(ReadOnlyStorage())

    with pytest.raises(PersistenceUnavailableError):
        adapter.save(_sample())


def test_clear_removes_stored_workouts() -> None:
    storage = MemoryStorage()
    adapter = PersistenceAdapter(storage)
    adapter.save(_sample())

    adapter.clear()

    assert adapter.load() == []


def test_json_file_storage_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "local_storage.json"
    storage = JsonFileStorage(path)

    assert storage.get_item("workouts") is None
    storage.set_item("workouts", "[]")
    storage.set_item("other", "x")
    storage.remove_item("other")

    assert path.exists()
    assert JsonFileStorage(path).get_item("workouts") == "[]"
    assert JsonFileStorage(path).get_item("other") is None


def test_json_file_storage_tolerates_broken_file(tmp_path: Path) -> None:
    path = tmp_path / "local_storage.json"
    path.write_text("{broken", encoding="utf-8")

    storage = JsonFileStorage(path)

    assert storage.get_item("workouts") is None
    storage.set_item("workouts", "[]")
    assert storage.get_item("workouts") == "[]"


def test_json_file_storage_tolerates_undecodable_bytes(tmp_path: Path) -> None:
    path = tmp_path / "local_storage.json"
    path.write_bytes(b'{"workouts": "\xff\xfe[]"}')

    assert PersistenceAdapter(JsonFileStorage(path)).load() == []


def test_json_file_storage_keeps_old_file_when_write_fails(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "local_storage.json"
    storage = JsonFileStorage(path)
    storage.set_item("workouts", "[]")

    def _crash(self: Path, target: Path) -> Path:
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", _crash)
    with pytest.raises(OSError):
        storage.set_item("workouts", '[{"id": "1"}]')

    assert JsonFileStorage(path).get_item("workouts") == "[]"


@pytest.fixture
def new_york_time(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_legacy_timestamps_use_local_day(new_york_time: None) -> None:
    legacy = [
        {
            "date": "2023-03-15T04:30:00.000Z",
            "id": "8788800000",
            "coords": [40.7, -74.0],
            "distance": 5,
            "duration": 30,
            "type": "running",
            "cadance": 150,
        }
    ]
    adapter = PersistenceAdapter(MemoryStorage({WORKOUTS_KEY: json.dumps(legacy)}))

    (run,) = adapter.load()

    assert run.description == "Running on March 14"
    assert run.created_at.day == 14
