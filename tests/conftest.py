from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from mapty.core.controller import AppController
from mapty.ui.gateways import FormFields
from mapty.workout.model import Coordinates, Workout, WorkoutKind
from mapty.workout.persistence import MemoryStorage, PersistenceAdapter


@dataclass
class FakeMap:
    markers: list[tuple[Coordinates, str, WorkoutKind | None]] = field(default_factory=list)
    recenters: list[Coordinates] = field(default_factory=list)

    def place_marker(
        self, coordinates: Coordinates, label: str, kind: WorkoutKind | None = None
    ) -> None:
        self.markers.append((coordinates, label, kind))

    def recenter(self, coordinates: Coordinates) -> None:
        self.recenters.append(coordinates)


@dataclass
class FakeForm:
    is_open: bool = False
    open_calls: int = 0
    close_calls: int = 0
    errors: list[str] = field(default_factory=list)
    kind_fields: list[WorkoutKind] = field(default_factory=list)
    fields: FormFields = FormFields(kind="running", distance_km="", duration_min="", kind_specific="")

    def open(self) -> None:
        self.is_open = True
        self.open_calls += 1

    def close(self) -> None:
        self.is_open = False
        self.close_calls += 1

    def read_fields(self) -> FormFields:
        return self.fields

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def show_kind_field(self, kind: WorkoutKind) -> None:
        self.kind_fields.append(kind)


@dataclass
class FakeList:
    rendered: list[Workout] = field(default_factory=list)

    def render(self, workout: Workout) -> None:
        self.rendered.append(workout)


@dataclass
class FakeNotifier:
    messages: list[str] = field(default_factory=list)

    def notify(self, message: str) -> None:
        self.messages.append(message)


class FailingStorage(MemoryStorage):
    def set_item(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


@dataclass
class Harness:
    controller: AppController
    map: FakeMap
    form: FakeForm
    workout_list: FakeList
    notifier: FakeNotifier
    storage: MemoryStorage


@pytest.fixture
def make_harness() -> Callable[..., Harness]:
    def _make(storage: MemoryStorage | None = None) -> Harness:
        store_backend = storage if storage is not None else MemoryStorage()
        fake_map = FakeMap()
        form = FakeForm()
        workout_list = FakeList()
        notifier = FakeNotifier()
        controller = AppController(
            map_gateway=fake_map,
            form=form,
            workout_list=workout_list,
            persistence=PersistenceAdapter(store_backend),
            notifier=notifier,
        )
        return Harness(controller, fake_map, form, workout_list, notifier, store_backend)

    return _make


@pytest.fixture
def london() -> Coordinates:
    return Coordinates(latitude=51.5, longitude=-0.1)
