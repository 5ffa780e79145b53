"""Interfaces of the UI collaborators driven by the app controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from mapty.workout.model import Coordinates, Workout, WorkoutKind


@dataclass(frozen=True)
class FormFields:
    kind: str
    distance_km: object
    duration_min: object
    # cadence for running, elevation for cycling
    kind_specific: object


class MapGateway(Protocol):
    def place_marker(
        self, coordinates: Coordinates, label: str, kind: WorkoutKind | None = None
    ) -> None: ...

    def recenter(self, coordinates: Coordinates) -> None: ...


class FormLayer(Protocol):
    def open(self) -> None: ...

    def close(self) -> None: ...

    def read_fields(self) -> FormFields: ...

    def show_error(self, message: str) -> None: ...

    def show_kind_field(self, kind: WorkoutKind) -> None: ...


class WorkoutListView(Protocol):
    def render(self, workout: Workout) -> None: ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...
