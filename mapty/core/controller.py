"""Coordinates the map, the entry form, the workout list and storage."""

from __future__ import annotations

from typing import cast

from loguru import logger

from mapty.core.state import AppState, ControllerState, PendingEntry
from mapty.ui.formatting import marker_label
from mapty.ui.gateways import FormLayer, MapGateway, Notifier, WorkoutListView
from mapty.workout.model import WORKOUT_KINDS, Coordinates, Workout, WorkoutKind
from mapty.workout.persistence import PersistenceAdapter, PersistenceUnavailableError
from mapty.workout.store import DuplicateWorkoutError, WorkoutStore
from mapty.workout.validation import WorkoutValidationError, validate_entry

CURRENT_POSITION_LABEL = "You are here."
GEOLOCATION_FAILED_MESSAGE = "Something went wrong reading your GPS position"
SAVE_FAILED_MESSAGE = "Workout recorded but could not be saved"
RETRY_MESSAGE = "Please submit the workout again"


class AppController:
    """Event handlers for one user session.

    Every handler runs to completion before the next UI event is delivered,
    so the store is only ever touched from one place at a time.
    """

    def __init__(
        self,
        *,
        map_gateway: MapGateway,
        form: FormLayer,
        workout_list: WorkoutListView,
        persistence: PersistenceAdapter,
        notifier: Notifier,
        store: WorkoutStore | None = None,
    ) -> None:
        self._map = map_gateway
        self._form = form
        self._list = workout_list
        self._persistence = persistence
        self._notifier = notifier
        self._store = store or WorkoutStore()
        self._state = AppState()

    @property
    def state(self) -> ControllerState:
        return self._state.mode

    @property
    def pending(self) -> PendingEntry | None:
        return self._state.pending

    @property
    def store(self) -> WorkoutStore:
        return self._store

    @property
    def accepts_entries(self) -> bool:
        return not self._state.location_failed

    def on_startup(self) -> int:
        records = self._persistence.load()
        self._store.restore(records)
        for workout in self._store.snapshot():
            self._render(workout)
        logger.info("Restored {} workouts from storage", len(records))
        return len(records)

    def on_position_acquired(self, coordinates: Coordinates) -> None:
        self._state.location = coordinates
        self._state.location_failed = False
        self._map.recenter(coordinates)
        self._map.place_marker(coordinates, CURRENT_POSITION_LABEL)

    def on_position_failed(self, reason: str = "") -> None:
        self._state.location_failed = True
        logger.warning("Geolocation unavailable: {}", reason or "no reason given")
        self._notifier.notify(GEOLOCATION_FAILED_MESSAGE)

    def on_map_click(self, coordinates: Coordinates) -> bool:
        if self._state.mode != "idle":
            logger.debug("Map click ignored while an entry is pending")
            return False
        if not self.accepts_entries:
            logger.debug("Map click ignored: map position unavailable")
            return False
        if not coordinates.is_valid:
            logger.debug("Map click ignored: invalid coordinates {}", coordinates)
            return False

        self._state.pending = PendingEntry(coordinates=coordinates)
        self._state.mode = "awaiting_entry"
        self._form.open()
        return True

    def on_kind_changed(self, kind: str) -> None:
        if kind in WORKOUT_KINDS:
            self._form.show_kind_field(cast(WorkoutKind, kind))

    def on_form_cancel(self) -> None:
        if self._state.mode != "awaiting_entry":
            return
        self._reset_entry()

    def submit_form(self) -> Workout | None:
        fields = self._form.read_fields()
        return self.on_form_submit(
            fields.kind,
            fields.distance_km,
            fields.duration_min,
            fields.kind_specific,
        )

    def on_form_submit(
        self,
        kind: object,
        distance_km: object,
        duration_min: object,
        kind_specific: object,
    ) -> Workout | None:
        pending = self._state.pending
        if self._state.mode != "awaiting_entry" or pending is None:
            logger.debug("Form submit ignored: no pending entry")
            return None

        try:
            entry = validate_entry(kind, distance_km, duration_min, kind_specific)
            workout = entry.build(pending.coordinates)
            self._store.add(workout)
        except WorkoutValidationError as exc:
            self._form.show_error(str(exc))
            return None
        except DuplicateWorkoutError as exc:
            logger.warning("{}", exc)
            self._form.show_error(RETRY_MESSAGE)
            return None

        logger.info("Recorded {} ({})", workout.description, workout.id)
        self._render(workout)
        self._persist()
        self._reset_entry()
        return workout

    def on_workout_selected(self, workout_id: str) -> None:
        workout = self._store.find_by_id(workout_id)
        if workout is None:
            logger.debug("No workout with id {}", workout_id)
            return
        self._map.recenter(workout.coordinates)

    def _render(self, workout: Workout) -> None:
        self._map.place_marker(workout.coordinates, marker_label(workout), workout.kind)
        self._list.render(workout)

    def _reset_entry(self) -> None:
        self._form.close()
        self._state.pending = None
        self._state.mode = "idle"

    def _persist(self) -> None:
        try:
            self._persistence.save(self._store.snapshot())
        except PersistenceUnavailableError as exc:
            # The workout stays visible for this session.
            logger.warning("{}", exc)
            self._notifier.notify(SAVE_FAILED_MESSAGE)
