"""In-memory collection of the workouts recorded in this session."""

from __future__ import annotations

from typing import Iterable, Iterator

from mapty.workout.model import Workout


class DuplicateWorkoutError(ValueError):
    """Raised when a workout id is already present in the store."""


class WorkoutStore:
    def __init__(self) -> None:
        self._workouts: list[Workout] = []

    def __len__(self) -> int:
        return len(self._workouts)

    def __iter__(self) -> Iterator[Workout]:
        return iter(tuple(self._workouts))

    def add(self, workout: Workout) -> None:
        if self.find_by_id(workout.id) is not None:
            raise DuplicateWorkoutError(f"Workout id {workout.id} already recorded")
        self._workouts.append(workout)

    def find_by_id(self, workout_id: str) -> Workout | None:
        for workout in self._workouts:
            if workout.id == workout_id:
                return workout
        return None

    def restore(self, records: Iterable[Workout]) -> None:
        # Records come from our own persistence layer and are not re-checked.
        self._workouts = list(records)

    def snapshot(self) -> tuple[Workout, ...]:
        """Ordered copy of the collection; records themselves are frozen."""
        return tuple(self._workouts)
