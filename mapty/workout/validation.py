"""Validation of workout form submissions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import cast

from mapty.workout.model import WORKOUT_KINDS, Coordinates, Cycling, Running, Workout, WorkoutKind

INVALID_INPUT_MESSAGE = "Inputs have to be positive numbers"


class WorkoutValidationError(ValueError):
    """Raised when submitted workout fields are missing or out of range."""


@dataclass(frozen=True)
class WorkoutEntry:
    kind: WorkoutKind
    distance_km: float
    duration_min: float
    # cadence (spm) for running, elevation gain (m) for cycling
    kind_specific: float

    def build(self, coordinates: Coordinates) -> Workout:
        if self.kind == "running":
            return Running.create(
                coordinates, self.distance_km, self.duration_min, self.kind_specific
            )
        if self.kind == "cycling":
            return Cycling.create(
                coordinates, self.distance_km, self.duration_min, self.kind_specific
            )
        raise WorkoutValidationError(f"Unknown workout type '{self.kind}'")


def validate_entry(
    kind: object,
    distance_km: object,
    duration_min: object,
    kind_specific: object,
) -> WorkoutEntry:
    if kind not in WORKOUT_KINDS:
        raise WorkoutValidationError(f"Unknown workout type '{kind}'")

    distance = _parse_finite(distance_km)
    duration = _parse_finite(duration_min)
    extra = _parse_finite(kind_specific)

    required_positive = [distance, duration]
    if kind == "running":
        required_positive.append(extra)
    # Cycling elevation only has to be finite: a net loss is a valid entry.
    if not all(value > 0 for value in required_positive):
        raise WorkoutValidationError(INVALID_INPUT_MESSAGE)

    return WorkoutEntry(
        kind=cast(WorkoutKind, kind),
        distance_km=distance,
        duration_min=duration,
        kind_specific=extra,
    )


def _parse_finite(raw: object) -> float:
    if raw is None or isinstance(raw, bool):
        raise WorkoutValidationError(INVALID_INPUT_MESSAGE)
    if isinstance(raw, str) and raw.strip() == "":
        raise WorkoutValidationError(INVALID_INPUT_MESSAGE)
    try:
        value = float(str(raw).strip())
    except ValueError as exc:
        raise WorkoutValidationError(INVALID_INPUT_MESSAGE) from exc
    if not math.isfinite(value):
        raise WorkoutValidationError(INVALID_INPUT_MESSAGE)
    return value
