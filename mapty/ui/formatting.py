"""Display helpers shared by the map popups, the workout list and the CLI."""

from __future__ import annotations

from dataclasses import dataclass

from mapty.workout.model import Cycling, Running, Workout, WorkoutKind

KIND_ICONS: dict[WorkoutKind, str] = {
    "running": "🏃‍♂️",
    "cycling": "🚴‍♀️",
}


@dataclass(frozen=True)
class DetailRow:
    icon: str
    value: str
    unit: str


def _fmt_number(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}"


def _fmt_plain(value: float) -> str:
    # Entered values are shown as typed: 5.0 -> "5", 5.25 -> "5.25".
    return f"{value:g}"


def marker_label(workout: Workout) -> str:
    return f"{KIND_ICONS[workout.kind]} {workout.description}"


def workout_details(workout: Workout) -> list[DetailRow]:
    rows = [
        DetailRow(KIND_ICONS[workout.kind], _fmt_plain(workout.distance_km), "km"),
        DetailRow("⏱", _fmt_plain(workout.duration_min), "min"),
    ]
    if isinstance(workout, Running):
        rows.append(DetailRow("⚡️", _fmt_number(workout.pace_min_per_km), "min/km"))
        rows.append(DetailRow("🦶🏼", _fmt_plain(workout.cadence_spm), "spm"))
    elif isinstance(workout, Cycling):
        rows.append(DetailRow("⚡️", _fmt_number(workout.speed_km_per_h), "km/h"))
        rows.append(DetailRow("⛰", _fmt_plain(workout.elevation_gain_m), "m"))
    else:
        raise TypeError(f"Unsupported workout type {type(workout).__name__}")
    return rows


def summary_line(workout: Workout) -> str:
    details = "  ".join(f"{row.value} {row.unit}" for row in workout_details(workout))
    return f"{workout.id}  {marker_label(workout):<28} {details}"
