"""Workout domain models."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Literal


WorkoutKind = Literal["running", "cycling"]
WORKOUT_KINDS: tuple[WorkoutKind, ...] = ("running", "cycling")

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

ID_DIGITS = 10


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    @property
    def is_valid(self) -> bool:
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


def local_now() -> datetime:
    return datetime.now().astimezone()


def new_workout_id(now: datetime | None = None) -> str:
    """Last digits of the epoch-millisecond clock.

    Unique only at human entry rates; two workouts created within the same
    millisecond collide.
    """
    if now is None:
        millis = time.time_ns() // 1_000_000
    else:
        millis = int(now.timestamp() * 1000)
    return str(millis)[-ID_DIGITS:]


def describe(kind: WorkoutKind, created_at: datetime) -> str:
    return f"{kind.capitalize()} on {MONTH_NAMES[created_at.month - 1]} {created_at.day}"


@dataclass(frozen=True)
class Workout:
    """A recorded activity at a point on the map.

    Concrete records are `Running` or `Cycling`; derived fields are filled
    in once by ``__post_init__`` and never change afterwards.
    """

    kind: ClassVar[WorkoutKind]

    id: str
    created_at: datetime
    coordinates: Coordinates
    distance_km: float
    duration_min: float
    description: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "description", describe(self.kind, self.created_at))

    @staticmethod
    def _stamp(now: datetime | None) -> tuple[str, datetime]:
        created_at = now or local_now()
        return new_workout_id(created_at), created_at


@dataclass(frozen=True)
class Running(Workout):
    kind: ClassVar[WorkoutKind] = "running"

    cadence_spm: float
    pace_min_per_km: float = field(init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "pace_min_per_km", self.duration_min / self.distance_km)

    @classmethod
    def create(
        cls,
        coordinates: Coordinates,
        distance_km: float,
        duration_min: float,
        cadence_spm: float,
        *,
        now: datetime | None = None,
    ) -> Running:
        workout_id, created_at = cls._stamp(now)
        return cls(
            id=workout_id,
            created_at=created_at,
            coordinates=coordinates,
            distance_km=distance_km,
            duration_min=duration_min,
            cadence_spm=cadence_spm,
        )


@dataclass(frozen=True)
class Cycling(Workout):
    kind: ClassVar[WorkoutKind] = "cycling"

    elevation_gain_m: float
    speed_km_per_h: float = field(init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(
            self, "speed_km_per_h", self.distance_km / (self.duration_min / 60)
        )

    @classmethod
    def create(
        cls,
        coordinates: Coordinates,
        distance_km: float,
        duration_min: float,
        elevation_gain_m: float,
        *,
        now: datetime | None = None,
    ) -> Cycling:
        workout_id, created_at = cls._stamp(now)
        return cls(
            id=workout_id,
            created_at=created_at,
            coordinates=coordinates,
            distance_km=distance_km,
            duration_min=duration_min,
            elevation_gain_m=elevation_gain_m,
        )
