"""Runtime state of the app controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from mapty.workout.model import Coordinates


ControllerState = Literal["idle", "awaiting_entry"]


@dataclass(frozen=True)
class PendingEntry:
    coordinates: Coordinates


@dataclass
class AppState:
    mode: ControllerState = "idle"
    pending: PendingEntry | None = None
    location: Coordinates | None = None
    location_failed: bool = False
