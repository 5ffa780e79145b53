"""NiceGUI web UI: Leaflet map, entry form and workout list."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from loguru import logger
from nicegui import Client, ui

from mapty.core.controller import AppController
from mapty.ui.formatting import KIND_ICONS, workout_details
from mapty.ui.gateways import FormFields
from mapty.ui.geolocation import GeolocationUnavailableError, request_position
from mapty.workout.model import Coordinates, Workout, WorkoutKind
from mapty.workout.persistence import JsonFileStorage, PersistenceAdapter

MAP_ZOOM_LEVEL = 13
DEFAULT_CENTER = (51.505, -0.09)
TILE_URL = "https://{s}.tile.openstreetmap.fr/hot/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)
KIND_OPTIONS: dict[str, str] = {"running": "Running", "cycling": "Cycling"}


class LeafletMapGateway:
    def __init__(self, leaflet: ui.leaflet, zoom: int = MAP_ZOOM_LEVEL) -> None:
        self._map = leaflet
        self._zoom = zoom

    def place_marker(
        self, coordinates: Coordinates, label: str, kind: WorkoutKind | None = None
    ) -> None:
        marker = self._map.marker(latlng=coordinates.as_tuple())
        options: dict[str, Any] = {
            "autoClose": False,
            "closeOnClick": False,
            "maxWidth": 250,
            "minWidth": 100,
        }
        if kind is not None:
            options["className"] = f"{kind}-popup"
        marker.run_method("bindPopup", label, options)
        marker.run_method("openPopup")

    def recenter(self, coordinates: Coordinates) -> None:
        self._map.set_center(coordinates.as_tuple())
        self._map.set_zoom(self._zoom)


class WebFormLayer:
    def __init__(self) -> None:
        with ui.card().classes("w-full mapty-form") as self._card:
            with ui.row().classes("w-full items-end gap-2"):
                self._kind = ui.select(KIND_OPTIONS, value="running", label="Type")
                self._distance = ui.number("Distance (km)", min=0)
                self._duration = ui.number("Duration (min)", min=0)
                self._cadence = ui.number("Cadence (step/min)", min=0)
                self._elevation = ui.number("Elev Gain (m)")
            with ui.row().classes("w-full justify-end gap-2"):
                self.cancel_btn = ui.button("Cancel").props("outline")
                self.submit_btn = ui.button("OK").props("color=primary")
        self._elevation.set_visibility(False)
        self._card.set_visibility(False)

    def on_kind_change(self, handler: Callable[[str], None]) -> None:
        self._kind.on_value_change(lambda e: handler(str(e.value)))

    def open(self) -> None:
        self._card.set_visibility(True)
        self._distance.run_method("focus")

    def close(self) -> None:
        self._distance.value = None
        self._duration.value = None
        self._cadence.value = None
        self._elevation.value = None
        self._card.set_visibility(False)

    def read_fields(self) -> FormFields:
        kind = str(self._kind.value)
        extra = self._cadence.value if kind == "running" else self._elevation.value
        return FormFields(
            kind=kind,
            distance_km=self._distance.value,
            duration_min=self._duration.value,
            kind_specific=extra,
        )

    def show_error(self, message: str) -> None:
        ui.notify(message, color="negative")

    def show_kind_field(self, kind: WorkoutKind) -> None:
        self._cadence.set_visibility(kind == "running")
        self._elevation.set_visibility(kind == "cycling")


class WebWorkoutList:
    def __init__(self) -> None:
        self.on_select: Callable[[str], None] = lambda _workout_id: None
        self._column = ui.column().classes("w-full gap-2")

    def render(self, workout: Workout) -> None:
        with self._column:
            with ui.card().classes(f"w-full workout workout--{workout.kind}") as card:
                ui.label(workout.description).classes("text-lg font-bold")
                with ui.row().classes("gap-4"):
                    for row in workout_details(workout):
                        ui.label(f"{row.icon} {row.value} {row.unit}")
        # Newest entries go on top, right below the form.
        card.move(target_index=0)
        card.on("click", lambda workout_id=workout.id: self.on_select(workout_id))


class NoticeDialog:
    def __init__(self) -> None:
        with ui.dialog().props("persistent") as self._dialog, ui.card():
            self._message = ui.label("")
            ui.button("OK", on_click=self._dialog.close)

    def notify(self, message: str) -> None:
        self._message.text = message
        self._dialog.open()


def _to_coordinates(args: dict[str, Any]) -> Coordinates | None:
    latlng = args.get("latlng") or {}
    try:
        return Coordinates(latitude=float(latlng["lat"]), longitude=float(latlng["lng"]))
    except (KeyError, TypeError, ValueError):
        return None


def run_web_ui(
    *,
    storage_path: Path | None = None,
    host: str = "127.0.0.1",
    port: int = 8089,
) -> int:
    storage = JsonFileStorage(storage_path)
    logger.info("Using workout storage at {}", storage.path)

    @ui.page("/")
    async def index(client: Client) -> None:
        ui.label("Mapty").classes("text-2xl font-bold")
        with ui.row().classes("w-full no-wrap gap-4"):
            with ui.column().classes("w-1/3 gap-2"):
                form = WebFormLayer()
                workout_list = WebWorkoutList()
            leaflet = ui.leaflet(center=DEFAULT_CENTER, zoom=MAP_ZOOM_LEVEL).classes(
                "w-2/3 h-[80vh]"
            )
        leaflet.clear_layers()
        leaflet.tile_layer(url_template=TILE_URL, options={"attribution": TILE_ATTRIBUTION})

        controller = AppController(
            map_gateway=LeafletMapGateway(leaflet),
            form=form,
            workout_list=workout_list,
            persistence=PersistenceAdapter(storage),
            notifier=NoticeDialog(),
        )

        def on_map_click(e: Any) -> None:
            coordinates = _to_coordinates(e.args)
            if coordinates is not None:
                controller.on_map_click(coordinates)

        leaflet.on("map-click", on_map_click)
        workout_list.on_select = controller.on_workout_selected
        form.on_kind_change(controller.on_kind_changed)
        form.submit_btn.on_click(controller.submit_form)
        form.cancel_btn.on_click(controller.on_form_cancel)

        await client.connected()
        await leaflet.initialized()
        controller.on_startup()
        try:
            position = await request_position()
        except GeolocationUnavailableError as exc:
            controller.on_position_failed(str(exc))
        else:
            controller.on_position_acquired(position)

    logger.info("Mapty listening on http://{}:{}", host, port)
    ui.run(host=host, port=port, reload=False, title="Mapty", favicon=KIND_ICONS["running"])
    return 0
