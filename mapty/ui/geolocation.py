"""Browser geolocation through the NiceGUI client."""

from __future__ import annotations

from nicegui import ui

from mapty.workout.model import Coordinates

DEFAULT_TIMEOUT_SEC = 10.0

# Resolves instead of rejecting so errors reach Python as data.
GEOLOCATION_JS = """
return await new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve({error: "Geolocation is not supported by this browser"});
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (position) => resolve({
      latitude: position.coords.latitude,
      longitude: position.coords.longitude,
    }),
    (error) => resolve({error: error.message || "Permission denied"}),
    {timeout: %d},
  );
});
"""


class GeolocationUnavailableError(RuntimeError):
    """Raised when the browser cannot provide a position."""


def parse_position(payload: object) -> Coordinates:
    if not isinstance(payload, dict):
        raise GeolocationUnavailableError("No position returned by the browser")
    error = payload.get("error")
    if error:
        raise GeolocationUnavailableError(str(error))
    try:
        coordinates = Coordinates(
            latitude=float(payload["latitude"]),
            longitude=float(payload["longitude"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise GeolocationUnavailableError(f"Malformed position: {payload!r}") from exc
    if not coordinates.is_valid:
        raise GeolocationUnavailableError(f"Position out of range: {payload!r}")
    return coordinates


async def request_position(timeout: float = DEFAULT_TIMEOUT_SEC) -> Coordinates:
    script = GEOLOCATION_JS % int(timeout * 1000)
    try:
        payload = await ui.run_javascript(script, timeout=timeout + 2.0)
    except TimeoutError as exc:
        raise GeolocationUnavailableError("Timed out waiting for the browser position") from exc
    return parse_position(payload)
