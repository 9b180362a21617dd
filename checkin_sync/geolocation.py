"""Device location providers."""
from __future__ import annotations

from typing import Optional, Protocol

from .models import Coordinates


class GeolocationProvider(Protocol):
    """Protocol for whatever supplies the device's current position."""

    def request_permission(self) -> None:
        ...

    def current_coordinates(self) -> Optional[Coordinates]:
        ...


class StaticGeolocation:
    """Provider holding a fixed, optionally unknown, position."""

    def __init__(self, coordinates: Optional[Coordinates] = None) -> None:
        self._coordinates = coordinates
        self.permission_requested = False

    def request_permission(self) -> None:
        self.permission_requested = True

    def current_coordinates(self) -> Optional[Coordinates]:
        return self._coordinates

    def update(self, coordinates: Optional[Coordinates]) -> None:
        self._coordinates = coordinates
