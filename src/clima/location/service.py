from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from ..domain.models import Coordinate

LOGGER = logging.getLogger(__name__)


class LocationResolutionError(RuntimeError):
    """Raised by location providers when permission is denied or no fix can be acquired."""


class LocationProvider(Protocol):
    def request_location(self) -> None:
        """Ask for a one-off fix; fixes or a LocationResolutionError arrive asynchronously."""


class CoordinateLookup(Protocol):
    def fetch_weather_by_coordinate(self, latitude: float, longitude: float) -> int: ...


class LocationTrigger:
    """Turns device location fixes into weather lookups."""

    def __init__(self, *, lookup: CoordinateLookup, provider: LocationProvider | None = None) -> None:
        self._lookup = lookup
        self._provider = provider

    def request_location(self) -> None:
        if self._provider is None:
            LOGGER.warning("Location requested but no location provider is configured")
            return
        self._provider.request_location()

    def on_locations_updated(self, fixes: Sequence[Coordinate]) -> int | None:
        if not fixes:
            LOGGER.debug("Location provider reported an empty batch of fixes")
            return None
        latest = fixes[-1]
        return self._lookup.fetch_weather_by_coordinate(latest.latitude, latest.longitude)

    def on_location_failed(self, error: LocationResolutionError) -> None:
        LOGGER.warning("Location provider failed: %s", error)
