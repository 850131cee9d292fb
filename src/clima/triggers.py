from __future__ import annotations

import logging
from typing import Protocol

LOGGER = logging.getLogger(__name__)

SEARCH_PLACEHOLDER = "Search"
EMPTY_SEARCH_PROMPT = "Enter city name"


class CityLookup(Protocol):
    def fetch_weather_by_city(self, city_name: str) -> int: ...


class CitySearchTrigger:
    """Submits city searches, refusing blank input before it reaches a lookup."""

    def __init__(self, *, lookup: CityLookup) -> None:
        self._lookup = lookup
        self.placeholder = SEARCH_PLACEHOLDER

    def submit(self, text: str | None) -> int | None:
        city_name = (text or "").strip()
        if not city_name:
            self.placeholder = EMPTY_SEARCH_PROMPT
            LOGGER.debug("Ignoring blank city search")
            return None

        self.placeholder = SEARCH_PLACEHOLDER
        return self._lookup.fetch_weather_by_city(city_name)
