from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from ..adapters.weather.base import WeatherLookupError
from ..domain.models import WeatherModel

LOGGER = logging.getLogger(__name__)

LookupResult = WeatherModel | WeatherLookupError


class WeatherObserver(Protocol):
    def on_weather_updated(self, model: WeatherModel) -> None:
        """Present a freshly looked-up weather model."""

    def on_weather_failed(self, error: WeatherLookupError) -> None:
        """Present a lookup failure."""


class DeliveryContext(Protocol):
    def post(self, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` on the context observers are allowed to run on."""


class InlineDelivery:
    """Runs callbacks immediately on the calling thread."""

    def post(self, callback: Callable[[], None]) -> None:
        callback()


class SerialDeliveryQueue:
    """Runs callbacks one at a time, in submission order, on a dedicated thread."""

    def __init__(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="clima-delivery")

    def post(self, callback: Callable[[], None]) -> None:
        self._executor.submit(callback)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class ResultDispatcher:
    def __init__(self, *, is_current: Callable[[int], bool], delivery: DeliveryContext) -> None:
        self._is_current = is_current
        self._delivery = delivery
        self._observer: WeatherObserver | None = None
        self._observer_lock = threading.Lock()

    @property
    def observer(self) -> WeatherObserver | None:
        with self._observer_lock:
            return self._observer

    def set_observer(self, observer: WeatherObserver | None) -> None:
        with self._observer_lock:
            self._observer = observer

    def dispatch(self, token: int, result: LookupResult) -> None:
        if not self._is_current(token):
            LOGGER.debug("Dropping result of superseded lookup %s", token)
            return
        self._delivery.post(lambda: self._deliver(token, result))

    def _deliver(self, token: int, result: LookupResult) -> None:
        # A newer lookup may have been issued while this result was queued.
        if not self._is_current(token):
            LOGGER.debug("Dropping result of superseded lookup %s", token)
            return

        observer = self.observer
        if observer is None:
            LOGGER.warning("No weather observer registered; dropping result of lookup %s", token)
            return

        try:
            if isinstance(result, WeatherModel):
                observer.on_weather_updated(result)
            else:
                observer.on_weather_failed(result)
        except Exception:
            LOGGER.exception("Weather observer failed while handling lookup %s", token)
