from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from functools import partial

from pydantic import ValidationError

from ..adapters.weather.base import (
    DecodeError,
    InvalidRequest,
    TransportError,
    WeatherLookupError,
    WeatherTransport,
)
from ..adapters.weather.open_weather import (
    UrllibWeatherTransport,
    build_request_url,
    decode_weather_payload,
)
from ..domain.models import LookupRequest
from ..settings import ClimaSettings, load_settings
from .dispatcher import DeliveryContext, LookupResult, ResultDispatcher, SerialDeliveryQueue, WeatherObserver
from .executor import FetchExecutor, InFlightFetch

LOGGER = logging.getLogger(__name__)


class WeatherManager:
    """Coordinates weather lookups from city searches and location fixes.

    Lookups run on a worker pool. Each completed lookup is decoded and handed
    to the result dispatcher, which only lets the most recently issued lookup
    reach the registered observer.
    """

    def __init__(
        self,
        *,
        settings: ClimaSettings | None = None,
        transport: WeatherTransport | None = None,
        delivery: DeliveryContext | None = None,
        workers: Executor | None = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._owns_delivery = delivery is None
        self._delivery = delivery or SerialDeliveryQueue()
        self._executor = FetchExecutor(
            transport=transport
            or UrllibWeatherTransport(timeout_seconds=self._settings.clima_timeout_seconds),
            build_url=partial(
                build_request_url,
                api_key=self._settings.clima_api_key,
                base_url=self._settings.clima_base_url,
            ),
            workers=workers,
        )
        self._dispatcher = ResultDispatcher(
            is_current=self._executor.is_current,
            delivery=self._delivery,
        )
        self._idle = threading.Condition()
        self._pending = 0

    @property
    def observer(self) -> WeatherObserver | None:
        return self._dispatcher.observer

    def set_observer(self, observer: WeatherObserver | None) -> None:
        self._dispatcher.set_observer(observer)

    def fetch_weather_by_city(self, city_name: str) -> int:
        try:
            request = LookupRequest.for_city(city_name)
        except ValidationError as exc:
            return self._reject(f"Invalid city name {city_name!r}", exc)
        return self.fetch(request)

    def fetch_weather_by_coordinate(self, latitude: float, longitude: float) -> int:
        try:
            request = LookupRequest.for_coordinate(latitude, longitude)
        except ValidationError as exc:
            return self._reject(f"Invalid coordinate ({latitude}, {longitude})", exc)
        return self.fetch(request)

    def fetch(self, request: LookupRequest) -> int:
        return self._track(self._executor.fetch(request))

    def _reject(self, message: str, cause: ValidationError) -> int:
        error = InvalidRequest(message)
        error.__cause__ = cause
        return self._track(self._executor.reject(error))

    def _track(self, in_flight: InFlightFetch) -> int:
        with self._idle:
            self._pending += 1
        in_flight.future.add_done_callback(partial(self._on_fetch_done, in_flight))
        return in_flight.token

    def _on_fetch_done(self, in_flight: InFlightFetch, future: Future[bytes]) -> None:
        try:
            result = self._resolve(in_flight, future)
            self._dispatcher.dispatch(in_flight.token, result)
        finally:
            with self._idle:
                self._pending -= 1
                self._idle.notify_all()

    @staticmethod
    def _resolve(in_flight: InFlightFetch, future: Future[bytes]) -> LookupResult:
        try:
            payload = future.result()
        except WeatherLookupError as exc:
            LOGGER.warning("Lookup %s failed: %s", in_flight.token, exc)
            return exc
        except Exception as exc:  # pragma: no cover - defensive fallback
            LOGGER.exception("Lookup %s failed unexpectedly", in_flight.token)
            error = TransportError("Weather lookup failed unexpectedly")
            error.__cause__ = exc
            return error

        try:
            return decode_weather_payload(payload)
        except WeatherLookupError as exc:
            LOGGER.warning("Lookup %s returned an unusable payload: %s", in_flight.token, exc)
            return exc
        except Exception as exc:
            LOGGER.exception("Lookup %s payload could not be decoded", in_flight.token)
            error = DecodeError("Weather payload could not be decoded")
            error.__cause__ = exc
            return error

    def close(self, *, timeout: float | None = None) -> None:
        """Stop the worker pool and the delivery queue this manager created.

        Lookups still running on caller-supplied workers are waited for, up to
        ``timeout`` seconds, before the delivery queue is shut down.
        """
        self._executor.shutdown()
        if self._owns_delivery and isinstance(self._delivery, SerialDeliveryQueue):
            with self._idle:
                if not self._idle.wait_for(lambda: self._pending == 0, timeout=timeout):
                    LOGGER.warning("Closing with %s weather lookups still in flight", self._pending)
            self._delivery.shutdown()

    def __enter__(self) -> WeatherManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
