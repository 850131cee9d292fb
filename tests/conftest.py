from __future__ import annotations

import json
from collections.abc import Callable
from concurrent.futures import Executor, Future
from typing import Any

import pytest

from clima.adapters.weather.base import TransportError
from clima.lookup.manager import WeatherManager
from clima.settings import ClimaSettings, load_settings


def make_payload(
    name: str = "London",
    temp: float = 21.4,
    code: int = 800,
) -> dict[str, Any]:
    return {
        "coord": {"lon": -0.13, "lat": 51.51},
        "weather": [{"id": code, "main": "Clear", "description": "clear sky", "icon": "01d"}],
        "main": {"temp": temp, "feels_like": temp - 1, "pressure": 1012, "humidity": 81},
        "name": name,
        "cod": 200,
    }


def encode(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


class FakeTransport:
    """Answers by the first registered URL fragment that matches."""

    def __init__(self) -> None:
        self.responses: list[tuple[str, bytes | Exception]] = []
        self.urls: list[str] = []

    def respond(self, fragment: str, response: bytes | Exception) -> None:
        self.responses.append((fragment, response))

    def get(self, url: str) -> bytes:
        self.urls.append(url)
        for fragment, response in self.responses:
            if fragment in url:
                if isinstance(response, Exception):
                    raise response
                return response
        raise TransportError(f"No canned response for {url}", status_code=404)


class ManualWorkers(Executor):
    """Holds submitted work until a test completes it explicitly."""

    def __init__(self) -> None:
        self.pending: list[tuple[Future, Callable[..., Any], tuple[Any, ...]]] = []

    def submit(self, fn, /, *args, **kwargs):  # type: ignore[override]
        future: Future = Future()
        self.pending.append((future, fn, args))
        return future

    def complete(self, index: int) -> None:
        future, fn, args = self.pending[index]
        try:
            result = fn(*args)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)


class ManualDelivery:
    def __init__(self) -> None:
        self.queue: list[Callable[[], None]] = []

    def post(self, callback: Callable[[], None]) -> None:
        self.queue.append(callback)

    def drain(self) -> None:
        while self.queue:
            self.queue.pop(0)()


class RecordingObserver:
    def __init__(self) -> None:
        self.updates: list[Any] = []
        self.failures: list[Exception] = []

    @property
    def calls(self) -> int:
        return len(self.updates) + len(self.failures)

    def on_weather_updated(self, model) -> None:
        self.updates.append(model)

    def on_weather_failed(self, error) -> None:
        self.failures.append(error)


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> ClimaSettings:
    monkeypatch.delenv("CLIMA_BASE_URL", raising=False)
    monkeypatch.delenv("CLIMA_TIMEOUT_SECONDS", raising=False)
    return ClimaSettings(clima_api_key="test-key")


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def workers() -> ManualWorkers:
    return ManualWorkers()


@pytest.fixture
def delivery() -> ManualDelivery:
    return ManualDelivery()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def manager(settings, transport, workers, delivery, observer) -> WeatherManager:
    weather_manager = WeatherManager(
        settings=settings,
        transport=transport,
        delivery=delivery,
        workers=workers,
    )
    weather_manager.set_observer(observer)
    return weather_manager
