from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ...domain.models import LookupRequest, WeatherModel
from ...settings import OPEN_WEATHER_CURRENT_URL
from .base import DecodeError, InvalidRequest, TransportError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10
UNITS = "metric"
COORDINATE_PRECISION = 4

UNKNOWN_ICON_KEY = "questionmark"

# Inclusive OpenWeatherMap condition id ranges.
CONDITION_ICON_RANGES = (
    (200, 232, "cloud.bolt"),
    (300, 321, "cloud.drizzle"),
    (500, 531, "cloud.rain"),
    (600, 622, "cloud.snow"),
    (701, 781, "cloud.fog"),
    (800, 800, "sun.max"),
    (801, 804, "cloud"),
)


def condition_icon_key(code: int) -> str:
    for low, high, icon_key in CONDITION_ICON_RANGES:
        if low <= code <= high:
            return icon_key
    return UNKNOWN_ICON_KEY


def _format_coordinate(value: float) -> str:
    text = f"{value:.{COORDINATE_PRECISION}f}".rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def build_request_url(
    request: LookupRequest,
    *,
    api_key: str,
    base_url: str = OPEN_WEATHER_CURRENT_URL,
) -> str:
    params = {"appid": api_key, "units": UNITS}
    if request.by_coordinate is not None:
        params["lat"] = _format_coordinate(request.by_coordinate.latitude)
        params["lon"] = _format_coordinate(request.by_coordinate.longitude)
    elif request.by_name is not None and request.by_name.strip():
        params["q"] = request.by_name.strip()
    else:
        raise InvalidRequest("Lookup request has neither a city name nor a coordinate")
    return f"{base_url}?{urlencode(params, quote_via=quote)}"


class UrllibWeatherTransport:
    def __init__(self, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout_seconds = timeout_seconds

    def get(self, url: str) -> bytes:
        request = Request(url, headers={"User-Agent": "clima/0.1", "Accept": "application/json"})
        try:
            with urlopen(request, timeout=self._timeout_seconds) as response:
                return response.read()
        except HTTPError as exc:
            raise TransportError(
                f"Weather endpoint answered with HTTP {exc.code}",
                status_code=exc.code,
            ) from exc
        except (URLError, TimeoutError, OSError) as exc:
            raise TransportError("Failed to reach the weather endpoint") from exc


def _require_mapping(value: Any, *, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DecodeError(f"Weather payload field '{field_name}' must be an object")
    return value


def _require_number(value: Any, *, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Weather payload field '{field_name}' must be numeric")
    try:
        number = float(value)
    except OverflowError as exc:
        raise DecodeError(f"Weather payload field '{field_name}' is out of range") from exc
    if not math.isfinite(number):
        raise DecodeError(f"Weather payload field '{field_name}' must be finite")
    return number


def _require_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool):
        raise DecodeError(f"Weather payload field '{field_name}' must be an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise DecodeError(f"Weather payload field '{field_name}' must be an integer")
    return value


def _load_document(payload: bytes | str | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(payload, Mapping):
        return payload
    try:
        document = json.loads(payload)
    except (TypeError, ValueError) as exc:
        raise DecodeError("Weather payload is not valid JSON") from exc
    return _require_mapping(document, field_name="<root>")


def decode_weather_payload(payload: bytes | str | Mapping[str, Any]) -> WeatherModel:
    document = _load_document(payload)

    city_name = document.get("name")
    if not isinstance(city_name, str) or not city_name.strip():
        raise DecodeError("Weather payload field 'name' must be a non-empty string")

    main = _require_mapping(document.get("main"), field_name="main")
    temperature = _require_number(main.get("temp"), field_name="main.temp")

    conditions = document.get("weather")
    if not isinstance(conditions, list) or not conditions:
        raise DecodeError("Weather payload field 'weather' must be a non-empty list")
    condition = _require_mapping(conditions[0], field_name="weather[0]")
    condition_code = _require_int(condition.get("id"), field_name="weather[0].id")

    icon_key = condition_icon_key(condition_code)
    if icon_key == UNKNOWN_ICON_KEY:
        LOGGER.debug("Unrecognised weather condition code %s", condition_code)

    return WeatherModel(
        city_name=city_name.strip(),
        temperature_celsius=float(round(temperature)),
        condition_icon_key=icon_key,
        raw_condition_code=condition_code,
    )
