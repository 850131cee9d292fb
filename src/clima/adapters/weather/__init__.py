from .base import DecodeError, InvalidRequest, TransportError, WeatherLookupError, WeatherTransport
from .open_weather import (
    UNKNOWN_ICON_KEY,
    UrllibWeatherTransport,
    build_request_url,
    condition_icon_key,
    decode_weather_payload,
)

__all__ = [
    "DecodeError",
    "InvalidRequest",
    "TransportError",
    "UNKNOWN_ICON_KEY",
    "UrllibWeatherTransport",
    "WeatherLookupError",
    "WeatherTransport",
    "build_request_url",
    "condition_icon_key",
    "decode_weather_payload",
]
