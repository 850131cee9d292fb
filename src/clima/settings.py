from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OPEN_WEATHER_CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"


class ClimaSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    clima_api_key: str
    clima_base_url: str = OPEN_WEATHER_CURRENT_URL
    clima_timeout_seconds: float = Field(default=10, ge=1, le=60)

    @field_validator("clima_api_key")
    @classmethod
    def validate_api_key(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("clima_api_key must not be empty")
        return text

    @field_validator("clima_base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        text = value.strip()
        parsed = urlparse(text)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("clima_base_url must be an absolute http(s) URL")
        if parsed.query:
            raise ValueError("clima_base_url must not carry query parameters")
        return text


@lru_cache(maxsize=1)
def load_settings() -> ClimaSettings:
    return ClimaSettings()
