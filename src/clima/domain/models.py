from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class LookupRequest(BaseModel):
    """A single weather lookup, either by city name or by coordinate."""

    model_config = ConfigDict(frozen=True)

    by_name: str | None = None
    by_coordinate: Coordinate | None = None

    @field_validator("by_name")
    @classmethod
    def validate_by_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError("by_name must not be blank")
        return text

    @model_validator(mode="after")
    def validate_single_variant(self) -> LookupRequest:
        if (self.by_name is None) == (self.by_coordinate is None):
            raise ValueError("exactly one of by_name or by_coordinate must be set")
        return self

    @classmethod
    def for_city(cls, city_name: str) -> LookupRequest:
        return cls(by_name=city_name)

    @classmethod
    def for_coordinate(cls, latitude: float, longitude: float) -> LookupRequest:
        return cls(by_coordinate=Coordinate(latitude=latitude, longitude=longitude))

    def describe(self) -> str:
        if self.by_coordinate is not None:
            return f"{self.by_coordinate.latitude:.4f},{self.by_coordinate.longitude:.4f}"
        return f"'{self.by_name}'"


class WeatherModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    city_name: str
    temperature_celsius: float
    condition_icon_key: str
    raw_condition_code: int

    @property
    def temperature_string(self) -> str:
        return f"{self.temperature_celsius:.0f}°C"
