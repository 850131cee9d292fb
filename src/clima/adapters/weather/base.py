from __future__ import annotations

from typing import Protocol


class WeatherLookupError(RuntimeError):
    """Base class for failures delivered to the weather observer."""

    kind = "lookup"


class InvalidRequest(WeatherLookupError):
    """Raised when a lookup request cannot be turned into a query URL."""

    kind = "invalid_request"


class TransportError(WeatherLookupError):
    """Raised when the weather endpoint cannot be reached or answers with an error status."""

    kind = "transport"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(WeatherLookupError):
    """Raised when a weather payload is missing a required field or is malformed."""

    kind = "decode"


class WeatherTransport(Protocol):
    def get(self, url: str) -> bytes:
        """Perform a single GET request and return the raw response body."""
