"""Error taxonomy shared by the weather and agent HTTP clients."""

from __future__ import annotations


class WeatherAgentError(Exception):
    """Base class for every failure a client can surface to a store."""


class NetworkError(WeatherAgentError):
    """Raised on connectivity failures and timeouts."""


class HttpStatusError(WeatherAgentError):
    """Raised when the server answers with a non-success status."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Server returned error: {status_code}")


class DecodeError(WeatherAgentError):
    """Raised when a response body cannot be parsed into the expected shape."""


class MissingFieldError(DecodeError):
    """Raised when a JSON response lacks a required field."""
