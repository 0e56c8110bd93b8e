"""Exceptions raised by :class:`yahoo_weather.provider.YahooWeatherProvider`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import Weather


class WeatherError(Exception):
    """Base error. ``result`` holds the provider's cached result after the failure."""

    def __init__(self, message: str, *, result: Optional["Weather"] = None) -> None:
        super().__init__(message)
        self.result = result


class SigningError(WeatherError):
    """Nonce or timestamp generation failed while signing a request."""


class TransportError(WeatherError):
    """The HTTP request failed or returned a status other than 200."""

    def __init__(
        self, message: str, *, status_code: Optional[int] = None, result: Optional["Weather"] = None
    ) -> None:
        super().__init__(message, result=result)
        self.status_code = status_code


class DecodeError(WeatherError):
    """The response body is not valid JSON or does not match the weather schema."""
