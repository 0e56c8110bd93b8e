from __future__ import annotations

import time
from typing import Callable, Dict, Optional

import httpx

from .config import ProviderConfig, QueryConfig, RSS_URL, app_config
from .errors import DecodeError, WeatherError
from .http_client import WeatherHttpClient
from .logging import get_logger
from .models import Unit, Weather
from .signer import OAuth1Signer

logger = get_logger(__name__)


def normalize_location(location: str) -> str:
    """Lower-case and collapse ``", "`` to ``","``. No other whitespace changes."""
    return location.lower().replace(", ", ",")


class YahooWeatherProvider:
    """Yahoo Weather client that reuses the previous result while it is fresh.

    A query is answered from the cached result when the location and unit
    match the previous query and fewer than
    ``QueryConfig.min_update_timeout_seconds`` have passed since the last
    successful fetch. Otherwise the request is signed and sent.

    Instances are not thread safe; callers sharing one provider must hold a
    lock around :meth:`query`.
    """

    def __init__(
        self,
        app_id: str,
        client_id: str,
        client_secret: str,
        *,
        config: Optional[QueryConfig] = None,
        client: Optional[httpx.Client] = None,
        endpoint: str = RSS_URL,
        clock: Callable[[], float] = time.time,
        signer: Optional[OAuth1Signer] = None,
    ) -> None:
        self.app_id = app_id
        self.config = config or app_config.query
        self.signer = signer or OAuth1Signer(client_id, client_secret, clock=clock)
        self.http = WeatherHttpClient(client, endpoint=endpoint)
        self._clock = clock

        self._location = ""
        self._normalized_location = ""
        self._unit = Unit.IMPERIAL
        self._unit_code = "f"
        self._last_query_time = 0.0
        self._last_result = Weather()

    @classmethod
    def from_config(cls, config: Optional[ProviderConfig] = None, **kwargs) -> "YahooWeatherProvider":
        config = config or app_config.provider
        kwargs.setdefault("endpoint", config.endpoint)
        return cls(config.app_id, config.client_id, config.client_secret, **kwargs)

    @property
    def location(self) -> str:
        return self._location

    @property
    def normalized_location(self) -> str:
        return self._normalized_location

    @property
    def unit(self) -> Unit:
        return self._unit

    @property
    def unit_code(self) -> str:
        return self._unit_code

    @property
    def last_query_time(self) -> float:
        return self._last_query_time

    @property
    def last_result(self) -> Weather:
        return self._last_result

    def is_stale(self, location: str, unit: Unit, now: float) -> bool:
        return (
            location != self._location
            or unit != self._unit
            or now - self._last_query_time > self.config.min_update_timeout_seconds
        )

    def query(self, location: str, unit: Unit = Unit.IMPERIAL, *, now: Optional[float] = None) -> Weather:
        """Return current weather and forecast for ``location``.

        Raises a :class:`~yahoo_weather.errors.WeatherError` subclass when a
        fetch fails. The exception's ``result`` is what the provider holds
        afterwards: the previous result for signing and transport failures,
        an empty ``Weather`` for decode failures.
        """
        if now is None:
            now = self._clock()

        if not self.is_stale(location, unit, now):
            logger.debug("weather.query.cached", location=self._normalized_location, unit=self._unit_code)
            return self._last_result

        # State moves to the new query before the outcome of the fetch is known.
        self._location = location
        self._normalized_location = normalize_location(location)
        self._unit = unit
        self._unit_code = unit.code
        logger.info("weather.query.stale", location=self._normalized_location, unit=self._unit_code)

        try:
            self._update(now)
        except WeatherError as exc:
            exc.result = self._last_result
            raise
        return self._last_result

    def _query_params(self) -> Dict[str, str]:
        return {
            "location": self._normalized_location,
            "format": "json",
            "u": self._unit_code,
        }

    def _update(self, now: float) -> None:
        params = self._query_params()
        authorization = self.signer.sign(self.http.endpoint, params)

        response = self.http.get_forecast(params, app_id=self.app_id, authorization=authorization)

        try:
            weather = Weather.from_json(response.content)
        except DecodeError as exc:
            logger.warning("weather.decode.failed", location=self._normalized_location, error=str(exc))
            self._last_result = Weather()
            raise

        self._last_result = weather
        self._last_query_time = now
        logger.info("weather.fetch.ok", location=self._normalized_location, unit=self._unit_code)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "YahooWeatherProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
