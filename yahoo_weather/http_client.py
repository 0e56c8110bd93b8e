from __future__ import annotations

from typing import Dict, Mapping, Optional

import httpx

from .config import RSS_URL
from .errors import TransportError
from .logging import get_logger

logger = get_logger(__name__)


class WeatherHttpClient:
    """Issues the signed forecast GET. One attempt per call, no retries."""

    def __init__(self, client: Optional[httpx.Client] = None, *, endpoint: str = RSS_URL) -> None:
        self.client = client or httpx.Client()
        self.endpoint = endpoint

    def get_forecast(
        self,
        params: Mapping[str, str],
        *,
        app_id: str,
        authorization: str,
    ) -> httpx.Response:
        headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "X-Yahoo-App-Id": app_id,
            "Authorization": authorization,
        }

        logger.info("weather.fetch", url=self.endpoint, location=params.get("location"), unit=params.get("u"))
        try:
            response = self.client.get(self.endpoint, params=dict(params), headers=headers)
        except httpx.RequestError as exc:
            logger.warning("weather.fetch.failed", url=self.endpoint, error=str(exc))
            raise TransportError(f"request to {self.endpoint} failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            logger.warning("weather.fetch.failed", url=self.endpoint, status=response.status_code)
            raise TransportError(
                f"wrong HTTP status: {response.status_code}", status_code=response.status_code
            )
        return response

    def close(self) -> None:
        self.client.close()
