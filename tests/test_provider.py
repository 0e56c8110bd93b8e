from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import httpx
import pytest

from yahoo_weather.config import QueryConfig
from yahoo_weather.errors import DecodeError, SigningError, TransportError
from yahoo_weather.models import Unit, Weather
from yahoo_weather.provider import YahooWeatherProvider, normalize_location
from yahoo_weather.signer import OAuth1Signer

FIXTURES = Path(__file__).parent / "fixtures"

START = 1_700_000_000.0


def _fixture_text(name: str) -> str:
    return (FIXTURES / name).read_text()


class Recorder:
    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def _ok(_: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text=_fixture_text("forecast.json"))


def _provider(recorder: Recorder, *, timeout: int = 300, **kwargs) -> YahooWeatherProvider:
    return YahooWeatherProvider(
        "app-id",
        "client-id",
        "client-secret",
        config=QueryConfig(min_update_timeout_seconds=timeout),
        client=httpx.Client(transport=httpx.MockTransport(recorder)),
        clock=lambda: START,
        **kwargs,
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Oakland, CA", "oakland,ca"),
        ("NEW YORK,NY", "new york,ny"),
        ("Paris,  FR", "paris, fr"),
    ],
)
def test_normalize_location(raw: str, expected: str) -> None:
    assert normalize_location(raw) == expected


def test_construction_does_not_touch_network() -> None:
    recorder = Recorder(_ok)
    provider = _provider(recorder)

    assert recorder.requests == []
    assert provider.unit is Unit.IMPERIAL
    assert provider.unit_code == "f"
    assert provider.last_result.is_empty


def test_query_sends_signed_request() -> None:
    recorder = Recorder(_ok)
    provider = _provider(recorder)

    weather = provider.query("Oakland, CA", Unit.METRIC, now=START)

    assert weather.location.city == "Oakland"
    assert len(recorder.requests) == 1
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.host == "weather-ydn-yql.media.yahoo.com"
    assert request.url.path == "/forecastrss"
    assert request.url.params["location"] == "oakland,ca"
    assert request.url.params["u"] == "c"
    assert request.url.params["format"] == "json"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["X-Yahoo-App-Id"] == "app-id"
    authorization = request.headers["Authorization"]
    assert authorization.startswith("OAuth ")
    assert 'oauth_consumer_key="client-id"' in authorization
    assert 'oauth_timestamp="1700000000"' in authorization
    assert "oauth_signature=" in authorization
    assert "client-secret" not in authorization


def test_repeated_query_within_window_reuses_result() -> None:
    recorder = Recorder(_ok)
    provider = _provider(recorder)

    first = provider.query("Oakland, CA", Unit.IMPERIAL, now=START)
    second = provider.query("Oakland, CA", Unit.IMPERIAL, now=START + 300)

    assert len(recorder.requests) == 1
    assert second is first


def test_query_after_window_refetches() -> None:
    recorder = Recorder(_ok)
    provider = _provider(recorder)

    first = provider.query("Oakland, CA", Unit.IMPERIAL, now=START)
    second = provider.query("Oakland, CA", Unit.IMPERIAL, now=START + 301)

    assert len(recorder.requests) == 2
    assert second is not first
    assert provider.last_query_time == START + 301


def test_unit_change_bypasses_window() -> None:
    recorder = Recorder(_ok)
    provider = _provider(recorder)

    provider.query("Oakland, CA", Unit.IMPERIAL, now=START)
    provider.query("Oakland, CA", Unit.METRIC, now=START + 1)

    assert len(recorder.requests) == 2
    assert recorder.requests[1].url.params["u"] == "c"


def test_location_change_bypasses_window() -> None:
    recorder = Recorder(_ok)
    provider = _provider(recorder)

    provider.query("Oakland, CA", Unit.IMPERIAL, now=START)
    provider.query("oakland,ca", Unit.IMPERIAL, now=START + 1)

    # Raw strings differ even though both normalize the same way.
    assert len(recorder.requests) == 2


def test_window_is_configurable() -> None:
    recorder = Recorder(_ok)
    provider = _provider(recorder, timeout=10)

    provider.query("Oakland, CA", Unit.IMPERIAL, now=START)
    provider.query("Oakland, CA", Unit.IMPERIAL, now=START + 11)

    assert len(recorder.requests) == 2


def test_first_query_judged_fresh_returns_empty_result() -> None:
    recorder = Recorder(_ok)
    provider = _provider(recorder)

    # Matches the initial state and falls inside the window measured from 0.
    weather = provider.query("", Unit.IMPERIAL, now=100)

    assert recorder.requests == []
    assert weather.is_empty
    assert weather is provider.last_result


def test_transport_failure_keeps_cached_result() -> None:
    responses = iter(
        [
            httpx.Response(200, text=_fixture_text("forecast.json")),
            httpx.Response(503, text="unavailable"),
        ]
    )
    recorder = Recorder(lambda _: next(responses))
    provider = _provider(recorder)

    cached = provider.query("Oakland, CA", Unit.IMPERIAL, now=START)

    with pytest.raises(TransportError) as excinfo:
        provider.query("Oakland, CA", Unit.IMPERIAL, now=START + 600)

    assert "503" in str(excinfo.value)
    assert excinfo.value.status_code == 503
    assert excinfo.value.result is cached
    assert provider.last_result is cached
    assert provider.last_query_time == START


def test_connection_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = _provider(Recorder(handler))

    with pytest.raises(TransportError) as excinfo:
        provider.query("Oakland, CA", Unit.IMPERIAL, now=START)

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert excinfo.value.result.is_empty


def test_decode_failure_clears_cached_result() -> None:
    responses = iter(
        [
            httpx.Response(200, text=_fixture_text("forecast.json")),
            httpx.Response(200, text="{not json"),
        ]
    )
    recorder = Recorder(lambda _: next(responses))
    provider = _provider(recorder)

    cached = provider.query("Oakland, CA", Unit.IMPERIAL, now=START)
    assert not cached.is_empty

    with pytest.raises(DecodeError) as excinfo:
        provider.query("Oakland, CA", Unit.IMPERIAL, now=START + 600)

    assert excinfo.value.result.is_empty
    assert provider.last_result.is_empty
    assert provider.last_query_time == START


def test_schema_mismatch_is_decode_error() -> None:
    recorder = Recorder(lambda _: httpx.Response(200, json={"forecasts": "tomorrow"}))
    provider = _provider(recorder)

    with pytest.raises(DecodeError):
        provider.query("Oakland, CA", Unit.IMPERIAL, now=START)


def test_failed_fetch_still_records_new_query_state() -> None:
    responses = iter(
        [
            httpx.Response(200, text=_fixture_text("forecast.json")),
            httpx.Response(500),
            httpx.Response(200, text=_fixture_text("forecast.json")),
        ]
    )
    recorder = Recorder(lambda _: next(responses))
    provider = _provider(recorder)

    oakland = provider.query("Oakland, CA", Unit.IMPERIAL, now=START)
    with pytest.raises(TransportError):
        provider.query("Berlin, DE", Unit.METRIC, now=START + 1)

    assert provider.location == "Berlin, DE"
    assert provider.normalized_location == "berlin,de"
    assert provider.unit is Unit.METRIC
    assert provider.unit_code == "c"

    # Same arguments inside the window measured from the last success: no fetch,
    # the result cached for the previous location comes back.
    weather = provider.query("Berlin, DE", Unit.METRIC, now=START + 2)
    assert len(recorder.requests) == 2
    assert weather is oakland

    weather = provider.query("Berlin, DE", Unit.METRIC, now=START + 301)
    assert len(recorder.requests) == 3
    assert recorder.requests[2].url.params["location"] == "berlin,de"
    assert weather is not oakland
    assert provider.last_query_time == START + 301


def test_signing_failure_leaves_cache_untouched() -> None:
    recorder = Recorder(_ok)
    calls = {"count": 0}

    def flaky_nonce() -> str:
        calls["count"] += 1
        if calls["count"] > 1:
            raise OSError("entropy unavailable")
        return "nonce-1"

    signer = OAuth1Signer("client-id", "client-secret", clock=lambda: START, nonce_factory=flaky_nonce)
    provider = _provider(recorder, signer=signer)

    cached = provider.query("Oakland, CA", Unit.IMPERIAL, now=START)
    with pytest.raises(SigningError) as excinfo:
        provider.query("Oakland, CA", Unit.METRIC, now=START + 1)

    assert len(recorder.requests) == 1
    assert excinfo.value.result is cached
    assert provider.last_result is cached
    assert provider.last_query_time == START


def test_null_body_decodes_to_empty_result() -> None:
    recorder = Recorder(lambda _: httpx.Response(200, text="null"))
    provider = _provider(recorder)

    weather = provider.query("Oakland, CA", Unit.IMPERIAL, now=START)

    assert weather.is_empty
    assert weather == Weather()
    assert provider.last_query_time == START
