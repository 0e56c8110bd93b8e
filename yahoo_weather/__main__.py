from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import httpx

from .config import ProviderConfig, app_config
from .errors import WeatherError
from .logging import get_logger
from .models import Unit
from .provider import YahooWeatherProvider

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yahoo_weather", description="Print current weather for a location.")
    parser.add_argument("location", help='e.g. "Oakland, CA"')
    parser.add_argument("--metric", action="store_true", help="report in Celsius instead of Fahrenheit")
    parser.add_argument("--app-id", default=app_config.provider.app_id)
    parser.add_argument("--client-id", default=app_config.provider.client_id)
    parser.add_argument("--client-secret", default=app_config.provider.client_secret)
    return parser


def main(argv: Optional[Sequence[str]] = None, *, client: Optional[httpx.Client] = None) -> int:
    args = build_parser().parse_args(argv)
    config = ProviderConfig(
        app_id=args.app_id,
        client_id=args.client_id,
        client_secret=args.client_secret,
        endpoint=app_config.provider.endpoint,
    )
    unit = Unit.METRIC if args.metric else Unit.IMPERIAL

    with YahooWeatherProvider.from_config(config, client=client) as provider:
        try:
            data = provider.query(args.location, unit)
        except WeatherError as exc:
            logger.error("cli.query.failed", location=args.location, error=str(exc))
            print(f"Got error: {exc}", file=sys.stderr)
            return 1

    condition = data.observation.condition if data.observation else None
    if condition is None:
        print("No current conditions reported", file=sys.stderr)
        return 1

    print(f"Temperature: {condition.temperature}")
    print(f"Condition: {condition.text}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
