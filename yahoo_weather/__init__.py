"""Yahoo Weather client with OAuth request signing and result reuse."""

from .config import ProviderConfig, QueryConfig, load_config
from .errors import DecodeError, SigningError, TransportError, WeatherError
from .models import ConditionCode, PressureState, Unit, Weather
from .provider import YahooWeatherProvider, normalize_location
from .signer import OAuth1Signer

__all__ = [
    "ConditionCode",
    "DecodeError",
    "load_config",
    "normalize_location",
    "OAuth1Signer",
    "PressureState",
    "ProviderConfig",
    "QueryConfig",
    "SigningError",
    "TransportError",
    "Unit",
    "Weather",
    "WeatherError",
    "YahooWeatherProvider",
]
