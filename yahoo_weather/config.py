from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "defaults.yaml"
load_dotenv()

RSS_URL = "https://weather-ydn-yql.media.yahoo.com/forecastrss"
DEFAULT_MIN_UPDATE_TIMEOUT_SECONDS = 5 * 60

_ENV_PREFIX = "YAHOO_WEATHER_"


def _bool_from_env(value: str | None) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return None


def _int_from_env(value: str | None) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _merge_dicts(base: Dict, overrides: Mapping) -> Dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            merged[key] = _merge_dicts(base[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> Dict:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text()) or {}


@dataclass(frozen=True)
class ProviderConfig:
    """Credentials issued by the Yahoo developer network plus the endpoint."""

    app_id: str = ""
    client_id: str = ""
    client_secret: str = ""
    endpoint: str = RSS_URL


@dataclass
class QueryConfig:
    min_update_timeout_seconds: int = DEFAULT_MIN_UPDATE_TIMEOUT_SECONDS


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = True


@dataclass
class AppConfig:
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(*, config_path: str | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = dict(os.environ if env is None else env)
    data = _load_yaml(_DEFAULT_CONFIG_PATH)

    explicit_path = config_path or env.get(f"{_ENV_PREFIX}CONFIG_PATH")
    if explicit_path:
        data = _merge_dicts(data, _load_yaml(Path(explicit_path)))

    provider_data = dict(data.get("provider") or {})
    for key in ("app_id", "client_id", "client_secret", "endpoint"):
        override = env.get(f"{_ENV_PREFIX}{key.upper()}")
        if override:
            provider_data[key] = override

    query_data = dict(data.get("query") or {})
    timeout_override = _int_from_env(env.get(f"{_ENV_PREFIX}MIN_UPDATE_TIMEOUT"))
    if timeout_override is not None:
        query_data["min_update_timeout_seconds"] = timeout_override

    logging_data = dict(data.get("logging") or {})
    level_override = env.get(f"{_ENV_PREFIX}LOG_LEVEL")
    if level_override:
        logging_data["level"] = level_override
    json_override = _bool_from_env(env.get(f"{_ENV_PREFIX}LOG_JSON"))
    if json_override is not None:
        logging_data["json"] = json_override

    return AppConfig(
        provider=ProviderConfig(**provider_data),
        query=QueryConfig(**query_data),
        logging=LoggingConfig(**logging_data),
    )


app_config = load_config()
