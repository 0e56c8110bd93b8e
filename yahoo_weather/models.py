from __future__ import annotations

from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DecodeError


class Unit(Enum):
    """Measurement system requested from the forecast endpoint."""

    IMPERIAL = "imperial"
    METRIC = "metric"

    @property
    def code(self) -> str:
        return "c" if self is Unit.METRIC else "f"


class PressureState(IntEnum):
    STEADY = 0
    RISING = 1
    FALLING = 2


class ConditionCode(IntEnum):
    TORNADO = 0
    TROPICAL_STORM = 1
    HURRICANE = 2
    SEVERE_THUNDERSTORMS = 3
    THUNDERSTORMS = 4
    MIXED_RAIN_AND_SNOW = 5
    MIXED_RAIN_AND_SLEET = 6
    MIXED_SNOW_AND_SLEET = 7
    FREEZING_DRIZZLE = 8
    DRIZZLE = 9
    FREEZING_RAIN = 10
    SHOWERS = 11
    RAIN = 12
    SNOW_FLURRIES = 13
    LIGHT_SNOW_SHOWERS = 14
    BLOWING_SNOW = 15
    SNOW = 16
    HAIL = 17
    SLEET = 18
    DUST = 19
    FOGGY = 20
    HAZE = 21
    SMOKY = 22
    BLUSTERY = 23
    WINDY = 24
    COLD = 25
    CLOUDY = 26
    MOSTLY_CLOUDY_NIGHT = 27
    MOSTLY_CLOUDY_DAY = 28
    PARTLY_CLOUDY_NIGHT = 29
    PARTLY_CLOUDY_DAY = 30
    CLEAR_NIGHT = 31
    SUNNY = 32
    FAIR_NIGHT = 33
    FAIR_DAY = 34
    MIXED_RAIN_AND_HAIL = 35
    HOT = 36
    ISOLATED_THUNDERSTORMS = 37
    SCATTERED_THUNDERSTORMS = 38
    SCATTERED_SHOWERS_DAY = 39
    HEAVY_RAIN = 40
    SCATTERED_SNOW_SHOWERS_DAY = 41
    HEAVY_SNOW = 42
    BLIZZARD = 43
    NOT_AVAILABLE = 44
    SCATTERED_SHOWERS_NIGHT = 45
    SCATTERED_SNOW_SHOWERS_NIGHT = 46
    SCATTERED_THUNDERSHOWERS = 47


def _condition(code: Optional[int]) -> Optional[ConditionCode]:
    if code is None:
        return None
    try:
        return ConditionCode(code)
    except ValueError:
        # Yahoo reports 3200 when no condition is available
        return None


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Location(_Schema):
    woeid: Optional[int] = None
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = Field(default=None, alias="long")
    timezone: Optional[str] = Field(default=None, alias="timezone_id")


class WindInfo(_Schema):
    chill: Optional[int] = None
    direction: Optional[int] = None
    speed: Optional[float] = None


class AtmosphereInfo(_Schema):
    humidity: Optional[int] = None
    visibility: Optional[float] = None
    pressure: Optional[float] = None
    state: Optional[int] = Field(default=None, alias="rising")

    @property
    def pressure_state(self) -> Optional[PressureState]:
        if self.state is None:
            return None
        try:
            return PressureState(self.state)
        except ValueError:
            return None


class AstronomyInfo(_Schema):
    sunrise: Optional[str] = None
    sunset: Optional[str] = None


class ConditionInfo(_Schema):
    text: Optional[str] = None
    code: Optional[int] = None
    temperature: Optional[int] = None

    @property
    def condition(self) -> Optional[ConditionCode]:
        return _condition(self.code)


class ForecastInfo(_Schema):
    day: Optional[str] = None
    date: Optional[int] = None
    low: Optional[int] = None
    high: Optional[int] = None
    text: Optional[str] = None
    code: Optional[int] = None

    @property
    def condition(self) -> Optional[ConditionCode]:
        return _condition(self.code)


class Observation(_Schema):
    wind: Optional[WindInfo] = None
    atmosphere: Optional[AtmosphereInfo] = None
    astronomy: Optional[AstronomyInfo] = None
    condition: Optional[ConditionInfo] = None


class Weather(_Schema):
    """Current conditions and daily forecast returned by the forecastrss endpoint.

    An instance built with no arguments is the "empty" result a provider
    hands out before its first successful fetch or after a decode failure.
    """

    location: Optional[Location] = None
    observation: Optional[Observation] = Field(default=None, alias="current_observation")
    forecasts: Optional[List[ForecastInfo]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.location is None and self.observation is None and not self.forecasts

    @classmethod
    def from_json(cls, text: str | bytes) -> "Weather":
        if text.strip() in ("null", b"null"):
            return cls()
        # Strict: a JSON string is never coerced into a numeric field.
        try:
            return cls.model_validate_json(text, strict=True)
        except ValidationError as exc:
            raise DecodeError(f"unexpected weather payload: {exc}") from exc
        except ValueError as exc:
            raise DecodeError(f"invalid JSON body: {exc}") from exc
