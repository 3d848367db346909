"""
Configuration for the weather layer.

Read from environment variables by ``WeatherConfig.from_env()``; every field
has a working default, so an empty environment gives permanent synthetic mode
centred on the default location.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.location.models import Coordinate, LocationResult, PlaceLabel, Provenance

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
OPENWEATHER_GEO_URL = "https://api.openweathermap.org/geo/1.0"

DEFAULT_LAT = 28.6139
DEFAULT_LON = 77.2090
DEFAULT_CITY = "Delhi"
DEFAULT_COUNTRY = "India"

MAX_HORIZON_DAYS = 5


class DefaultLocation(BaseModel):
    """Fixed location used whenever geolocation fails."""
    latitude: float = Field(DEFAULT_LAT, ge=-90, le=90)
    longitude: float = Field(DEFAULT_LON, ge=-180, le=180)
    city: str = DEFAULT_CITY
    country: str = DEFAULT_COUNTRY

    model_config = {"frozen": True}

    @field_validator("city", "country")
    @classmethod
    def _not_placeholder(cls, v: str) -> str:
        v = v.strip()
        if not v or v.lower() in {"unknown", "your_city", "changeme"}:
            raise ValueError("default location needs a real place name")
        return v

    def to_result(self) -> LocationResult:
        return LocationResult(
            coordinate=Coordinate(self.latitude, self.longitude),
            place=PlaceLabel(city=self.city, country=self.country),
            provenance=Provenance.DEFAULT_FALLBACK,
        )


class WeatherConfig(BaseModel):
    provider_api_key: Optional[str] = None
    default_location: DefaultLocation = Field(default_factory=DefaultLocation)
    request_timeout_s: float = Field(10.0, gt=0)
    geolocation_timeout_s: float = Field(10.0, gt=0)
    # Accept a previous geolocation fix up to this age
    position_max_age_s: float = Field(300.0, ge=0)
    forecast_horizon_days: int = Field(MAX_HORIZON_DAYS, ge=1, le=MAX_HORIZON_DAYS)
    base_url: str = OPENWEATHER_BASE_URL
    geo_url: str = OPENWEATHER_GEO_URL

    @field_validator("provider_api_key")
    @classmethod
    def _blank_key_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def has_api_key(self) -> bool:
        return self.provider_api_key is not None

    @classmethod
    def from_env(cls, environ=None) -> "WeatherConfig":
        """
        Build a config from ``environ`` (default: ``os.environ``).

        Raw strings are handed to pydantic, so any bad value raises ValidationError.
        """
        env = os.environ if environ is None else environ

        default_location = DefaultLocation(
            latitude=env.get("DEFAULT_LATITUDE", DEFAULT_LAT),
            longitude=env.get("DEFAULT_LONGITUDE", DEFAULT_LON),
            city=env.get("DEFAULT_CITY", DEFAULT_CITY),
            country=env.get("DEFAULT_COUNTRY", DEFAULT_COUNTRY),
        )
        return cls(
            provider_api_key=env.get("OPENWEATHER_API_KEY"),
            default_location=default_location,
            request_timeout_s=env.get("WEATHER_REQUEST_TIMEOUT_S", 10.0),
            geolocation_timeout_s=env.get("GEOLOCATION_TIMEOUT_S", 10.0),
            position_max_age_s=env.get("POSITION_MAX_AGE_S", 300.0),
            forecast_horizon_days=env.get("FORECAST_HORIZON_DAYS", MAX_HORIZON_DAYS),
        )
