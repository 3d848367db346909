"""
OpenWeatherMap client: current conditions, 3-hourly forecast samples and
geocoding for a point. Requires an API key (OPENWEATHER_API_KEY).

API docs: https://openweathermap.org/current
          https://openweathermap.org/forecast5
          https://openweathermap.org/api/geocoding-api

Every call is a single GET with a bounded timeout. No retries here; the
caller decides what to do with a ProviderFailure.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import requests
from pydantic import BaseModel, Field, ValidationError

from src.location.models import Coordinate, LocationResult, PlaceLabel, Provenance
from src.weather.config import WeatherConfig

logger = logging.getLogger(__name__)

MS_TO_KMH = 3.6


class ProviderFailure(RuntimeError):
    """Upstream call failed: network, timeout, non-2xx or malformed payload."""


class ConfigurationMissing(ProviderFailure):
    """No API key configured; the provider cannot be called at all."""


@dataclass(frozen=True)
class RawCurrent:
    place_name: str
    temperature: int
    humidity: float
    wind_speed: float  # km/h
    description: str
    icon: str


@dataclass(frozen=True)
class RawWeatherSample:
    """One forecast step as the provider reports it (usually 3-hourly)."""
    timestamp: datetime  # aware, in the forecast location's UTC offset
    temperature: int
    humidity: float
    wind_speed: float  # km/h
    precipitation_pct: int
    description: str
    icon: str


# ---- Payload schemas (only load-bearing fields) ----

class _Main(BaseModel):
    temp: float
    humidity: float


class _Wind(BaseModel):
    speed: float


class _Condition(BaseModel):
    description: str
    icon: str


class _CurrentPayload(BaseModel):
    name: str = ""
    main: _Main
    wind: _Wind
    weather: List[_Condition] = Field(..., min_length=1)


class _ForecastItem(BaseModel):
    dt: int
    main: _Main
    wind: _Wind
    weather: List[_Condition] = Field(..., min_length=1)
    pop: float = 0.0  # probability of precipitation, 0..1


class _City(BaseModel):
    timezone: int = 0  # UTC offset in seconds


class _ForecastPayload(BaseModel):
    items: List[_ForecastItem] = Field(..., alias="list")
    city: _City = Field(default_factory=_City)


class _GeoPlace(BaseModel):
    name: str
    country: str = "Unknown"
    state: str = ""
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


def _kmh(speed_ms: float) -> float:
    return round(speed_ms * MS_TO_KMH, 1)


def _pct(pop: float) -> int:
    return max(0, min(100, int(round(pop * 100))))


class WeatherProviderClient:
    """
    Explicitly configured OpenWeatherMap client.

    Usage:
        client = WeatherProviderClient(WeatherConfig.from_env())
        current = client.fetch_current(Coordinate(28.61, 77.21))
    """

    def __init__(self, config: WeatherConfig):
        self.config = config

    def _get(self, url: str, params: Dict[str, Any]) -> Any:
        if not self.config.has_api_key:
            raise ConfigurationMissing("OPENWEATHER_API_KEY is not set")

        query = dict(params, appid=self.config.provider_api_key)
        try:
            resp = requests.get(url, params=query, timeout=self.config.request_timeout_s)
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.Timeout as e:
            logger.warning("OpenWeatherMap request timed out: %s", url)
            raise ProviderFailure(f"timeout calling {url}") from e
        except requests.exceptions.RequestException as e:
            logger.warning("OpenWeatherMap request failed: %s", e)
            raise ProviderFailure(f"request to {url} failed: {e}") from e
        except ValueError as e:
            logger.warning("OpenWeatherMap returned invalid JSON from %s", url)
            raise ProviderFailure(f"invalid JSON from {url}") from e

    def _point_params(self, coord: Coordinate) -> Dict[str, Any]:
        return {"lat": coord.latitude, "lon": coord.longitude, "units": "metric"}

    def fetch_current(self, coord: Coordinate) -> RawCurrent:
        """Current conditions at ``coord``. Raises ProviderFailure."""
        data = self._get(f"{self.config.base_url}/weather", self._point_params(coord))
        try:
            payload = _CurrentPayload.model_validate(data)
        except ValidationError as e:
            logger.warning("Malformed current-weather payload: %s", e.errors()[:3])
            raise ProviderFailure("malformed current-weather payload") from e

        condition = payload.weather[0]
        return RawCurrent(
            place_name=payload.name,
            temperature=int(round(payload.main.temp)),
            humidity=payload.main.humidity,
            wind_speed=_kmh(payload.wind.speed),
            description=condition.description,
            icon=condition.icon,
        )

    def fetch_forecast_samples(self, coord: Coordinate) -> List[RawWeatherSample]:
        """
        5-day / 3-hour forecast at ``coord`` as raw samples in stream order.

        A single malformed entry fails the whole call; partial data never
        reaches the normalizer.
        """
        data = self._get(f"{self.config.base_url}/forecast", self._point_params(coord))
        try:
            payload = _ForecastPayload.model_validate(data)
        except ValidationError as e:
            logger.warning("Malformed forecast payload: %s", e.errors()[:3])
            raise ProviderFailure("malformed forecast payload") from e

        tz = timezone(timedelta(seconds=payload.city.timezone))
        samples = []
        for item in payload.items:
            condition = item.weather[0]
            samples.append(RawWeatherSample(
                timestamp=datetime.fromtimestamp(item.dt, tz=tz),
                temperature=int(round(item.main.temp)),
                humidity=item.main.humidity,
                wind_speed=_kmh(item.wind.speed),
                precipitation_pct=_pct(item.pop),
                description=condition.description,
                icon=condition.icon,
            ))
        return samples

    def _places(self, data: Any) -> List[_GeoPlace]:
        if not isinstance(data, list):
            raise ProviderFailure("geocoding response is not a list")
        try:
            return [_GeoPlace.model_validate(entry) for entry in data]
        except ValidationError as e:
            raise ProviderFailure("malformed geocoding payload") from e

    def reverse_geocode(self, coord: Coordinate) -> PlaceLabel:
        """Nearest named place for ``coord``. Raises ProviderFailure."""
        data = self._get(
            f"{self.config.geo_url}/reverse",
            {"lat": coord.latitude, "lon": coord.longitude, "limit": 1},
        )
        places = self._places(data)
        if not places:
            raise ProviderFailure(f"no place found near {coord.label()}")
        return PlaceLabel(city=places[0].name, country=places[0].country)

    def search_city(self, query: str, limit: int = 5) -> List[LocationResult]:
        """
        Look up places by name, e.g. ``"Nashik"`` or ``"Pune,IN"``.

        Raises:
            ValueError: If the query is shorter than 3 characters.
            ProviderFailure: On any upstream failure.
        """
        query = query.strip()
        if len(query) < 3:
            raise ValueError("Search query must be at least 3 characters")

        data = self._get(f"{self.config.geo_url}/direct", {"q": query, "limit": limit})
        results = []
        for place in self._places(data):
            city = f"{place.name}, {place.state}" if place.state else place.name
            results.append(LocationResult(
                coordinate=Coordinate(place.lat, place.lon),
                place=PlaceLabel(city=city, country=place.country),
                provenance=Provenance.REVERSE_GEOCODED,
            ))
        return results
