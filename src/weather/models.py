"""
Weather value types exposed to callers.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple

from src.location.models import LocationResult


class Source(str, Enum):
    """Where the data in a WeatherSnapshot came from."""
    LIVE = "LIVE"
    CACHED = "CACHED"
    SYNTHETIC = "SYNTHETIC"


@dataclass(frozen=True)
class DailyForecast:
    """One calendar day of forecast."""
    date: date
    high: float
    low: float
    description: str
    icon: str
    precipitation_pct: int

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "high": self.high,
            "low": self.low,
            "description": self.description,
            "icon": self.icon,
            "precipitation_pct": self.precipitation_pct,
        }


@dataclass(frozen=True)
class WeatherSnapshot:
    """
    Current conditions plus daily forecast for one location.

    ``source`` tells presentation code whether the data is fresh (LIVE), a
    replay of the last live fetch (CACHED, with its original
    ``last_updated``) or the built-in dataset (SYNTHETIC).
    """
    location: LocationResult
    temperature: float
    humidity: float
    wind_speed: float  # km/h
    description: str
    icon: str
    forecast: Tuple[DailyForecast, ...]
    last_updated: datetime
    source: Source

    def age(self, now: Optional[datetime] = None) -> timedelta:
        """Time elapsed since ``last_updated``."""
        now = now or datetime.now(timezone.utc)
        return now - self.last_updated

    def to_dict(self) -> dict:
        return {
            "location": self.location.to_dict(),
            "temperature": self.temperature,
            "humidity": self.humidity,
            "wind_speed": self.wind_speed,
            "description": self.description,
            "icon": self.icon,
            "forecast": [day.to_dict() for day in self.forecast],
            "last_updated": self.last_updated.isoformat(),
            "source": self.source.value,
        }
