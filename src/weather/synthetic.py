"""
Built-in weather dataset used when no live data is obtainable.

Values are fixed so offline demos and tests are repeatable; only the dates
move with the clock. Day 1 is ``now``'s calendar date in ``now``'s own
offset: the controller's default clock is UTC, so for a farm far from UTC
day 1 can differ from the local date around local midnight. Pass a clock in
the farm's offset to get local dates.
"""

from datetime import datetime, timedelta

from src.location.models import LocationResult
from src.weather.models import DailyForecast, Source, WeatherSnapshot

SYNTHETIC_CURRENT = {
    "temperature": 28,
    "humidity": 65,
    "wind_speed": 12,
    "description": "partly cloudy",
    "icon": "02d",
}

# (high, low, description, icon, precipitation_pct)
SYNTHETIC_FORECAST = [
    (30, 22, "sunny", "01d", 0),
    (29, 21, "partly cloudy", "02d", 10),
    (27, 20, "light rain", "10d", 60),
    (28, 19, "cloudy", "03d", 20),
    (31, 23, "sunny", "01d", 0),
]


def synthetic_snapshot(
    location: LocationResult,
    now: datetime,
    horizon: int = len(SYNTHETIC_FORECAST),
) -> WeatherSnapshot:
    """Synthetic snapshot for ``location``, forecast starting on ``now``'s local date."""
    today = now.date()
    forecast = tuple(
        DailyForecast(
            date=today + timedelta(days=i),
            high=high,
            low=low,
            description=description,
            icon=icon,
            precipitation_pct=precip,
        )
        for i, (high, low, description, icon, precip) in enumerate(SYNTHETIC_FORECAST[:horizon])
    )
    return WeatherSnapshot(
        location=location,
        forecast=forecast,
        last_updated=now,
        source=Source.SYNTHETIC,
        **SYNTHETIC_CURRENT,
    )
