"""
Pydantic response schemas for the weather API.
"""

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class LocationOut(BaseModel):
    """Resolved location and how it was obtained."""
    latitude: float
    longitude: float
    city: str
    country: str
    provenance: str = Field(..., description="PRECISE, REVERSE_GEOCODED or DEFAULT_FALLBACK")


class DailyForecastOut(BaseModel):
    date: date
    high: float
    low: float
    description: str
    icon: str
    precipitation_pct: int = Field(..., ge=0, le=100)


class WeatherResponse(BaseModel):
    """Output schema for /weather."""
    location: LocationOut
    temperature: float = Field(..., description="Temperature (°C)")
    humidity: float = Field(..., description="Relative humidity (%)")
    wind_speed: float = Field(..., description="Wind speed (km/h)")
    description: str
    icon: str
    forecast: List[DailyForecastOut]
    last_updated: datetime
    source: str = Field(..., description="LIVE, CACHED or SYNTHETIC")

    model_config = {"json_schema_extra": {
        "examples": [{
            "location": {
                "latitude": 28.6139, "longitude": 77.209, "city": "Delhi",
                "country": "India", "provenance": "DEFAULT_FALLBACK",
            },
            "temperature": 28, "humidity": 65, "wind_speed": 12,
            "description": "partly cloudy", "icon": "02d",
            "forecast": [{
                "date": "2026-10-19", "high": 30, "low": 22,
                "description": "sunny", "icon": "01d", "precipitation_pct": 0,
            }],
            "last_updated": "2026-10-19T06:30:00+00:00",
            "source": "SYNTHETIC",
        }]
    }}


class AdvisoryOut(BaseModel):
    category: str
    message: str
    severity: str


class AdvisoryResponse(BaseModel):
    """Output schema for /advisories."""
    weather: WeatherResponse
    advisories: List[AdvisoryOut]


class LocationSearchResponse(BaseModel):
    query: str
    results: List[LocationOut]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    provider_configured: bool
    last_live_update: Optional[datetime] = None
    version: str
