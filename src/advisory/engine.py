"""
Rule-based farming advisories derived from a weather snapshot.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from src.weather.models import WeatherSnapshot


class Category(str, Enum):
    TEMPERATURE = "TEMPERATURE"
    HUMIDITY = "HUMIDITY"
    WIND = "WIND"
    RAIN = "RAIN"


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"


@dataclass(frozen=True)
class Advisory:
    category: Category
    message: str
    severity: Severity

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "message": self.message,
            "severity": self.severity.value,
        }


# Thresholds (temperature in C, humidity in %, wind in km/h, rain in %)
HOT_TEMP_C = 35
COLD_TEMP_C = 10
HUMID_PCT = 80
DRY_PCT = 30
STRONG_WIND_KMH = 20
RAIN_LIKELY_PCT = 50

HOT = Advisory(Category.TEMPERATURE, "High temperature: increase irrigation frequency and shade sensitive crops", Severity.WARN)
COLD = Advisory(Category.TEMPERATURE, "Low temperature: protect crops from frost", Severity.WARN)
MILD = Advisory(Category.TEMPERATURE, "Optimal temperature: good conditions for most crops", Severity.INFO)
HUMID = Advisory(Category.HUMIDITY, "High humidity: watch for fungal disease and improve air circulation", Severity.WARN)
DRY = Advisory(Category.HUMIDITY, "Low humidity: increase irrigation and mulch to retain soil moisture", Severity.INFO)
WINDY = Advisory(Category.WIND, "Strong winds: secure structures and avoid spraying", Severity.WARN)
RAIN = Advisory(Category.RAIN, "Rain expected: plan irrigation and drainage around it", Severity.INFO)


def advise(snapshot: WeatherSnapshot) -> List[Advisory]:
    """
    Advisories for ``snapshot`` in fixed order: temperature, humidity, wind,
    rain. Every matching rule fires; the result may be empty.
    """
    advisories = []

    if snapshot.temperature > HOT_TEMP_C:
        advisories.append(HOT)
    elif snapshot.temperature < COLD_TEMP_C:
        advisories.append(COLD)
    else:
        advisories.append(MILD)

    if snapshot.humidity > HUMID_PCT:
        advisories.append(HUMID)
    elif snapshot.humidity < DRY_PCT:
        advisories.append(DRY)

    if snapshot.wind_speed > STRONG_WIND_KMH:
        advisories.append(WINDY)

    if any(day.precipitation_pct > RAIN_LIKELY_PCT for day in snapshot.forecast):
        advisories.append(RAIN)

    return advisories
