"""Tests for environment-driven configuration."""

import sys
import pytest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError

from src.location.models import Coordinate, Provenance
from src.weather.config import DefaultLocation, WeatherConfig


class TestWeatherConfig:
    def test_defaults(self):
        config = WeatherConfig.from_env({})
        assert config.has_api_key is False
        assert config.forecast_horizon_days == 5
        assert config.geolocation_timeout_s == 10.0
        assert config.position_max_age_s == 300.0

        fallback = config.default_location.to_result()
        assert fallback.coordinate == Coordinate(28.6139, 77.2090)
        assert fallback.provenance == Provenance.DEFAULT_FALLBACK

    def test_from_env(self):
        config = WeatherConfig.from_env({
            "OPENWEATHER_API_KEY": " abc123 ",
            "DEFAULT_LATITUDE": "12.9716",
            "DEFAULT_LONGITUDE": "77.5946",
            "DEFAULT_CITY": "Bengaluru",
            "WEATHER_REQUEST_TIMEOUT_S": "4",
            "FORECAST_HORIZON_DAYS": "3",
        })
        assert config.provider_api_key == "abc123"
        assert config.request_timeout_s == 4.0
        assert config.forecast_horizon_days == 3
        assert config.default_location.city == "Bengaluru"

    def test_blank_key_means_unconfigured(self):
        assert WeatherConfig.from_env({"OPENWEATHER_API_KEY": "   "}).has_api_key is False

    @pytest.mark.parametrize("env", [
        {"FORECAST_HORIZON_DAYS": "0"},
        {"FORECAST_HORIZON_DAYS": "7"},
        {"WEATHER_REQUEST_TIMEOUT_S": "0"},
        {"DEFAULT_LATITUDE": "123"},
        {"DEFAULT_CITY": ""},
        {"DEFAULT_LATITUDE": "abc"},
        {"FORECAST_HORIZON_DAYS": "three"},
        {"WEATHER_REQUEST_TIMEOUT_S": "fast"},
    ])
    def test_invalid_values_rejected(self, env):
        with pytest.raises(ValidationError):
            WeatherConfig.from_env(env)

    def test_placeholder_city_rejected(self):
        with pytest.raises(ValidationError):
            DefaultLocation(city="Unknown")
