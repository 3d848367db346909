"""
Unit tests for the OpenWeatherMap client.
All HTTP calls are mocked — no network access required.
"""

import sys
import pytest
from datetime import date
from unittest.mock import patch, MagicMock
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import requests as req_module

from src.location.models import Coordinate, Provenance
from src.weather.config import WeatherConfig
from src.weather.provider import (
    ConfigurationMissing, ProviderFailure, WeatherProviderClient,
)

DELHI = Coordinate(28.6139, 77.2090)

CURRENT_PAYLOAD = {
    "name": "New Delhi",
    "main": {"temp": 27.6, "humidity": 58},
    "wind": {"speed": 5.0},
    "weather": [{"description": "haze", "icon": "50d"}],
}

FORECAST_PAYLOAD = {
    "city": {"timezone": 19800},  # UTC+05:30
    "list": [
        {
            "dt": 1792368000,  # 2026-10-19 00:00 UTC
            "main": {"temp": 24.2, "humidity": 70},
            "wind": {"speed": 2.0},
            "weather": [{"description": "clear sky", "icon": "01d"}],
            "pop": 0.35,
        },
        {
            "dt": 1792443600,  # 2026-10-19 21:00 UTC
            "main": {"temp": 19.8, "humidity": 80},
            "wind": {"speed": 1.0},
            "weather": [{"description": "mist", "icon": "50n"}],
        },
    ],
}


def _client(api_key="test_key"):
    return WeatherProviderClient(WeatherConfig(provider_api_key=api_key, request_timeout_s=3))


def _response(payload):
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status = MagicMock()
    return mock_resp


class TestCurrentWeather:
    def test_fetch_current_success(self):
        """Parse current weather, rounding temperature and converting wind to km/h."""
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.return_value = _response(CURRENT_PAYLOAD)
            current = _client().fetch_current(DELHI)

        assert current.place_name == "New Delhi"
        assert current.temperature == 28
        assert current.humidity == 58
        assert current.wind_speed == 18.0
        assert current.description == "haze"
        assert current.icon == "50d"

        _, kwargs = mock_get.call_args
        assert kwargs["params"]["appid"] == "test_key"
        assert kwargs["params"]["units"] == "metric"
        assert kwargs["timeout"] == 3

    def test_missing_key_skips_network(self):
        """No API key fails fast without any HTTP request."""
        with patch("src.weather.provider.requests.get") as mock_get:
            with pytest.raises(ConfigurationMissing):
                _client(api_key=None).fetch_current(DELHI)
        mock_get.assert_not_called()

    def test_missing_key_is_a_provider_failure(self):
        assert issubclass(ConfigurationMissing, ProviderFailure)

    def test_timeout_is_failure(self):
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.side_effect = req_module.exceptions.Timeout("timeout")
            with pytest.raises(ProviderFailure, match="timeout"):
                _client().fetch_current(DELHI)

    def test_http_error_is_failure(self):
        """Non-2xx responses are failures."""
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_resp = _response({"cod": 401, "message": "Invalid API key"})
            mock_resp.raise_for_status.side_effect = req_module.exceptions.HTTPError("401")
            mock_get.return_value = mock_resp
            with pytest.raises(ProviderFailure):
                _client().fetch_current(DELHI)

    def test_invalid_json_is_failure(self):
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_resp = _response(None)
            mock_resp.json.side_effect = ValueError("No JSON object could be decoded")
            mock_get.return_value = mock_resp
            with pytest.raises(ProviderFailure, match="invalid JSON"):
                _client().fetch_current(DELHI)

    @pytest.mark.parametrize("broken", [
        {"main": {"humidity": 58}},
        {"main": {"temp": None, "humidity": 58}},
        {"wind": {}},
        {"weather": []},
    ])
    def test_missing_required_field_is_failure(self, broken):
        """Partial payloads never become a partially-filled result."""
        payload = dict(CURRENT_PAYLOAD, **broken)
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.return_value = _response(payload)
            with pytest.raises(ProviderFailure, match="malformed"):
                _client().fetch_current(DELHI)


class TestForecastSamples:
    def test_fetch_forecast_samples(self):
        """Samples keep stream order and carry the location's local time."""
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.return_value = _response(FORECAST_PAYLOAD)
            samples = _client().fetch_forecast_samples(DELHI)

        assert len(samples) == 2
        first, second = samples
        assert first.timestamp.date() == date(2026, 10, 19)
        assert first.timestamp.hour == 5 and first.timestamp.minute == 30
        assert first.temperature == 24
        assert first.precipitation_pct == 35
        assert first.wind_speed == 7.2
        # 21:00 UTC is already the next day in IST
        assert second.timestamp.date() == date(2026, 10, 20)
        assert second.temperature == 20
        assert second.precipitation_pct == 0

    def test_one_malformed_entry_fails_whole_call(self):
        payload = {
            "city": {"timezone": 0},
            "list": FORECAST_PAYLOAD["list"] + [{"dt": 1792454400, "main": {"humidity": 60}}],
        }
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.return_value = _response(payload)
            with pytest.raises(ProviderFailure, match="malformed forecast"):
                _client().fetch_forecast_samples(DELHI)

    def test_missing_list_is_failure(self):
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.return_value = _response({"cod": "200"})
            with pytest.raises(ProviderFailure):
                _client().fetch_forecast_samples(DELHI)


class TestGeocoding:
    def test_reverse_geocode(self):
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.return_value = _response([
                {"name": "Nashik", "country": "IN", "state": "Maharashtra", "lat": 19.99, "lon": 73.78},
            ])
            place = _client().reverse_geocode(Coordinate(19.99, 73.78))

        assert place.city == "Nashik"
        assert place.country == "IN"
        assert mock_get.call_args[0][0].endswith("/geo/1.0/reverse")

    def test_reverse_geocode_no_match(self):
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.return_value = _response([])
            with pytest.raises(ProviderFailure, match="no place found"):
                _client().reverse_geocode(Coordinate(0.0, -160.0))

    def test_search_city(self):
        with patch("src.weather.provider.requests.get") as mock_get:
            mock_get.return_value = _response([
                {"name": "Pune", "country": "IN", "state": "Maharashtra", "lat": 18.52, "lon": 73.85},
                {"name": "Pune", "country": "IN", "lat": 26.1, "lon": 84.9},
            ])
            results = _client().search_city("  Pune ")

        assert len(results) == 2
        assert results[0].place.city == "Pune, Maharashtra"
        assert results[1].place.city == "Pune"
        assert results[0].coordinate == Coordinate(18.52, 73.85)
        assert results[0].provenance == Provenance.REVERSE_GEOCODED
        assert mock_get.call_args[1]["params"]["q"] == "Pune"

    def test_search_city_short_query(self):
        with patch("src.weather.provider.requests.get") as mock_get:
            with pytest.raises(ValueError, match="at least 3"):
                _client().search_city(" ab ")
        mock_get.assert_not_called()
