"""Tests for the weather_report CLI (offline: no provider key)."""

import json
import sys
import pytest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(PROJECT_ROOT / "scripts"))

import weather_report


@pytest.fixture(autouse=True)
def no_provider_key(monkeypatch):
    for name in ("OPENWEATHER_API_KEY", "DEFAULT_LATITUDE", "DEFAULT_LONGITUDE",
                 "DEFAULT_CITY", "DEFAULT_COUNTRY", "FORECAST_HORIZON_DAYS"):
        monkeypatch.delenv(name, raising=False)


def _run(monkeypatch, capsys, *args):
    monkeypatch.setattr(sys, "argv", ["weather_report.py", *args])
    weather_report.main()
    return capsys.readouterr()


class TestWeatherReport:
    def test_default_location(self, monkeypatch, capsys):
        out = json.loads(_run(monkeypatch, capsys).out)
        assert out["weather"]["source"] == "SYNTHETIC"
        assert out["weather"]["location"]["provenance"] == "DEFAULT_FALLBACK"
        assert [a["category"] for a in out["advisories"]] == ["TEMPERATURE", "RAIN"]

    def test_location_flag(self, monkeypatch, capsys):
        out = json.loads(_run(monkeypatch, capsys, "--location", "19.9975,73.7898").out)
        location = out["weather"]["location"]
        assert location["provenance"] == "PRECISE"
        assert (location["latitude"], location["longitude"]) == (19.9975, 73.7898)

    def test_bad_location_exits(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, capsys, "--location", "Nashik")
        assert exc.value.code == 1
        assert "Unrecognized location format" in capsys.readouterr().err

    def test_search_without_key_exits(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, capsys, "--search", "Nashik")
        assert exc.value.code == 1
