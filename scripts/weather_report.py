"""
CLI entry point: print a weather snapshot and farming advisories as JSON.

Usage:
    python scripts/weather_report.py
    python scripts/weather_report.py --location 12.9716,77.5946
    python scripts/weather_report.py --ip-location -v
    python scripts/weather_report.py --search Nashik
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.advisory.engine import advise
from src.location.geolocation import IPPositionSource
from src.location.resolver import LocationResolver, parse_coordinates
from src.weather.config import WeatherConfig
from src.weather.controller import DegradationController
from src.weather.provider import ProviderFailure, WeatherProviderClient


def main():
    parser = argparse.ArgumentParser(
        description="Fetch weather and farming advisories for a location",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  OPENWEATHER_API_KEY   OpenWeatherMap key (without it, built-in data is shown)
  DEFAULT_LATITUDE, DEFAULT_LONGITUDE, DEFAULT_CITY, DEFAULT_COUNTRY
        """,
    )
    parser.add_argument(
        "--location", default=None,
        help="lat,lon (e.g., 12.97,77.59); default: detect, then fall back to the default location",
    )
    parser.add_argument(
        "--ip-location", action="store_true",
        help="Detect the location from the public IP address when --location is not given",
    )
    parser.add_argument(
        "--search", default=None,
        help="Search places by name and print the matches instead of weather",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    config = WeatherConfig.from_env()
    client = WeatherProviderClient(config)

    if args.search:
        try:
            results = client.search_city(args.search)
        except (ValueError, ProviderFailure) as e:
            print(f"ERROR: Location search failed: {e}", file=sys.stderr)
            sys.exit(1)
        print(json.dumps([r.to_dict() for r in results], indent=2))
        return

    coord = None
    if args.location:
        try:
            coord = parse_coordinates(args.location)
        except ValueError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            sys.exit(1)

    resolver = LocationResolver(
        config,
        position_source=IPPositionSource() if args.ip_location else None,
        reverse_geocoder=client.reverse_geocode if config.has_api_key else None,
    )
    controller = DegradationController(config, client=client, resolver=resolver)
    snapshot = asyncio.run(controller.fetch(coord))

    output = {
        "weather": snapshot.to_dict(),
        "advisories": [a.to_dict() for a in advise(snapshot)],
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
