"""
Location resolver: produces a usable LocationResult no matter what the
geolocation layer does.

Fallback chain:
    1. Recent fix (younger than position_max_age_s) reused as-is
    2. Fresh fix from the position source, bounded by geolocation_timeout_s
    3. Configured default location (provenance DEFAULT_FALLBACK)

A fix is then labelled through reverse geocoding; a failed lookup keeps the
coordinate and labels it "lat, lon".
"""

import asyncio
import logging
import re
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from src.location.geolocation import PositionResult, acquire_position
from src.location.models import Coordinate, LocationResult, PlaceLabel, Provenance
from src.weather.config import WeatherConfig

logger = logging.getLogger(__name__)

# Oldest labels are evicted past this many distinct coordinates
LABEL_CACHE_SIZE = 256

_COORD_RE = re.compile(r"^-?\d+\.?\d*\s*,\s*-?\d+\.?\d*$")


def _is_coordinates(location: str) -> bool:
    """Check if the location string looks like lat,lon coordinates."""
    return bool(_COORD_RE.match(location.strip()))


def parse_coordinates(location: str) -> Coordinate:
    """
    Parse a 'lat,lon' string (e.g. '12.9716,77.5946') into a Coordinate.

    Raises:
        ValueError: If the format is unrecognized or values are out of range.
    """
    if not _is_coordinates(location):
        raise ValueError(
            f"Unrecognized location format: '{location}'. Provide lat,lon coordinates."
        )
    lat, lon = (float(part.strip()) for part in location.strip().split(","))
    return Coordinate(lat, lon)


class LocationResolver:
    """
    Resolve the farm's position with a deterministic fallback.

    Usage:
        resolver = LocationResolver(config, IPPositionSource(), client.reverse_geocode)
        location = await resolver.resolve()
    """

    def __init__(
        self,
        config: WeatherConfig,
        position_source=None,
        reverse_geocoder: Optional[Callable[[Coordinate], PlaceLabel]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.position_source = position_source
        self.reverse_geocoder = reverse_geocoder
        self._clock = clock
        self._fallback = config.default_location.to_result()
        self._last_fix: Optional[Tuple[float, PositionResult]] = None
        self._labels: "OrderedDict[str, PlaceLabel]" = OrderedDict()

    @property
    def fallback(self) -> LocationResult:
        return self._fallback

    def _recent_fix(self) -> Optional[PositionResult]:
        if self._last_fix is None:
            return None
        taken_at, fix = self._last_fix
        if self._clock() - taken_at <= self.config.position_max_age_s:
            return fix
        return None

    async def resolve(self) -> LocationResult:
        """Best-effort current location. Never raises."""
        try:
            fix = self._recent_fix()
            if fix is None:
                fix = await acquire_position(
                    self.position_source, self.config.geolocation_timeout_s
                )
                if not fix.ok:
                    logger.info(
                        "Geolocation unavailable (%s: %s); using default location %s",
                        fix.status.value, fix.detail, self._fallback.place,
                    )
                    return self._fallback
                self._last_fix = (self._clock(), fix)
            else:
                logger.debug("Reusing recent fix %s", fix.coordinate.label())
            return await self.describe(fix.coordinate, fix.provenance)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Location resolution failed, using default location: %s", e)
            return self._fallback

    async def describe(
        self, coord: Coordinate, provenance: Provenance = Provenance.PRECISE
    ) -> LocationResult:
        """Attach a place label to a known coordinate. Never raises."""
        return LocationResult(coordinate=coord, place=await self._label(coord), provenance=provenance)

    async def _label(self, coord: Coordinate) -> PlaceLabel:
        key = f"{coord.latitude:.5f},{coord.longitude:.5f}"
        if key in self._labels:
            self._labels.move_to_end(key)
            return self._labels[key]
        if self.reverse_geocoder is None:
            return PlaceLabel.from_coordinate(coord)

        try:
            label = await asyncio.wait_for(
                asyncio.to_thread(self.reverse_geocoder, coord),
                timeout=self.config.request_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.info("Reverse geocoding timed out for %s", coord.label())
            return PlaceLabel.from_coordinate(coord)
        except Exception as e:
            logger.info("Reverse geocoding failed for %s: %s", coord.label(), e)
            return PlaceLabel.from_coordinate(coord)

        self._labels[key] = label
        if len(self._labels) > LABEL_CACHE_SIZE:
            self._labels.popitem(last=False)
        return label
