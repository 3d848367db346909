"""
Degradation controller: resolves a location, fetches live weather and falls
back to the last live snapshot or to the built-in dataset when anything goes
wrong.

    RESOLVING_LOCATION -> FETCHING_LIVE -> NORMALIZING -> DONE(LIVE)
                       \\-> DONE(CACHED) | DONE(SYNTHETIC)

``fetch()`` always returns a WeatherSnapshot; presentation code only needs
to branch on ``snapshot.source``.
"""

import asyncio
import itertools
import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from src.location.models import Coordinate, LocationResult
from src.location.resolver import LocationResolver
from src.weather.config import WeatherConfig
from src.weather.models import Source, WeatherSnapshot
from src.weather.normalizer import normalize
from src.weather.provider import ProviderFailure, WeatherProviderClient
from src.weather.synthetic import synthetic_snapshot

logger = logging.getLogger(__name__)


class FetchState(str, Enum):
    RESOLVING_LOCATION = "RESOLVING_LOCATION"
    FETCHING_LIVE = "FETCHING_LIVE"
    NORMALIZING = "NORMALIZING"
    DONE = "DONE"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DegradationController:
    """
    Owns the provider client, the resolver and the cached live snapshot.

    Usage:
        controller = DegradationController(WeatherConfig.from_env())
        snapshot = await controller.fetch()
        # snapshot.source is LIVE, CACHED or SYNTHETIC
    """

    def __init__(
        self,
        config: WeatherConfig,
        client: Optional[WeatherProviderClient] = None,
        resolver: Optional[LocationResolver] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.config = config
        self.client = client or WeatherProviderClient(config)
        if resolver is None:
            geocoder = self.client.reverse_geocode if config.has_api_key else None
            resolver = LocationResolver(config, reverse_geocoder=geocoder)
        self.resolver = resolver
        self._now = clock
        self._sequence = itertools.count(1)
        self._committed_seq = 0
        self._cached: Optional[WeatherSnapshot] = None

    @property
    def cached_snapshot(self) -> Optional[WeatherSnapshot]:
        """Most recent committed LIVE snapshot, or None before the first success."""
        return self._cached

    async def fetch(self, coord: Optional[Coordinate] = None) -> WeatherSnapshot:
        """
        Weather for ``coord``, or for the resolved current location.

        Never raises except for cancellation; a cancelled call commits nothing.
        """
        seq = next(self._sequence)
        location = None
        try:
            logger.debug("fetch #%d: %s", seq, FetchState.RESOLVING_LOCATION.value)
            if coord is None:
                location = await self.resolver.resolve()
            else:
                location = await self.resolver.describe(coord)

            if not self.config.has_api_key:
                logger.info("fetch #%d: no provider API key, serving synthetic data", seq)
                return self._synthetic(location)

            logger.debug("fetch #%d: %s %s", seq, FetchState.FETCHING_LIVE.value, location.coordinate.label())
            current, samples = await asyncio.gather(
                self._call(self.client.fetch_current, location.coordinate),
                self._call(self.client.fetch_forecast_samples, location.coordinate),
            )

            logger.debug("fetch #%d: %s %d samples", seq, FetchState.NORMALIZING.value, len(samples))
            snapshot = WeatherSnapshot(
                location=location,
                temperature=current.temperature,
                humidity=current.humidity,
                wind_speed=current.wind_speed,
                description=current.description,
                icon=current.icon,
                forecast=tuple(normalize(samples, self.config.forecast_horizon_days)),
                last_updated=self._live_timestamp(),
                source=Source.LIVE,
            )
            self._commit(seq, snapshot)
            return snapshot

        except asyncio.CancelledError:
            logger.debug("fetch #%d cancelled", seq)
            raise
        except (ProviderFailure, asyncio.TimeoutError) as e:
            logger.warning("fetch #%d: provider unavailable (%s)", seq, str(e) or type(e).__name__)
            return self._degrade(location)
        except Exception:
            logger.exception("fetch #%d: unexpected error, degrading", seq)
            return self._degrade(location)

    async def _call(self, func, coord: Coordinate):
        return await asyncio.wait_for(
            asyncio.to_thread(func, coord), timeout=self.config.request_timeout_s
        )

    def _live_timestamp(self) -> datetime:
        now = self._now()
        cached = self._cached
        if cached is not None and now <= cached.last_updated:
            now = cached.last_updated + timedelta(microseconds=1)
        return now

    def _commit(self, seq: int, snapshot: WeatherSnapshot) -> bool:
        if seq <= self._committed_seq:
            logger.info(
                "fetch #%d finished after #%d; not replacing the cached snapshot",
                seq, self._committed_seq,
            )
            return False
        self._committed_seq = seq
        self._cached = snapshot
        logger.debug("fetch #%d: %s(%s)", seq, FetchState.DONE.value, Source.LIVE.value)
        return True

    def _degrade(self, location: Optional[LocationResult]) -> WeatherSnapshot:
        cached = self._cached
        if cached is not None:
            logger.info("Serving cached snapshot from %s", cached.last_updated.isoformat())
            return replace(cached, source=Source.CACHED)
        return self._synthetic(location or self.resolver.fallback)

    def _synthetic(self, location: LocationResult) -> WeatherSnapshot:
        return synthetic_snapshot(location, self._now(), self.config.forecast_horizon_days)
