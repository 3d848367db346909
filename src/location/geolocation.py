"""
Position sources: wrappers around whatever can tell us where the farm is.

A source exposes a blocking ``get_current_position()`` that returns a
Coordinate or raises PositionError. ``acquire_position`` turns a source into a
single timeout-bounded coroutine with a tagged result, so callers never deal
with exceptions from the geolocation layer.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests

from src.location.models import Coordinate, Provenance

logger = logging.getLogger(__name__)

IPAPI_URL = "https://ipapi.co/json/"
IPINFO_URL = "https://ipinfo.io/json"


class PositionStatus(str, Enum):
    OK = "OK"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNSUPPORTED = "UNSUPPORTED"


class PositionError(RuntimeError):
    """Raised by a position source when no fix can be produced."""

    def __init__(self, status: PositionStatus, message: str = ""):
        super().__init__(message or status.value)
        self.status = status


@dataclass(frozen=True)
class PositionResult:
    status: PositionStatus
    coordinate: Optional[Coordinate] = None
    provenance: Optional[Provenance] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == PositionStatus.OK


class DevicePositionSource:
    """
    Fix reported by the host device (phone GPS, field tablet).

    The host pushes fixes with ``update()``; ``deny()`` records that the user
    refused location permission.
    """

    provenance = Provenance.PRECISE

    def __init__(self, coordinate: Optional[Coordinate] = None):
        self._lock = threading.Lock()
        self._coordinate = coordinate
        self._denied = False

    def update(self, coordinate: Coordinate) -> None:
        with self._lock:
            self._coordinate = coordinate
            self._denied = False

    def deny(self) -> None:
        with self._lock:
            self._denied = True

    def get_current_position(self) -> Coordinate:
        with self._lock:
            if self._denied:
                raise PositionError(PositionStatus.PERMISSION_DENIED, "location permission denied")
            if self._coordinate is None:
                raise PositionError(PositionStatus.POSITION_UNAVAILABLE, "device has no fix yet")
            return self._coordinate


class IPPositionSource:
    """Approximate position from the public IP address (ipapi.co, then ipinfo.io)."""

    provenance = Provenance.REVERSE_GEOCODED

    def __init__(self, timeout_s: float = 6.0):
        self.timeout_s = timeout_s

    def _ipapi(self) -> Coordinate:
        r = requests.get(IPAPI_URL, timeout=self.timeout_s)
        r.raise_for_status()
        j = r.json()
        return Coordinate(float(j["latitude"]), float(j["longitude"]))

    def _ipinfo(self) -> Coordinate:
        r = requests.get(IPINFO_URL, timeout=self.timeout_s)
        r.raise_for_status()
        lat, lon = (r.json().get("loc") or "").split(",")
        return Coordinate(float(lat), float(lon))

    def get_current_position(self) -> Coordinate:
        timed_out = False
        for lookup in (self._ipapi, self._ipinfo):
            try:
                return lookup()
            except requests.exceptions.Timeout as e:
                logger.debug("IP geolocation timed out: %s", e)
                timed_out = True
            except (requests.exceptions.RequestException, KeyError, TypeError, ValueError) as e:
                logger.debug("IP geolocation lookup failed: %s", e)
        if timed_out:
            raise PositionError(PositionStatus.TIMEOUT, "IP geolocation timed out")
        raise PositionError(PositionStatus.POSITION_UNAVAILABLE, "IP geolocation failed")


async def acquire_position(source, timeout_s: float) -> PositionResult:
    """
    Ask ``source`` for a fix, waiting at most ``timeout_s`` seconds.

    Never raises (other than cancellation): every failure is reported through
    the returned status. ``source=None`` means the capability is absent.
    """
    if source is None:
        return PositionResult(PositionStatus.UNSUPPORTED, detail="no position source configured")

    try:
        coord = await asyncio.wait_for(
            asyncio.to_thread(source.get_current_position), timeout=timeout_s
        )
    except asyncio.TimeoutError:
        return PositionResult(PositionStatus.TIMEOUT, detail=f"no fix within {timeout_s}s")
    except PositionError as e:
        return PositionResult(e.status, detail=str(e))
    except Exception as e:
        logger.warning("Position source %s raised: %s", type(source).__name__, e)
        return PositionResult(PositionStatus.POSITION_UNAVAILABLE, detail=str(e))

    provenance = getattr(source, "provenance", Provenance.PRECISE)
    return PositionResult(PositionStatus.OK, coordinate=coord, provenance=provenance)
