"""
Location value types shared by the resolver, the provider client and the
weather snapshot.
"""

from dataclasses import dataclass
from enum import Enum


class Provenance(str, Enum):
    """How the coordinate of a LocationResult was obtained."""
    PRECISE = "PRECISE"
    REVERSE_GEOCODED = "REVERSE_GEOCODED"
    DEFAULT_FALLBACK = "DEFAULT_FALLBACK"


@dataclass(frozen=True)
class Coordinate:
    """WGS84 point in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (-90 <= self.latitude <= 90):
            raise ValueError(f"Latitude {self.latitude} out of range [-90, 90]")
        if not (-180 <= self.longitude <= 180):
            raise ValueError(f"Longitude {self.longitude} out of range [-180, 180]")

    def label(self) -> str:
        return f"{self.latitude:.2f}, {self.longitude:.2f}"


@dataclass(frozen=True)
class PlaceLabel:
    """Best-effort human readable name for a coordinate."""
    city: str
    country: str

    @classmethod
    def from_coordinate(cls, coord: Coordinate) -> "PlaceLabel":
        return cls(city=coord.label(), country="Unknown")

    def __str__(self) -> str:
        return f"{self.city}, {self.country}"


@dataclass(frozen=True)
class LocationResult:
    coordinate: Coordinate
    place: PlaceLabel
    provenance: Provenance

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    def to_dict(self) -> dict:
        return {
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "city": self.place.city,
            "country": self.place.country,
            "provenance": self.provenance.value,
        }
