"""Coordinate value types and geometry text encoding.

All geometry text handed to the store is produced here. Longitude comes
first in WKT (``POINT(lng lat)``), the reverse of how coordinates are
usually spoken.
"""

import math
from dataclasses import dataclass
from typing import Dict, Tuple

from rentgeo.core.exceptions import ValidationException

WGS84_SRID = 4326

# Mean Earth radius used by the in-process great-circle distance.
EARTH_RADIUS_METERS = 6_371_008.8

METERS_PER_KILOMETER = 1000.0
METERS_PER_MILE = 1609.34


def _require_finite(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationException(
            f"{name} must be a number",
            details={"field": name, "value": repr(value)},
        )
    if not math.isfinite(value):
        raise ValidationException(
            f"{name} must be a finite number",
            details={"field": name, "value": repr(value)},
        )
    return float(value)


@dataclass(frozen=True)
class Coordinate:
    """An immutable WGS 84 latitude/longitude pair in decimal degrees.

    Raises:
        ValidationException: If either component is non-finite or out of range.
    """

    lat: float
    lng: float

    def __post_init__(self) -> None:
        lat = _require_finite("lat", self.lat)
        lng = _require_finite("lng", self.lng)
        if not -90.0 <= lat <= 90.0:
            raise ValidationException(
                f"Latitude must be between -90 and 90, got {lat}",
                details={"field": "lat", "value": lat},
            )
        if not -180.0 <= lng <= 180.0:
            raise ValidationException(
                f"Longitude must be between -180 and 180, got {lng}",
                details={"field": "lng", "value": lng},
            )
        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lng", lng)

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class BoundingBox:
    """A closed lat/lng rectangle.

    Boxes crossing the antimeridian are rejected: ``east`` must be
    strictly greater than ``west`` and ``north`` strictly greater than
    ``south``.
    """

    north: float
    south: float
    east: float
    west: float

    def __post_init__(self) -> None:
        for edge in ("north", "south", "east", "west"):
            object.__setattr__(self, edge, _require_finite(edge, getattr(self, edge)))

        for edge in ("north", "south"):
            value = getattr(self, edge)
            if not -90.0 <= value <= 90.0:
                raise ValidationException(
                    f"{edge} must be between -90 and 90, got {value}",
                    details={"field": edge, "value": value},
                )
        for edge in ("east", "west"):
            value = getattr(self, edge)
            if not -180.0 <= value <= 180.0:
                raise ValidationException(
                    f"{edge} must be between -180 and 180, got {value}",
                    details={"field": edge, "value": value},
                )

        if self.north <= self.south:
            raise ValidationException(
                "Bounds north edge must be greater than south edge",
                details={"north": self.north, "south": self.south},
            )
        if self.east <= self.west:
            raise ValidationException(
                "Bounds east edge must be greater than west edge",
                details={"east": self.east, "west": self.west},
            )

    def contains(self, point: Coordinate) -> bool:
        """Return True if ``point`` lies inside or on the edge of the box."""
        return (
            self.south <= point.lat <= self.north
            and self.west <= point.lng <= self.east
        )

    def corners(self) -> Tuple[Coordinate, ...]:
        """Closed ring of corners starting at (west, south)."""
        return (
            Coordinate(lat=self.south, lng=self.west),
            Coordinate(lat=self.south, lng=self.east),
            Coordinate(lat=self.north, lng=self.east),
            Coordinate(lat=self.north, lng=self.west),
            Coordinate(lat=self.south, lng=self.west),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }


def point_wkt(point: Coordinate) -> str:
    """Encode a coordinate as ``POINT(lng lat)``."""
    return f"POINT({point.lng!r} {point.lat!r})"


def polygon_wkt(bounds: BoundingBox) -> str:
    """Encode a bounding box as a closed five-vertex ``POLYGON``.

    Vertices run (west,south) -> (east,south) -> (east,north) ->
    (west,north) -> (west,south).
    """
    ring = ", ".join(f"{corner.lng!r} {corner.lat!r}" for corner in bounds.corners())
    return f"POLYGON(({ring}))"


def ewkt(wkt: str, srid: int = WGS84_SRID) -> str:
    """Prefix WKT with its SRID, as accepted by ``ST_GeogFromText``."""
    return f"SRID={srid};{wkt}"


def haversine_meters(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates on a spherical Earth.

    Args:
        a: First coordinate.
        b: Second coordinate.

    Returns:
        Non-negative distance in meters. Identical points yield 0.0.
    """
    if a == b:
        return 0.0

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def km_to_meters(radius_km: float) -> float:
    return radius_km * METERS_PER_KILOMETER


@dataclass(frozen=True)
class Distance:
    """A distance reported in meters with unit conversions."""

    meters: float

    @property
    def kilometers(self) -> float:
        return self.meters / METERS_PER_KILOMETER

    @property
    def miles(self) -> float:
        return self.meters / METERS_PER_MILE
