"""Search query shapes.

Each query validates itself on construction so malformed input fails
before any store round-trip.
"""

import math
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from rentgeo.core.config import settings
from rentgeo.core.exceptions import ValidationException
from rentgeo.geo.geometry import BoundingBox, Coordinate


def _validate_radius(radius_km: float) -> float:
    if isinstance(radius_km, bool) or not isinstance(radius_km, (int, float)):
        raise ValidationException("radiusKm must be a number", details={"field": "radiusKm"})
    if not math.isfinite(radius_km) or radius_km <= 0:
        raise ValidationException(
            "radiusKm must be a finite number greater than 0",
            details={"field": "radiusKm", "value": repr(radius_km)},
        )
    return float(radius_km)


def _validate_optional_number(name: str, value: Optional[float]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationException(
            f"{name} must be a finite number",
            details={"field": name, "value": repr(value)},
        )


@dataclass(frozen=True)
class PageRequest:
    """Offset/limit window over an ordered result set."""

    limit: int
    offset: int = 0
    max_limit: int = field(default=settings.MAX_SEARCH_LIMIT, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise ValidationException("limit must be an integer", details={"field": "limit"})
        if isinstance(self.offset, bool) or not isinstance(self.offset, int):
            raise ValidationException("offset must be an integer", details={"field": "offset"})
        if not 1 <= self.limit <= self.max_limit:
            raise ValidationException(
                f"limit must be between 1 and {self.max_limit}",
                details={"field": "limit", "value": self.limit},
            )
        if self.offset < 0:
            raise ValidationException(
                "offset must not be negative",
                details={"field": "offset", "value": self.offset},
            )


@dataclass(frozen=True)
class SearchFilters:
    """Optional attribute constraints.

    An omitted field means no constraint on that attribute.
    """

    property_type: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_beds: Optional[int] = None
    min_baths: Optional[float] = None
    amenities: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        _validate_optional_number("minPrice", self.min_price)
        _validate_optional_number("maxPrice", self.max_price)
        _validate_optional_number("beds", self.min_beds)
        _validate_optional_number("baths", self.min_baths)
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValidationException(
                "minPrice must not exceed maxPrice",
                details={"minPrice": self.min_price, "maxPrice": self.max_price},
            )
        if not isinstance(self.amenities, frozenset):
            object.__setattr__(self, "amenities", frozenset(self.amenities))

    @classmethod
    def from_values(
        cls,
        property_type: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        min_beds: Optional[int] = None,
        min_baths: Optional[float] = None,
        amenities: Optional[Iterable[str]] = None,
    ) -> "SearchFilters":
        return cls(
            property_type=property_type or None,
            min_price=min_price,
            max_price=max_price,
            min_beds=min_beds,
            min_baths=min_baths,
            amenities=frozenset(a for a in (amenities or ()) if a),
        )

    def to_dict(self) -> dict:
        return {
            "propertyType": self.property_type,
            "minPrice": self.min_price,
            "maxPrice": self.max_price,
            "beds": self.min_beds,
            "baths": self.min_baths,
            "amenities": sorted(self.amenities),
        }


@dataclass(frozen=True)
class PointRadiusQuery:
    center: Coordinate
    radius_km: float
    page: PageRequest

    def __post_init__(self) -> None:
        object.__setattr__(self, "radius_km", _validate_radius(self.radius_km))


@dataclass(frozen=True)
class ProximityQuery:
    center: Coordinate
    radius_km: float
    page: PageRequest
    filters: SearchFilters = field(default_factory=SearchFilters)

    def __post_init__(self) -> None:
        object.__setattr__(self, "radius_km", _validate_radius(self.radius_km))


@dataclass(frozen=True)
class BoundingBoxQuery:
    bounds: BoundingBox
    filters: SearchFilters = field(default_factory=SearchFilters)


@dataclass(frozen=True)
class NearestQuery:
    property_id: int
    radius_km: float
    limit: int
    max_limit: int = field(default=settings.MAX_SEARCH_LIMIT, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "radius_km", _validate_radius(self.radius_km))
        # Reuse the page bounds check for the limit
        PageRequest(limit=self.limit, max_limit=self.max_limit)


@dataclass(frozen=True)
class TextQuery:
    term: str
    page: PageRequest

    def __post_init__(self) -> None:
        term = (self.term or "").strip()
        if len(term) < 2:
            raise ValidationException(
                "Search query must be at least 2 characters",
                details={"field": "q"},
            )
        object.__setattr__(self, "term", term)
