"""Typed predicate clauses.

A search is a conjunction of clauses. Each store renders every clause
variant into its own query mechanism (SQL expression, Python predicate)
but the clause list itself is built once and shared by the count and
page evaluations.
"""

from dataclasses import dataclass
from typing import FrozenSet, Union

from rentgeo.geo.geometry import BoundingBox, Coordinate


@dataclass(frozen=True)
class RadiusWithin:
    center: Coordinate
    meters: float


@dataclass(frozen=True)
class BoundsWithin:
    bounds: BoundingBox


@dataclass(frozen=True)
class TypeEq:
    property_type: str


@dataclass(frozen=True)
class PriceGte:
    amount: float


@dataclass(frozen=True)
class PriceLte:
    amount: float


@dataclass(frozen=True)
class BedsGte:
    count: int


@dataclass(frozen=True)
class BathsGte:
    count: float


@dataclass(frozen=True)
class AmenityOverlap:
    """Matches when at least one requested amenity is present."""

    amenities: FrozenSet[str]


@dataclass(frozen=True)
class ExcludeProperty:
    property_id: int


@dataclass(frozen=True)
class TextMatch:
    """Case-insensitive substring over address, city, state and name."""

    term: str


Clause = Union[
    RadiusWithin,
    BoundsWithin,
    TypeEq,
    PriceGte,
    PriceLte,
    BedsGte,
    BathsGte,
    AmenityOverlap,
    ExcludeProperty,
    TextMatch,
]
