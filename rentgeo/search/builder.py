"""Spatial query builder.

Turns a validated search query into a ``QueryPlan``: an immutable,
ordered tuple of clauses plus the ordering and distance reference.
Stores derive both the count evaluation and the page evaluation from
the same plan object, so the two can never filter differently.
"""

from dataclasses import dataclass
from enum import Enum
from functools import singledispatch
from typing import List, Optional, Tuple

from rentgeo.geo.geometry import BoundingBox, Coordinate, km_to_meters
from rentgeo.search.clauses import (
    AmenityOverlap,
    BathsGte,
    BedsGte,
    BoundsWithin,
    Clause,
    ExcludeProperty,
    PriceGte,
    PriceLte,
    RadiusWithin,
    TextMatch,
    TypeEq,
)
from rentgeo.search.queries import (
    BoundingBoxQuery,
    NearestQuery,
    PointRadiusQuery,
    ProximityQuery,
    SearchFilters,
    TextQuery,
)


class Ordering(str, Enum):
    DISTANCE = "distance"
    IDENTITY = "identity"


@dataclass(frozen=True)
class QueryPlan:
    """Everything a store needs to evaluate one search.

    Attributes:
        clauses: Conjunction of predicates, in the order they were added.
        order: Result ordering.
        reference: Point distances are measured from; required when
            ordering by distance.
    """

    clauses: Tuple[Clause, ...]
    order: Ordering = Ordering.IDENTITY
    reference: Optional[Coordinate] = None

    def __post_init__(self) -> None:
        if self.order is Ordering.DISTANCE and self.reference is None:
            raise ValueError("Distance ordering requires a reference point")

    @property
    def measures_distance(self) -> bool:
        return self.reference is not None


class SpatialQueryBuilder:
    """Accumulates clauses for one search.

    Example:
        ```python
        plan = (
            SpatialQueryBuilder()
            .within_radius(center, radius_km=10)
            .with_filters(SearchFilters(min_beds=2))
            .build()
        )
        ```
    """

    def __init__(self) -> None:
        self._clauses: List[Clause] = []
        self._order = Ordering.IDENTITY
        self._reference: Optional[Coordinate] = None

    def within_radius(self, center: Coordinate, radius_km: float) -> "SpatialQueryBuilder":
        self._clauses.append(RadiusWithin(center=center, meters=km_to_meters(radius_km)))
        self._reference = center
        self._order = Ordering.DISTANCE
        return self

    def within_bounds(self, bounds: BoundingBox) -> "SpatialQueryBuilder":
        self._clauses.append(BoundsWithin(bounds=bounds))
        return self

    def with_filters(self, filters: SearchFilters) -> "SpatialQueryBuilder":
        if filters.property_type is not None:
            self._clauses.append(TypeEq(filters.property_type))
        if filters.min_price is not None:
            self._clauses.append(PriceGte(filters.min_price))
        if filters.max_price is not None:
            self._clauses.append(PriceLte(filters.max_price))
        if filters.min_beds is not None:
            self._clauses.append(BedsGte(filters.min_beds))
        if filters.min_baths is not None:
            self._clauses.append(BathsGte(filters.min_baths))
        if filters.amenities:
            self._clauses.append(AmenityOverlap(filters.amenities))
        return self

    def excluding(self, property_id: int) -> "SpatialQueryBuilder":
        self._clauses.append(ExcludeProperty(property_id))
        return self

    def matching_text(self, term: str) -> "SpatialQueryBuilder":
        self._clauses.append(TextMatch(term))
        return self

    def build(self) -> QueryPlan:
        return QueryPlan(
            clauses=tuple(self._clauses),
            order=self._order,
            reference=self._reference,
        )


@singledispatch
def build_plan(query) -> QueryPlan:
    raise TypeError(f"No query plan for {type(query).__name__}")


@build_plan.register
def _(query: PointRadiusQuery) -> QueryPlan:
    return SpatialQueryBuilder().within_radius(query.center, query.radius_km).build()


@build_plan.register
def _(query: ProximityQuery) -> QueryPlan:
    return (
        SpatialQueryBuilder()
        .within_radius(query.center, query.radius_km)
        .with_filters(query.filters)
        .build()
    )


@build_plan.register
def _(query: BoundingBoxQuery) -> QueryPlan:
    return SpatialQueryBuilder().within_bounds(query.bounds).with_filters(query.filters).build()


@build_plan.register
def _(query: TextQuery) -> QueryPlan:
    return SpatialQueryBuilder().matching_text(query.term).build()


def build_neighbor_plan(query: NearestQuery, reference: Coordinate) -> QueryPlan:
    """Plan for neighbors of an existing property.

    ``reference`` is the property's own resolved coordinate; the
    property itself is excluded from the candidates.
    """
    return (
        SpatialQueryBuilder()
        .within_radius(reference, query.radius_km)
        .excluding(query.property_id)
        .build()
    )
