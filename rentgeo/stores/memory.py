"""In-process spatial store.

Evaluates query plans against Python dictionaries with haversine
distances. Used for tests and for running the API without a database
(``STORE_BACKEND=memory``).
"""

import itertools
from functools import singledispatch
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from rentgeo.geo.geometry import Coordinate, ewkt, haversine_meters, point_wkt
from rentgeo.models.location import Location
from rentgeo.models.property import Property
from rentgeo.search.builder import Ordering, QueryPlan
from rentgeo.search.clauses import (
    AmenityOverlap,
    BathsGte,
    BedsGte,
    BoundsWithin,
    ExcludeProperty,
    PriceGte,
    PriceLte,
    RadiusWithin,
    TextMatch,
    TypeEq,
)
from rentgeo.search.ranking import PropertyHit, rank_by_distance
from rentgeo.stores.base import SpatialStore


class Candidate(NamedTuple):
    property: Property
    location: Location
    point: Coordinate


Matcher = Callable[[Candidate], bool]


@singledispatch
def matcher(clause) -> Matcher:
    raise TypeError(f"Cannot evaluate clause {type(clause).__name__}")


@matcher.register
def _(clause: RadiusWithin) -> Matcher:
    return lambda c: haversine_meters(clause.center, c.point) <= clause.meters


@matcher.register
def _(clause: BoundsWithin) -> Matcher:
    return lambda c: clause.bounds.contains(c.point)


@matcher.register
def _(clause: TypeEq) -> Matcher:
    return lambda c: c.property.property_type == clause.property_type


@matcher.register
def _(clause: PriceGte) -> Matcher:
    return lambda c: c.property.price_per_month >= clause.amount


@matcher.register
def _(clause: PriceLte) -> Matcher:
    return lambda c: c.property.price_per_month <= clause.amount


@matcher.register
def _(clause: BedsGte) -> Matcher:
    return lambda c: c.property.beds >= clause.count


@matcher.register
def _(clause: BathsGte) -> Matcher:
    return lambda c: c.property.baths >= clause.count


@matcher.register
def _(clause: AmenityOverlap) -> Matcher:
    return lambda c: not clause.amenities.isdisjoint(c.property.amenities or ())


@matcher.register
def _(clause: ExcludeProperty) -> Matcher:
    return lambda c: c.property.id != clause.property_id


@matcher.register
def _(clause: TextMatch) -> Matcher:
    term = clause.term.lower()

    def match(c: Candidate) -> bool:
        fields = (c.location.address, c.location.city, c.location.state, c.property.name)
        return any(term in (value or "").lower() for value in fields)

    return match


class InMemoryStore(SpatialStore):
    """Spatial store holding locations and properties in memory."""

    def __init__(self) -> None:
        self._locations: Dict[int, Location] = {}
        self._points: Dict[int, Coordinate] = {}
        self._properties: Dict[int, Property] = {}
        self._location_ids = itertools.count(1)
        self._property_ids = itertools.count(1)

    # Seeding -----------------------------------------------------------

    def add_location(
        self,
        point: Coordinate,
        address: str = "",
        city: str = "",
        state: Optional[str] = None,
        country: str = "",
        postal_code: Optional[str] = None,
    ) -> Location:
        location = Location(
            id=next(self._location_ids),
            address=address,
            city=city,
            state=state,
            country=country,
            postal_code=postal_code,
            coordinates=ewkt(point_wkt(point)),
        )
        self._locations[location.id] = location
        self._points[location.id] = point
        return location

    def add_property(
        self,
        location: Location,
        name: str,
        price_per_month: float,
        property_type: str = "Apartment",
        beds: int = 1,
        baths: float = 1.0,
        amenities: Iterable[str] = (),
        **extra,
    ) -> Property:
        if location.id not in self._locations:
            raise KeyError(f"Unknown location {location.id}")
        prop = Property(
            id=next(self._property_ids),
            name=name,
            price_per_month=price_per_month,
            property_type=property_type,
            beds=beds,
            baths=baths,
            amenities=list(amenities),
            location_id=location.id,
            **extra,
        )
        self._properties[prop.id] = prop
        return prop

    # Evaluation --------------------------------------------------------

    def _candidates(self) -> List[Candidate]:
        return [
            Candidate(prop, self._locations[prop.location_id], self._points[prop.location_id])
            for _, prop in sorted(self._properties.items())
        ]

    def _matches(self, plan: QueryPlan) -> List[Candidate]:
        tests = [matcher(clause) for clause in plan.clauses]
        return [c for c in self._candidates() if all(test(c) for test in tests)]

    @staticmethod
    def _hit(candidate: Candidate) -> PropertyHit:
        return PropertyHit(
            property=candidate.property.to_dict(),
            location=candidate.location.address_fields(),
            point=candidate.point,
        )

    async def has_properties(self) -> bool:
        return bool(self._properties)

    async def count(self, plan: QueryPlan) -> int:
        return len(self._matches(plan))

    async def fetch(
        self,
        plan: QueryPlan,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[PropertyHit]:
        hits = [self._hit(c) for c in self._matches(plan)]
        if plan.measures_distance:
            hits = rank_by_distance(hits, plan.reference)
            if plan.order is Ordering.IDENTITY:
                hits.sort(key=lambda h: h.property_id)
        end = None if limit is None else offset + limit
        return hits[offset:end]

    async def property_point(self, property_id: int) -> Optional[Coordinate]:
        prop = self._properties.get(property_id)
        if prop is None:
            return None
        return self._points[prop.location_id]

    async def property_location_id(self, property_id: int) -> Optional[int]:
        prop = self._properties.get(property_id)
        return None if prop is None else prop.location_id

    async def update_location_point(self, location_id: int, point: Coordinate) -> bool:
        location = self._locations.get(location_id)
        if location is None:
            return False
        location.coordinates = ewkt(point_wkt(point))
        self._points[location_id] = point
        return True

    async def insert_location(
        self,
        *,
        address: str,
        city: str,
        state: Optional[str],
        country: str,
        postal_code: Optional[str],
        point: Coordinate,
    ) -> int:
        location = self.add_location(
            point,
            address=address,
            city=city,
            state=state,
            country=country,
            postal_code=postal_code,
        )
        return location.id

    async def distance_between(self, a: Coordinate, b: Coordinate) -> float:
        return haversine_meters(a, b)
