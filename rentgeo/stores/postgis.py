"""PostGIS-backed spatial store.

Clauses render to SQLAlchemy/GeoAlchemy2 expressions:

- ``ST_DWithin`` / ``ST_Distance`` on the geography column, in meters.
  ``ST_DWithin`` can use the GIST index on ``locations.coordinates``.
- ``ST_Covers`` of the bounding polygon over the location cast to
  geometry, so points on an edge are included.
- ``&&`` (array overlap) for amenities.
"""

from functools import lru_cache, singledispatch
from typing import List, Optional, Tuple

from sqlalchemy import ColumnElement, Select, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentgeo.geo.geometry import (
    WGS84_SRID,
    Coordinate,
    ewkt,
    point_wkt,
    polygon_wkt,
)
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
from rentgeo.search.ranking import PropertyHit
from rentgeo.stores.base import SpatialStore


def geography_point(point: Coordinate) -> ColumnElement:
    return func.ST_GeogFromText(ewkt(point_wkt(point)))


def _location_geometry() -> ColumnElement:
    return func.geometry(Location.coordinates)


@singledispatch
def render_clause(clause) -> ColumnElement:
    raise TypeError(f"Cannot render clause {type(clause).__name__}")


@render_clause.register
def _(clause: RadiusWithin) -> ColumnElement:
    return func.ST_DWithin(Location.coordinates, geography_point(clause.center), clause.meters)


@render_clause.register
def _(clause: BoundsWithin) -> ColumnElement:
    polygon = func.ST_GeomFromText(polygon_wkt(clause.bounds), WGS84_SRID)
    return func.ST_Covers(polygon, _location_geometry())


@render_clause.register
def _(clause: TypeEq) -> ColumnElement:
    return Property.property_type == clause.property_type


@render_clause.register
def _(clause: PriceGte) -> ColumnElement:
    return Property.price_per_month >= clause.amount


@render_clause.register
def _(clause: PriceLte) -> ColumnElement:
    return Property.price_per_month <= clause.amount


@render_clause.register
def _(clause: BedsGte) -> ColumnElement:
    return Property.beds >= clause.count


@render_clause.register
def _(clause: BathsGte) -> ColumnElement:
    return Property.baths >= clause.count


@render_clause.register
def _(clause: AmenityOverlap) -> ColumnElement:
    return Property.amenities.overlap(sorted(clause.amenities))


@render_clause.register
def _(clause: ExcludeProperty) -> ColumnElement:
    return Property.id != clause.property_id


@render_clause.register
def _(clause: TextMatch) -> ColumnElement:
    return or_(
        Location.address.icontains(clause.term, autoescape=True),
        Location.city.icontains(clause.term, autoescape=True),
        Location.state.icontains(clause.term, autoescape=True),
        Property.name.icontains(clause.term, autoescape=True),
    )


@lru_cache(maxsize=256)
def render_conditions(plan: QueryPlan) -> Tuple[ColumnElement, ...]:
    """Render a plan's clauses once; count and page statements share the result."""
    return tuple(render_clause(clause) for clause in plan.clauses)


def _joined(stmt: Select) -> Select:
    return stmt.join(Location, Property.location_id == Location.id)


def count_statement(plan: QueryPlan) -> Select:
    stmt = select(func.count(Property.id)).select_from(Property)
    return _joined(stmt).where(*render_conditions(plan))


def page_statement(plan: QueryPlan, limit: Optional[int] = None, offset: int = 0) -> Select:
    columns = [
        Property,
        Location.address,
        Location.city,
        Location.state,
        Location.country,
        Location.postal_code,
        func.ST_X(_location_geometry()).label("lng"),
        func.ST_Y(_location_geometry()).label("lat"),
    ]
    distance = None
    if plan.measures_distance:
        distance = func.ST_Distance(
            Location.coordinates,
            geography_point(plan.reference),
        ).label("distance_meters")
        columns.append(distance)

    stmt = _joined(select(*columns).select_from(Property)).where(*render_conditions(plan))

    if plan.order is Ordering.DISTANCE:
        stmt = stmt.order_by(distance.asc(), Property.id.asc())
    else:
        stmt = stmt.order_by(Property.id.asc())

    if limit is not None:
        stmt = stmt.limit(limit)
    if offset:
        stmt = stmt.offset(offset)
    return stmt


class PostGISStore(SpatialStore):
    """Spatial store over an async SQLAlchemy session.

    The session is request-scoped; committing is left to the caller
    (see ``rentgeo.services.database.get_db``).
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def has_properties(self) -> bool:
        result = await self.session.execute(select(Property.id).limit(1))
        return result.scalar() is not None

    async def count(self, plan: QueryPlan) -> int:
        result = await self.session.execute(count_statement(plan))
        return int(result.scalar() or 0)

    async def fetch(
        self,
        plan: QueryPlan,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[PropertyHit]:
        result = await self.session.execute(page_statement(plan, limit, offset))
        hits = []
        for row in result:
            prop: Property = row.Property
            hits.append(
                PropertyHit(
                    property=prop.to_dict(),
                    location={
                        "location_id": prop.location_id,
                        "address": row.address,
                        "city": row.city,
                        "state": row.state,
                        "country": row.country,
                        "postal_code": row.postal_code,
                    },
                    point=Coordinate(lat=row.lat, lng=row.lng),
                    distance_meters=(
                        float(row.distance_meters) if plan.measures_distance else None
                    ),
                )
            )
        return hits

    async def property_point(self, property_id: int) -> Optional[Coordinate]:
        stmt = _joined(
            select(
                func.ST_Y(_location_geometry()).label("lat"),
                func.ST_X(_location_geometry()).label("lng"),
            ).select_from(Property)
        ).where(Property.id == property_id)
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        return Coordinate(lat=row.lat, lng=row.lng)

    async def property_location_id(self, property_id: int) -> Optional[int]:
        result = await self.session.execute(
            select(Property.location_id).where(Property.id == property_id)
        )
        return result.scalar_one_or_none()

    async def update_location_point(self, location_id: int, point: Coordinate) -> bool:
        stmt = (
            update(Location)
            .where(Location.id == location_id)
            .values(coordinates=geography_point(point))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

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
        location = Location(
            address=address,
            city=city,
            state=state,
            country=country,
            postal_code=postal_code,
            coordinates=ewkt(point_wkt(point)),
        )
        self.session.add(location)
        await self.session.flush()
        return location.id

    async def distance_between(self, a: Coordinate, b: Coordinate) -> float:
        result = await self.session.execute(
            select(func.ST_Distance(geography_point(a), geography_point(b)))
        )
        return float(result.scalar_one())
