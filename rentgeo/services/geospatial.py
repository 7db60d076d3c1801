"""Geospatial search service.

Façade over geocoding, query planning, the spatial store and ranking.
Validation happens before the store is touched; any store failure is
logged here with the operation and its key parameters, then re-raised
as a caller-safe ``StoreQueryException`` chained to the original error.
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple

from loguru import logger

from rentgeo.core.config import Settings, settings
from rentgeo.core.exceptions import AppException, NotFoundException, StoreQueryException
from rentgeo.geo.geocoding import Geocoder
from rentgeo.geo.geometry import BoundingBox, Coordinate, Distance
from rentgeo.search.builder import build_neighbor_plan, build_plan
from rentgeo.search.pagination import Page
from rentgeo.search.queries import (
    BoundingBoxQuery,
    NearestQuery,
    PageRequest,
    PointRadiusQuery,
    ProximityQuery,
    SearchFilters,
    TextQuery,
)
from rentgeo.search.ranking import PropertyHit, rank_by_distance
from rentgeo.stores.base import SpatialStore


@contextmanager
def store_errors(operation: str, message: str, **params: Any) -> Iterator[None]:
    """Translate unexpected failures inside the block into StoreQueryException.

    Application exceptions (validation, not found) pass through untouched.
    """
    try:
        yield
    except AppException:
        raise
    except Exception as exc:
        logger.opt(exception=exc).error(
            "{} failed: {} | params={}", operation, exc, params
        )
        raise StoreQueryException(message, operation=operation) from exc


class GeospatialService:
    """Search orchestration over an injected spatial store.

    Args:
        store: Spatial engine evaluating query plans.
        geocoder: Address resolution provider.
        config: Settings supplying defaults and the distance error policy.
    """

    def __init__(
        self,
        store: SpatialStore,
        geocoder: Geocoder,
        config: Settings = settings,
    ) -> None:
        self.store = store
        self.geocoder = geocoder
        self.config = config

    async def geocode_address(
        self,
        address: Optional[str],
        city: Optional[str],
        state: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Coordinate:
        logger.info(f"Geocoding address: {address}, {city}, {state or 'N/A'}, {country}")
        with store_errors("geocode_address", "Failed to geocode address", city=city):
            return await self.geocoder.resolve(address, city, state, country)

    async def find_properties_near_point(
        self,
        center: Coordinate,
        radius_km: float,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Page:
        """Radius search returning one page plus the total match count."""
        page_request = PageRequest(
            limit=self.config.NEAR_POINT_DEFAULT_LIMIT if limit is None else limit,
            offset=offset,
            max_limit=self.config.MAX_SEARCH_LIMIT,
        )
        query = PointRadiusQuery(center=center, radius_km=radius_km, page=page_request)
        plan = build_plan(query)

        with store_errors(
            "find_properties_near_point",
            "Failed to find properties near point",
            center=center,
            radius_km=radius_km,
            limit=page_request.limit,
            offset=page_request.offset,
        ):
            if not await self.store.has_properties():
                logger.info("No properties stored, returning empty near-point result")
                return Page.empty(page_request)

            total_count = await self.store.count(plan)
            hits = await self.store.fetch(plan, page_request.limit, page_request.offset)

        page = Page(items=rank_by_distance(hits), total_count=total_count, request=page_request)
        logger.info(
            f"Found {page.count} properties (of {total_count} total) within {query.radius_km}km"
        )
        return page

    async def proximity_search(
        self,
        center: Coordinate,
        radius_km: float,
        filters: Optional[SearchFilters] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[PropertyHit]:
        """Radius search with attribute filters; returns exactly one page."""
        query = ProximityQuery(
            center=center,
            radius_km=radius_km,
            filters=filters or SearchFilters(),
            page=PageRequest(
                limit=self.config.NEAR_POINT_DEFAULT_LIMIT if limit is None else limit,
                offset=offset,
                max_limit=self.config.MAX_SEARCH_LIMIT,
            ),
        )
        plan = build_plan(query)

        with store_errors(
            "proximity_search",
            "Failed to perform proximity search",
            center=center,
            radius_km=radius_km,
            filters=query.filters,
        ):
            hits = await self.store.fetch(plan, query.page.limit, query.page.offset)

        logger.debug(f"Proximity search matched {len(hits)} properties")
        return rank_by_distance(hits)

    async def find_properties_in_bounds(
        self,
        bounds: BoundingBox,
        filters: Optional[SearchFilters] = None,
    ) -> List[PropertyHit]:
        """All properties inside ``bounds``, ordered by property id."""
        query = BoundingBoxQuery(bounds=bounds, filters=filters or SearchFilters())
        plan = build_plan(query)

        with store_errors(
            "find_properties_in_bounds",
            "Failed to find properties in bounds",
            bounds=bounds,
            filters=query.filters,
        ):
            hits = await self.store.fetch(plan)

        logger.debug(f"Bounds search matched {len(hits)} properties")
        return hits

    async def find_nearest_properties(
        self,
        property_id: int,
        radius_km: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[PropertyHit]:
        """Neighbors of an existing property, nearest first, excluding itself.

        Raises:
            NotFoundException: If the reference property does not exist.
        """
        query = NearestQuery(
            property_id=property_id,
            radius_km=self.config.NEAREST_DEFAULT_RADIUS_KM if radius_km is None else radius_km,
            limit=self.config.NEAREST_DEFAULT_LIMIT if limit is None else limit,
            max_limit=self.config.MAX_SEARCH_LIMIT,
        )

        with store_errors(
            "find_nearest_properties",
            "Failed to find nearest properties",
            property_id=property_id,
            radius_km=query.radius_km,
            limit=query.limit,
        ):
            reference = await self.store.property_point(property_id)
            if reference is None:
                raise NotFoundException(
                    "Property not found",
                    details={"property_id": property_id},
                )
            hits = await self.store.fetch(build_neighbor_plan(query, reference), query.limit)

        return rank_by_distance(hits)

    async def calculate_distance(self, point1: Coordinate, point2: Coordinate) -> Distance:
        """Distance between two points, independent of stored data.

        With ``DISTANCE_LENIENT_ON_ERROR`` enabled a store failure yields
        a zero distance instead of an error.
        """
        try:
            meters = await self.store.distance_between(point1, point2)
        except Exception as exc:
            if not self.config.DISTANCE_LENIENT_ON_ERROR:
                logger.opt(exception=exc).error(
                    "calculate_distance failed: {} | point1={} point2={}", exc, point1, point2
                )
                raise StoreQueryException(
                    "Failed to calculate distance",
                    operation="calculate_distance",
                ) from exc
            logger.warning(f"Distance calculation failed, reporting 0: {exc}")
            meters = 0.0
        return Distance(max(0.0, meters))

    async def update_property_location(self, location_id: int, point: Coordinate) -> bool:
        """Move a stored location to ``point``.

        Raises:
            NotFoundException: If the location does not exist.
        """
        with store_errors(
            "update_property_location",
            "Failed to update property location",
            location_id=location_id,
            point=point,
        ):
            updated = await self.store.update_location_point(location_id, point)

        if not updated:
            raise NotFoundException(
                "Location not found",
                details={"location_id": location_id},
            )
        logger.info(f"Location {location_id} moved to ({point.lat}, {point.lng})")
        return True

    async def relocate_property(self, property_id: int, point: Coordinate) -> int:
        """Move the location owned by ``property_id``; returns its location id.

        Raises:
            NotFoundException: If the property does not exist.
        """
        with store_errors(
            "relocate_property",
            "Failed to update property location",
            property_id=property_id,
        ):
            location_id = await self.store.property_location_id(property_id)

        if location_id is None:
            raise NotFoundException(
                "Property not found",
                details={"property_id": property_id},
            )
        await self.update_property_location(location_id, point)
        return location_id

    async def search_by_location_text(
        self,
        term: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[PropertyHit]:
        """Case-insensitive substring search over address fields and names."""
        query = TextQuery(
            term=term,
            page=PageRequest(
                limit=self.config.TEXT_SEARCH_DEFAULT_LIMIT if limit is None else limit,
                offset=offset,
                max_limit=self.config.MAX_SEARCH_LIMIT,
            ),
        )
        with store_errors(
            "search_by_location_text",
            "Failed to search properties by location",
            term=query.term,
        ):
            return await self.store.fetch(build_plan(query), query.page.limit, query.page.offset)

    async def register_location(
        self,
        address: str,
        city: str,
        state: Optional[str],
        country: str,
        postal_code: Optional[str] = None,
    ) -> Tuple[int, Coordinate]:
        """Geocode an address and persist it as a new location.

        Returns:
            The new location id and the coordinate it was stored at.
        """
        point = await self.geocode_address(address, city, state, country)
        with store_errors("register_location", "Failed to create location", city=city):
            location_id = await self.store.insert_location(
                address=address,
                city=city,
                state=state,
                country=country,
                postal_code=postal_code,
                point=point,
            )
        logger.info(f"Created location {location_id} for {address}, {city}")
        return location_id, point
